"""Allow-listed event types and their typed payload variants.

ALLOWED_EVENT_TYPES is the one list of what is meaningful enough to persist.
The client publisher and the ingress service both import it, so a new event
type is tracked by adding it here and nowhere else.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar


class Source(str, Enum):
    """Origin tag of an event."""

    UI = "ui"
    SIM = "sim"


class EventType(str, Enum):
    """Allow-listed event types."""

    HOTSPOT_ENTERED = "ui.hotspot.entered"
    HOTSPOT_LEFT = "ui.hotspot.left"
    VOICE_TRANSCRIPT_FINAL = "ui.voice.transcript.final"
    BUTTON_CLICKED = "ui.button.clicked"
    KEYBOARD_PRESSED = "ui.keyboard.pressed"
    ROOM_OCCUPANCY_CHANGED = "sim.room.occupancy.changed"
    AGENT_STATE_CHANGED = "sim.agent.state.changed"


ALLOWED_EVENT_TYPES: frozenset[str] = frozenset(t.value for t in EventType)

# UI interactions that may pass while upstream processing is disabled
BOOT_ALLOWED_UI_TYPES: frozenset[str] = frozenset(
    {EventType.BUTTON_CLICKED.value, EventType.KEYBOARD_PRESSED.value}
)

MEANINGFUL_BUTTONS: frozenset[str] = frozenset(
    {
        "initialize-intelligence",
        "director-mode",
        "robot-hotspot",
        "robot-panel-assistance",
        "robot-panel-services",
        "regenerate-visuals",
        "lobby-choice",
        "robot-panel-close",
    }
)


def is_allowed(event_type: Any) -> bool:
    """Check whether a raw type value is on the allow-list."""
    return isinstance(event_type, str) and event_type in ALLOWED_EVENT_TYPES


@dataclass(frozen=True)
class PayloadVariant:
    """Base for typed payloads. Subclasses pin their type and source."""

    event_type: ClassVar[EventType]
    source: ClassVar[Source]

    def _fields(self) -> dict[str, Any]:
        raise NotImplementedError

    def to_payload(self) -> dict[str, Any]:
        """Wire payload: extra fields first, named fields override them."""
        payload = dict(getattr(self, "extra", {}))
        payload.update({k: v for k, v in self._fields().items() if v is not None})
        return payload


@dataclass(frozen=True)
class HotspotEntered(PayloadVariant):
    event_type: ClassVar[EventType] = EventType.HOTSPOT_ENTERED
    source: ClassVar[Source] = Source.UI

    hotspot_id: str
    extra: dict[str, Any] = field(default_factory=dict)

    def _fields(self) -> dict[str, Any]:
        return {"hotspotId": self.hotspot_id}


@dataclass(frozen=True)
class HotspotLeft(PayloadVariant):
    event_type: ClassVar[EventType] = EventType.HOTSPOT_LEFT
    source: ClassVar[Source] = Source.UI

    hotspot_id: str
    extra: dict[str, Any] = field(default_factory=dict)

    def _fields(self) -> dict[str, Any]:
        return {"hotspotId": self.hotspot_id}


@dataclass(frozen=True)
class VoiceTranscript(PayloadVariant):
    event_type: ClassVar[EventType] = EventType.VOICE_TRANSCRIPT_FINAL
    source: ClassVar[Source] = Source.UI

    transcript: str
    is_final: bool | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def _fields(self) -> dict[str, Any]:
        return {"transcript": self.transcript, "isFinal": self.is_final}


@dataclass(frozen=True)
class ButtonClicked(PayloadVariant):
    event_type: ClassVar[EventType] = EventType.BUTTON_CLICKED
    source: ClassVar[Source] = Source.UI

    button_id: str
    extra: dict[str, Any] = field(default_factory=dict)

    def _fields(self) -> dict[str, Any]:
        return {"buttonId": self.button_id}


@dataclass(frozen=True)
class KeyboardPressed(PayloadVariant):
    event_type: ClassVar[EventType] = EventType.KEYBOARD_PRESSED
    source: ClassVar[Source] = Source.UI

    key: str
    action: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def _fields(self) -> dict[str, Any]:
        return {"key": self.key, "action": self.action}


@dataclass(frozen=True)
class RoomOccupancyChanged(PayloadVariant):
    event_type: ClassVar[EventType] = EventType.ROOM_OCCUPANCY_CHANGED
    source: ClassVar[Source] = Source.SIM

    room_id: str
    room_name: str
    occupancy: int
    extra: dict[str, Any] = field(default_factory=dict)

    def _fields(self) -> dict[str, Any]:
        return {
            "roomId": self.room_id,
            "roomName": self.room_name,
            "occupancy": self.occupancy,
        }


@dataclass(frozen=True)
class AgentStateChanged(PayloadVariant):
    event_type: ClassVar[EventType] = EventType.AGENT_STATE_CHANGED
    source: ClassVar[Source] = Source.SIM

    agent_id: str
    agent_role: str
    state: str
    previous_state: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def _fields(self) -> dict[str, Any]:
        return {
            "agentId": self.agent_id,
            "agentRole": self.agent_role,
            "state": self.state,
            "previousState": self.previous_state,
        }


PAYLOAD_VARIANTS: dict[EventType, type[PayloadVariant]] = {
    cls.event_type: cls
    for cls in (
        HotspotEntered,
        HotspotLeft,
        VoiceTranscript,
        ButtonClicked,
        KeyboardPressed,
        RoomOccupancyChanged,
        AgentStateChanged,
    )
}
