"""In-process pub/sub hub that stamps occurrences into envelopes."""

import uuid
from typing import Any, Callable, Mapping, Protocol

from ..logging_config import get_logger
from ..models import (
    MEANINGFUL_BUTTONS,
    AgentStateChanged,
    ButtonClicked,
    Envelope,
    HotspotEntered,
    HotspotLeft,
    KeyboardPressed,
    PayloadVariant,
    RoomOccupancyChanged,
    Source,
    VoiceTranscript,
)
from ..session import Clock, SessionContext, now_ms

logger = get_logger(__name__)


EventCallback = Callable[[Envelope], None]
Unsubscribe = Callable[[], None]


class IEventEmitter(Protocol):
    """Stamps occurrences and fans them out to subscribers."""

    def set_user_id(self, user_id: str) -> None:
        """Stamp subsequent envelopes with this user id."""
        ...

    def subscribe(self, callback: EventCallback) -> Unsubscribe:
        """Register a callback; returns a function that removes it."""
        ...

    def emit(
        self, source: Source | str, event_type: str, payload: Mapping[str, Any]
    ) -> Envelope:
        """Build an envelope and dispatch it to every subscriber."""
        ...


class EventEmitter:
    """Synchronous fire-and-forget emitter."""

    def __init__(self, context: SessionContext, clock: Clock | None = None):
        self._context = context
        self._clock = clock or now_ms
        self._callbacks: list[EventCallback] = []

    @property
    def session_id(self) -> str:
        return self._context.session_id

    def set_user_id(self, user_id: str) -> None:
        """Stamp subsequent envelopes with this user id."""
        self._context.user_id = user_id

    def subscribe(self, callback: EventCallback) -> Unsubscribe:
        """Register a callback; returns a function that removes it."""
        self._callbacks.append(callback)
        removed = False

        def unsubscribe() -> None:
            nonlocal removed
            if removed:
                return
            removed = True
            # Identity match: equal-but-distinct callables stay registered
            for i, registered in enumerate(self._callbacks):
                if registered is callback:
                    del self._callbacks[i]
                    break

        return unsubscribe

    def emit(
        self, source: Source | str, event_type: str, payload: Mapping[str, Any]
    ) -> Envelope:
        """Build an envelope and dispatch it to every subscriber."""
        envelope = Envelope(
            event_id=str(uuid.uuid4()),
            timestamp=self._clock(),
            session_id=self._context.session_id,
            user_id=self._context.user_id,
            source=Source(source),
            type=event_type,
            payload=payload,
        )

        # Snapshot so (un)subscribing from a callback can't skip anyone
        for callback in list(self._callbacks):
            try:
                callback(envelope)
            except Exception as e:
                logger.error("Error in event callback %r: %s", callback, e, exc_info=True)

        return envelope

    def emit_variant(self, variant: PayloadVariant) -> Envelope:
        """Emit a typed payload under its own source and type."""
        return self.emit(variant.source, variant.event_type.value, variant.to_payload())

    # UI occurrences

    def emit_hotspot_entered(self, payload: HotspotEntered) -> Envelope:
        return self.emit_variant(payload)

    def emit_hotspot_left(self, payload: HotspotLeft) -> Envelope:
        return self.emit_variant(payload)

    def emit_voice_transcript(self, payload: VoiceTranscript) -> Envelope:
        return self.emit_variant(payload)

    def emit_button_click(self, payload: ButtonClicked) -> Envelope | None:
        """Emit only for buttons that mean something downstream."""
        if payload.button_id not in MEANINGFUL_BUTTONS:
            return None
        return self.emit_variant(payload)

    def emit_keyboard_pressed(self, payload: KeyboardPressed) -> Envelope | None:
        """Emit only Enter presses that carry an action."""
        if payload.key != "Enter" or not payload.action:
            return None
        return self.emit_variant(payload)

    # Simulation occurrences, already filtered for change by the world

    def emit_room_occupancy_changed(self, payload: RoomOccupancyChanged) -> Envelope:
        return self.emit_variant(payload)

    def emit_agent_state_changed(self, payload: AgentStateChanged) -> Envelope:
        return self.emit_variant(payload)
