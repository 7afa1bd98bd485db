"""Core data models for the lobby event pipeline."""

from .envelope import Envelope
from .event_types import (
    ALLOWED_EVENT_TYPES,
    BOOT_ALLOWED_UI_TYPES,
    MEANINGFUL_BUTTONS,
    PAYLOAD_VARIANTS,
    AgentStateChanged,
    ButtonClicked,
    EventType,
    HotspotEntered,
    HotspotLeft,
    KeyboardPressed,
    PayloadVariant,
    RoomOccupancyChanged,
    Source,
    VoiceTranscript,
    is_allowed,
)
from .tracing import IngestStats, TraceEvent

__all__ = [
    # Envelope
    "Envelope",
    "Source",
    # Allow-list
    "EventType",
    "ALLOWED_EVENT_TYPES",
    "BOOT_ALLOWED_UI_TYPES",
    "MEANINGFUL_BUTTONS",
    "is_allowed",
    # Payload variants
    "PayloadVariant",
    "PAYLOAD_VARIANTS",
    "HotspotEntered",
    "HotspotLeft",
    "VoiceTranscript",
    "ButtonClicked",
    "KeyboardPressed",
    "RoomOccupancyChanged",
    "AgentStateChanged",
    # Tracing
    "TraceEvent",
    "IngestStats",
]
