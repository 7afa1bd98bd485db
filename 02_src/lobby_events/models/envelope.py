"""Event envelope: the immutable unit of transport."""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from ..errors import InvalidEnvelopeError
from .event_types import Source


@dataclass(frozen=True)
class Envelope:
    """A fully stamped event, ready for transport."""

    event_id: str
    timestamp: int  # ms since epoch
    session_id: str
    source: Source
    type: str
    payload: Mapping[str, Any] = field(default_factory=dict)
    user_id: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "source", Source(self.source))
        object.__setattr__(self, "payload", MappingProxyType(dict(self.payload)))

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the camelCase wire shape."""
        data: dict[str, Any] = {
            "eventId": self.event_id,
            "timestamp": self.timestamp,
            "sessionId": self.session_id,
            "source": self.source.value,
            "type": self.type,
            "payload": dict(self.payload),
        }
        if self.user_id is not None:
            data["userId"] = self.user_id
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Envelope":
        """Parse the camelCase wire shape."""
        if not isinstance(data, Mapping):
            raise InvalidEnvelopeError("Envelope must be a JSON object")

        try:
            event_id = data["eventId"]
            timestamp = data["timestamp"]
            session_id = data["sessionId"]
            source = Source(data["source"])
            event_type = data["type"]
        except KeyError as e:
            raise InvalidEnvelopeError(f"Missing envelope field: {e.args[0]}") from e
        except ValueError as e:
            raise InvalidEnvelopeError(f"Unknown source: {data.get('source')!r}") from e

        payload = data.get("payload", {})
        user_id = data.get("userId")

        if not isinstance(event_id, str) or not isinstance(session_id, str):
            raise InvalidEnvelopeError("eventId and sessionId must be strings")
        if not isinstance(event_type, str):
            raise InvalidEnvelopeError("type must be a string")
        if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)):
            raise InvalidEnvelopeError("timestamp must be a number")
        if not isinstance(payload, Mapping):
            raise InvalidEnvelopeError("payload must be an object")
        if user_id is not None and not isinstance(user_id, str):
            raise InvalidEnvelopeError("userId must be a string")

        return cls(
            event_id=event_id,
            timestamp=int(timestamp),
            session_id=session_id,
            source=source,
            type=event_type,
            payload=payload,
            user_id=user_id,
        )
