"""Tracker: turns ingress outcomes into stored TraceEvents."""

import uuid
from datetime import datetime, timezone
from typing import Callable, Protocol

from ..models import TraceEvent
from ..storage import IStorage


class ITracker(Protocol):
    async def track(self, event_type: str, actor: str, data: dict) -> None:
        """Record one trace event."""
        ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Tracker:
    """Stamps id and time, then writes through to storage."""

    def __init__(self, storage: IStorage, clock: Callable[[], datetime] = _utcnow):
        self._storage = storage
        self._clock = clock

    async def track(self, event_type: str, actor: str, data: dict) -> None:
        await self._storage.save_trace_event(
            TraceEvent(
                id=str(uuid.uuid4()),
                event_type=event_type,
                actor=actor,
                data=data,
                timestamp=self._clock(),
            )
        )
