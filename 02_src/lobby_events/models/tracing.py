"""Tracing and observability data models."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class TraceEvent:
    """A server-side observability record (ingest outcomes, publish failures)."""

    id: str
    event_type: str  # e.g. "events_ingested", "events_publish_failed"
    actor: str  # component that recorded it
    data: dict
    timestamp: datetime


@dataclass(frozen=True)
class IngestStats:
    """Totals folded from events_ingested / events_publish_failed traces."""

    batches: int = 0
    received: int = 0
    published: int = 0
    dropped: int = 0
    publish_failures: int = 0
