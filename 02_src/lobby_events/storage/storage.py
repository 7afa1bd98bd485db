"""SQLite storage for server-side trace events."""

import json
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol

import aiosqlite

from ..config import resolve_db_path
from ..models import IngestStats, TraceEvent

SCHEMA_PATH = Path(__file__).parent / "schema.sql"

_INGEST_STATS_SQL = """
    SELECT
        COUNT(*),
        COALESCE(SUM(json_extract(data, '$.received')), 0),
        COALESCE(SUM(json_extract(data, '$.published')), 0),
        COALESCE(SUM(json_extract(data, '$.dropped')), 0)
    FROM trace_events
    WHERE event_type = 'events_ingested'
"""


class IStorage(Protocol):
    """Persistent storage for ingress observability (SQLite)."""

    async def init(self) -> None:
        ...

    async def close(self) -> None:
        ...

    async def save_trace_event(self, event: TraceEvent) -> None:
        ...

    async def get_trace_events(
        self,
        after: datetime | None = None,
        event_types: list[str] | None = None,
        actor: str | None = None,
        limit: int = 100,
    ) -> list[TraceEvent]:
        """Trace events matching every given filter, newest first."""
        ...

    async def ingest_stats(self) -> IngestStats:
        """Totals across every recorded ingest."""
        ...

    async def clear(self) -> None:
        ...


class Storage:
    """aiosqlite-backed trace store. ':memory:' is accepted for tests."""

    def __init__(self, db_path: str | Path | None = None):
        self._db_path = resolve_db_path(db_path)
        self._conn: aiosqlite.Connection | None = None

    @property
    def _db(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise RuntimeError("Storage not initialized")
        return self._conn

    async def init(self) -> None:
        """Open the connection and apply schema.sql."""
        self._conn = await aiosqlite.connect(self._db_path)
        await self._conn.executescript(SCHEMA_PATH.read_text(encoding="utf-8"))
        await self._conn.commit()

    async def close(self) -> None:
        if self._conn:
            await self._conn.close()
            self._conn = None

    async def save_trace_event(self, event: TraceEvent) -> None:
        await self._db.execute(
            "INSERT INTO trace_events (id, event_type, actor, data, timestamp) VALUES (?, ?, ?, ?, ?)",
            (
                event.id or str(uuid.uuid4()),
                event.event_type,
                event.actor,
                json.dumps(event.data, default=str),
                _to_utc(event.timestamp).isoformat(),
            ),
        )
        await self._db.commit()

    async def get_trace_events(
        self,
        after: datetime | None = None,
        event_types: list[str] | None = None,
        actor: str | None = None,
        limit: int = 100,
    ) -> list[TraceEvent]:
        """Trace events matching every given filter, newest first."""
        clauses: list[str] = []
        params: list = []
        if after:
            clauses.append("timestamp > ?")
            params.append(_to_utc(after).isoformat())
        if event_types:
            clauses.append(f"event_type IN ({', '.join('?' for _ in event_types)})")
            params.extend(event_types)
        if actor:
            clauses.append("actor = ?")
            params.append(actor)

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        params.append(limit)

        async with self._db.execute(
            f"SELECT id, event_type, actor, data, timestamp FROM trace_events {where} "
            "ORDER BY timestamp DESC LIMIT ?",
            params,
        ) as cursor:
            rows = await cursor.fetchall()

        return [_row_to_trace(row) for row in rows]

    async def ingest_stats(self) -> IngestStats:
        async with self._db.execute(_INGEST_STATS_SQL) as cursor:
            batches, received, published, dropped = await cursor.fetchone()
        async with self._db.execute(
            "SELECT COUNT(*) FROM trace_events WHERE event_type = 'events_publish_failed'"
        ) as cursor:
            (failures,) = await cursor.fetchone()

        return IngestStats(
            batches=batches,
            received=received,
            published=published,
            dropped=dropped,
            publish_failures=failures,
        )

    async def clear(self) -> None:
        await self._db.execute("DELETE FROM trace_events")
        await self._db.commit()


def _row_to_trace(row) -> TraceEvent:
    trace_id, event_type, actor, data, timestamp = row
    return TraceEvent(
        id=trace_id,
        event_type=event_type,
        actor=actor,
        data=json.loads(data),
        timestamp=_to_utc(datetime.fromisoformat(timestamp)),
    )


def _to_utc(value: datetime) -> datetime:
    # Naive datetimes are UTC so stored ISO strings sort lexically
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
