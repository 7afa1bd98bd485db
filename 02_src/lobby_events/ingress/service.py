"""Ingress: re-validates client batches and hands them to the broker."""

from dataclasses import dataclass
from typing import Any, Mapping, Protocol

from ..broker import IBrokerAdapter
from ..errors import BrokerPublishError, EmptyBatchError
from ..logging_config import get_logger
from ..models import is_allowed
from ..tracker import ITracker

logger = get_logger(__name__)


@dataclass(frozen=True)
class IngressResult:
    """Outcome of one ingested batch."""

    published: int
    dropped: int
    message: str | None = None


class IIngressService(Protocol):
    async def ingest(self, events: Any) -> IngressResult:
        """Validate a batch and publish the allowed subset."""
        ...


def is_acceptable(event: Any) -> bool:
    """Server-side check; never trusts the client's own filtering."""
    if not isinstance(event, Mapping):
        return False
    if not is_allowed(event.get("type")):
        return False
    return isinstance(event.get("payload", {}), Mapping)


class IngressService:
    """Validates, partitions and publishes event batches."""

    def __init__(
        self,
        broker: IBrokerAdapter | None,
        tracker: ITracker | None = None,
    ):
        self._broker = broker
        self._tracker = tracker
        self._published_total = 0

    @property
    def published_total(self) -> int:
        return self._published_total

    async def ingest(self, events: Any) -> IngressResult:
        """Validate a batch and publish the allowed subset."""
        if not isinstance(events, list) or not events:
            raise EmptyBatchError("Missing or empty events array")

        accepted: list[Mapping[str, Any]] = []
        dropped = 0
        for event in events:
            if is_acceptable(event):
                accepted.append(event)
            else:
                dropped += 1
                logger.debug(
                    "Dropping non-allowed event type: %s",
                    event.get("type") if isinstance(event, Mapping) else type(event).__name__,
                )

        if not accepted:
            result = IngressResult(0, dropped, "No allowed events to publish")
        elif self._broker is None or not self._broker.is_ready:
            result = IngressResult(0, dropped, "Broker not configured, events acknowledged only")
        else:
            try:
                published = await self._broker.publish(accepted)
            except BrokerPublishError as e:
                logger.error("Event publish failed: %s", e, extra={"batch_size": len(accepted)})
                await self._track(
                    "events_publish_failed",
                    {"accepted": len(accepted), "dropped": dropped, "error": str(e)},
                )
                raise
            self._log_published(published)
            result = IngressResult(published, dropped)

        await self._track(
            "events_ingested",
            {
                "received": len(events),
                "published": result.published,
                "dropped": result.dropped,
                "sessions": sorted({str(e.get("sessionId")) for e in accepted}),
            },
        )
        return result

    def _log_published(self, count: int) -> None:
        previous = self._published_total
        self._published_total += count
        # First ten events, then once per hundred, to keep logs quiet under load
        if self._published_total <= 10 or previous // 100 != self._published_total // 100:
            logger.info(
                "Published %d events (total: %d)", count, self._published_total
            )

    async def _track(self, event_type: str, data: dict) -> None:
        if not self._tracker:
            return
        try:
            await self._tracker.track(event_type=event_type, actor="ingress", data=data)
        except Exception as e:
            logger.error("Failed to record %s trace: %s", event_type, e)
