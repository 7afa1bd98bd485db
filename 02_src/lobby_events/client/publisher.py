"""Client publisher: filter, deduplicate, batch and deliver envelopes."""

import asyncio
from typing import Protocol

from ..config import PublisherConfig
from ..logging_config import get_logger
from ..models import BOOT_ALLOWED_UI_TYPES, Envelope, Source, is_allowed
from ..session import Clock, now_ms
from .circuit import CircuitBreaker, CircuitState
from .dedupe import RecentEvents
from .scheduler import IScheduler, ITimer
from .transport import DeliveryReceipt, ITransport

logger = get_logger(__name__)


class IPublisher(Protocol):
    """Accepts envelopes and delivers them in batches."""

    def publish(self, envelope: Envelope) -> bool:
        """Queue an envelope. Never raises; returns whether it was queued."""
        ...

    async def flush(self) -> None:
        """Deliver everything currently queued."""
        ...


class ClientPublisher:
    """
    Batches envelopes and delivers them through a transport.

    publish() never blocks and never raises. Delivery failures feed a
    circuit breaker: after failure_threshold consecutive failures the
    periodic flush stops, the queue is discarded and publish() becomes a
    no-op until reset_circuit() is called or an in-flight flush succeeds.
    """

    def __init__(
        self,
        transport: ITransport,
        scheduler: IScheduler,
        config: PublisherConfig | None = None,
        clock: Clock | None = None,
        upstream_enabled: bool = False,
    ):
        self._transport = transport
        self._scheduler = scheduler
        self._config = config or PublisherConfig()
        self._clock = clock or now_ms
        self._upstream_enabled = upstream_enabled

        self._queue: list[Envelope] = []
        self._circuit = CircuitBreaker(self._config.failure_threshold)
        self._recent = RecentEvents(self._config.dedupe_window_ms)
        self._timer: ITimer | None = None

    @property
    def state(self) -> CircuitState:
        return self._circuit.state

    @property
    def consecutive_failures(self) -> int:
        return self._circuit.failures

    @property
    def queue_size(self) -> int:
        return len(self._queue)

    @property
    def upstream_enabled(self) -> bool:
        return self._upstream_enabled

    def queued(self) -> list[Envelope]:
        """Copy of the pending queue, oldest first."""
        return list(self._queue)

    def start(self) -> None:
        """Start the periodic flush timer."""
        if not self._circuit.is_open:
            self._start_timer()

    def set_upstream_enabled(self, enabled: bool) -> None:
        """Toggle the boot/standby filter."""
        self._upstream_enabled = enabled

    def publish(self, envelope: Envelope) -> bool:
        """Queue an envelope. Never raises; returns whether it was queued."""
        if self._circuit.is_open:
            return False

        if not self._upstream_enabled and not self._passes_standby(envelope):
            logger.debug("Standby filter dropped %s from %s", envelope.type, envelope.source.value)
            return False

        if not is_allowed(envelope.type):
            logger.debug("Skipping non-allowed event type: %s", envelope.type)
            return False

        if not self._recent.admit(envelope, self._clock()):
            logger.debug("Duplicate %s within dedupe window", envelope.type)
            return False

        self._queue.append(envelope)

        # Snapshot now so a synchronous burst cannot grow the batch past the mark
        if len(self._queue) >= self._config.high_water_mark:
            self._scheduler.spawn(self._deliver(self._take_batch()))

        return True

    async def flush(self) -> None:
        """Deliver everything currently queued as one batch."""
        batch = self._take_batch()
        if batch:
            await self._deliver(batch)

    def _take_batch(self) -> list[Envelope]:
        """Snapshot-and-clear: events published after this start a new batch."""
        if self._circuit.is_open:
            self._queue.clear()
            return []
        batch, self._queue = self._queue, []
        return batch

    async def _deliver(self, batch: list[Envelope]) -> None:
        try:
            receipt = await asyncio.wait_for(
                self._transport.send(batch),
                timeout=self._config.request_timeout_s,
            )
        except Exception as e:
            self._on_failure(batch, e)
        else:
            self._on_success(batch, receipt)

    def reset_circuit(self) -> None:
        """Close an open circuit and resume periodic flushing."""
        if not self._circuit.is_open:
            return
        self._circuit.reset()
        self._start_timer()
        logger.info("Circuit breaker reset")

    async def stop(self) -> None:
        """Stop the timer and make one last best-effort flush."""
        self._stop_timer()
        if self._queue and not self._circuit.is_open:
            await self.flush()

    def _passes_standby(self, envelope: Envelope) -> bool:
        if envelope.source is Source.SIM:
            return False
        return envelope.type in BOOT_ALLOWED_UI_TYPES

    def _on_tick(self) -> None:
        batch = self._take_batch()
        if batch:
            self._scheduler.spawn(self._deliver(batch))

    def _on_success(self, batch: list[Envelope], receipt: DeliveryReceipt) -> None:
        previous, _ = self._circuit.record_success()
        if previous.is_open:
            logger.info("Circuit closed, ingress is back online")
            self._start_timer()
        logger.debug(
            "Delivered %d events (published=%d, dropped=%d)",
            len(batch),
            receipt.published,
            receipt.dropped,
        )

    def _on_failure(self, batch: list[Envelope], error: Exception) -> None:
        previous, current = self._circuit.record_failure()

        # Only the first failure of a streak is reported
        if current.failures == 1:
            logger.warning(
                "Failed to publish %d events (ingress may be down): %s",
                len(batch),
                str(error) or type(error).__name__,
                extra={"batch_size": len(batch), "circuit_state": current.state.value},
            )

        if current.is_open:
            if not previous.is_open:
                logger.warning(
                    "Circuit opened after %d consecutive failures, event publishing stopped",
                    current.failures,
                    extra={"circuit_state": current.state.value},
                )
            self._stop_timer()
            self._queue.clear()
            return

        if len(self._queue) < self._config.requeue_limit:
            self._queue[:0] = batch
        else:
            logger.debug("Re-queue limit reached, dropping batch of %d events", len(batch))

    def _start_timer(self) -> None:
        self._stop_timer()
        self._timer = self._scheduler.call_every(self._config.flush_interval_s, self._on_tick)

    def _stop_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
