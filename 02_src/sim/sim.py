"""SIM implementation - lobby world driving the client event pipeline."""

import asyncio
import random
from typing import Protocol

from lobby_events.client import (
    AsyncioScheduler,
    ClientPublisher,
    EventEmitter,
    EventTracking,
    HttpTransport,
    ITransport,
)
from lobby_events.config import PublisherConfig
from lobby_events.logging_config import get_logger
from lobby_events.session import InMemorySessionStore, SessionContext

from .world import LobbyWorld

logger = get_logger(__name__)


class ISim(Protocol):
    """Generate simulation events."""

    async def start(self) -> None:
        """Start the world loop."""
        ...

    async def stop(self) -> None:
        """Stop the world loop and flush what is queued."""
        ...

    def set_upstream_enabled(self, enabled: bool) -> None:
        """Toggle the publisher's standby filter."""
        ...


class Sim:
    """Runs a LobbyWorld and publishes its changes to the ingress over HTTP."""

    def __init__(
        self,
        api_url: str = "http://localhost:8000",
        tick_interval: float = 1.0,
        seed: int | None = None,
        world: LobbyWorld | None = None,
        transport: ITransport | None = None,
        publisher_config: PublisherConfig | None = None,
    ):
        self._api_url = api_url
        self._tick_interval = tick_interval
        self._world = world or LobbyWorld(rng=random.Random(seed))
        self._transport = transport
        self._owns_transport = transport is None
        self._publisher_config = publisher_config
        self._upstream_enabled = True

        self._running = False
        self._task: asyncio.Task | None = None
        self._scheduler: AsyncioScheduler | None = None
        self._emitter: EventEmitter | None = None
        self._publisher: ClientPublisher | None = None
        self._tracking: EventTracking | None = None

    @property
    def running(self) -> bool:
        return self._running

    @property
    def emitter(self) -> EventEmitter | None:
        return self._emitter

    @property
    def publisher(self) -> ClientPublisher | None:
        return self._publisher

    def set_upstream_enabled(self, enabled: bool) -> None:
        """Toggle the publisher's standby filter."""
        self._upstream_enabled = enabled
        if self._publisher:
            self._publisher.set_upstream_enabled(enabled)

    async def start(self) -> None:
        """Start the world loop with a fresh session."""
        if self._running:
            return

        self._running = True
        if self._transport is None:
            self._transport = HttpTransport(self._api_url)

        context = SessionContext.from_store(InMemorySessionStore())
        self._emitter = EventEmitter(context)
        self._scheduler = AsyncioScheduler()
        self._publisher = ClientPublisher(
            transport=self._transport,
            scheduler=self._scheduler,
            config=self._publisher_config,
            upstream_enabled=self._upstream_enabled,
        )
        self._publisher.start()
        self._tracking = EventTracking(self._emitter, self._publisher)
        self._tracking.attach()

        logger.info("SIM started (session %s)", context.session_id, extra={"session_id": context.session_id})
        self._task = asyncio.create_task(self._run_world())

    async def stop(self) -> None:
        """Stop the world loop and flush what is queued."""
        if not self._running:
            return
        self._running = False

        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        if self._tracking:
            self._tracking.detach()
        if self._publisher:
            await self._publisher.stop()
        if self._scheduler:
            await self._scheduler.drain()
        if self._owns_transport and isinstance(self._transport, HttpTransport):
            await self._transport.aclose()
            self._transport = None

        logger.info("SIM stopped")

    async def _run_world(self) -> None:
        """Step the world and emit every change."""
        try:
            while self._running:
                await asyncio.sleep(self._tick_interval)
                for change in self._world.step():
                    self._emitter.emit_variant(change)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error("SIM world error: %s", e, exc_info=True)
