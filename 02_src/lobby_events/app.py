"""Application bootstrap and lifecycle management."""

import os
from typing import Protocol

from .broker import IBrokerAdapter, KafkaBrokerAdapter
from .concierge import ConciergeDialogue, SpeechSynthesizer
from .config import BrokerConfig, resolve_db_path
from .ingress import IngressService
from .llm import ILLMProvider, LLMProvider
from .logging_config import get_logger
from .storage import IStorage, Storage
from .tracker import ITracker, Tracker

logger = get_logger(__name__)


class IApplication(Protocol):
    """Bootstrap and lifecycle."""

    async def start(self) -> None:
        """Initialize components in dependency order."""
        ...

    async def stop(self) -> None:
        """Shutdown in reverse order."""
        ...

    async def reset(self) -> None:
        """Reset trace data between test runs."""
        ...


class Application:
    """Server-side bootstrap: storage, tracker, broker, ingress, concierge."""

    def __init__(
        self,
        db_path: str | None = None,
        broker_config: BrokerConfig | None = None,
        broker: IBrokerAdapter | None = None,
        llm: ILLMProvider | None = None,
    ):
        env_db_path = os.getenv("DATABASE_URL") if db_path is None else db_path
        self._db_path = resolve_db_path(env_db_path)
        self._broker_config = broker_config

        # Components (initialized in start(), injectable for tests)
        self._storage: IStorage | None = None
        self._tracker: ITracker | None = None
        self._broker: IBrokerAdapter | None = broker
        self._ingress: IngressService | None = None
        self._llm: ILLMProvider | None = llm
        self._concierge: ConciergeDialogue | None = None
        self._speech: SpeechSynthesizer | None = None

    async def start(self) -> None:
        """Initialize components in dependency order."""
        logger.info("Starting application")

        # 1. Storage (no dependencies)
        self._storage = Storage(self._db_path)
        await self._storage.init()
        logger.info("Storage initialized")

        # 2. Tracker (depends on Storage)
        self._tracker = Tracker(self._storage)

        # 3. Broker adapter (best-effort connect, never fatal)
        if self._broker is None:
            self._broker = KafkaBrokerAdapter(self._broker_config or BrokerConfig.from_env())
        await self._broker.start()
        logger.info("Broker adapter ready: %s", self._broker.is_ready)

        # 4. Ingress (depends on Broker + Tracker)
        self._ingress = IngressService(self._broker, self._tracker)

        # 5. Concierge collaborators (optional, keyed by API credentials)
        if self._llm is None:
            try:
                self._llm = LLMProvider()
            except ValueError as e:
                logger.warning("Concierge dialogue disabled: %s", e)
        if self._llm is not None:
            self._concierge = ConciergeDialogue(self._llm)
        self._speech = SpeechSynthesizer()

        logger.info("All components initialized successfully")

    async def stop(self) -> None:
        """Shutdown in reverse order."""
        if self._speech:
            await self._speech.aclose()
        if self._broker:
            await self._broker.stop()
        if self._storage:
            await self._storage.close()
            logger.info("Storage closed")

    async def reset(self) -> None:
        """Reset trace data between test runs."""
        if self._storage:
            await self._storage.clear()
            logger.info("Storage cleared")

    @property
    def storage(self) -> IStorage:
        """Get storage instance."""
        if not self._storage:
            raise RuntimeError("Application not started")
        return self._storage

    @property
    def ingress(self) -> IngressService:
        """Get ingress service instance."""
        if not self._ingress:
            raise RuntimeError("Application not started")
        return self._ingress

    @property
    def concierge(self) -> ConciergeDialogue | None:
        """Concierge dialogue, or None when no LLM is configured."""
        return self._concierge

    @property
    def speech(self) -> SpeechSynthesizer:
        """Get speech synthesizer instance."""
        if not self._speech:
            raise RuntimeError("Application not started")
        return self._speech
