"""Broker adapter: publishes accepted events to a single Kafka topic."""

import asyncio
import json
from typing import Any, Callable, Mapping, Protocol

from aiokafka import AIOKafkaProducer
from aiokafka.helpers import create_ssl_context

from ..config import BrokerConfig
from ..errors import BrokerPublishError
from ..logging_config import get_logger

logger = get_logger(__name__)

UNKNOWN_SESSION_KEY = "unknown"


def partition_key(event: Mapping[str, Any]) -> str:
    """sessionId keeps one session's events on one partition, in order."""
    session_id = event.get("sessionId")
    if isinstance(session_id, str) and session_id:
        return session_id
    return UNKNOWN_SESSION_KEY


class IBrokerAdapter(Protocol):
    """Publishes validated events to the durable topic."""

    @property
    def is_ready(self) -> bool:
        """True when connected and able to publish."""
        ...

    async def start(self) -> None:
        """Connect once, best effort."""
        ...

    async def stop(self) -> None:
        """Flush and disconnect."""
        ...

    async def publish(self, events: list[Mapping[str, Any]]) -> int:
        """Publish events in order; raises BrokerPublishError."""
        ...


class KafkaBrokerAdapter:
    """aiokafka-backed adapter."""

    def __init__(
        self,
        config: BrokerConfig,
        producer_factory: Callable[..., AIOKafkaProducer] = AIOKafkaProducer,
    ):
        self._config = config
        self._producer_factory = producer_factory
        self._producer: AIOKafkaProducer | None = None

    @property
    def topic(self) -> str:
        return self._config.topic

    @property
    def is_ready(self) -> bool:
        return self._producer is not None

    async def start(self) -> None:
        """Connect once without retrying; failure leaves the adapter not ready."""
        if not self._config.enabled:
            logger.info("Kafka disabled (CONFLUENT_ENABLED is not 'true' or '1')")
            return
        if not self._config.is_configured:
            logger.info("Kafka disabled (no KAFKA_BROKERS or CONFLUENT_BOOTSTRAP_SERVERS)")
            return

        producer = self._producer_factory(**self._producer_options())
        try:
            await producer.start()
        except Exception as e:
            logger.error("Kafka connection failed: %s", e)
            return

        self._producer = producer
        logger.info("Connected to Kafka brokers: %s", ",".join(self._config.brokers))

    async def stop(self) -> None:
        """Flush and disconnect."""
        if self._producer is not None:
            producer, self._producer = self._producer, None
            await producer.stop()
            logger.info("Kafka producer stopped")

    async def publish(self, events: list[Mapping[str, Any]]) -> int:
        """
        Publish events to the topic, keyed by sessionId.

        Sends are enqueued one after another before any is awaited, so
        messages sharing a key land on their partition in call order.
        """
        if self._producer is None:
            raise BrokerPublishError("Kafka producer is not connected")
        if not events:
            return 0

        try:
            deliveries = []
            for event in events:
                deliveries.append(
                    await self._producer.send(
                        self._config.topic,
                        value=json.dumps(event).encode("utf-8"),
                        key=partition_key(event).encode("utf-8"),
                    )
                )
            await asyncio.gather(*deliveries)
        except Exception as e:
            raise BrokerPublishError(f"Kafka publish failed: {e}") from e

        return len(events)

    def _producer_options(self) -> dict[str, Any]:
        options: dict[str, Any] = {
            "bootstrap_servers": self._config.brokers,
            "client_id": self._config.client_id,
            "security_protocol": self._config.security_protocol,
        }
        if self._config.username:
            options["sasl_mechanism"] = "PLAIN"
            options["sasl_plain_username"] = self._config.username
            options["sasl_plain_password"] = self._config.password or ""
        if self._config.ssl:
            options["ssl_context"] = create_ssl_context()
        return options
