"""Project-level configuration and path helpers."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
DATA_DIR = PROJECT_ROOT / "03_data"
LOGS_DIR = PROJECT_ROOT / "04_logs"
DEFAULT_DB_PATH = DATA_DIR / "lobby_events.db"
DEFAULT_LOG_PATH = LOGS_DIR / "lobby_events.log"

DEFAULT_TOPIC = "seedcore.hotel.events"

DATA_DIR.mkdir(parents=True, exist_ok=True)
LOGS_DIR.mkdir(parents=True, exist_ok=True)


PathLike = Union[str, Path]


def resolve_db_path(env_value: PathLike | None = None) -> PathLike:
    """Resolve DATABASE_URL to an absolute path."""
    if not env_value:
        return DEFAULT_DB_PATH

    if str(env_value) == ":memory:":
        return ":memory:"

    candidate = Path(env_value)
    return candidate if candidate.is_absolute() else PROJECT_ROOT / candidate


def env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in ("1", "true", "yes")


@dataclass(frozen=True)
class PublisherConfig:
    """Batching and resilience knobs for the client publisher."""

    flush_interval_s: float = 2.0
    high_water_mark: int = 50
    failure_threshold: int = 3
    requeue_limit: int = 100
    dedupe_window_ms: int = 1000
    request_timeout_s: float = 5.0


@dataclass(frozen=True)
class BrokerConfig:
    """Connection settings for the Kafka-compatible broker."""

    enabled: bool = False
    brokers: list[str] = field(default_factory=list)
    client_id: str = "lobby-events-server"
    username: str | None = None
    password: str | None = None
    ssl: bool = False
    topic: str = DEFAULT_TOPIC

    @property
    def is_configured(self) -> bool:
        """True when enabled and at least one broker address is known."""
        return self.enabled and any(self.brokers)

    @property
    def security_protocol(self) -> str:
        if self.ssl:
            return "SASL_SSL" if self.username else "SSL"
        return "SASL_PLAINTEXT" if self.username else "PLAINTEXT"

    @classmethod
    def from_env(cls) -> "BrokerConfig":
        """
        Build broker settings from the environment.

        CONFLUENT_* variables take precedence over their KAFKA_* fallbacks.
        """
        bootstrap = os.getenv("CONFLUENT_BOOTSTRAP_SERVERS")
        if bootstrap:
            brokers = [bootstrap]
        else:
            raw = os.getenv("KAFKA_BROKERS", "")
            brokers = [b.strip() for b in raw.split(",") if b.strip()]

        return cls(
            enabled=env_flag("CONFLUENT_ENABLED"),
            brokers=brokers,
            client_id=os.getenv("KAFKA_CLIENT_ID", "lobby-events-server"),
            username=os.getenv("CONFLUENT_API_KEY") or os.getenv("KAFKA_USERNAME"),
            password=os.getenv("CONFLUENT_API_SECRET") or os.getenv("KAFKA_PASSWORD"),
            ssl=(
                os.getenv("CONFLUENT_SECURITY_PROTOCOL") == "SASL_SSL"
                or env_flag("KAFKA_SSL")
            ),
            topic=os.getenv("EVENTS_TOPIC", DEFAULT_TOPIC),
        )
