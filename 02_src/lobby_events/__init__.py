"""Lobby event capture, publishing and ingress pipeline."""

from .app import Application, IApplication
from .broker import IBrokerAdapter, KafkaBrokerAdapter
from .client import (
    AsyncioScheduler,
    CircuitState,
    ClientPublisher,
    EventEmitter,
    EventTracking,
    HttpTransport,
)
from .config import BrokerConfig, PublisherConfig
from .ingress import IngressResult, IngressService
from .models import ALLOWED_EVENT_TYPES, Envelope, EventType, Source, TraceEvent
from .session import InMemorySessionStore, SessionContext
from .storage import IStorage, Storage
from .tracker import ITracker, Tracker

__all__ = [
    # Application
    "Application",
    "IApplication",
    # Models
    "Envelope",
    "EventType",
    "Source",
    "ALLOWED_EVENT_TYPES",
    "TraceEvent",
    # Session
    "SessionContext",
    "InMemorySessionStore",
    # Client pipeline
    "EventEmitter",
    "ClientPublisher",
    "CircuitState",
    "AsyncioScheduler",
    "HttpTransport",
    "EventTracking",
    # Server side
    "IngressService",
    "IngressResult",
    "IBrokerAdapter",
    "KafkaBrokerAdapter",
    "IStorage",
    "Storage",
    "ITracker",
    "Tracker",
    # Config
    "PublisherConfig",
    "BrokerConfig",
]
