"""Client-side capture and publishing pipeline."""

from .circuit import CircuitBreaker, CircuitSignal, CircuitSnapshot, CircuitState, transition
from .dedupe import RecentEvents, dedupe_key
from .emitter import EventCallback, EventEmitter, IEventEmitter
from .publisher import ClientPublisher, IPublisher
from .scheduler import AsyncioScheduler, IScheduler, ITimer
from .tracking import EventTracking
from .transport import DeliveryReceipt, HttpTransport, ITransport

__all__ = [
    "EventEmitter",
    "IEventEmitter",
    "EventCallback",
    "ClientPublisher",
    "IPublisher",
    "CircuitBreaker",
    "CircuitSignal",
    "CircuitSnapshot",
    "CircuitState",
    "transition",
    "RecentEvents",
    "dedupe_key",
    "AsyncioScheduler",
    "IScheduler",
    "ITimer",
    "HttpTransport",
    "ITransport",
    "DeliveryReceipt",
    "EventTracking",
]
