"""Binds an emitter to a publisher for the lifetime of a component."""

from ..models import Envelope
from .emitter import IEventEmitter, Unsubscribe
from .publisher import IPublisher


class EventTracking:
    """Subscribe on attach, unsubscribe on detach."""

    def __init__(self, emitter: IEventEmitter, publisher: IPublisher):
        self._emitter = emitter
        self._publisher = publisher
        self._unsubscribe: Unsubscribe | None = None

    @property
    def attached(self) -> bool:
        return self._unsubscribe is not None

    def attach(self) -> None:
        if self._unsubscribe is None:
            self._unsubscribe = self._emitter.subscribe(self._forward)

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _forward(self, envelope: Envelope) -> None:
        self._publisher.publish(envelope)

    def __enter__(self) -> "EventTracking":
        self.attach()
        return self

    def __exit__(self, *exc_info) -> None:
        self.detach()
