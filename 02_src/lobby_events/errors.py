"""Domain exceptions for the event pipeline and its collaborators."""


class LobbyEventsError(Exception):
    """Base class for all lobby_events errors."""


class InvalidEnvelopeError(LobbyEventsError):
    """A wire dict could not be parsed into an Envelope."""


class DeliveryError(LobbyEventsError):
    """A batch could not be delivered to the ingress endpoint."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class EmptyBatchError(LobbyEventsError):
    """Ingress received a missing or empty events array."""


class BrokerPublishError(LobbyEventsError):
    """The broker rejected or failed to acknowledge a batch."""


class LLMError(LobbyEventsError):
    """Every configured model failed to produce a line."""


class SpeechError(LobbyEventsError):
    """Text-to-speech synthesis failed."""
