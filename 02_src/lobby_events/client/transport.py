"""Network boundary between the client publisher and the ingress endpoint."""

from dataclasses import dataclass
from typing import Protocol

import httpx

from ..errors import DeliveryError
from ..models import Envelope

EVENTS_PATH = "/api/events"


@dataclass(frozen=True)
class DeliveryReceipt:
    """Counts acknowledged by the ingress for one batch."""

    published: int
    dropped: int = 0


class ITransport(Protocol):
    """Delivers one batch; raises DeliveryError on any failure."""

    async def send(self, events: list[Envelope]) -> DeliveryReceipt:
        ...


class HttpTransport:
    """POSTs batches to the ingress endpoint with httpx."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        client: httpx.AsyncClient | None = None,
    ):
        self._url = f"{base_url.rstrip('/')}{EVENTS_PATH}"
        self._timeout = timeout
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient()

    async def send(self, events: list[Envelope]) -> DeliveryReceipt:
        """POST {"events": [...]} and parse the acknowledgement."""
        try:
            response = await self._client.post(
                self._url,
                json={"events": [e.to_dict() for e in events]},
                timeout=self._timeout,
            )
        except httpx.TimeoutException as e:
            raise DeliveryError(f"Timed out after {self._timeout}s") from e
        except httpx.HTTPError as e:
            raise DeliveryError(f"Connection error: {e}") from e

        if not response.is_success:
            raise DeliveryError(
                f"Ingress responded {response.status_code}",
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError:
            body = {}

        published = body.get("published") if isinstance(body, dict) else None
        dropped = body.get("dropped") if isinstance(body, dict) else None
        return DeliveryReceipt(
            published=published if isinstance(published, int) else len(events),
            dropped=dropped if isinstance(dropped, int) else 0,
        )

    async def aclose(self) -> None:
        """Close the underlying client if this transport created it."""
        if self._owns_client:
            await self._client.aclose()
