"""Event ingress API routes."""

from typing import Any

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ...app import Application
from ...errors import BrokerPublishError, EmptyBatchError
from ...logging_config import get_logger

logger = get_logger(__name__)


class EventsRequest(BaseModel):
    """Request body: a batch of envelopes in wire form."""

    events: list[Any] | None = None


class EventsResponse(BaseModel):
    """Response for an accepted batch."""

    success: bool = True
    published: int
    dropped: int
    message: str | None = None


def create_events_router(app: Application) -> APIRouter:
    """Create events router."""
    router = APIRouter(prefix="/api", tags=["events"])

    @router.post(
        "/events",
        response_model=EventsResponse,
        response_model_exclude_none=True,
    )
    async def publish_events(request: EventsRequest | None = None) -> Any:
        """Re-validate a batch and publish the allowed events."""
        events = request.events if request else None
        try:
            result = await app.ingress.ingest(events)
        except EmptyBatchError as e:
            return JSONResponse(status_code=400, content={"error": str(e)})
        except BrokerPublishError as e:
            return JSONResponse(
                status_code=500,
                content={"error": "Event publish failed", "message": str(e)},
            )
        except Exception as e:
            logger.error("Unexpected ingress error: %s", e, exc_info=True)
            return JSONResponse(
                status_code=500,
                content={"error": "Event publish failed", "message": str(e)},
            )

        return {
            "success": True,
            "published": result.published,
            "dropped": result.dropped,
            "message": result.message,
        }

    return router
