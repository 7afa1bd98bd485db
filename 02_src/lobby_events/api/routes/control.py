"""Control API routes."""

from typing import Any

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from ...app import IApplication


class StatusResponse(BaseModel):
    """Response model for status."""

    status: str


class UpstreamRequest(BaseModel):
    """Toggle for the sim publisher's standby filter."""

    enabled: bool


# Global SIM instance (set by main)
_sim_instance: Any = None


def set_sim_instance(sim: Any) -> None:
    """Set the global SIM instance."""
    global _sim_instance
    _sim_instance = sim


def get_sim_instance() -> Any:
    """Get the global SIM instance."""
    return _sim_instance


def _require_sim() -> Any:
    if not _sim_instance:
        raise HTTPException(status_code=404, detail="SIM not configured")
    return _sim_instance


def create_control_router(app: IApplication) -> APIRouter:
    """Create control router."""
    router = APIRouter(prefix="/api/control", tags=["control"])

    @router.post("/reset", response_model=StatusResponse)
    async def reset_system() -> dict:
        """Clear recorded trace events."""
        try:
            await app.reset()
            return {"status": "ok"}
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    @router.post("/sim/start", response_model=StatusResponse)
    async def start_sim() -> dict:
        """Start the lobby simulation."""
        sim = _require_sim()
        try:
            await sim.start()
            return {"status": "ok"}
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    @router.post("/sim/stop", response_model=StatusResponse)
    async def stop_sim() -> dict:
        """Stop the lobby simulation."""
        sim = _require_sim()
        try:
            await sim.stop()
            return {"status": "ok"}
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    @router.post("/sim/upstream", response_model=StatusResponse)
    async def set_sim_upstream(request: UpstreamRequest) -> dict:
        """Enable or disable upstream publishing of simulation events."""
        sim = _require_sim()
        sim.set_upstream_enabled(request.enabled)
        return {"status": "enabled" if request.enabled else "standby"}

    return router
