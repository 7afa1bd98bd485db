"""Concierge robot API routes: greeting lines and speech."""

from fastapi import APIRouter, Header, HTTPException
from fastapi.responses import Response
from pydantic import BaseModel, Field

from ...app import Application
from ...errors import LLMError, SpeechError


class RobotRequest(BaseModel):
    """Scene context for a concierge line."""

    scene: str | None = None
    trigger: str | None = None
    atmosphere: str | None = None
    time_of_day: str | None = Field(None, alias="timeOfDay")


class RobotResponse(BaseModel):
    text: str
    cached: bool


class SpeechRequest(BaseModel):
    text: str | None = None
    voice_id: str | None = Field(None, alias="voiceId")


def create_concierge_router(app: Application) -> APIRouter:
    """Create concierge router."""
    router = APIRouter(prefix="/api", tags=["concierge"])

    @router.post("/npc/robot", response_model=RobotResponse)
    async def robot_line(
        request: RobotRequest,
        x_client_id: str = Header("default"),
    ) -> dict:
        """Generate a short concierge greeting."""
        if app.concierge is None:
            raise HTTPException(status_code=500, detail="ANTHROPIC_API_KEY not configured")
        try:
            greeting = await app.concierge.greet(
                client_id=x_client_id,
                scene=request.scene,
                trigger=request.trigger,
                atmosphere=request.atmosphere,
                time_of_day=request.time_of_day,
            )
        except LLMError as e:
            raise HTTPException(status_code=500, detail=str(e))
        return {"text": greeting.text, "cached": greeting.cached}

    @router.post("/tts")
    async def text_to_speech(request: SpeechRequest) -> Response:
        """Synthesize a line as audio/mpeg."""
        if not request.text:
            raise HTTPException(status_code=400, detail="Missing text")
        if not app.speech.configured:
            raise HTTPException(status_code=500, detail="ELEVENLABS_API_KEY not configured")
        try:
            result = await app.speech.synthesize(request.text, request.voice_id)
        except SpeechError as e:
            raise HTTPException(status_code=500, detail=str(e))
        return Response(
            content=result.audio,
            media_type="audio/mpeg",
            headers={"X-Cached": "true" if result.cached else "false"},
        )

    return router
