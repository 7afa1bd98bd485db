"""Text-to-speech through the ElevenLabs HTTP API."""

import os
from collections import OrderedDict
from dataclasses import dataclass

import httpx

from ..errors import SpeechError
from ..logging_config import get_logger

logger = get_logger(__name__)

ELEVENLABS_URL = "https://api.elevenlabs.io/v1/text-to-speech"
DEFAULT_VOICE_ID = "21m00Tcm4TlvDq8ikWAM"


@dataclass(frozen=True)
class SpeechResult:
    audio: bytes
    cached: bool


class SpeechSynthesizer:
    """Synthesizes audio/mpeg bytes with a small FIFO cache."""

    def __init__(
        self,
        api_key: str | None = None,
        client: httpx.AsyncClient | None = None,
        cache_size: int = 50,
        timeout: float = 30.0,
    ):
        self._api_key = api_key or os.getenv("ELEVENLABS_API_KEY")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient()
        self._cache_size = cache_size
        self._timeout = timeout
        self._cache: OrderedDict[str, bytes] = OrderedDict()

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    async def synthesize(self, text: str, voice_id: str | None = None) -> SpeechResult:
        """Return audio for text, from cache when the same line was spoken before."""
        if not self._api_key:
            raise SpeechError("ELEVENLABS_API_KEY not configured")

        voice = voice_id or DEFAULT_VOICE_ID
        cache_key = f"{voice}-{text[:100]}"
        if cache_key in self._cache:
            logger.debug("TTS cache hit for: %s", text[:50])
            return SpeechResult(audio=self._cache[cache_key], cached=True)

        try:
            response = await self._client.post(
                f"{ELEVENLABS_URL}/{voice}",
                headers={"xi-api-key": self._api_key, "accept": "audio/mpeg"},
                json={
                    "text": text,
                    "model_id": "eleven_multilingual_v2",
                    "voice_settings": {"stability": 0.35, "similarity_boost": 0.75},
                },
                timeout=self._timeout,
            )
        except httpx.HTTPError as e:
            raise SpeechError(f"ElevenLabs request failed: {e}") from e

        if not response.is_success:
            raise SpeechError(f"ElevenLabs error {response.status_code}: {response.text[:200]}")

        audio = response.content
        self._cache[cache_key] = audio
        if len(self._cache) > self._cache_size:
            self._cache.popitem(last=False)
        return SpeechResult(audio=audio, cached=False)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
