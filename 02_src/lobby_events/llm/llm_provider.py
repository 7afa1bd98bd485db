"""LLM provider for short concierge lines, using the Anthropic API."""

import os
from typing import Protocol

import anthropic

from ..errors import LLMError
from ..logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_MODELS = [
    "claude-3-5-haiku-latest",
    "claude-3-5-sonnet-latest",
]


class ILLMProvider(Protocol):
    """Opaque text generation service."""

    async def generate(
        self, prompt: str, max_tokens: int = 120, temperature: float = 0.7
    ) -> str:
        """Generate a short line of text for the prompt."""
        ...


class LLMProvider:
    """Anthropic provider that falls back through a list of models."""

    def __init__(self, api_key: str | None = None, models: list[str] | None = None):
        self._api_key = api_key or os.getenv("ANTHROPIC_API_KEY")
        if not self._api_key:
            raise ValueError("ANTHROPIC_API_KEY environment variable not set")

        if models is None:
            env_models = os.getenv("ANTHROPIC_MODELS", "")
            models = [m.strip() for m in env_models.split(",") if m.strip()] or DEFAULT_MODELS
        self._models = list(models)
        self._client = anthropic.AsyncAnthropic(api_key=self._api_key)

    @property
    def models(self) -> list[str]:
        return list(self._models)

    async def generate(
        self, prompt: str, max_tokens: int = 120, temperature: float = 0.7
    ) -> str:
        """Try each model in order; raise LLMError when all fail."""
        last_error: Exception | None = None

        for model in self._models:
            try:
                response = await self._client.messages.create(
                    model=model,
                    max_tokens=max_tokens,
                    temperature=temperature,
                    messages=[{"role": "user", "content": prompt}],
                )
            except anthropic.APIError as e:
                last_error = e
                logger.warning("Model %s failed, trying next: %s", model, e)
                continue

            text = "".join(
                getattr(block, "text", "") for block in response.content
            ).strip()
            logger.debug("Generated line with %s", model)
            return text

        raise LLMError(f"All models failed: {last_error}")
