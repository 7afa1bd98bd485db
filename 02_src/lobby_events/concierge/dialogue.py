"""Concierge robot greetings with a per-client cooldown."""

import random
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable

from ..llm import ILLMProvider
from ..logging_config import get_logger

logger = get_logger(__name__)

FALLBACK_GREETING = "Welcome. How may I assist you today?"

ACKNOWLEDGEMENTS = [
    "I'm here whenever you need assistance.",
    "Feel free to ask if you need anything.",
    "How can I help you today?",
    "Is there something I can assist with?",
]

PROMPT_TEMPLATE = """You are the hotel concierge robot "Core Concierge" in the {scene}.
The user is near you (trigger: {trigger}).
Current atmosphere: {atmosphere}
Time of day: {time_of_day}

Speak 1-2 short sentences. Warm, futuristic, helpful. Be concise and welcoming.
Vary your phrasing - avoid repeating previous greetings. Reference the lobby ambience if relevant.
No markdown, just plain text."""


@dataclass(frozen=True)
class Greeting:
    text: str
    cached: bool


class ConciergeDialogue:
    """Generates concierge lines, answering repeat visitors without the model."""

    def __init__(
        self,
        llm: ILLMProvider,
        cooldown_s: float = 60.0,
        max_clients: int = 100,
        clock: Callable[[], float] = time.monotonic,
        rng: random.Random | None = None,
    ):
        self._llm = llm
        self._cooldown_s = cooldown_s
        self._max_clients = max_clients
        self._clock = clock
        self._rng = rng or random.Random()
        # client_id -> time of last generated greeting
        self._last_greeting: OrderedDict[str, float] = OrderedDict()

    async def greet(
        self,
        client_id: str = "default",
        scene: str | None = None,
        trigger: str | None = None,
        atmosphere: str | None = None,
        time_of_day: str | None = None,
    ) -> Greeting:
        """Return a concierge line; raises LLMError if generation fails."""
        now = self._clock()
        last = self._last_greeting.get(client_id)
        if last is not None and now - last < self._cooldown_s:
            logger.info("Greeting cooldown active for %s (%ds ago)", client_id, int(now - last))
            return Greeting(text=self._rng.choice(ACKNOWLEDGEMENTS), cached=True)

        prompt = PROMPT_TEMPLATE.format(
            scene=scene or "Grand Atrium",
            trigger=trigger or "hover",
            atmosphere=atmosphere or "neutral",
            time_of_day=time_of_day or "day",
        )
        text = await self._llm.generate(prompt) or FALLBACK_GREETING

        self._remember(client_id, now)
        return Greeting(text=text, cached=False)

    def _remember(self, client_id: str, now: float) -> None:
        self._last_greeting[client_id] = now
        self._last_greeting.move_to_end(client_id)
        while len(self._last_greeting) > self._max_clients:
            self._last_greeting.popitem(last=False)
