"""Concierge collaborators: dialogue lines and speech."""

from .dialogue import ConciergeDialogue, Greeting
from .speech import SpeechResult, SpeechSynthesizer

__all__ = ["ConciergeDialogue", "Greeting", "SpeechResult", "SpeechSynthesizer"]
