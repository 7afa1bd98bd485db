"""Lobby simulation used as an event source."""

from .sim import ISim, Sim
from .world import AGENT_STATES, Agent, LobbyWorld, Room

__all__ = ["ISim", "Sim", "LobbyWorld", "Agent", "Room", "AGENT_STATES"]
