"""Lobby world: agents wandering between rooms."""

import random
from dataclasses import dataclass

from lobby_events.models import AgentStateChanged, PayloadVariant, RoomOccupancyChanged

AGENT_STATES = ("idle", "walking", "serving", "resting")


@dataclass(frozen=True)
class Room:
    id: str
    name: str


@dataclass
class Agent:
    id: str
    role: str
    state: str
    room_id: str


DEFAULT_ROOMS = [
    Room("atrium", "Grand Atrium"),
    Room("reception", "Reception"),
    Room("lounge", "Sky Lounge"),
    Room("spa", "Wellness Spa"),
]

DEFAULT_AGENTS = [
    ("agent_concierge", "concierge"),
    ("agent_porter", "porter"),
    ("agent_housekeeper", "housekeeper"),
    ("guest_001", "guest"),
    ("guest_002", "guest"),
    ("guest_003", "guest"),
]


class LobbyWorld:
    """Random agent movement; step() reports only what actually changed."""

    def __init__(
        self,
        agents: list[Agent] | None = None,
        rooms: list[Room] | None = None,
        rng: random.Random | None = None,
        move_probability: float = 0.3,
    ):
        self._rng = rng or random.Random()
        self.rooms = list(rooms or DEFAULT_ROOMS)
        if agents is None:
            agents = [
                Agent(id=agent_id, role=role, state="idle", room_id=self._rng.choice(self.rooms).id)
                for agent_id, role in DEFAULT_AGENTS
            ]
        self.agents = agents
        self._move_probability = move_probability

    def occupancy(self) -> dict[str, int]:
        """Agent count per room id."""
        counts = {room.id: 0 for room in self.rooms}
        for agent in self.agents:
            counts[agent.room_id] = counts.get(agent.room_id, 0) + 1
        return counts

    def step(self) -> list[PayloadVariant]:
        """Advance one tick and return the changes it produced."""
        before = self.occupancy()
        changes: list[PayloadVariant] = []

        for agent in self.agents:
            if self._rng.random() >= self._move_probability:
                continue

            previous = agent.state
            agent.state = self._rng.choice([s for s in AGENT_STATES if s != previous])
            if agent.state == "walking":
                agent.room_id = self._rng.choice(self.rooms).id

            changes.append(
                AgentStateChanged(
                    agent_id=agent.id,
                    agent_role=agent.role,
                    state=agent.state,
                    previous_state=previous,
                )
            )

        after = self.occupancy()
        for room in self.rooms:
            if before.get(room.id) != after.get(room.id):
                changes.append(
                    RoomOccupancyChanged(
                        room_id=room.id,
                        room_name=room.name,
                        occupancy=after[room.id],
                    )
                )

        return changes
