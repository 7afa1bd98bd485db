"""Session identity for a single client lifetime."""

import random
import string
import time
from dataclasses import dataclass
from typing import Callable, Protocol

SESSION_KEY = "lobby_session_id"

Clock = Callable[[], int]


def now_ms() -> int:
    """Wall-clock milliseconds since epoch."""
    return time.time_ns() // 1_000_000


def new_session_id(clock: Clock = now_ms) -> str:
    """Generate a session id like session_<ms>_<random7>."""
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=7))
    return f"session_{clock()}_{suffix}"


class ISessionStore(Protocol):
    """Session-scoped key/value storage."""

    def get(self, key: str) -> str | None:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class InMemorySessionStore:
    """Dict-backed session store; one instance per client session."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


@dataclass
class SessionContext:
    """Session identity passed explicitly to the emitter."""

    session_id: str
    user_id: str | None = None

    @classmethod
    def from_store(cls, store: ISessionStore, clock: Clock = now_ms) -> "SessionContext":
        """Reuse the session id held by the store, creating one on first use."""
        session_id = store.get(SESSION_KEY)
        if not session_id:
            session_id = new_session_id(clock)
            store.set(SESSION_KEY, session_id)
        return cls(session_id=session_id)
