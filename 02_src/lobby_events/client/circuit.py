"""CLOSED/OPEN circuit breaker guarding the flush path."""

from dataclasses import dataclass
from enum import Enum


class CircuitState(str, Enum):
    """Delivery state of the publisher."""

    CLOSED = "closed"
    OPEN = "open"


class CircuitSignal(str, Enum):
    """Inputs to the transition function."""

    SUCCESS = "success"
    FAILURE = "failure"
    RESET = "reset"


@dataclass(frozen=True)
class CircuitSnapshot:
    state: CircuitState = CircuitState.CLOSED
    failures: int = 0

    @property
    def is_open(self) -> bool:
        return self.state is CircuitState.OPEN


def transition(
    snapshot: CircuitSnapshot, signal: CircuitSignal, threshold: int
) -> CircuitSnapshot:
    """Apply one signal. FAILURE opens at threshold; SUCCESS and RESET close."""
    if signal is CircuitSignal.FAILURE:
        failures = snapshot.failures + 1
        state = CircuitState.OPEN if failures >= threshold else snapshot.state
        return CircuitSnapshot(state=state, failures=failures)
    return CircuitSnapshot(state=CircuitState.CLOSED, failures=0)


class CircuitBreaker:
    """Holds the current snapshot and reports edges to the caller."""

    def __init__(self, threshold: int = 3):
        if threshold < 1:
            raise ValueError("threshold must be >= 1")
        self._threshold = threshold
        self._snapshot = CircuitSnapshot()

    @property
    def snapshot(self) -> CircuitSnapshot:
        return self._snapshot

    @property
    def state(self) -> CircuitState:
        return self._snapshot.state

    @property
    def failures(self) -> int:
        return self._snapshot.failures

    @property
    def is_open(self) -> bool:
        return self._snapshot.is_open

    def apply(self, signal: CircuitSignal) -> tuple[CircuitSnapshot, CircuitSnapshot]:
        """Apply a signal and return (previous, current)."""
        previous = self._snapshot
        self._snapshot = transition(previous, signal, self._threshold)
        return previous, self._snapshot

    def record_success(self) -> tuple[CircuitSnapshot, CircuitSnapshot]:
        return self.apply(CircuitSignal.SUCCESS)

    def record_failure(self) -> tuple[CircuitSnapshot, CircuitSnapshot]:
        return self.apply(CircuitSignal.FAILURE)

    def reset(self) -> tuple[CircuitSnapshot, CircuitSnapshot]:
        return self.apply(CircuitSignal.RESET)
