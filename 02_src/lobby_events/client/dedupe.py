"""Short-window deduplication of identical (type, payload) pairs."""

import json
from collections import OrderedDict

from ..models import Envelope


def dedupe_key(envelope: Envelope) -> str:
    """type + canonical JSON of the payload."""
    try:
        payload = json.dumps(
            dict(envelope.payload), sort_keys=True, separators=(",", ":"), default=str
        )
    except TypeError:
        # Mixed key types cannot be sorted directly; order them by their text form
        items = sorted(envelope.payload.items(), key=lambda item: str(item[0]))
        payload = json.dumps(
            [[str(k), v] for k, v in items], separators=(",", ":"), default=str
        )
    return f"{envelope.type}:{payload}"


class RecentEvents:
    """Remembers when each key was last admitted."""

    def __init__(self, window_ms: int = 1000):
        self._window_ms = window_ms
        # key -> last admitted at (ms), oldest first
        self._seen: OrderedDict[str, int] = OrderedDict()

    def __len__(self) -> int:
        return len(self._seen)

    def admit(self, envelope: Envelope, now_ms: int) -> bool:
        """Return False if an identical event was admitted within the window."""
        self._prune(now_ms)

        key = dedupe_key(envelope)
        last = self._seen.get(key)
        if last is not None and now_ms - last < self._window_ms:
            return False

        self._seen[key] = now_ms
        self._seen.move_to_end(key)
        return True

    def clear(self) -> None:
        self._seen.clear()

    def _prune(self, now_ms: int) -> None:
        while self._seen:
            key, seen_at = next(iter(self._seen.items()))
            if now_ms - seen_at < self._window_ms:
                break
            del self._seen[key]
