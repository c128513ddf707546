"""TTL key-value store backing the circuit breaker."""

import threading
import time
from typing import Callable, Protocol


class TTLStore(Protocol):
    """Minimal shared key-value store with per-key expiry.

    Any low-latency store with TTL support (memcached, redis, ...) can sit
    behind this interface.
    """

    def get(self, key: str) -> int | None: ...

    def increment(self, key: str, ttl_s: float) -> int:
        """Add one to ``key`` (starting from zero) and reset its expiry."""
        ...

    def delete(self, key: str) -> None: ...


class InMemoryTTLStore:
    """Process-local TTLStore. Expired keys are dropped lazily on access."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._lock = threading.Lock()
        self._data: dict[str, tuple[int, float]] = {}  # key -> (value, expires_at)

    def _live(self, key: str, now: float) -> int | None:
        entry = self._data.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if now >= expires_at:
            del self._data[key]
            return None
        return value

    def get(self, key: str) -> int | None:
        with self._lock:
            return self._live(key, self._clock())

    def increment(self, key: str, ttl_s: float) -> int:
        with self._lock:
            now = self._clock()
            value = (self._live(key, now) or 0) + 1
            self._data[key] = (value, now + ttl_s)
            return value

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def __len__(self) -> int:
        with self._lock:
            now = self._clock()
            return sum(1 for key in list(self._data) if self._live(key, now) is not None)
