import time
from typing import Callable, Optional

from leaderboard_backend.services.interfaces.cache import Cache


class InMemoryCache(Cache):
    """Process-local cache with per-key expiry, for single-process setups and tests."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._store: dict[str, tuple[str, float]] = {}

    async def get(self, key: str) -> Optional[str]:
        item = self._store.get(key)
        if item is None:
            return None

        value, expires_at = item
        if self._clock() >= expires_at:
            del self._store[key]
            return None
        return value

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        self._store[key] = (value, self._clock() + ttl_seconds)
