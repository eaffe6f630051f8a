from __future__ import annotations

import asyncio
import json
import logging
from typing import Optional

from leaderboard_backend.entities.leaderboard import LeaderboardEntry, SortKey
from leaderboard_backend.services.interfaces.cache import Cache

DEFAULT_TTL_SECONDS = 300


class LeaderboardCacheGateway:
    """Snapshot cache keyed by leaderboard and sort field.

    Reads degrade to a miss on any fault, writes never surface an error.
    """

    def __init__(self, cache: Cache, ttl_seconds: int = DEFAULT_TTL_SECONDS):
        self._cache = cache
        self.ttl_seconds = ttl_seconds
        self._pending: set[asyncio.Task] = set()
        self.logger = logging.getLogger(__name__)

    @staticmethod
    def cache_key(leaderboard_id: str, sort_key: SortKey) -> str:
        return f"{leaderboard_id}:leaderboard:{SortKey(sort_key).value}"

    async def get(self, leaderboard_id: str, sort_key: SortKey) -> Optional[list[LeaderboardEntry]]:
        key = self.cache_key(leaderboard_id, sort_key)
        try:
            data = await self._cache.get(key)
        except Exception as exc:
            self.logger.warning("Cache read failed for %s: %s", key, exc)
            return None

        if data is None:
            self.logger.debug("Cache miss for %s", key)
            return None

        try:
            entries = json.loads(data)
        except (TypeError, ValueError) as exc:
            self.logger.warning("Discarding undecodable cache entry %s: %s", key, exc)
            return None

        if not isinstance(entries, list):
            self.logger.warning("Discarding cache entry %s: expected a list, got %s", key, type(entries).__name__)
            return None

        return entries

    async def set(self, leaderboard_id: str, sort_key: SortKey, entries: list[LeaderboardEntry]) -> None:
        key = self.cache_key(leaderboard_id, sort_key)
        try:
            await self._cache.set(key, json.dumps(entries), self.ttl_seconds)
        except Exception as exc:
            self.logger.warning("Cache write failed for %s: %s", key, exc)
            return
        self.logger.debug("Cached %d entries under %s for %ss", len(entries), key, self.ttl_seconds)

    def schedule_set(self, leaderboard_id: str, sort_key: SortKey, entries: list[LeaderboardEntry]) -> asyncio.Task:
        """Write the snapshot in the background. The caller does not wait on it
        and its outcome is discarded; the task is only held until it finishes."""
        task = asyncio.create_task(self.set(leaderboard_id, sort_key, entries))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def wait_pending(self) -> None:
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
