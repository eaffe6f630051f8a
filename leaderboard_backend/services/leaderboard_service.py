from __future__ import annotations

import logging
from typing import Optional

from leaderboard_backend.entities.leaderboard import (
    LeaderboardEntry,
    PageRequest,
    PageResult,
    SortKey,
)
from leaderboard_backend.services.cache_gateway import DEFAULT_TTL_SECONDS, LeaderboardCacheGateway
from leaderboard_backend.services.interfaces.cache import Cache
from leaderboard_backend.services.interfaces.leaderboard_source import LeaderboardSource
from leaderboard_backend.services.pagination import PaginationResolver


class LeaderboardFetcher:

    def __init__(self, source: LeaderboardSource, cache_gateway: LeaderboardCacheGateway):
        self._source = source
        self.cache_gateway = cache_gateway
        self.logger = logging.getLogger(__name__)

    async def fetch(
        self,
        leaderboard_id: str,
        sort_key: SortKey,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> list[LeaderboardEntry]:
        """
        Return the ranked snapshot sliced to the window.

        The snapshot comes from cache when present, otherwise from the source,
        in which case it is written back to cache without waiting on the write.
        Offsets are 1-based here: offset 1 keeps the first entry, offset 3
        drops two entries.
        """
        entries = await self.cache_gateway.get(leaderboard_id, sort_key)
        if entries is None:
            entries = await self._source.fetch_full_leaderboard(leaderboard_id, sort_key)
            if entries is None:
                return []
            entries = list(entries)
            self.logger.debug("Fetched %d entries for %s/%s from source", len(entries), leaderboard_id, sort_key)
            self.cache_gateway.schedule_set(leaderboard_id, sort_key, entries)

        if offset:
            entries = entries[offset - 1:]

        if limit and limit > 0:
            entries = entries[:limit]

        return entries


class LeaderboardService:

    def __init__(self, resolver: PaginationResolver, fetcher: LeaderboardFetcher):
        self.resolver = resolver
        self.fetcher = fetcher

    @staticmethod
    def create(source: LeaderboardSource, cache: Cache, ttl_seconds: int = DEFAULT_TTL_SECONDS) -> "LeaderboardService":
        gateway = LeaderboardCacheGateway(cache, ttl_seconds=ttl_seconds)
        return LeaderboardService(
            resolver=PaginationResolver(source),
            fetcher=LeaderboardFetcher(source, gateway),
        )

    @property
    def cache_gateway(self) -> LeaderboardCacheGateway:
        return self.fetcher.cache_gateway

    async def get_page(self, leaderboard_id: str, request: PageRequest) -> PageResult:
        window = await self.resolver.resolve(leaderboard_id, request)
        if window.is_exhausted:
            return PageResult(entries=[], page=window.page, total_pages=window.total_pages)

        entries = await self.fetcher.fetch(
            leaderboard_id,
            window.sort_key,
            offset=window.offset,
            limit=window.limit,
        )
        # Page counts are only reported for the empty short-circuit above.
        return PageResult(entries=entries, page=window.page, total_pages=None)
