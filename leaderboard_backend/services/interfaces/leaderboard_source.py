from abc import ABC, abstractmethod
from typing import Optional

from leaderboard_backend.entities.leaderboard import LeaderboardEntry, SortKey


class LeaderboardSourceError(Exception):
    """The balance store could not answer a leaderboard query."""


class LeaderboardSource(ABC):

    @abstractmethod
    async def fetch_full_leaderboard(self, leaderboard_id: str, sort_key: SortKey) -> list[LeaderboardEntry]:
        pass

    @abstractmethod
    async def total_pages(self, leaderboard_id: str, page_size: int) -> Optional[int]:
        pass
