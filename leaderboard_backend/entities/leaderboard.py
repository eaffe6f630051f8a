from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

# One participant's row as served to callers. Only ordered and sliced here.
LeaderboardEntry = dict[str, Any]


class SortKey(StrEnum):
    TOTAL = "total"
    CASH = "cash"
    BANK = "bank"


@dataclass
class BalanceEntry:
    rank: int
    user_id: str
    cash: int
    bank: int
    total: int


@dataclass(frozen=True)
class PageRequest:
    """Typed query of a leaderboard page.

    ``offset`` is None when the caller did not send one, which is how an
    explicit offset takes precedence over the page-derived one.
    """
    page: int | None = None
    offset: int | None = None
    limit: int | None = None
    sort_key: SortKey = SortKey.TOTAL
    paged: bool = False


@dataclass(frozen=True)
class PageWindow:
    sort_key: SortKey
    offset: int
    limit: int | None
    page: int | None = None
    total_pages: int | None = None
    paged: bool = False

    @property
    def is_exhausted(self) -> bool:
        return self.paged and not self.total_pages


@dataclass
class PageResult:
    entries: list[LeaderboardEntry] = field(default_factory=list)
    page: int | None = None
    total_pages: int | None = None
