from __future__ import annotations

import logging
import re

from leaderboard_backend.entities.leaderboard import PageRequest, PageWindow, SortKey
from leaderboard_backend.services.interfaces.leaderboard_source import LeaderboardSource

logger = logging.getLogger(__name__)

PAGED_DEFAULT_LIMIT = 1000
OFFSET_DEFAULT_LIMIT = 25
OFFSET_MAX_LIMIT = 25

_LEADING_INT = re.compile(r"\s*([+-]?[0-9]+)")


def _parse_int(raw: str | None) -> int | None:
    """Leading-integer coercion: ``"10abc"`` is 10, ``"abc"`` is None.

    Digit runs too long for ``int()`` count as unparseable.
    """
    if raw is None:
        return None
    match = _LEADING_INT.match(str(raw))
    if match is None:
        return None
    try:
        return int(match.group(1))
    except ValueError:
        return None


def parse_sort_key(raw: str | None) -> SortKey:
    try:
        return SortKey(raw)
    except ValueError:
        return SortKey.TOTAL


def parse_page(raw: str | None) -> int | None:
    return _parse_int(raw) or None


def parse_offset(raw: str | None) -> int | None:
    if raw is None:
        return None
    value = _parse_int(raw)
    if not value or value < 0:
        return 0
    return value


def parse_limit(raw: str | None) -> int | None:
    return _parse_int(raw)


def parse_page_request(
    page: str | None = None,
    offset: str | None = None,
    limit: str | None = None,
    sort: str | None = None,
) -> PageRequest:
    """Turn raw query values into a PageRequest. Never raises.

    Paging mode is selected by the mere presence of ``page``, even when its
    value is malformed.
    """
    return PageRequest(
        page=parse_page(page),
        offset=parse_offset(offset),
        limit=parse_limit(limit),
        sort_key=parse_sort_key(sort),
        paged=page is not None,
    )


class PaginationResolver:
    """Resolves a PageRequest into the concrete window to slice.

    Only paging mode talks to the source, and only for the page count.
    """

    def __init__(self, source: LeaderboardSource):
        self._source = source

    async def resolve(self, leaderboard_id: str, request: PageRequest) -> PageWindow:
        if request.paged:
            return await self._resolve_paged(leaderboard_id, request)
        return self._resolve_offset(request)

    async def _resolve_paged(self, leaderboard_id: str, request: PageRequest) -> PageWindow:
        page = request.page if request.page and request.page > 0 else 1
        limit = request.limit if request.limit is not None else PAGED_DEFAULT_LIMIT

        total_pages = await self._source.total_pages(leaderboard_id, limit)
        if not total_pages:
            logger.debug("Leaderboard %s has no pages for limit=%s", leaderboard_id, limit)
            return PageWindow(
                sort_key=request.sort_key,
                offset=0,
                limit=limit,
                page=page,
                total_pages=total_pages,
                paged=True,
            )

        if request.offset is None:
            page = min(max(page, 1), total_pages)
            offset = max(0, (page - 1) * limit)
        else:
            offset = request.offset

        return PageWindow(
            sort_key=request.sort_key,
            offset=offset,
            limit=limit,
            page=page,
            total_pages=total_pages,
            paged=True,
        )

    @staticmethod
    def _resolve_offset(request: PageRequest) -> PageWindow:
        limit = request.limit
        if not limit or limit <= 0 or limit > OFFSET_MAX_LIMIT:
            limit = OFFSET_DEFAULT_LIMIT

        return PageWindow(
            sort_key=request.sort_key,
            offset=request.offset or 0,
            limit=limit,
            page=request.page,
        )
