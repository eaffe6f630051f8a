from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import asdict
from typing import Any

from sqlalchemy import func
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from leaderboard_backend.entities.leaderboard import BalanceEntry, LeaderboardEntry, SortKey
from leaderboard_backend.infrastructure.db.db_tables import BalanceRow
from leaderboard_backend.services.interfaces.leaderboard_source import (
    LeaderboardSource,
    LeaderboardSourceError,
)

logger = logging.getLogger(__name__)


def _sort_expression(sort_key: SortKey) -> Any:
    if sort_key == SortKey.CASH:
        return BalanceRow.cash
    if sort_key == SortKey.BANK:
        return BalanceRow.bank
    return BalanceRow.cash + BalanceRow.bank


class DBLeaderboardSource(LeaderboardSource):
    """
    Reads ranked balance snapshots from the balances table.

    Queries are blocking, so each one runs in a worker thread with its own session.
    """

    def __init__(self, engine: Engine):
        self._engine = engine

    async def fetch_full_leaderboard(self, leaderboard_id: str, sort_key: SortKey) -> list[LeaderboardEntry]:
        return await asyncio.to_thread(self._fetch_full_leaderboard, leaderboard_id, SortKey(sort_key))

    async def total_pages(self, leaderboard_id: str, page_size: int) -> int:
        return await asyncio.to_thread(self._total_pages, leaderboard_id, page_size)

    def _fetch_full_leaderboard(self, leaderboard_id: str, sort_key: SortKey) -> list[LeaderboardEntry]:
        statement = (
            select(BalanceRow)
            .where(BalanceRow.leaderboard_id == leaderboard_id)
            .order_by(_sort_expression(sort_key).desc(), BalanceRow.user_id)
        )
        try:
            with Session(self._engine) as session:
                rows = session.exec(statement).all()
        except SQLAlchemyError as exc:
            logger.error("Failed to fetch leaderboard %s by %s: %s", leaderboard_id, sort_key, exc)
            raise LeaderboardSourceError(f"leaderboard {leaderboard_id} unavailable") from exc

        return [
            asdict(BalanceEntry(
                rank=rank,
                user_id=row.user_id,
                cash=row.cash,
                bank=row.bank,
                total=row.cash + row.bank,
            ))
            for rank, row in enumerate(rows, start=1)
        ]

    def _total_pages(self, leaderboard_id: str, page_size: int) -> int:
        if page_size <= 0:
            return 0

        statement = (
            select(func.count())
            .select_from(BalanceRow)
            .where(BalanceRow.leaderboard_id == leaderboard_id)
        )
        try:
            with Session(self._engine) as session:
                count = session.exec(statement).one()
        except SQLAlchemyError as exc:
            logger.error("Failed to count leaderboard %s: %s", leaderboard_id, exc)
            raise LeaderboardSourceError(f"leaderboard {leaderboard_id} unavailable") from exc

        return math.ceil(count / page_size)
