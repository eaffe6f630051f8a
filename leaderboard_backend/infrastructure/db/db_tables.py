from __future__ import annotations

from typing import Optional

from sqlmodel import SQLModel, Field, Index


class BalanceRow(SQLModel, table=True):
    __tablename__ = "balances"

    id: Optional[int] = Field(default=None, primary_key=True)
    leaderboard_id: str = Field(index=True)
    user_id: str
    cash: int = 0
    bank: int = 0

    __table_args__ = (
        Index("idx_balances_leaderboard_user", "leaderboard_id", "user_id", unique=True),
    )
