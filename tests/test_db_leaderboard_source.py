"""Tests for the SQLModel-backed leaderboard source against in-memory SQLite."""
from __future__ import annotations

import asyncio
import os
import unittest
from unittest.mock import patch

from sqlalchemy.exc import OperationalError
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from leaderboard_backend.entities.leaderboard import SortKey
from leaderboard_backend.infrastructure.db import BalanceRow, DBLeaderboardSource, database_url
from leaderboard_backend.infrastructure.db.init_db import init_db
from leaderboard_backend.services.interfaces.leaderboard_source import LeaderboardSourceError


def _memory_engine():
    return create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


class TestDBLeaderboardSource(unittest.TestCase):
    def setUp(self):
        self.engine = _memory_engine()
        SQLModel.metadata.create_all(self.engine)
        with Session(self.engine) as session:
            session.add_all([
                BalanceRow(leaderboard_id="g1", user_id="alice", cash=50, bank=500),
                BalanceRow(leaderboard_id="g1", user_id="bob", cash=400, bank=10),
                BalanceRow(leaderboard_id="g1", user_id="carol", cash=100, bank=100),
                BalanceRow(leaderboard_id="g1", user_id="dave", cash=100, bank=100),
                BalanceRow(leaderboard_id="g2", user_id="erin", cash=1, bank=1),
            ])
            session.commit()
        self.source = DBLeaderboardSource(self.engine)

    def _users(self, sort_key: SortKey) -> list[str]:
        entries = asyncio.run(self.source.fetch_full_leaderboard("g1", sort_key))
        return [entry["user_id"] for entry in entries]

    def test_sorted_by_total(self):
        self.assertEqual(self._users(SortKey.TOTAL), ["alice", "bob", "carol", "dave"])

    def test_sorted_by_cash(self):
        self.assertEqual(self._users(SortKey.CASH), ["bob", "carol", "dave", "alice"])

    def test_sorted_by_bank(self):
        self.assertEqual(self._users(SortKey.BANK), ["alice", "carol", "dave", "bob"])

    def test_entries_carry_rank_and_total(self):
        entries = asyncio.run(self.source.fetch_full_leaderboard("g1", SortKey.CASH))
        self.assertEqual(
            entries[0],
            {"rank": 1, "user_id": "bob", "cash": 400, "bank": 10, "total": 410},
        )
        self.assertEqual([entry["rank"] for entry in entries], [1, 2, 3, 4])

    def test_leaderboards_are_isolated(self):
        entries = asyncio.run(self.source.fetch_full_leaderboard("g2", SortKey.TOTAL))
        self.assertEqual([entry["user_id"] for entry in entries], ["erin"])

    def test_unknown_leaderboard_is_empty(self):
        self.assertEqual(asyncio.run(self.source.fetch_full_leaderboard("nope", SortKey.TOTAL)), [])
        self.assertEqual(asyncio.run(self.source.total_pages("nope", 10)), 0)

    def test_total_pages_rounds_up(self):
        self.assertEqual(asyncio.run(self.source.total_pages("g1", 3)), 2)
        self.assertEqual(asyncio.run(self.source.total_pages("g1", 4)), 1)
        self.assertEqual(asyncio.run(self.source.total_pages("g1", 1000)), 1)

    def test_total_pages_non_positive_size_is_zero(self):
        self.assertEqual(asyncio.run(self.source.total_pages("g1", 0)), 0)
        self.assertEqual(asyncio.run(self.source.total_pages("g1", -5)), 0)

    def test_missing_table_raises_source_error(self):
        source = DBLeaderboardSource(_memory_engine())
        with self.assertRaises(LeaderboardSourceError) as ctx:
            asyncio.run(source.fetch_full_leaderboard("g1", SortKey.TOTAL))
        self.assertIsInstance(ctx.exception.__cause__, OperationalError)

        with self.assertRaises(LeaderboardSourceError):
            asyncio.run(source.total_pages("g1", 10))


class TestDatabaseSetup(unittest.TestCase):
    def test_balances_table_columns(self):
        self.assertEqual(
            set(BalanceRow.__table__.columns.keys()),
            {"id", "leaderboard_id", "user_id", "cash", "bank"},
        )

    def test_init_db_creates_balances_table(self):
        engine = _memory_engine()
        with self.assertLogs("leaderboard_backend.infrastructure.db.init_db", level="INFO") as logs:
            init_db(engine)
        self.assertIn("Database initialization complete", logs.output[-1])
        source = DBLeaderboardSource(engine)
        self.assertEqual(asyncio.run(source.fetch_full_leaderboard("g1", SortKey.TOTAL)), [])

    def test_database_url_from_postgres_env(self):
        env = {
            "POSTGRES_USER": "u",
            "POSTGRES_PASSWORD": "p",
            "POSTGRES_HOST": "db",
            "POSTGRES_PORT": "6543",
            "POSTGRES_DB": "coins",
        }
        with patch.dict(os.environ, env, clear=False):
            os.environ.pop("DATABASE_URL", None)
            self.assertEqual(database_url(), "postgresql+psycopg2://u:p@db:6543/coins")

    def test_database_url_override(self):
        with patch.dict(os.environ, {"DATABASE_URL": "sqlite:///balances.db"}):
            self.assertEqual(database_url(), "sqlite:///balances.db")


if __name__ == "__main__":
    unittest.main()
