from __future__ import annotations

import logging

from sqlalchemy.engine import Engine
from sqlmodel import SQLModel

from leaderboard_backend.infrastructure.db.db_tables import BalanceRow  # noqa: F401  registers the table
from leaderboard_backend.infrastructure.db.session import get_engine
from leaderboard_backend.utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


def init_db(engine: Engine | None = None) -> None:
    logger.info("Creating tables if they do not exist")
    SQLModel.metadata.create_all(engine or get_engine())
    logger.info("Database initialization complete")


if __name__ == "__main__":
    setup_logging()
    init_db()
