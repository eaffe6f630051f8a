from .db_leaderboard_source import DBLeaderboardSource
from .db_tables import BalanceRow
from .session import database_url, get_engine
