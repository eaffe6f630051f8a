from __future__ import annotations

from dataclasses import dataclass
import os


@dataclass(frozen=True)
class RuntimeSettings:
    redis_host: str
    redis_port: int
    redis_db: int
    cache_backend: str
    cache_ttl_seconds: int
    api_host: str
    api_port: int
    log_level: str

    @classmethod
    def from_env(cls) -> "RuntimeSettings":
        return cls(
            redis_host=os.getenv("REDIS_HOST", "localhost"),
            redis_port=int(os.getenv("REDIS_PORT", "6379")),
            redis_db=int(os.getenv("REDIS_DB", "0")),
            cache_backend=os.getenv("LEADERBOARD_CACHE_BACKEND", "redis").lower(),
            cache_ttl_seconds=int(os.getenv("LEADERBOARD_CACHE_TTL_SECONDS", "300")),
            api_host=os.getenv("API_HOST", "0.0.0.0"),
            api_port=int(os.getenv("API_PORT", "8000")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
