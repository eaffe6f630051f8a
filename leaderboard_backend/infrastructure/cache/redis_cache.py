from typing import Optional

from redis.asyncio import Redis

from leaderboard_backend.services.interfaces.cache import Cache


class RedisCache(Cache):
    """
    String key/value cache on Redis. The connection is owned by whoever
    built the client, not by this adapter.
    """

    def __init__(self, redis: Redis):
        self._redis = redis

    @staticmethod
    def connect(host: str = "localhost", port: int = 6379, db: int = 0) -> Redis:
        return Redis(host=host, port=port, db=db, decode_responses=True)

    async def get(self, key: str) -> Optional[str]:
        return await self._redis.get(key)

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        await self._redis.set(key, value, ex=ttl_seconds)
