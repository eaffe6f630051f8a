from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Annotated, Any, AsyncIterator, Optional

import uvicorn
from fastapi import Depends, FastAPI, HTTPException, Query, Request, status
from pydantic import BaseModel, Field

from leaderboard_backend.config.runtime import RuntimeSettings
from leaderboard_backend.infrastructure.cache.redis_cache import RedisCache
from leaderboard_backend.infrastructure.db import DBLeaderboardSource, get_engine
from leaderboard_backend.infrastructure.memory.in_memory_cache import InMemoryCache
from leaderboard_backend.services.interfaces.cache import Cache
from leaderboard_backend.services.leaderboard_service import LeaderboardService
from leaderboard_backend.services.pagination import parse_page_request
from leaderboard_backend.utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------------------
# Lifecycle: the cache connection is opened at startup and handed to the service
# ------------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = RuntimeSettings.from_env()

    redis = None
    cache: Cache
    if settings.cache_backend == "memory":
        cache = InMemoryCache()
    else:
        redis = RedisCache.connect(settings.redis_host, settings.redis_port, settings.redis_db)
        cache = RedisCache(redis)
    logger.info("Leaderboard cache backend: %s (ttl=%ss)", settings.cache_backend, settings.cache_ttl_seconds)

    service = LeaderboardService.create(
        DBLeaderboardSource(get_engine()),
        cache,
        ttl_seconds=settings.cache_ttl_seconds,
    )
    app.state.leaderboard_service = service

    try:
        yield
    finally:
        await service.cache_gateway.wait_pending()
        if redis is not None:
            await redis.aclose()


app = FastAPI(title="Leaderboard API", lifespan=lifespan)


def get_leaderboard_service(request: Request) -> LeaderboardService:
    return request.app.state.leaderboard_service


# ------------------------------------------------------------------------------
# Pydantic Schemas
# ------------------------------------------------------------------------------

class LeaderboardPageResponse(BaseModel):
    balances: list[Any] = Field(default_factory=list)
    page: Optional[int] = None
    total_pages: Optional[int] = None


# ------------------------------------------------------------------------------
# Routes
# ------------------------------------------------------------------------------

@app.get("/healthz")
def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/leaderboards/{leaderboard_id}", response_model=LeaderboardPageResponse)
async def get_leaderboard(
    leaderboard_id: str,
    service: Annotated[LeaderboardService, Depends(get_leaderboard_service)],
    page: Annotated[Optional[str], Query()] = None,
    offset: Annotated[Optional[str], Query()] = None,
    limit: Annotated[Optional[str], Query()] = None,
    sort: Annotated[Optional[str], Query()] = None,
) -> LeaderboardPageResponse:
    """
    Ranked balances of a leaderboard.

    Query values are taken as raw strings; malformed numbers fall back to
    defaults instead of failing validation.
    """
    page_request = parse_page_request(page=page, offset=offset, limit=limit, sort=sort)

    try:
        result = await service.get_page(leaderboard_id, page_request)
    except Exception as exc:
        logger.exception("Leaderboard %s could not be served", leaderboard_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        ) from exc

    return LeaderboardPageResponse(
        balances=result.entries,
        page=result.page,
        total_pages=result.total_pages,
    )


if __name__ == "__main__":
    runtime_settings = RuntimeSettings.from_env()
    setup_logging(runtime_settings.log_level)

    uvicorn.run(
        app,
        host=runtime_settings.api_host,
        port=runtime_settings.api_port,
    )
