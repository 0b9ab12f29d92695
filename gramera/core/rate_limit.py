"""
Fixed-window rate limiting backed by Redis.

One counter per (scope, client key) per minute. INCR and EXPIRE NX go out
in one MULTI/EXEC so a counter never outlives its window.
"""

from __future__ import annotations

import logging
import time

import redis.asyncio as aioredis
from fastapi import Depends, HTTPException, Request, status
from redis.exceptions import RedisError

from gramera.core.config import settings
from gramera.core.dependencies import get_redis

logger = logging.getLogger(__name__)

WINDOW_SECONDS = 60


def rate_limit_redis_key(scope: str, client_key: str, window: int) -> str:
    return f"ratelimit:{scope}:{client_key}:{window}"


async def hit(
    redis: aioredis.Redis,
    scope: str,
    client_key: str,
    limit: int,
    now: float | None = None,
) -> bool:
    """
    Count one request. Returns True if it is within ``limit``.
    Fails open when Redis is unreachable.
    """
    window = int((now if now is not None else time.time()) // WINDOW_SECONDS)
    key = rate_limit_redis_key(scope, client_key, window)
    try:
        async with redis.pipeline(transaction=True) as pipe:
            count, _ = await pipe.incr(key).expire(key, WINDOW_SECONDS, nx=True).execute()
    except RedisError as exc:
        logger.warning("Rate limiter unavailable, allowing request: %s", exc)
        return True
    return count <= limit


def client_key_for(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client is not None:
        return request.client.host
    return "anonymous"


def rate_limit(scope: str, limit: int | None = None):
    """
    Dependency factory that enforces a per-client request budget.

    Usage:
        @router.post("/...", dependencies=[Depends(rate_limit("ai"))])
    """
    async def checker(
        request: Request,
        redis: aioredis.Redis = Depends(get_redis),
    ) -> None:
        budget = limit if limit is not None else settings.AI_RATE_LIMIT_PER_MINUTE
        allowed = await hit(redis, scope, client_key_for(request), budget)
        if not allowed:
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail={
                    "code": "RATE_LIMITED",
                    "message": "Too many requests. Please wait a minute.",
                },
            )

    return checker
