"""
FastAPI dependency injection functions.

Provides the Redis client and the per-application relay objects, which
create_app() stores on app.state.
"""

from __future__ import annotations

import redis.asyncio as aioredis
from fastapi.requests import HTTPConnection

from gramera.core.config import settings
from gramera.services.presence_service import PresenceService
from gramera.services.relay_service import MessageRelay
from gramera.services.suggestion_service import SuggestionService

# ---------------------------------------------------------------------------
# Redis
# ---------------------------------------------------------------------------

_redis_pool: aioredis.Redis | None = None


async def get_redis() -> aioredis.Redis:
    """
    Return a shared async Redis client.

    Uses a module-level pool so connections are reused across requests.
    """
    global _redis_pool
    if _redis_pool is None:
        _redis_pool = aioredis.from_url(
            str(settings.REDIS_URL),
            encoding="utf-8",
            decode_responses=True,
        )
    return _redis_pool


# ---------------------------------------------------------------------------
# Relay objects (HTTP and WebSocket)
# ---------------------------------------------------------------------------

def get_presence_service(conn: HTTPConnection) -> PresenceService:
    return conn.app.state.presence_service


def get_relay(conn: HTTPConnection) -> MessageRelay:
    return conn.app.state.relay


# ---------------------------------------------------------------------------
# Suggestions
# ---------------------------------------------------------------------------

def get_suggestion_service(conn: HTTPConnection) -> SuggestionService:
    return conn.app.state.suggestion_service
