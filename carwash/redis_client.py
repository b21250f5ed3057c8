"""Shared Redis connection backing the bearer-token session store.

Tokens issued at login live under ``settings.auth_token_prefix`` keys (see
``carwash.auth.sessions``); this module only owns the connection. One client
is created per process on first use and closed from the app lifespan.
"""

from typing import Optional

import structlog
from redis.asyncio import Redis

from carwash.config import settings

logger = structlog.get_logger()

_session_store: Optional[Redis] = None


def session_store() -> Redis:
    """Client for the token store, connected lazily on first request."""
    global _session_store
    if _session_store is None:
        # Session payloads are JSON text, so replies come back as str.
        _session_store = Redis.from_url(settings.redis_url, decode_responses=True)
        logger.info("session_store_connected")
    return _session_store


async def get_redis() -> Redis:
    """FastAPI dependency handing the session store to auth routes."""
    return session_store()


async def close_redis() -> None:
    global _session_store
    if _session_store is None:
        return
    await _session_store.aclose()
    _session_store = None
    logger.info("session_store_closed")
