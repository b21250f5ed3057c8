"""Bearer-token sessions stored in Redis."""

from __future__ import annotations

import json
import secrets
from typing import Optional

import structlog
from redis.asyncio import Redis

from carwash.config import settings

logger = structlog.get_logger()


def _key(token: str) -> str:
    return f"{settings.auth_token_prefix}{token}"


async def create_session(
    redis: Redis,
    user_id: int,
    org_id: Optional[int],
    branch_id: Optional[int],
    role: str,
    device_name: str = "api",
) -> str:
    """Create a login session in Redis.

    Args:
        redis: Redis client
        user_id: Authenticated user's id
        org_id: User's organization (None for platform accounts)
        branch_id: User's branch (None for organization-wide accounts)
        role: User role at login time
        device_name: Free-form client label

    Returns:
        Session token (random string)
    """
    token = secrets.token_urlsafe(32)
    session_data = json.dumps({
        "user_id": user_id,
        "org_id": org_id,
        "branch_id": branch_id,
        "role": role,
        "device_name": device_name,
    })

    await redis.setex(_key(token), settings.auth_token_ttl_seconds, session_data)

    logger.info("auth_session_created", user_id=user_id, org_id=org_id, device=device_name)

    return token


async def get_session(redis: Redis, token: str) -> Optional[dict]:
    """Get session data from Redis.

    Returns:
        Session dict with user_id, org_id, branch_id, role or None
    """
    if not token:
        return None

    data = await redis.get(_key(token))
    if not data:
        return None

    try:
        return json.loads(data)
    except (json.JSONDecodeError, TypeError):
        return None


async def delete_session(redis: Redis, token: str) -> None:
    """Delete a login session from Redis."""
    await redis.delete(_key(token))
