"""FastAPI dependencies for authentication and tenant resolution."""

from __future__ import annotations

from typing import Callable, Optional

import structlog
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from redis.asyncio import Redis
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from carwash.auth.sessions import get_session
from carwash.database import get_db
from carwash.errors import ForbiddenError, UnauthorizedError
from carwash.models.user import User
from carwash.redis_client import get_redis
from carwash.tenancy import TenantContext

logger = structlog.get_logger()

bearer_scheme = HTTPBearer(auto_error=False)


async def get_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
    """Extract the bearer token or fail with 401."""
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError()
    return credentials.credentials


async def get_current_user(
    token: str = Depends(get_token),
    redis: Redis = Depends(get_redis),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Resolve the active user behind the bearer token."""
    session = await get_session(redis, token)
    if not session or not session.get("user_id"):
        raise UnauthorizedError()

    result = await db.execute(
        select(User).where(User.id == session["user_id"], User.is_active == True)  # noqa: E712
    )
    user = result.scalar_one_or_none()
    if user is None:
        logger.warning("auth_user_gone", user_id=session["user_id"])
        raise UnauthorizedError()

    return user


async def get_tenant(user: User = Depends(get_current_user)) -> TenantContext:
    """Derive the caller's tenant window from the user's org and branch."""
    if not user.org_id:
        raise ForbiddenError("User is not associated with any organization")
    return TenantContext(org_id=user.org_id, branch_id=user.branch_id)


def require_roles(*roles: str) -> Callable:
    """Build a dependency that only lets the given roles through."""

    async def _check_role(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            logger.warning("auth_role_denied", user_id=user.id, role=user.role)
            raise ForbiddenError("You do not have permission to access this resource")
        return user

    return _check_role
