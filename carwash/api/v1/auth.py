"""Auth API — login, logout and profile."""

import structlog
from fastapi import APIRouter, Depends
from redis.asyncio import Redis
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from carwash.api.responses import success
from carwash.auth.dependencies import get_current_user, get_token
from carwash.auth.passwords import verify_password
from carwash.auth.sessions import create_session, delete_session
from carwash.database import get_db
from carwash.errors import UnauthorizedError
from carwash.models.user import User
from carwash.redis_client import get_redis
from carwash.schemas.auth import AuthUser, LoginRequest, LoginResponse, ProfileResponse

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1", tags=["auth"])

INVALID_CREDENTIALS = "Invalid credentials or account is inactive"


@router.post("/login")
async def login(
    data: LoginRequest,
    db: AsyncSession = Depends(get_db),
    redis: Redis = Depends(get_redis),
) -> dict:
    """Exchange email + password for a bearer token."""
    result = await db.execute(select(User).where(User.email == data.email))
    user = result.scalar_one_or_none()

    if user is None or not verify_password(data.password, user.password_hash):
        logger.warning("auth_login_failed", email=data.email)
        raise UnauthorizedError(INVALID_CREDENTIALS)

    if not user.is_active:
        logger.warning("auth_login_inactive", user_id=user.id)
        raise UnauthorizedError(INVALID_CREDENTIALS)

    token = await create_session(
        redis,
        user_id=user.id,
        org_id=user.org_id,
        branch_id=user.branch_id,
        role=user.role,
        device_name=data.device_name,
    )

    logger.info("auth_login_success", user_id=user.id, org_id=user.org_id)
    return success(
        LoginResponse(user=AuthUser.model_validate(user), token=token),
        "Login successful",
    )


@router.post("/logout")
async def logout(
    token: str = Depends(get_token),
    user: User = Depends(get_current_user),
    redis: Redis = Depends(get_redis),
) -> dict:
    await delete_session(redis, token)
    logger.info("auth_logout", user_id=user.id)
    return success(None, "Logged out successfully")


@router.get("/me")
async def me(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Current user with organization and branch."""
    result = await db.execute(
        select(User)
        .where(User.id == user.id)
        .options(selectinload(User.organization), selectinload(User.branch))
        .execution_options(populate_existing=True)
    )
    profile = result.scalar_one()
    return success(ProfileResponse.model_validate(profile), "User profile retrieved")
