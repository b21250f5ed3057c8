"""Users API — staff accounts of the caller's organization."""

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from carwash.api.access import (
    apply_changes,
    get_accessible_branch,
    get_owned,
    resolve_branch_for_create,
    soft_delete,
)
from carwash.api.pagination import PageParams, page_params, paginate
from carwash.api.responses import paginated, success
from carwash.auth.dependencies import get_tenant
from carwash.auth.passwords import hash_password
from carwash.database import get_db
from carwash.errors import ConflictError
from carwash.models.user import User
from carwash.repositories.users import EMAIL_TAKEN, email_taken
from carwash.schemas.user import UserCreate, UserResponse, UserUpdate
from carwash.tenancy import TenantContext, scope

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1/users", tags=["users"])


@router.get("")
async def list_users(
    page: PageParams = Depends(page_params),
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
) -> dict:
    stmt = scope(select(User), tenant).order_by(User.id)
    users, meta = await paginate(db, stmt, page)
    return paginated(users, meta, UserResponse, "Users retrieved successfully")


@router.post("", status_code=201)
async def create_user(
    data: UserCreate,
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
) -> dict:
    if await email_taken(db, data.email):
        raise ConflictError(EMAIL_TAKEN)

    fields = data.model_dump(exclude={"password", "branch_id"})
    user = User(
        org_id=tenant.org_id,
        branch_id=await resolve_branch_for_create(db, tenant, data.branch_id),
        password_hash=hash_password(data.password),
        **fields,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)

    logger.info("user_created", user_id=user.id, org_id=user.org_id, role=user.role)
    return success(UserResponse.model_validate(user), "User created successfully")


@router.get("/{user_id}")
async def get_user(
    user_id: int,
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
) -> dict:
    user = await get_owned(db, User, user_id, tenant, label="User")
    return success(UserResponse.model_validate(user), "User retrieved successfully")


@router.put("/{user_id}")
async def update_user(
    user_id: int,
    data: UserUpdate,
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
) -> dict:
    user = await get_owned(db, User, user_id, tenant, label="User")
    changes = data.model_dump(exclude_unset=True, exclude_none=True)

    if "email" in changes and await email_taken(db, changes["email"], exclude_id=user.id):
        raise ConflictError(EMAIL_TAKEN)

    if "password" in changes:
        changes["password_hash"] = hash_password(changes.pop("password"))

    if "branch_id" in changes:
        if tenant.is_org_wide:
            await get_accessible_branch(db, tenant, changes["branch_id"])
        else:
            changes.pop("branch_id")

    apply_changes(user, changes)
    await db.commit()
    await db.refresh(user)

    logger.info("user_updated", user_id=user.id)
    return success(UserResponse.model_validate(user), "User updated successfully")


@router.delete("/{user_id}")
async def delete_user(
    user_id: int,
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
) -> dict:
    user = await get_owned(db, User, user_id, tenant, label="User")
    await soft_delete(db, user)

    logger.info("user_deleted", user_id=user_id)
    return success(None, "User deleted successfully")
