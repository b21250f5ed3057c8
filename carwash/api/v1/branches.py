"""Branches API — locations of the caller's organization."""

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from carwash.api.access import apply_changes, get_owned, soft_delete
from carwash.api.pagination import PageParams, page_params, paginate
from carwash.api.responses import paginated, success
from carwash.auth.dependencies import get_tenant
from carwash.auth.passwords import hash_password
from carwash.database import get_db
from carwash.errors import ConflictError, ForbiddenError
from carwash.models.organization import Branch
from carwash.models.user import ROLE_BRANCH_ADMIN, User
from carwash.repositories.users import EMAIL_TAKEN, email_taken
from carwash.schemas.organization import BranchCreate, BranchResponse, BranchUpdate
from carwash.schemas.user import UserResponse
from carwash.tenancy import TenantContext, scope

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1/branches", tags=["branches"])


def _owned_branch(db: AsyncSession, branch_id: int, tenant: TenantContext):
    return get_owned(db, Branch, branch_id, tenant, label="Branch", branch_column="id")


@router.get("")
async def list_branches(
    page: PageParams = Depends(page_params),
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
) -> dict:
    stmt = scope(select(Branch), tenant, branch_column="id").order_by(Branch.id)
    branches, meta = await paginate(db, stmt, page)
    return paginated(branches, meta, BranchResponse, "Branches retrieved successfully")


@router.post("", status_code=201)
async def create_branch(
    data: BranchCreate,
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Create a branch and, optionally, its branch admin in one transaction."""
    if not tenant.is_org_wide:
        raise ForbiddenError("Only organization-wide users can create branches")

    if data.user is not None and await email_taken(db, data.user.email):
        raise ConflictError(EMAIL_TAKEN)

    branch = Branch(org_id=tenant.org_id, **data.branch.model_dump())
    db.add(branch)
    await db.flush()

    admin = None
    if data.user is not None:
        fields = data.user.model_dump(exclude={"password"})
        admin = User(
            org_id=tenant.org_id,
            branch_id=branch.id,
            role=ROLE_BRANCH_ADMIN,
            password_hash=hash_password(data.user.password),
            **fields,
        )
        db.add(admin)

    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        raise ConflictError(EMAIL_TAKEN) from exc

    await db.refresh(branch)
    if admin is not None:
        await db.refresh(admin)

    logger.info(
        "branch_created",
        branch_id=branch.id,
        org_id=tenant.org_id,
        admin_user_id=admin.id if admin else None,
    )
    return success(
        {
            "branch": BranchResponse.model_validate(branch),
            "user": UserResponse.model_validate(admin) if admin else None,
        },
        "Branch created successfully",
    )


@router.get("/{branch_id}")
async def get_branch(
    branch_id: int,
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
) -> dict:
    branch = await _owned_branch(db, branch_id, tenant)
    return success(BranchResponse.model_validate(branch), "Branch retrieved successfully")


@router.put("/{branch_id}")
async def update_branch(
    branch_id: int,
    data: BranchUpdate,
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
) -> dict:
    branch = await _owned_branch(db, branch_id, tenant)
    apply_changes(branch, data.model_dump(exclude_unset=True, exclude_none=True))
    await db.commit()
    await db.refresh(branch)

    logger.info("branch_updated", branch_id=branch.id)
    return success(BranchResponse.model_validate(branch), "Branch updated successfully")


@router.delete("/{branch_id}")
async def delete_branch(
    branch_id: int,
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
) -> dict:
    branch = await _owned_branch(db, branch_id, tenant)
    await soft_delete(db, branch)

    logger.info("branch_deleted", branch_id=branch_id)
    return success(None, "Branch deleted successfully")
