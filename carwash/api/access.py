"""Tenant-checked record loading shared by the routers."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional, Sequence, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from carwash.errors import ForbiddenError, NotFoundError, ValidationError
from carwash.models.organization import Branch
from carwash.tenancy import TenantContext, belongs_to_tenant

T = TypeVar("T")


async def get_owned(
    db: AsyncSession,
    model: type[T],
    obj_id: int,
    tenant: TenantContext,
    *,
    label: str,
    org_column: str = "org_id",
    branch_column: str = "branch_id",
    options: Sequence[Any] = (),
) -> T:
    """Load a record for show/update/destroy.

    Raises:
        NotFoundError: no live record with this id
        ForbiddenError: the record is outside the caller's tenant
    """
    stmt = select(model).where(model.id == obj_id)
    if options:
        stmt = stmt.options(*options)
    obj = (await db.execute(stmt)).scalar_one_or_none()

    if obj is None:
        raise NotFoundError(f"{label} not found")

    if not belongs_to_tenant(obj, tenant, org_column, branch_column):
        raise ForbiddenError(f"{label} does not belong to your organization")

    return obj


async def get_accessible_branch(
    db: AsyncSession, tenant: TenantContext, branch_id: int
) -> Branch:
    """Resolve a branch the caller may act on.

    Raises:
        ValidationError: no such branch
        ForbiddenError: branch belongs to another organization, or the
            caller is bound to a different branch
    """
    branch = (
        await db.execute(select(Branch).where(Branch.id == branch_id))
    ).scalar_one_or_none()

    if branch is None:
        raise invalid_field("branch_id")

    if not belongs_to_tenant(branch, tenant, branch_column="id"):
        raise ForbiddenError("Branch does not belong to your organization")

    return branch


async def get_org_reference(
    db: AsyncSession,
    model: type[T],
    obj_id: Optional[int],
    tenant: TenantContext,
    field: str,
) -> Optional[T]:
    """Resolve a foreign key from a request body within the caller's org.

    Catalog entries are shared across branches, so only the organization
    is checked here.
    """
    if obj_id is None:
        return None

    obj = (await db.execute(select(model).where(model.id == obj_id))).scalar_one_or_none()
    if obj is None or getattr(obj, "org_id", tenant.org_id) != tenant.org_id:
        raise invalid_field(field)
    return obj


def invalid_field(field: str, reason: Optional[str] = None) -> ValidationError:
    return ValidationError(
        "Validation failed",
        errors={field: [reason or f"The selected {field} is invalid."]},
    )


async def resolve_branch_for_create(
    db: AsyncSession, tenant: TenantContext, branch_id: Optional[int]
) -> Optional[int]:
    """Branch a new record lands in.

    Branch-bound callers always write into their own branch; an
    organization-wide caller may name one of the org's branches or none.
    """
    if tenant.branch_id is not None:
        return tenant.branch_id
    if branch_id is None:
        return None
    branch = await get_accessible_branch(db, tenant, branch_id)
    return branch.id


def apply_changes(obj: Any, changes: dict[str, Any]) -> None:
    for field, value in changes.items():
        setattr(obj, field, value)


async def soft_delete(db: AsyncSession, obj: Any) -> None:
    obj.deleted_at = datetime.now(timezone.utc)
    await db.commit()
