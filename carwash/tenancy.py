"""Tenant scoping — organization plus optional branch visibility.

Every tenant-owned table carries an organization column and usually a
branch column. A caller bound to a branch sees only that branch's rows;
a caller without a branch sees the whole organization. The filter and
the membership check below are the only places that rule is written.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from sqlalchemy import Select


@dataclass(frozen=True)
class TenantContext:
    """Visibility window of the authenticated caller."""

    org_id: int
    branch_id: Optional[int] = None

    @property
    def is_org_wide(self) -> bool:
        return self.branch_id is None


def scope(
    stmt: Select,
    tenant: TenantContext,
    org_column: str = "org_id",
    branch_column: str = "branch_id",
    entity: Any = None,
) -> Select:
    """Restrict a select to the tenant's organization and branch.

    Args:
        stmt: Select over a tenant-owned entity
        tenant: Caller's tenant context
        org_column: Attribute holding the organization id
        branch_column: Attribute holding the branch id
        entity: Entity owning the columns; defaults to the first
            entity selected (pass the joined parent for child tables)

    Returns:
        The narrowed select
    """
    if entity is None:
        entity = stmt.column_descriptions[0]["entity"]

    stmt = stmt.where(getattr(entity, org_column) == tenant.org_id)
    if tenant.branch_id is not None:
        stmt = stmt.where(getattr(entity, branch_column) == tenant.branch_id)
    return stmt


def belongs_to_tenant(
    obj: Any,
    tenant: TenantContext,
    org_column: str = "org_id",
    branch_column: str = "branch_id",
) -> bool:
    """Check whether a loaded record falls inside the tenant's window."""
    if getattr(obj, org_column) != tenant.org_id:
        return False

    if tenant.branch_id is not None and getattr(obj, branch_column) != tenant.branch_id:
        return False

    return True
