"""Organizations API — platform-level tenant management."""

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from carwash.api.access import apply_changes, soft_delete
from carwash.api.pagination import PageParams, page_params, paginate
from carwash.api.responses import paginated, success
from carwash.auth.dependencies import require_roles
from carwash.database import get_db
from carwash.errors import NotFoundError
from carwash.models.organization import Organization
from carwash.models.user import ROLE_SUPER_ADMIN
from carwash.schemas.organization import (
    OrganizationCreate,
    OrganizationResponse,
    OrganizationUpdate,
)

logger = structlog.get_logger()

router = APIRouter(
    prefix="/api/v1/organizations",
    tags=["organizations"],
    dependencies=[Depends(require_roles(ROLE_SUPER_ADMIN))],
)


async def _get_organization(db: AsyncSession, org_id: int) -> Organization:
    result = await db.execute(select(Organization).where(Organization.id == org_id))
    org = result.scalar_one_or_none()
    if org is None:
        raise NotFoundError("Organization not found")
    return org


@router.get("")
async def list_organizations(
    page: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
) -> dict:
    stmt = select(Organization).order_by(Organization.id.desc())
    orgs, meta = await paginate(db, stmt, page)
    return paginated(orgs, meta, OrganizationResponse, "Organizations retrieved successfully")


@router.post("", status_code=201)
async def create_organization(
    data: OrganizationCreate,
    db: AsyncSession = Depends(get_db),
) -> dict:
    org = Organization(**data.model_dump())
    db.add(org)
    await db.commit()
    await db.refresh(org)

    logger.info("organization_created", org_id=org.id)
    return success(OrganizationResponse.model_validate(org), "Organization created successfully")


@router.get("/{org_id}")
async def get_organization(org_id: int, db: AsyncSession = Depends(get_db)) -> dict:
    org = await _get_organization(db, org_id)
    return success(OrganizationResponse.model_validate(org), "Organization retrieved successfully")


@router.put("/{org_id}")
async def update_organization(
    org_id: int,
    data: OrganizationUpdate,
    db: AsyncSession = Depends(get_db),
) -> dict:
    org = await _get_organization(db, org_id)
    apply_changes(org, data.model_dump(exclude_unset=True, exclude_none=True))
    await db.commit()
    await db.refresh(org)

    logger.info("organization_updated", org_id=org.id)
    return success(OrganizationResponse.model_validate(org), "Organization updated successfully")


@router.delete("/{org_id}")
async def delete_organization(org_id: int, db: AsyncSession = Depends(get_db)) -> dict:
    org = await _get_organization(db, org_id)
    await soft_delete(db, org)

    logger.info("organization_deleted", org_id=org_id)
    return success(None, "Organization deleted successfully")
