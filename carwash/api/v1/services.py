"""Services API — the service catalog priced by pricing rules."""

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy import or_, select
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
from carwash.database import get_db
from carwash.models.service import Service
from carwash.schemas.service import ServiceCreate, ServiceResponse, ServiceUpdate
from carwash.tenancy import TenantContext, scope

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1/services", tags=["services"])


@router.get("")
async def list_services(
    page: PageParams = Depends(page_params),
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
) -> dict:
    stmt = scope(select(Service), tenant).order_by(Service.name)
    services, meta = await paginate(db, stmt, page)
    return paginated(services, meta, ServiceResponse, "Services retrieved successfully")


@router.get("/by-branch/{branch_id}")
async def services_by_branch(
    branch_id: int,
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Active services offered at a branch, including org-wide ones."""
    branch = await get_accessible_branch(db, tenant, branch_id)

    stmt = (
        select(Service)
        .where(
            Service.org_id == branch.org_id,
            or_(Service.branch_id == branch.id, Service.branch_id.is_(None)),
            Service.is_active == True,  # noqa: E712
        )
        .order_by(Service.name)
    )
    result = await db.execute(stmt)
    return success(
        [ServiceResponse.model_validate(s) for s in result.scalars().all()],
        "Services retrieved successfully",
    )


@router.post("", status_code=201)
async def create_service(
    data: ServiceCreate,
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
) -> dict:
    service = Service(
        org_id=tenant.org_id,
        branch_id=await resolve_branch_for_create(db, tenant, data.branch_id),
        **data.model_dump(exclude={"branch_id"}),
    )
    db.add(service)
    await db.commit()
    await db.refresh(service)

    logger.info("service_created", service_id=service.id, org_id=tenant.org_id)
    return success(ServiceResponse.model_validate(service), "Service created successfully")


@router.get("/{service_id}")
async def get_service(
    service_id: int,
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
) -> dict:
    service = await get_owned(db, Service, service_id, tenant, label="Service")
    return success(ServiceResponse.model_validate(service), "Service retrieved successfully")


@router.put("/{service_id}")
async def update_service(
    service_id: int,
    data: ServiceUpdate,
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
) -> dict:
    service = await get_owned(db, Service, service_id, tenant, label="Service")
    apply_changes(service, data.model_dump(exclude_unset=True, exclude_none=True))
    await db.commit()
    await db.refresh(service)

    return success(ServiceResponse.model_validate(service), "Service updated successfully")


@router.delete("/{service_id}")
async def delete_service(
    service_id: int,
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
) -> dict:
    service = await get_owned(db, Service, service_id, tenant, label="Service")
    await soft_delete(db, service)

    logger.info("service_deleted", service_id=service_id)
    return success(None, "Service deleted successfully")
