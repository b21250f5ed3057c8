"""Vehicle types API — top level of the vehicle catalog."""

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from carwash.api.access import apply_changes, get_owned, resolve_branch_for_create, soft_delete
from carwash.api.pagination import PageParams, page_params, paginate
from carwash.api.responses import paginated, success
from carwash.auth.dependencies import get_tenant
from carwash.database import get_db
from carwash.models.vehicle import VehicleType
from carwash.schemas.vehicle import VehicleTypeCreate, VehicleTypeResponse, VehicleTypeUpdate
from carwash.tenancy import TenantContext, scope

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1/vehicle-types", tags=["vehicle-types"])


@router.get("")
async def list_vehicle_types(
    page: PageParams = Depends(page_params),
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
) -> dict:
    stmt = scope(select(VehicleType), tenant).order_by(VehicleType.name)
    types, meta = await paginate(db, stmt, page)
    return paginated(types, meta, VehicleTypeResponse, "Vehicle types retrieved successfully")


@router.get("/list")
async def list_active_vehicle_types(
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """All active types, unpaginated, for dropdowns."""
    stmt = (
        scope(select(VehicleType), tenant)
        .where(VehicleType.is_active == True)  # noqa: E712
        .order_by(VehicleType.name)
    )
    result = await db.execute(stmt)
    return success(
        [VehicleTypeResponse.model_validate(t) for t in result.scalars().all()],
        "Vehicle types retrieved successfully",
    )


@router.post("", status_code=201)
async def create_vehicle_type(
    data: VehicleTypeCreate,
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
) -> dict:
    vehicle_type = VehicleType(
        org_id=tenant.org_id,
        branch_id=await resolve_branch_for_create(db, tenant, data.branch_id),
        **data.model_dump(exclude={"branch_id"}),
    )
    db.add(vehicle_type)
    await db.commit()
    await db.refresh(vehicle_type)

    logger.info("vehicle_type_created", vehicle_type_id=vehicle_type.id, org_id=tenant.org_id)
    return success(
        VehicleTypeResponse.model_validate(vehicle_type), "Vehicle type created successfully"
    )


@router.get("/{type_id}")
async def get_vehicle_type(
    type_id: int,
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
) -> dict:
    vehicle_type = await get_owned(db, VehicleType, type_id, tenant, label="Vehicle type")
    return success(
        VehicleTypeResponse.model_validate(vehicle_type), "Vehicle type retrieved successfully"
    )


@router.put("/{type_id}")
async def update_vehicle_type(
    type_id: int,
    data: VehicleTypeUpdate,
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
) -> dict:
    vehicle_type = await get_owned(db, VehicleType, type_id, tenant, label="Vehicle type")
    apply_changes(vehicle_type, data.model_dump(exclude_unset=True, exclude_none=True))
    await db.commit()
    await db.refresh(vehicle_type)

    return success(
        VehicleTypeResponse.model_validate(vehicle_type), "Vehicle type updated successfully"
    )


@router.delete("/{type_id}")
async def delete_vehicle_type(
    type_id: int,
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
) -> dict:
    vehicle_type = await get_owned(db, VehicleType, type_id, tenant, label="Vehicle type")
    await soft_delete(db, vehicle_type)

    logger.info("vehicle_type_deleted", vehicle_type_id=type_id)
    return success(None, "Vehicle type deleted successfully")
