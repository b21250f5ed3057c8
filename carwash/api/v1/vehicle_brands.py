"""Vehicle brands API — brands grouped under a vehicle type."""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from carwash.api.access import (
    apply_changes,
    get_org_reference,
    get_owned,
    resolve_branch_for_create,
    soft_delete,
)
from carwash.api.pagination import PageParams, page_params, paginate
from carwash.api.responses import paginated, success
from carwash.auth.dependencies import get_tenant
from carwash.database import get_db
from carwash.models.vehicle import VehicleBrand, VehicleType
from carwash.schemas.vehicle import VehicleBrandCreate, VehicleBrandResponse, VehicleBrandUpdate
from carwash.tenancy import TenantContext, scope

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1/vehicle-brands", tags=["vehicle-brands"])


@router.get("")
async def list_vehicle_brands(
    vehicle_type_id: Optional[int] = Query(None),
    page: PageParams = Depends(page_params),
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
) -> dict:
    stmt = scope(select(VehicleBrand), tenant)
    if vehicle_type_id is not None:
        stmt = stmt.where(VehicleBrand.vehicle_type_id == vehicle_type_id)
    brands, meta = await paginate(db, stmt.order_by(VehicleBrand.name), page)
    return paginated(brands, meta, VehicleBrandResponse, "Vehicle brands retrieved successfully")


@router.get("/by-type/{vehicle_type_id}")
async def brands_by_type(
    vehicle_type_id: int,
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Active brands of one type, unpaginated."""
    stmt = (
        scope(select(VehicleBrand), tenant)
        .where(
            VehicleBrand.vehicle_type_id == vehicle_type_id,
            VehicleBrand.is_active == True,  # noqa: E712
        )
        .order_by(VehicleBrand.name)
    )
    result = await db.execute(stmt)
    return success(
        [VehicleBrandResponse.model_validate(b) for b in result.scalars().all()],
        "Vehicle brands retrieved successfully",
    )


@router.post("", status_code=201)
async def create_vehicle_brand(
    data: VehicleBrandCreate,
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
) -> dict:
    await get_org_reference(db, VehicleType, data.vehicle_type_id, tenant, "vehicle_type_id")

    brand = VehicleBrand(
        org_id=tenant.org_id,
        branch_id=await resolve_branch_for_create(db, tenant, data.branch_id),
        **data.model_dump(exclude={"branch_id"}),
    )
    db.add(brand)
    await db.commit()
    await db.refresh(brand)

    logger.info("vehicle_brand_created", vehicle_brand_id=brand.id, org_id=tenant.org_id)
    return success(VehicleBrandResponse.model_validate(brand), "Vehicle brand created successfully")


@router.get("/{brand_id}")
async def get_vehicle_brand(
    brand_id: int,
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
) -> dict:
    brand = await get_owned(db, VehicleBrand, brand_id, tenant, label="Vehicle brand")
    return success(
        VehicleBrandResponse.model_validate(brand), "Vehicle brand retrieved successfully"
    )


@router.put("/{brand_id}")
async def update_vehicle_brand(
    brand_id: int,
    data: VehicleBrandUpdate,
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
) -> dict:
    brand = await get_owned(db, VehicleBrand, brand_id, tenant, label="Vehicle brand")
    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    if "vehicle_type_id" in changes:
        await get_org_reference(db, VehicleType, changes["vehicle_type_id"], tenant, "vehicle_type_id")

    apply_changes(brand, changes)
    await db.commit()
    await db.refresh(brand)

    return success(VehicleBrandResponse.model_validate(brand), "Vehicle brand updated successfully")


@router.delete("/{brand_id}")
async def delete_vehicle_brand(
    brand_id: int,
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
) -> dict:
    brand = await get_owned(db, VehicleBrand, brand_id, tenant, label="Vehicle brand")
    await soft_delete(db, brand)

    logger.info("vehicle_brand_deleted", vehicle_brand_id=brand_id)
    return success(None, "Vehicle brand deleted successfully")
