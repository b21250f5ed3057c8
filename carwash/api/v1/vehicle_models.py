"""Vehicle models API — models are owned through their brand."""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from carwash.api.access import apply_changes, get_owned, soft_delete
from carwash.api.pagination import PageParams, page_params, paginate
from carwash.api.responses import paginated, success
from carwash.auth.dependencies import get_tenant
from carwash.database import get_db
from carwash.errors import ForbiddenError, NotFoundError
from carwash.models.vehicle import VehicleBrand, VehicleModel
from carwash.schemas.vehicle import VehicleModelCreate, VehicleModelResponse, VehicleModelUpdate
from carwash.tenancy import TenantContext, belongs_to_tenant, scope

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1/vehicle-models", tags=["vehicle-models"])


def _models_query(tenant: TenantContext):
    return scope(
        select(VehicleModel).join(VehicleModel.brand),
        tenant,
        entity=VehicleBrand,
    )


async def _owned_model(db: AsyncSession, model_id: int, tenant: TenantContext) -> VehicleModel:
    # Joined so that a model under a deleted brand is gone too.
    result = await db.execute(
        select(VehicleModel, VehicleBrand)
        .join(VehicleModel.brand)
        .where(VehicleModel.id == model_id)
    )
    row = result.first()
    if row is None:
        raise NotFoundError("Vehicle model not found")

    model, brand = row
    if not belongs_to_tenant(brand, tenant):
        raise ForbiddenError("Vehicle model does not belong to your organization")
    return model


async def _brand_for_write(db: AsyncSession, brand_id: int, tenant: TenantContext) -> VehicleBrand:
    return await get_owned(db, VehicleBrand, brand_id, tenant, label="Vehicle brand")


@router.get("")
async def list_vehicle_models(
    vehicle_brand_id: Optional[int] = Query(None),
    page: PageParams = Depends(page_params),
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
) -> dict:
    stmt = _models_query(tenant)
    if vehicle_brand_id is not None:
        stmt = stmt.where(VehicleModel.vehicle_brand_id == vehicle_brand_id)
    models, meta = await paginate(db, stmt.order_by(VehicleModel.name), page)
    return paginated(models, meta, VehicleModelResponse, "Vehicle models retrieved successfully")


@router.get("/by-brand/{vehicle_brand_id}")
async def models_by_brand(
    vehicle_brand_id: int,
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Active models of one brand, unpaginated."""
    stmt = (
        _models_query(tenant)
        .where(
            VehicleModel.vehicle_brand_id == vehicle_brand_id,
            VehicleModel.is_active == True,  # noqa: E712
        )
        .order_by(VehicleModel.name)
    )
    result = await db.execute(stmt)
    return success(
        [VehicleModelResponse.model_validate(m) for m in result.scalars().all()],
        "Vehicle models retrieved successfully",
    )


@router.post("", status_code=201)
async def create_vehicle_model(
    data: VehicleModelCreate,
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
) -> dict:
    await _brand_for_write(db, data.vehicle_brand_id, tenant)

    model = VehicleModel(**data.model_dump())
    db.add(model)
    await db.commit()
    await db.refresh(model)

    logger.info("vehicle_model_created", vehicle_model_id=model.id, brand_id=model.vehicle_brand_id)
    return success(VehicleModelResponse.model_validate(model), "Vehicle model created successfully")


@router.get("/{model_id}")
async def get_vehicle_model(
    model_id: int,
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
) -> dict:
    model = await _owned_model(db, model_id, tenant)
    return success(
        VehicleModelResponse.model_validate(model), "Vehicle model retrieved successfully"
    )


@router.put("/{model_id}")
async def update_vehicle_model(
    model_id: int,
    data: VehicleModelUpdate,
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
) -> dict:
    model = await _owned_model(db, model_id, tenant)
    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    if "vehicle_brand_id" in changes:
        await _brand_for_write(db, changes["vehicle_brand_id"], tenant)

    apply_changes(model, changes)
    await db.commit()
    await db.refresh(model)

    return success(VehicleModelResponse.model_validate(model), "Vehicle model updated successfully")


@router.delete("/{model_id}")
async def delete_vehicle_model(
    model_id: int,
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
) -> dict:
    model = await _owned_model(db, model_id, tenant)
    await soft_delete(db, model)

    logger.info("vehicle_model_deleted", vehicle_model_id=model_id)
    return success(None, "Vehicle model deleted successfully")
