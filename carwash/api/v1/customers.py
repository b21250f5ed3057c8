"""Customers API — customers and the vehicles registered to them."""

from typing import Any, Optional

import structlog
from fastapi import APIRouter, Depends, Query
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from carwash.api.access import (
    apply_changes,
    get_org_reference,
    get_owned,
    invalid_field,
    soft_delete,
)
from carwash.api.pagination import PageParams, page_params, paginate
from carwash.api.responses import paginated, success
from carwash.auth.dependencies import get_tenant
from carwash.database import get_db
from carwash.errors import ConflictError, NotFoundError
from carwash.models.customer import Customer, CustomerVehicle
from carwash.models.vehicle import VehicleBrand, VehicleModel, VehicleType
from carwash.schemas.customer import (
    CustomerCreate,
    CustomerDetailResponse,
    CustomerResponse,
    CustomerUpdate,
    CustomerVehicleCreate,
    CustomerVehicleResponse,
    CustomerVehicleUpdate,
)
from carwash.tenancy import TenantContext, scope

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1/customers", tags=["customers"])

PHONE_TAKEN = "A customer with this phone number already exists"


async def _phone_taken(
    db: AsyncSession, org_id: int, phone: str, exclude_id: Optional[int] = None
) -> bool:
    stmt = select(Customer.id).where(Customer.org_id == org_id, Customer.phone == phone)
    if exclude_id is not None:
        stmt = stmt.where(Customer.id != exclude_id)
    result = await db.execute(stmt.limit(1))
    return result.scalar_one_or_none() is not None


async def _commit_customer(db: AsyncSession) -> None:
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        raise ConflictError(PHONE_TAKEN) from exc


async def _owned_customer(
    db: AsyncSession, customer_id: int, tenant: TenantContext, with_vehicles: bool = False
) -> Customer:
    options = (selectinload(Customer.vehicles),) if with_vehicles else ()
    return await get_owned(db, Customer, customer_id, tenant, label="Customer", options=options)


async def _check_vehicle_catalog(
    db: AsyncSession, tenant: TenantContext, fields: dict[str, Any]
) -> None:
    """Catalog references must exist in the org and nest type > brand > model."""
    await get_org_reference(db, VehicleType, fields.get("vehicle_type_id"), tenant, "vehicle_type_id")

    brand = await get_org_reference(
        db, VehicleBrand, fields.get("vehicle_brand_id"), tenant, "vehicle_brand_id"
    )
    if brand is not None and brand.vehicle_type_id != fields.get("vehicle_type_id"):
        raise invalid_field(
            "vehicle_brand_id", "The selected brand does not belong to this vehicle type."
        )

    model = await get_org_reference(
        db, VehicleModel, fields.get("vehicle_model_id"), tenant, "vehicle_model_id"
    )
    if model is not None and (brand is None or model.vehicle_brand_id != brand.id):
        raise invalid_field(
            "vehicle_model_id", "The selected model does not belong to this brand."
        )


@router.get("")
async def list_customers(
    search: Optional[str] = Query(None, description="Matches name, phone or email"),
    page: PageParams = Depends(page_params),
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
) -> dict:
    stmt = scope(select(Customer), tenant)
    if search:
        pattern = f"%{search}%"
        stmt = stmt.where(
            or_(
                Customer.name.ilike(pattern),
                Customer.phone.ilike(pattern),
                Customer.email.ilike(pattern),
            )
        )
    customers, meta = await paginate(db, stmt.order_by(Customer.id.desc()), page)
    return paginated(customers, meta, CustomerResponse, "Customers retrieved successfully")


@router.get("/search")
async def search_by_phone(
    phone: str = Query(..., min_length=1),
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Exact phone lookup, used at the counter."""
    stmt = (
        scope(select(Customer), tenant)
        .where(Customer.phone == phone)
        .options(selectinload(Customer.vehicles))
    )
    customer = (await db.execute(stmt)).scalars().first()
    if customer is None:
        raise NotFoundError("Customer not found")
    return success(CustomerDetailResponse.model_validate(customer), "Customer found")


@router.post("", status_code=201)
async def create_customer(
    data: CustomerCreate,
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
) -> dict:
    if await _phone_taken(db, tenant.org_id, data.phone):
        raise ConflictError(PHONE_TAKEN)

    customer = Customer(org_id=tenant.org_id, branch_id=tenant.branch_id, **data.model_dump())
    db.add(customer)
    await _commit_customer(db)
    await db.refresh(customer)

    logger.info("customer_created", customer_id=customer.id, org_id=tenant.org_id)
    return success(CustomerResponse.model_validate(customer), "Customer created successfully")


@router.get("/{customer_id}")
async def get_customer(
    customer_id: int,
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
) -> dict:
    customer = await _owned_customer(db, customer_id, tenant, with_vehicles=True)
    return success(
        CustomerDetailResponse.model_validate(customer), "Customer retrieved successfully"
    )


@router.put("/{customer_id}")
async def update_customer(
    customer_id: int,
    data: CustomerUpdate,
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
) -> dict:
    customer = await _owned_customer(db, customer_id, tenant)
    changes = data.model_dump(exclude_unset=True, exclude_none=True)

    if "phone" in changes and await _phone_taken(
        db, customer.org_id, changes["phone"], exclude_id=customer.id
    ):
        raise ConflictError(PHONE_TAKEN)

    apply_changes(customer, changes)
    await _commit_customer(db)
    await db.refresh(customer)

    return success(CustomerResponse.model_validate(customer), "Customer updated successfully")


@router.delete("/{customer_id}")
async def delete_customer(
    customer_id: int,
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
) -> dict:
    customer = await _owned_customer(db, customer_id, tenant)
    await soft_delete(db, customer)

    logger.info("customer_deleted", customer_id=customer_id)
    return success(None, "Customer deleted successfully")


# -- Vehicles of a customer --


async def _owned_vehicle(
    db: AsyncSession, customer: Customer, vehicle_id: int
) -> CustomerVehicle:
    result = await db.execute(
        select(CustomerVehicle).where(
            CustomerVehicle.id == vehicle_id,
            CustomerVehicle.customer_id == customer.id,
        )
    )
    vehicle = result.scalar_one_or_none()
    if vehicle is None:
        raise NotFoundError("Vehicle not found")
    return vehicle


@router.get("/{customer_id}/vehicles")
async def list_customer_vehicles(
    customer_id: int,
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
) -> dict:
    customer = await _owned_customer(db, customer_id, tenant)
    result = await db.execute(
        select(CustomerVehicle)
        .where(CustomerVehicle.customer_id == customer.id)
        .order_by(CustomerVehicle.id)
    )
    return success(
        [CustomerVehicleResponse.model_validate(v) for v in result.scalars().all()],
        "Vehicles retrieved successfully",
    )


@router.post("/{customer_id}/vehicles", status_code=201)
async def add_customer_vehicle(
    customer_id: int,
    data: CustomerVehicleCreate,
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
) -> dict:
    customer = await _owned_customer(db, customer_id, tenant)
    fields = data.model_dump()
    await _check_vehicle_catalog(db, tenant, fields)

    vehicle = CustomerVehicle(
        org_id=customer.org_id,
        branch_id=customer.branch_id,
        customer_id=customer.id,
        **fields,
    )
    db.add(vehicle)
    await db.commit()
    await db.refresh(vehicle)

    logger.info("customer_vehicle_created", vehicle_id=vehicle.id, customer_id=customer.id)
    return success(CustomerVehicleResponse.model_validate(vehicle), "Vehicle added successfully")


@router.get("/{customer_id}/vehicles/{vehicle_id}")
async def get_customer_vehicle(
    customer_id: int,
    vehicle_id: int,
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
) -> dict:
    customer = await _owned_customer(db, customer_id, tenant)
    vehicle = await _owned_vehicle(db, customer, vehicle_id)
    return success(
        CustomerVehicleResponse.model_validate(vehicle), "Vehicle retrieved successfully"
    )


@router.put("/{customer_id}/vehicles/{vehicle_id}")
async def update_customer_vehicle(
    customer_id: int,
    vehicle_id: int,
    data: CustomerVehicleUpdate,
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
) -> dict:
    customer = await _owned_customer(db, customer_id, tenant)
    vehicle = await _owned_vehicle(db, customer, vehicle_id)
    changes = data.model_dump(exclude_unset=True)

    merged = {
        "vehicle_type_id": vehicle.vehicle_type_id,
        "vehicle_brand_id": vehicle.vehicle_brand_id,
        "vehicle_model_id": vehicle.vehicle_model_id,
        **changes,
    }
    await _check_vehicle_catalog(db, tenant, merged)

    apply_changes(vehicle, changes)
    await db.commit()
    await db.refresh(vehicle)

    return success(CustomerVehicleResponse.model_validate(vehicle), "Vehicle updated successfully")


@router.delete("/{customer_id}/vehicles/{vehicle_id}")
async def delete_customer_vehicle(
    customer_id: int,
    vehicle_id: int,
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
) -> dict:
    customer = await _owned_customer(db, customer_id, tenant)
    vehicle = await _owned_vehicle(db, customer, vehicle_id)
    await soft_delete(db, vehicle)

    logger.info("customer_vehicle_deleted", vehicle_id=vehicle_id, customer_id=customer.id)
    return success(None, "Vehicle deleted successfully")
