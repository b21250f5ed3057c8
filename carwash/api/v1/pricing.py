"""Pricing API — vehicle service price rules and price lookup."""

from __future__ import annotations

from typing import Any, Optional

import structlog
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from carwash.api.access import (
    get_accessible_branch,
    get_org_reference,
    get_owned,
    invalid_field,
)
from carwash.api.pagination import PageParams, page_params, paginate
from carwash.api.responses import paginated, success
from carwash.auth.dependencies import get_tenant
from carwash.database import get_db
from carwash.errors import BadRequestError, NotFoundError
from carwash.models.pricing import PricingRule
from carwash.models.service import Service
from carwash.models.vehicle import VehicleBrand, VehicleModel, VehicleType
from carwash.pricing.engine import PricingEngine
from carwash.repositories.pricing import DETAIL_OPTIONS, PricingRuleRepository
from carwash.schemas.pricing import (
    PriceLookupResult,
    PricingRuleCreate,
    PricingRuleDetail,
    PricingRuleUpdate,
)
from carwash.tenancy import TenantContext

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1/pricing", tags=["pricing"])

pricing_engine = PricingEngine()


def get_pricing_engine() -> PricingEngine:
    return pricing_engine


def _resolve_branch_id(branch_id: Optional[int], tenant: TenantContext) -> int:
    resolved = branch_id if branch_id is not None else tenant.branch_id
    if resolved is None:
        raise BadRequestError("Branch ID is required")
    return resolved


async def _check_rule_scope(
    db: AsyncSession, tenant: TenantContext, fields: dict[str, Any]
) -> None:
    """Validate the service and vehicle scope a rule points at.

    A model-level rule must name the model's own brand, and a brand must
    sit under the rule's vehicle type; otherwise the rule could never be
    reached by a lookup.
    """
    brand_id = fields.get("vehicle_brand_id")
    model_id = fields.get("vehicle_model_id")

    if model_id is not None and brand_id is None:
        raise invalid_field(
            "vehicle_brand_id", "vehicle_brand_id is required when vehicle_model_id is set"
        )

    await get_org_reference(db, Service, fields["service_id"], tenant, "service_id")
    await get_org_reference(db, VehicleType, fields["vehicle_type_id"], tenant, "vehicle_type_id")

    brand = await get_org_reference(db, VehicleBrand, brand_id, tenant, "vehicle_brand_id")
    if brand is not None and brand.vehicle_type_id != fields["vehicle_type_id"]:
        raise invalid_field(
            "vehicle_brand_id", "The selected brand does not belong to this vehicle type."
        )

    if model_id is not None:
        model = await get_org_reference(db, VehicleModel, model_id, tenant, "vehicle_model_id")
        if model.vehicle_brand_id != brand_id:
            raise invalid_field(
                "vehicle_model_id", "The selected model does not belong to this brand."
            )


@router.get("")
async def list_pricing(
    branch_id: Optional[int] = Query(None, description="Defaults to the caller's branch"),
    service_id: Optional[int] = Query(None),
    page: PageParams = Depends(page_params),
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """List pricing rules of one branch."""
    branch = await get_accessible_branch(db, tenant, _resolve_branch_id(branch_id, tenant))

    repo = PricingRuleRepository(db)
    rules, meta = await paginate(db, repo.branch_query(branch.id, service_id), page)

    return paginated(rules, meta, PricingRuleDetail, "Pricing retrieved successfully")


@router.post("", status_code=201)
async def create_pricing(
    data: PricingRuleCreate,
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Create a pricing rule; 409 if the same rule already exists."""
    branch = await get_accessible_branch(db, tenant, data.branch_id)
    fields = data.model_dump()
    await _check_rule_scope(db, tenant, fields)

    repo = PricingRuleRepository(db)
    rule = await repo.create(branch.org_id, fields)
    await db.commit()

    rule = await repo.get(rule.id, with_details=True)
    return success(PricingRuleDetail.model_validate(rule), "Pricing created successfully")


@router.get("/lookup")
async def lookup_price(
    branch_id: int = Query(...),
    service_id: int = Query(...),
    vehicle_type_id: int = Query(...),
    vehicle_brand_id: Optional[int] = Query(None),
    vehicle_model_id: Optional[int] = Query(None),
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
    engine: PricingEngine = Depends(get_pricing_engine),
) -> dict:
    """Find the price for a vehicle, most specific rule first."""
    await get_accessible_branch(db, tenant, branch_id)

    match = await engine.lookup(
        db,
        branch_id=branch_id,
        service_id=service_id,
        vehicle_type_id=vehicle_type_id,
        vehicle_brand_id=vehicle_brand_id,
        vehicle_model_id=vehicle_model_id,
    )
    if match is None:
        raise NotFoundError("No pricing found for the specified parameters")

    result = PriceLookupResult(
        pricing=PricingRuleDetail.model_validate(match.rule),
        price=match.price,
        match_type=match.match_type,
    )
    return success(result, "Price found")


@router.get("/by-service/{service_id}")
async def pricing_by_service(
    service_id: int,
    branch_id: Optional[int] = Query(None, description="Defaults to the caller's branch"),
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """All active rules of one service at a branch."""
    branch = await get_accessible_branch(db, tenant, _resolve_branch_id(branch_id, tenant))

    rules = await PricingRuleRepository(db).list_active_for_service(branch.id, service_id)
    return success(
        [PricingRuleDetail.model_validate(rule) for rule in rules],
        "Pricing retrieved successfully",
    )


@router.get("/{rule_id}")
async def get_pricing(
    rule_id: int,
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
) -> dict:
    rule = await get_owned(
        db, PricingRule, rule_id, tenant, label="Pricing", options=DETAIL_OPTIONS
    )
    return success(PricingRuleDetail.model_validate(rule), "Pricing retrieved successfully")


@router.put("/{rule_id}")
async def update_pricing(
    rule_id: int,
    data: PricingRuleUpdate,
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Update a rule; the resulting rule must still be unique."""
    rule = await get_owned(db, PricingRule, rule_id, tenant, label="Pricing")
    changes = data.model_dump(exclude_unset=True)

    if changes.get("branch_id") is not None and changes["branch_id"] != rule.branch_id:
        branch = await get_accessible_branch(db, tenant, changes["branch_id"])
        changes["org_id"] = branch.org_id
    else:
        changes.pop("branch_id", None)

    for required in ("service_id", "vehicle_type_id", "price", "is_active"):
        if required in changes and changes[required] is None:
            raise invalid_field(required, f"The {required} field may not be null.")

    merged = {
        "service_id": rule.service_id,
        "vehicle_type_id": rule.vehicle_type_id,
        "vehicle_brand_id": rule.vehicle_brand_id,
        "vehicle_model_id": rule.vehicle_model_id,
        **changes,
    }
    await _check_rule_scope(db, tenant, merged)

    repo = PricingRuleRepository(db)
    await repo.update(rule, changes)
    await db.commit()

    rule = await repo.get(rule_id, with_details=True)
    return success(PricingRuleDetail.model_validate(rule), "Pricing updated successfully")


@router.delete("/{rule_id}")
async def delete_pricing(
    rule_id: int,
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Soft-delete a rule; it stops matching lookups immediately."""
    rule = await get_owned(db, PricingRule, rule_id, tenant, label="Pricing")

    await PricingRuleRepository(db).soft_delete(rule)
    await db.commit()

    return success(None, "Pricing deleted successfully")
