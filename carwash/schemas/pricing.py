"""Pricing rule and price lookup schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from carwash.pricing.tiers import MatchType


class PricingRuleCreate(BaseModel):
    branch_id: int
    service_id: int
    vehicle_type_id: int
    vehicle_brand_id: Optional[int] = None
    vehicle_model_id: Optional[int] = None
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    is_active: bool = True

    @model_validator(mode="after")
    def _model_needs_brand(self) -> "PricingRuleCreate":
        if self.vehicle_model_id is not None and self.vehicle_brand_id is None:
            raise ValueError("vehicle_brand_id is required when vehicle_model_id is set")
        return self


class PricingRuleUpdate(BaseModel):
    """Partial update; the merged rule is re-checked for duplicates."""

    branch_id: Optional[int] = None
    service_id: Optional[int] = None
    vehicle_type_id: Optional[int] = None
    vehicle_brand_id: Optional[int] = None
    vehicle_model_id: Optional[int] = None
    price: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    is_active: Optional[bool] = None


class NamedRef(BaseModel):
    id: int
    name: str

    model_config = {"from_attributes": True}


class PricingRuleResponse(BaseModel):
    id: int
    org_id: int
    branch_id: int
    service_id: int
    vehicle_type_id: int
    vehicle_brand_id: Optional[int] = None
    vehicle_model_id: Optional[int] = None
    price: Decimal
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class PricingRuleDetail(PricingRuleResponse):
    """Rule with its service and vehicle scope names loaded."""

    service: Optional[NamedRef] = None
    vehicle_type: Optional[NamedRef] = None
    vehicle_brand: Optional[NamedRef] = None
    vehicle_model: Optional[NamedRef] = None


class PriceLookupResult(BaseModel):
    pricing: PricingRuleDetail
    price: Decimal
    match_type: MatchType
