"""Service catalog schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class ServiceCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    branch_id: Optional[int] = None
    base_price: Decimal = Field(default=Decimal("0"), ge=0, max_digits=10, decimal_places=2)
    duration_minutes: Optional[int] = Field(default=None, ge=0)
    is_active: bool = True


class ServiceUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    base_price: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    duration_minutes: Optional[int] = Field(default=None, ge=0)
    is_active: Optional[bool] = None


class ServiceResponse(BaseModel):
    id: int
    org_id: int
    branch_id: Optional[int] = None
    name: str
    description: Optional[str] = None
    base_price: Decimal
    duration_minutes: Optional[int] = None
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
