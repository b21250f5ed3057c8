"""Customer and customer vehicle schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class CustomerCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    phone: str = Field(min_length=3, max_length=50)
    email: Optional[str] = Field(default=None, max_length=255)
    address: Optional[str] = None
    is_active: bool = True


class CustomerUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    phone: Optional[str] = Field(default=None, min_length=3, max_length=50)
    email: Optional[str] = Field(default=None, max_length=255)
    address: Optional[str] = None
    is_active: Optional[bool] = None


class CustomerResponse(BaseModel):
    id: int
    org_id: int
    branch_id: Optional[int] = None
    user_id: Optional[int] = None
    name: str
    phone: str
    email: Optional[str] = None
    address: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class CustomerVehicleCreate(BaseModel):
    vehicle_type_id: int
    vehicle_brand_id: Optional[int] = None
    vehicle_model_id: Optional[int] = None
    registration_number: Optional[str] = Field(default=None, max_length=50)
    color: Optional[str] = Field(default=None, max_length=50)
    year: Optional[int] = Field(default=None, ge=1900, le=2100)
    notes: Optional[str] = None
    is_active: bool = True


class CustomerVehicleUpdate(BaseModel):
    vehicle_type_id: Optional[int] = None
    vehicle_brand_id: Optional[int] = None
    vehicle_model_id: Optional[int] = None
    registration_number: Optional[str] = Field(default=None, max_length=50)
    color: Optional[str] = Field(default=None, max_length=50)
    year: Optional[int] = Field(default=None, ge=1900, le=2100)
    notes: Optional[str] = None
    is_active: Optional[bool] = None


class CustomerVehicleResponse(BaseModel):
    id: int
    org_id: int
    branch_id: Optional[int] = None
    customer_id: int
    vehicle_type_id: Optional[int] = None
    vehicle_brand_id: Optional[int] = None
    vehicle_model_id: Optional[int] = None
    registration_number: Optional[str] = None
    color: Optional[str] = None
    year: Optional[int] = None
    notes: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class CustomerDetailResponse(CustomerResponse):
    vehicles: list[CustomerVehicleResponse] = []
