"""Vehicle catalog schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class VehicleTypeCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    branch_id: Optional[int] = None
    is_active: bool = True


class VehicleTypeUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    is_active: Optional[bool] = None


class VehicleTypeResponse(BaseModel):
    id: int
    org_id: int
    branch_id: Optional[int] = None
    name: str
    description: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class VehicleBrandCreate(BaseModel):
    vehicle_type_id: int
    name: str = Field(min_length=1, max_length=255)
    branch_id: Optional[int] = None
    is_active: bool = True


class VehicleBrandUpdate(BaseModel):
    vehicle_type_id: Optional[int] = None
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    is_active: Optional[bool] = None


class VehicleBrandResponse(BaseModel):
    id: int
    org_id: int
    branch_id: Optional[int] = None
    vehicle_type_id: int
    name: str
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class VehicleModelCreate(BaseModel):
    vehicle_brand_id: int
    name: str = Field(min_length=1, max_length=255)
    year: Optional[str] = Field(default=None, max_length=10)
    is_active: bool = True


class VehicleModelUpdate(BaseModel):
    vehicle_brand_id: Optional[int] = None
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    year: Optional[str] = Field(default=None, max_length=10)
    is_active: Optional[bool] = None


class VehicleModelResponse(BaseModel):
    id: int
    vehicle_brand_id: int
    name: str
    year: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
