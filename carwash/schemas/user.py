"""User management schemas."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

RoleName = Literal["org_admin", "branch_admin", "staff", "customer"]


class UserCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    email: str = Field(min_length=3, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=50)
    password: str = Field(min_length=8)
    role: RoleName = "staff"
    branch_id: Optional[int] = None
    is_active: bool = True


class UserUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    email: Optional[str] = Field(default=None, min_length=3, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=50)
    password: Optional[str] = Field(default=None, min_length=8)
    role: Optional[RoleName] = None
    branch_id: Optional[int] = None
    is_active: Optional[bool] = None


class UserResponse(BaseModel):
    id: int
    org_id: Optional[int] = None
    branch_id: Optional[int] = None
    name: str
    email: str
    phone: Optional[str] = None
    role: str
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
