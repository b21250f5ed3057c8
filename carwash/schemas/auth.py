"""Login and profile schemas."""

from typing import Optional

from pydantic import BaseModel, Field

from carwash.schemas.organization import BranchResponse, OrganizationResponse


class LoginRequest(BaseModel):
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=1)
    device_name: str = Field(default="api", max_length=100)


class AuthUser(BaseModel):
    id: int
    name: str
    email: str
    role: str
    org_id: Optional[int] = None
    branch_id: Optional[int] = None

    model_config = {"from_attributes": True}


class LoginResponse(BaseModel):
    user: AuthUser
    token: str
    token_type: str = "Bearer"


class ProfileResponse(BaseModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    role: str
    is_active: bool
    organization: Optional[OrganizationResponse] = None
    branch: Optional[BranchResponse] = None

    model_config = {"from_attributes": True}

