"""Pydantic schemas for company and membership endpoints."""

from datetime import datetime

from pydantic import BaseModel, Field

from dealhub.domain.entities import TenantRole


class CompanyCreateRequest(BaseModel):
    """Request body for creating a company."""

    name: str = Field(..., min_length=1, max_length=255, description="Company name")


class CompanyResponse(BaseModel):
    """Company information."""

    id: int
    name: str
    owner_user_id: int
    created_at: datetime

    model_config = {"from_attributes": True}


class MemberRoleRequest(BaseModel):
    """Request body for granting a role to a user."""

    role: TenantRole = Field(..., description="Role within the company")


class MemberResponse(BaseModel):
    """Membership of a user in a company."""

    user_id: int
    company_id: int
    role: TenantRole
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}
