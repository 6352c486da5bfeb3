"""Pydantic schemas for product and discount endpoints."""

from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field, field_validator

DiscountStatus = Literal["active", "inactive"]


class ProductCreateRequest(BaseModel):
    """Request body for creating a product."""

    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    price: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)


class ProductUpdateRequest(BaseModel):
    """Request body for updating a product. Omitted fields are unchanged."""

    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    price: Decimal | None = Field(None, ge=0, max_digits=12, decimal_places=2)

    @field_validator("name", "price")
    @classmethod
    def reject_null(cls, v):
        """Required columns may be omitted but never cleared."""
        if v is None:
            raise ValueError("may be omitted but not null")
        return v


class ProductResponse(BaseModel):
    """Product information."""

    id: int
    company_id: int
    name: str
    description: str | None
    price: Decimal
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class DiscountCreateRequest(BaseModel):
    """Request body for creating a discount."""

    title: str = Field(..., min_length=1, max_length=255)
    discount_percent: int = Field(..., ge=1, le=100)
    product_id: int | None = Field(None, description="Product the discount applies to")
    status: DiscountStatus = "active"


class DiscountUpdateRequest(BaseModel):
    """Request body for updating a discount. Omitted fields are unchanged."""

    title: str | None = Field(None, min_length=1, max_length=255)
    discount_percent: int | None = Field(None, ge=1, le=100)
    status: DiscountStatus | None = None

    @field_validator("title", "discount_percent", "status")
    @classmethod
    def reject_null(cls, v):
        """Required columns may be omitted but never cleared."""
        if v is None:
            raise ValueError("may be omitted but not null")
        return v


class DiscountResponse(BaseModel):
    """Discount information."""

    id: int
    company_id: int
    product_id: int | None
    title: str
    discount_percent: int
    status: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
