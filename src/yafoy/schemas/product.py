"""Product schemas for request/response validation."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel

from yafoy.schemas.pagination import PageMeta


class ProductResponse(BaseModel):
    """Schema for product response."""

    product_id: UUID
    provider_id: UUID
    name: str
    description: str | None
    category_name: str | None
    price_per_day: Decimal
    deposit_amount: Decimal
    quantity_available: int
    images: list[str]
    location: str | None
    is_verified: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class ProductSummary(BaseModel):
    """Compact product card used in recommendations and favorites."""

    product_id: UUID
    name: str
    price_per_day: Decimal
    location: str | None
    images: list[str]
    is_verified: bool
    category_name: str | None = None

    model_config = {"from_attributes": True}


class ProductListResponse(BaseModel):
    """Schema for product list response."""

    products: list[ProductResponse]
    page: PageMeta
