"""Favorite schemas."""

from uuid import UUID

from pydantic import BaseModel

from yafoy.schemas.product import ProductSummary


class FavoriteStatus(BaseModel):
    product_id: UUID
    is_favorite: bool


class FavoriteListResponse(BaseModel):
    products: list[ProductSummary]
    total: int
