"""Favorites API endpoints."""

from uuid import UUID

from fastapi import APIRouter

from yafoy.api.deps import CurrentSession, DbSession, http_error
from yafoy.core.exceptions import ServiceError
from yafoy.schemas.favorite import FavoriteListResponse, FavoriteStatus
from yafoy.schemas.product import ProductSummary
from yafoy.services.favorite_service import FavoriteService

router = APIRouter()


@router.get("", response_model=FavoriteListResponse)
async def list_favorites(db: DbSession, session: CurrentSession):
    products = await FavoriteService(db).list_for_user(session.user_id)
    return FavoriteListResponse(
        products=[ProductSummary.model_validate(p) for p in products],
        total=len(products),
    )


@router.get("/{product_id}", response_model=FavoriteStatus)
async def get_favorite_status(product_id: UUID, db: DbSession, session: CurrentSession):
    is_favorite = await FavoriteService(db).is_favorite(session.user_id, product_id)
    return FavoriteStatus(product_id=product_id, is_favorite=is_favorite)


@router.post("/{product_id}/toggle", response_model=FavoriteStatus)
async def toggle_favorite(product_id: UUID, db: DbSession, session: CurrentSession):
    """Add the product to favorites, or remove it if already there."""
    try:
        is_favorite = await FavoriteService(db).toggle(session.user_id, product_id)
    except ServiceError as e:
        raise http_error(e)
    return FavoriteStatus(product_id=product_id, is_favorite=is_favorite)
