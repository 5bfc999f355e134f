"""Product catalog API endpoints."""

from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status

from yafoy.api.deps import DbSession
from yafoy.schemas.product import ProductListResponse, ProductResponse
from yafoy.services.product_service import ProductService

router = APIRouter()


@router.get("", response_model=ProductListResponse)
async def list_products(
    db: DbSession,
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
):
    """Get active products with pagination."""
    service = ProductService(db)
    products, meta = await service.list_active(page=page, per_page=per_page)
    return ProductListResponse(products=products, page=meta)


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: UUID,
    db: DbSession,
):
    """Get product by ID."""
    service = ProductService(db)
    product = await service.get_by_id(product_id)
    if not product or not product.is_active:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"code": "PRODUCT_NOT_FOUND", "message": "Produit introuvable."},
        )
    return product
