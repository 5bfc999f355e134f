"""Product service for catalog reads."""

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from yafoy.models.product import Product
from yafoy.schemas.pagination import PageMeta


class ProductService:
    """Service class for product operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_active(self, page: int = 1, per_page: int = 20) -> tuple[list[Product], PageMeta]:
        """Get active products, newest first.

        Args:
            page: Requested page (clamped into range)
            per_page: Page size

        Returns:
            Tuple of (products list, page metadata)
        """
        count_result = await self.db.execute(
            select(func.count(Product.product_id)).where(Product.is_active.is_(True))
        )
        meta = PageMeta.build(count_result.scalar_one(), page, per_page)

        result = await self.db.execute(
            select(Product)
            .where(Product.is_active.is_(True))
            .order_by(Product.created_at.desc())
            .offset(meta.offset)
            .limit(per_page)
        )
        return list(result.scalars().all()), meta

    async def get_by_id(self, product_id: UUID) -> Product | None:
        """Get product by ID.

        Args:
            product_id: Product UUID

        Returns:
            Product or None if not found
        """
        result = await self.db.execute(
            select(Product).where(Product.product_id == product_id)
        )
        return result.scalar_one_or_none()

    async def get_active_catalog(self, limit: int = 50) -> list[Product]:
        """Active products offered to the planner assistant."""
        result = await self.db.execute(
            select(Product)
            .where(Product.is_active.is_(True))
            .order_by(Product.is_verified.desc(), Product.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def get_active_by_ids(self, product_ids: list[UUID]) -> list[Product]:
        """Active products among ``product_ids``, in the order given.

        Unknown or inactive ids are skipped; duplicates are returned once.
        """
        if not product_ids:
            return []
        result = await self.db.execute(
            select(Product).where(
                Product.product_id.in_(product_ids),
                Product.is_active.is_(True),
            )
        )
        by_id = {product.product_id: product for product in result.scalars().all()}

        ordered: list[Product] = []
        seen: set[UUID] = set()
        for product_id in product_ids:
            if product_id in by_id and product_id not in seen:
                seen.add(product_id)
                ordered.append(by_id[product_id])
        return ordered
