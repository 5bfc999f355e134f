"""Favorite service: a user's saved products."""

import logging
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from yafoy.core.exceptions import StorageUnavailableError
from yafoy.models.favorite import Favorite
from yafoy.models.product import Product

logger = logging.getLogger(__name__)


class FavoriteService:
    """Service class for favorite operations.

    The existence of a (user, product) row is the favorite state; add and
    remove are idempotent.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def is_favorite(self, user_id: UUID, product_id: UUID) -> bool:
        result = await self.db.execute(
            select(Favorite.favorite_id).where(
                Favorite.user_id == user_id,
                Favorite.product_id == product_id,
            )
        )
        return result.scalar_one_or_none() is not None

    async def add(self, user_id: UUID, product_id: UUID) -> None:
        stmt = (
            pg_insert(Favorite)
            .values(user_id=user_id, product_id=product_id)
            .on_conflict_do_nothing(constraint="uq_favorite_user_product")
        )
        await self._write(stmt, f"add favorite {product_id} for {user_id}")

    async def remove(self, user_id: UUID, product_id: UUID) -> None:
        stmt = delete(Favorite).where(
            Favorite.user_id == user_id,
            Favorite.product_id == product_id,
        )
        await self._write(stmt, f"remove favorite {product_id} for {user_id}")

    async def toggle(self, user_id: UUID, product_id: UUID) -> bool:
        """Flip membership of a product in the user's favorites.

        Returns:
            The new membership
        """
        if await self.is_favorite(user_id, product_id):
            await self.remove(user_id, product_id)
            return False
        await self.add(user_id, product_id)
        return True

    async def list_for_user(self, user_id: UUID) -> list[Product]:
        """Favorited products, most recently saved first."""
        result = await self.db.execute(
            select(Product)
            .join(Favorite, Favorite.product_id == Product.product_id)
            .where(Favorite.user_id == user_id)
            .order_by(Favorite.created_at.desc())
        )
        return list(result.scalars().all())

    async def _write(self, stmt, description: str) -> None:
        try:
            await self.db.execute(stmt)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            logger.exception(f"Failed to {description}")
            raise StorageUnavailableError("FAVORITE_UPDATE_FAILED", "Impossible de mettre à jour vos favoris.")
