"""Order service for order creation and query operations."""

import logging
from typing import Literal
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from yafoy.core.exceptions import NotFoundError, PermissionDeniedError, StorageUnavailableError
from yafoy.core.session import SessionContext
from yafoy.models.order import Order, OrderStatus
from yafoy.models.user import User, UserRole
from yafoy.schemas.order import OrderCreate
from yafoy.schemas.pagination import PageMeta

logger = logging.getLogger(__name__)


class OrderService:
    """Service class for order operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_order(self, client: SessionContext, order_data: OrderCreate) -> Order:
        """Create a pending order from a client to a provider.

        Raises:
            NotFoundError: If the provider does not exist
            StorageUnavailableError: If the insert fails
        """
        provider = await self.db.execute(
            select(User.user_id).where(
                User.user_id == order_data.provider_id,
                User.role == UserRole.PROVIDER.value,
            )
        )
        if provider.scalar_one_or_none() is None:
            raise NotFoundError("PROVIDER_NOT_FOUND", "Prestataire introuvable.")

        order = Order(
            client_id=client.user_id,
            provider_id=order_data.provider_id,
            total_amount=order_data.total_amount,
            deposit_paid=order_data.deposit_paid,
            event_date=order_data.event_date,
            event_location=order_data.event_location,
            notes=order_data.notes,
            status=OrderStatus.PENDING.value,
        )

        try:
            self.db.add(order)
            await self.db.commit()
            await self.db.refresh(order)
        except Exception:
            await self.db.rollback()
            logger.exception(f"Failed to create order for client {client.user_id}")
            raise StorageUnavailableError("ORDER_CREATE_FAILED", "Impossible de créer la commande.")

        logger.info(f"Order created: {order.order_id} ({client.user_id} -> {order.provider_id})")
        return order

    async def get_user_orders(
        self,
        user_id: UUID,
        as_role: Literal["client", "provider"] = "client",
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[list[Order], PageMeta]:
        """Get orders for a specific user, newest first.

        Args:
            user_id: User UUID
            as_role: Whether to list orders placed (client) or received (provider)
            page: Requested page (clamped into range)
            per_page: Page size

        Returns:
            Tuple of (orders list, page metadata)
        """
        column = Order.client_id if as_role == "client" else Order.provider_id

        count_result = await self.db.execute(
            select(func.count(Order.order_id)).where(column == user_id)
        )
        meta = PageMeta.build(count_result.scalar_one(), page, per_page)

        result = await self.db.execute(
            select(Order)
            .where(column == user_id)
            .order_by(Order.created_at.desc())
            .offset(meta.offset)
            .limit(per_page)
        )
        return list(result.scalars().all()), meta

    async def get_order_by_id(self, order_id: UUID) -> Order | None:
        """Get order by ID.

        Args:
            order_id: Order UUID

        Returns:
            Order or None if not found
        """
        result = await self.db.execute(
            select(Order).where(Order.order_id == order_id)
        )
        return result.scalar_one_or_none()

    async def get_visible_order(self, order_id: UUID, viewer: SessionContext) -> Order:
        """Get an order the viewer is party to.

        Raises:
            NotFoundError: Unknown order
            PermissionDeniedError: Viewer is neither client nor provider
        """
        order = await self.get_order_by_id(order_id)
        if order is None:
            raise NotFoundError("ORDER_NOT_FOUND", "Commande introuvable.")
        if viewer.user_id not in (order.client_id, order.provider_id) and not viewer.is_admin:
            raise PermissionDeniedError("ORDER_FORBIDDEN", "Accès refusé à cette commande.")
        return order
