"""Order status controller: the guarded lifecycle of a rental order.

Lifecycle::

    pending ──> confirmed ──> in_progress ──> completed
       │
       └──> cancelled

``completed`` and ``cancelled`` are terminal. Only the fulfilling party (the
provider) may move an order. Cancellation is two-step: a first request
issues a single-use token, and only confirming with that token writes the
new status.
"""

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from yafoy.core.config import settings
from yafoy.core.exceptions import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    StorageUnavailableError,
)
from yafoy.core.session import SessionContext
from yafoy.middleware.metrics import record_order_transition
from yafoy.models.order import Order, OrderStatus
from yafoy.schemas.order import OrderAction
from yafoy.services.redis_service import RedisService

logger = logging.getLogger(__name__)

TRANSITIONS: dict[OrderStatus, tuple[OrderStatus, ...]] = {
    OrderStatus.PENDING: (OrderStatus.CONFIRMED, OrderStatus.CANCELLED),
    OrderStatus.CONFIRMED: (OrderStatus.IN_PROGRESS,),
    OrderStatus.IN_PROGRESS: (OrderStatus.COMPLETED,),
    OrderStatus.COMPLETED: (),
    OrderStatus.CANCELLED: (),
}

ACTION_LABELS: dict[OrderStatus, str] = {
    OrderStatus.CONFIRMED: "Accepter",
    OrderStatus.CANCELLED: "Refuser",
    OrderStatus.IN_PROGRESS: "Démarrer",
    OrderStatus.COMPLETED: "Terminer",
}

CONFIRMATION_MESSAGES: dict[OrderStatus, str] = {
    OrderStatus.CONFIRMED: "La commande a été confirmée.",
    OrderStatus.IN_PROGRESS: "La commande est maintenant en cours.",
    OrderStatus.COMPLETED: "La commande a été marquée comme terminée.",
    OrderStatus.CANCELLED: "La commande a été annulée.",
}

PERSIST_FAILED_MESSAGE = "Impossible de mettre à jour le statut."


@dataclass(frozen=True)
class StatusChange:
    """Outcome of a persisted transition, handed to observers."""

    order: Order
    previous_status: OrderStatus
    status: OrderStatus
    message: str


@dataclass(frozen=True)
class CancellationRequest:
    order_id: UUID
    token: str
    expires_in: int
    message: str


StatusObserver = Callable[[StatusChange], Awaitable[None]]


def allowed_targets(status: OrderStatus | str) -> tuple[OrderStatus, ...]:
    """Statuses reachable from ``status`` in one step."""
    return TRANSITIONS[OrderStatus(status)]


def available_actions(status: OrderStatus | str, is_provider: bool) -> list[OrderAction]:
    """Controls offered to the caller for an order in ``status``.

    Callers other than the fulfilling party get no controls at all.
    """
    if not is_provider:
        return []
    return [
        OrderAction(
            target=target,
            label=ACTION_LABELS[target],
            requires_confirmation=target == OrderStatus.CANCELLED,
        )
        for target in allowed_targets(status)
    ]


def _lock_resource(order_id: UUID) -> str:
    return f"order:{order_id}"


def _cancel_token_key(order_id: UUID) -> str:
    return f"order_cancel:{order_id}"


class OrderStatusController:
    """Validates and persists order status transitions."""

    def __init__(self, db: AsyncSession, redis_service: RedisService):
        self.db = db
        self.redis_service = redis_service

    async def _load_for_actor(self, order_id: UUID, actor: SessionContext) -> Order:
        result = await self.db.execute(select(Order).where(Order.order_id == order_id))
        order = result.scalar_one_or_none()
        if order is None:
            raise NotFoundError("ORDER_NOT_FOUND", "Commande introuvable.")
        if order.provider_id != actor.user_id:
            raise PermissionDeniedError(
                "NOT_ORDER_PROVIDER",
                "Seul le prestataire de la commande peut modifier son statut.",
            )
        return order

    @staticmethod
    def _ensure_reachable(order: Order, target: OrderStatus) -> None:
        if target not in allowed_targets(order.status):
            raise ConflictError(
                "INVALID_TRANSITION",
                f"Transition impossible de {order.status} vers {target.value}.",
            )

    async def transition(
        self,
        order_id: UUID,
        target: OrderStatus,
        actor: SessionContext,
        on_status_change: StatusObserver | None = None,
    ) -> StatusChange:
        """Move an order to ``target`` in one step.

        Cancellation is refused here; it goes through
        ``request_cancellation`` and ``confirm_cancellation``.

        Raises:
            NotFoundError: Unknown order
            PermissionDeniedError: Actor is not the order's provider
            ConflictError: Target not reachable, or a transition is in flight
            StorageUnavailableError: The write failed; status is unchanged
        """
        target = OrderStatus(target)
        order = await self._load_for_actor(order_id, actor)

        if target == OrderStatus.CANCELLED:
            record_order_transition(target.value, "refused")
            raise ConflictError(
                "CONFIRMATION_REQUIRED",
                "L'annulation doit être confirmée.",
            )
        try:
            self._ensure_reachable(order, target)
        except ConflictError:
            record_order_transition(target.value, "refused")
            raise

        return await self._persist(order, target, on_status_change)

    async def request_cancellation(
        self, order_id: UUID, actor: SessionContext
    ) -> CancellationRequest:
        """First affirmative step of a cancellation. Writes no status."""
        order = await self._load_for_actor(order_id, actor)
        self._ensure_reachable(order, OrderStatus.CANCELLED)

        ttl = settings.ORDER_CANCEL_CONFIRM_TTL
        token = await self.redis_service.issue_confirmation_token(
            _cancel_token_key(order.order_id), ttl
        )
        logger.info(f"Cancellation requested: order={order.order_id}, by={actor.user_id}")
        return CancellationRequest(
            order_id=order.order_id,
            token=token,
            expires_in=ttl,
            message="Confirmez l'annulation de la commande.",
        )

    async def confirm_cancellation(
        self,
        order_id: UUID,
        token: str,
        actor: SessionContext,
        on_status_change: StatusObserver | None = None,
    ) -> StatusChange:
        """Second affirmative step: consume the token, then cancel.

        The token is only consumed once the busy flag is held, so a refusal
        with ``TRANSITION_IN_PROGRESS`` leaves it usable for a retry.
        """
        order = await self._load_for_actor(order_id, actor)
        self._ensure_reachable(order, OrderStatus.CANCELLED)

        return await self._persist(
            order, OrderStatus.CANCELLED, on_status_change, confirmation_token=token
        )

    async def _reload_status(self, order: Order) -> None:
        result = await self.db.execute(
            select(Order.status).where(Order.order_id == order.order_id)
        )
        current = result.scalar_one_or_none()
        if current is None:
            raise NotFoundError("ORDER_NOT_FOUND", "Commande introuvable.")
        order.status = current

    async def _persist(
        self,
        order: Order,
        target: OrderStatus,
        on_status_change: StatusObserver | None,
        confirmation_token: str | None = None,
    ) -> StatusChange:
        resource = _lock_resource(order.order_id)
        acquired, owner_id = await self.redis_service.acquire_lock(
            resource, ttl=settings.ORDER_LOCK_TTL
        )
        if not acquired:
            record_order_transition(target.value, "busy")
            raise ConflictError(
                "TRANSITION_IN_PROGRESS",
                "Une mise à jour est déjà en cours pour cette commande.",
            )

        try:
            # Another transition may have landed since the order was loaded
            await self._reload_status(order)
            try:
                self._ensure_reachable(order, target)
            except ConflictError:
                record_order_transition(target.value, "refused")
                raise

            if confirmation_token is not None:
                consumed = await self.redis_service.consume_confirmation_token(
                    _cancel_token_key(order.order_id), confirmation_token
                )
                if not consumed:
                    record_order_transition(target.value, "refused")
                    raise ConflictError(
                        "INVALID_CONFIRMATION",
                        "Confirmation invalide ou expirée.",
                    )

            previous = OrderStatus(order.status)
            try:
                await self.db.execute(
                    update(Order)
                    .where(Order.order_id == order.order_id)
                    .values(status=target.value)
                )
                await self.db.commit()
            except Exception:
                await self.db.rollback()
                logger.exception(
                    f"Failed to persist status {target.value} for order {order.order_id}"
                )
                record_order_transition(target.value, "error")
                raise StorageUnavailableError("STATUS_UPDATE_FAILED", PERSIST_FAILED_MESSAGE)

            order.status = target.value
            change = StatusChange(
                order=order,
                previous_status=previous,
                status=target,
                message=CONFIRMATION_MESSAGES[target],
            )
            record_order_transition(target.value, "success")
            logger.info(
                f"Order {order.order_id}: {previous.value} -> {target.value}"
            )

            if on_status_change is not None:
                await on_status_change(change)
            return change
        finally:
            await self.redis_service.release_lock(resource, owner_id)
