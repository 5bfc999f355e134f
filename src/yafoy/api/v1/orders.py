"""Order API endpoints: creation, listing and status transitions."""

import logging
from datetime import datetime, timezone
from typing import Literal
from uuid import UUID

from fastapi import APIRouter, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from yafoy.api.deps import CurrentSession, DbSession, RedisServiceDep, http_error
from yafoy.core.exceptions import ServiceError
from yafoy.schemas.notification import NotificationPayload
from yafoy.schemas.order import (
    CancellationConfirm,
    CancellationRequestResponse,
    OrderCreate,
    OrderDetailResponse,
    OrderListResponse,
    OrderResponse,
    OrderStatusUpdate,
    OrderTransitionResponse,
)
from yafoy.schemas.ws import OrderStatusChangedData, OrderStatusChangedEvent
from yafoy.services.notification_service import NotificationService
from yafoy.services.order_service import OrderService
from yafoy.services.order_status import (
    OrderStatusController,
    StatusChange,
    StatusObserver,
    available_actions,
)
from yafoy.services.realtime import order_topic, publish_event

logger = logging.getLogger(__name__)

router = APIRouter()


def status_change_observer(db: AsyncSession) -> StatusObserver:
    """Observer that pushes the change to subscribers and notifies the client."""

    async def on_status_change(change: StatusChange) -> None:
        order = change.order
        await publish_event(
            order_topic(order.order_id),
            OrderStatusChangedEvent(
                data=OrderStatusChangedData(
                    order_id=order.order_id,
                    previous_status=change.previous_status,
                    status=change.status,
                    message=change.message,
                    timestamp=datetime.now(timezone.utc),
                )
            ),
        )
        try:
            await NotificationService(db).create_many(
                [
                    NotificationPayload(
                        user_id=order.client_id,
                        type="order_status",
                        title="Mise à jour de votre commande",
                        body=change.message,
                        data={"order_id": str(order.order_id), "status": change.status.value},
                    )
                ]
            )
        except ServiceError as e:
            # Status is already persisted at this point
            logger.error(f"Failed to notify client of order {order.order_id}: {e.message}")

    return on_status_change


@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def create_order(order_data: OrderCreate, db: DbSession, session: CurrentSession):
    """Create a pending order addressed to a provider."""
    try:
        return await OrderService(db).create_order(session, order_data)
    except ServiceError as e:
        raise http_error(e)


@router.get("", response_model=OrderListResponse)
async def get_my_orders(
    db: DbSession,
    session: CurrentSession,
    as_role: Literal["client", "provider"] = Query("client"),
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
):
    """Get the caller's orders, newest first."""
    service = OrderService(db)
    orders, meta = await service.get_user_orders(
        user_id=session.user_id,
        as_role=as_role,
        page=page,
        per_page=per_page,
    )
    return OrderListResponse(orders=orders, page=meta)


@router.get("/{order_id}", response_model=OrderDetailResponse)
async def get_order(order_id: UUID, db: DbSession, session: CurrentSession):
    """Get an order with the status controls available to the caller."""
    try:
        order = await OrderService(db).get_visible_order(order_id, session)
    except ServiceError as e:
        raise http_error(e)

    detail = OrderDetailResponse.model_validate(order)
    detail.available_actions = available_actions(
        order.status, is_provider=order.provider_id == session.user_id
    )
    return detail


@router.post("/{order_id}/status", response_model=OrderTransitionResponse)
async def update_order_status(
    order_id: UUID,
    body: OrderStatusUpdate,
    db: DbSession,
    redis_service: RedisServiceDep,
    session: CurrentSession,
):
    """Move an order to its next status.

    Raises:
        403: Caller is not the order's provider
        409: Transition not allowed, confirmation required, or already in progress
        503: The status could not be saved
    """
    controller = OrderStatusController(db, redis_service)
    try:
        change = await controller.transition(
            order_id, body.status, session, on_status_change=status_change_observer(db)
        )
    except ServiceError as e:
        raise http_error(e)

    return OrderTransitionResponse(
        order_id=change.order.order_id,
        status=change.status,
        message=change.message,
    )


@router.post("/{order_id}/cancellation", response_model=CancellationRequestResponse)
async def request_cancellation(
    order_id: UUID,
    db: DbSession,
    redis_service: RedisServiceDep,
    session: CurrentSession,
):
    """First step of a cancellation. The order is not modified."""
    controller = OrderStatusController(db, redis_service)
    try:
        request = await controller.request_cancellation(order_id, session)
    except ServiceError as e:
        raise http_error(e)

    return CancellationRequestResponse(
        order_id=request.order_id,
        token=request.token,
        expires_in=request.expires_in,
        message=request.message,
    )


@router.post("/{order_id}/cancellation/confirm", response_model=OrderTransitionResponse)
async def confirm_cancellation(
    order_id: UUID,
    body: CancellationConfirm,
    db: DbSession,
    redis_service: RedisServiceDep,
    session: CurrentSession,
):
    """Second step of a cancellation: cancel with the issued token."""
    controller = OrderStatusController(db, redis_service)
    try:
        change = await controller.confirm_cancellation(
            order_id, body.token, session, on_status_change=status_change_observer(db)
        )
    except ServiceError as e:
        raise http_error(e)

    return OrderTransitionResponse(
        order_id=change.order.order_id,
        status=change.status,
        message=change.message,
    )
