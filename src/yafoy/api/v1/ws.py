"""WebSocket endpoints for realtime chat, notifications and order status."""

import logging
from typing import Any
from uuid import UUID

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect

from yafoy.core.database import async_session_maker
from yafoy.core.exceptions import ServiceError
from yafoy.core.redis import get_redis
from yafoy.core.session import SessionContext
from yafoy.services.chat_service import ChatService
from yafoy.services.order_service import OrderService
from yafoy.services.realtime import Subscription, hub, order_topic, room_topic, user_topic
from yafoy.services.redis_service import RedisService
from yafoy.services.session_service import SessionService

logger = logging.getLogger(__name__)

router = APIRouter()


async def _authenticate(websocket: WebSocket, token: str) -> SessionContext | None:
    redis = await get_redis()
    session = await SessionService(RedisService(redis)).resolve(token)
    if session is None:
        await websocket.close(code=4001, reason="Invalid token")
    return session


async def _serve(websocket: WebSocket, topic: str, session: SessionContext) -> None:
    """Push every event on ``topic`` to the socket until it disconnects."""
    await websocket.accept()

    async def push(event: dict[str, Any]) -> None:
        await websocket.send_json(event)

    subscription: Subscription = await hub.subscribe(topic, push)
    try:
        while True:
            # Wait for messages from client (heartbeat)
            data = await websocket.receive_text()

            if data == "ping":
                await websocket.send_text("pong")

    except WebSocketDisconnect:
        logger.info(f"WebSocket disconnected: topic={topic}, user={session.user_id}")
    except Exception as e:
        logger.error(f"WebSocket error: topic={topic}, user={session.user_id}, error={e}")
    finally:
        await subscription.unsubscribe()


@router.websocket("/ws/rooms/{room_id}")
async def room_websocket(
    websocket: WebSocket,
    room_id: str,
    token: str = Query(..., description="JWT access token"),
):
    """Live messages of a chat room.

    Connection URL: ws://host/ws/rooms/{room_id}?token={jwt_token}

    Events pushed to client:
    - chat_message: A message was stored in the room

    Client can send:
    - ping: Server responds with pong (heartbeat)
    """
    session = await _authenticate(websocket, token)
    if session is None:
        return

    try:
        room_uuid = UUID(room_id)
    except ValueError:
        await websocket.close(code=4002, reason="Invalid room ID")
        return

    async with async_session_maker() as db:
        is_member = await ChatService(db).is_member(room_uuid, session.user_id)
    if not is_member:
        await websocket.close(code=4003, reason="Not a room member")
        return

    await _serve(websocket, room_topic(room_uuid), session)


@router.websocket("/ws/notifications")
async def notifications_websocket(
    websocket: WebSocket,
    token: str = Query(..., description="JWT access token"),
):
    """Live notifications of the authenticated user.

    Events pushed to client:
    - notification: A notification was created for the user
    """
    session = await _authenticate(websocket, token)
    if session is None:
        return

    await _serve(websocket, user_topic(session.user_id), session)


@router.websocket("/ws/orders/{order_id}")
async def order_websocket(
    websocket: WebSocket,
    order_id: str,
    token: str = Query(..., description="JWT access token"),
):
    """Live status changes of an order the caller is party to.

    Events pushed to client:
    - order_status_changed: The order moved to a new status
    """
    session = await _authenticate(websocket, token)
    if session is None:
        return

    try:
        order_uuid = UUID(order_id)
    except ValueError:
        await websocket.close(code=4002, reason="Invalid order ID")
        return

    async with async_session_maker() as db:
        try:
            await OrderService(db).get_visible_order(order_uuid, session)
        except ServiceError as e:
            await websocket.close(code=4003, reason=e.message)
            return

    await _serve(websocket, order_topic(order_uuid), session)
