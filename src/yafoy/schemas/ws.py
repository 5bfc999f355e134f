"""Realtime event schemas pushed over WebSocket subscriptions."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel

from yafoy.models.order import OrderStatus
from yafoy.schemas.chat import ChatMessageResponse
from yafoy.schemas.notification import NotificationResponse


class ChatMessageEvent(BaseModel):
    """New message inserted in a room, with sender metadata merged."""

    event: Literal["chat_message"] = "chat_message"
    data: ChatMessageResponse


class OrderStatusChangedData(BaseModel):
    order_id: UUID
    previous_status: OrderStatus
    status: OrderStatus
    message: str
    timestamp: datetime


class OrderStatusChangedEvent(BaseModel):
    """Pushed on ``order:{id}`` after a successful transition."""

    event: Literal["order_status_changed"] = "order_status_changed"
    data: OrderStatusChangedData


class NotificationEvent(BaseModel):
    """Pushed on ``user:{id}`` when a notification is created."""

    event: Literal["notification"] = "notification"
    data: NotificationResponse


# Type alias for all WebSocket events
WSEvent = ChatMessageEvent | OrderStatusChangedEvent | NotificationEvent
