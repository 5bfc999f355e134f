"""Notification schemas."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel

from yafoy.schemas.pagination import PageMeta


class NotificationPayload(BaseModel):
    """One notification to create.

    Required fields are checked by the service so that a batch is rejected
    as a whole with a single message.
    """

    user_id: UUID | None = None
    type: str | None = None
    title: str | None = None
    body: str | None = None
    data: dict[str, Any] | None = None


class NotificationBatchCreate(BaseModel):
    notifications: list[NotificationPayload] = []


class NotificationResponse(BaseModel):
    notification_id: UUID
    user_id: UUID
    type: str
    title: str
    body: str | None
    data: dict[str, Any] | None
    read: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class NotificationBatchResponse(BaseModel):
    success: bool = True
    count: int
    notifications: list[NotificationResponse]


class NotificationListResponse(BaseModel):
    notifications: list[NotificationResponse]
    unread: int
    page: PageMeta
