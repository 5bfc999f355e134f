"""Notification API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Query, status

from yafoy.api.deps import AdminSession, CurrentSession, DbSession, http_error
from yafoy.core.exceptions import ServiceError
from yafoy.schemas.notification import (
    NotificationBatchCreate,
    NotificationBatchResponse,
    NotificationListResponse,
)
from yafoy.services.notification_service import NotificationService

router = APIRouter()


@router.post("", response_model=NotificationBatchResponse, status_code=status.HTTP_201_CREATED)
async def create_notifications(
    batch: NotificationBatchCreate,
    db: DbSession,
    admin: AdminSession,
):
    """Create a batch of notifications (admin only).

    Raises:
        400: Empty batch, or an item without user_id, type or title
    """
    try:
        created = await NotificationService(db).create_many(batch.notifications)
    except ServiceError as e:
        raise http_error(e)
    return NotificationBatchResponse(count=len(created), notifications=created)


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    db: DbSession,
    session: CurrentSession,
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
):
    service = NotificationService(db)
    notifications, meta = await service.list_for_user(session.user_id, page=page, per_page=per_page)
    unread = await service.unread_count(session.user_id)
    return NotificationListResponse(notifications=notifications, unread=unread, page=meta)


@router.post("/read-all")
async def mark_all_read(db: DbSession, session: CurrentSession):
    updated = await NotificationService(db).mark_all_read(session.user_id)
    return {"updated": updated}


@router.post("/{notification_id}/read", status_code=status.HTTP_204_NO_CONTENT)
async def mark_read(notification_id: UUID, db: DbSession, session: CurrentSession):
    try:
        await NotificationService(db).mark_read(session.user_id, notification_id)
    except ServiceError as e:
        raise http_error(e)
