"""Notification service: batch creation, listing and read state."""

import logging
from uuid import UUID

from sqlalchemy import func, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from yafoy.core.exceptions import NotFoundError, ServiceError, StorageUnavailableError
from yafoy.models.notification import Notification
from yafoy.schemas.notification import NotificationPayload, NotificationResponse
from yafoy.schemas.pagination import PageMeta
from yafoy.schemas.ws import NotificationEvent
from yafoy.services.realtime import publish_event, user_topic

logger = logging.getLogger(__name__)


class NotificationService:
    """Service class for notification operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @staticmethod
    def validate_batch(payloads: list[NotificationPayload]) -> None:
        """Reject an empty batch or any item missing a required field.

        Raises:
            ServiceError: 400 with the reason
        """
        if not payloads:
            raise ServiceError("NOTIFICATIONS_REQUIRED", "notifications array is required")
        for payload in payloads:
            if not payload.user_id or not payload.type or not payload.title:
                raise ServiceError(
                    "NOTIFICATION_INVALID",
                    "Each notification must have user_id, type, and title",
                )

    async def create_many(self, payloads: list[NotificationPayload]) -> list[NotificationResponse]:
        """Insert a batch of unread notifications in one statement and push them.

        Returns:
            The created notifications
        """
        self.validate_batch(payloads)

        rows = [
            {
                "user_id": payload.user_id,
                "type": payload.type,
                "title": payload.title,
                "body": payload.body,
                "data": payload.data or {},
                "read": False,
            }
            for payload in payloads
        ]

        try:
            result = await self.db.execute(insert(Notification).returning(Notification), rows)
            created = [NotificationResponse.model_validate(n) for n in result.scalars().all()]
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            logger.exception(f"Failed to insert {len(rows)} notifications")
            raise StorageUnavailableError("NOTIFICATION_CREATE_FAILED", "Impossible de créer les notifications.")

        for notification in created:
            await publish_event(user_topic(notification.user_id), NotificationEvent(data=notification))

        logger.info(f"Created {len(created)} notifications")
        return created

    async def list_for_user(
        self, user_id: UUID, page: int = 1, per_page: int = 20
    ) -> tuple[list[Notification], PageMeta]:
        """Get a user's notifications, newest first."""
        count_result = await self.db.execute(
            select(func.count(Notification.notification_id)).where(Notification.user_id == user_id)
        )
        meta = PageMeta.build(count_result.scalar_one(), page, per_page)

        result = await self.db.execute(
            select(Notification)
            .where(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc())
            .offset(meta.offset)
            .limit(per_page)
        )
        return list(result.scalars().all()), meta

    async def unread_count(self, user_id: UUID) -> int:
        result = await self.db.execute(
            select(func.count(Notification.notification_id)).where(
                Notification.user_id == user_id,
                Notification.read.is_(False),
            )
        )
        return result.scalar_one()

    async def mark_read(self, user_id: UUID, notification_id: UUID) -> None:
        """Mark one of the user's notifications as read.

        Raises:
            NotFoundError: No such notification for this user
        """
        result = await self.db.execute(
            update(Notification)
            .where(
                Notification.notification_id == notification_id,
                Notification.user_id == user_id,
            )
            .values(read=True)
        )
        if result.rowcount == 0:
            await self.db.rollback()
            raise NotFoundError("NOTIFICATION_NOT_FOUND", "Notification introuvable.")
        await self.db.commit()

    async def mark_all_read(self, user_id: UUID) -> int:
        """Returns the number of notifications updated."""
        result = await self.db.execute(
            update(Notification)
            .where(Notification.user_id == user_id, Notification.read.is_(False))
            .values(read=True)
        )
        await self.db.commit()
        return result.rowcount
