"""Chat service for rooms, membership and messages."""

import logging
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from yafoy.core.config import settings
from yafoy.core.exceptions import (
    ContentRejectedError,
    NotFoundError,
    PermissionDeniedError,
    StorageUnavailableError,
)
from yafoy.core.session import SessionContext
from yafoy.middleware.metrics import record_chat_message
from yafoy.models.chat import ChatMessage, ChatRoom, ChatRoomMember, MessageType
from yafoy.schemas.chat import ChatMessageCreate, ChatMessageResponse
from yafoy.schemas.ws import ChatMessageEvent
from yafoy.services.realtime import publish_event, room_topic
from yafoy.utils.chat_validation import validate_chat_message

logger = logging.getLogger(__name__)


def to_message_response(message: ChatMessage) -> ChatMessageResponse:
    """Serialize a message with its sender metadata merged in."""
    return ChatMessageResponse.model_validate(message)


class ChatService:
    """Service class for chat operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_room(
        self,
        name: str,
        creator: SessionContext,
        member_ids: list[UUID] | None = None,
        event_planning_id: UUID | None = None,
    ) -> ChatRoom:
        """Create a room; the creator is always a member."""
        room = ChatRoom(
            name=name,
            event_planning_id=event_planning_id,
            created_by=creator.user_id,
        )
        unique_members = list(dict.fromkeys([creator.user_id, *(member_ids or [])]))

        try:
            self.db.add(room)
            await self.db.flush()
            self.db.add_all(
                ChatRoomMember(room_id=room.room_id, user_id=user_id)
                for user_id in unique_members
            )
            await self.db.commit()
            await self.db.refresh(room)
        except Exception:
            await self.db.rollback()
            logger.exception(f"Failed to create chat room '{name}'")
            raise StorageUnavailableError("ROOM_CREATE_FAILED", "Impossible de créer la conversation.")

        logger.info(f"Chat room created: {room.room_id} with {len(unique_members)} members")
        return room

    async def get_room(self, room_id: UUID) -> ChatRoom | None:
        result = await self.db.execute(select(ChatRoom).where(ChatRoom.room_id == room_id))
        return result.scalar_one_or_none()

    async def list_rooms_for_user(self, user_id: UUID) -> list[ChatRoom]:
        result = await self.db.execute(
            select(ChatRoom)
            .join(ChatRoomMember, ChatRoomMember.room_id == ChatRoom.room_id)
            .where(ChatRoomMember.user_id == user_id)
            .order_by(ChatRoom.created_at.desc())
        )
        return list(result.scalars().all())

    async def is_member(self, room_id: UUID, user_id: UUID) -> bool:
        result = await self.db.execute(
            select(ChatRoomMember.member_id).where(
                ChatRoomMember.room_id == room_id,
                ChatRoomMember.user_id == user_id,
            )
        )
        return result.scalar_one_or_none() is not None

    async def ensure_member(self, room_id: UUID, user_id: UUID) -> None:
        """Raise unless the room exists and the user belongs to it."""
        if await self.get_room(room_id) is None:
            raise NotFoundError("ROOM_NOT_FOUND", "Conversation introuvable.")
        if not await self.is_member(room_id, user_id):
            raise PermissionDeniedError("NOT_ROOM_MEMBER", "Vous ne faites pas partie de cette conversation.")

    async def list_messages(self, room_id: UUID, limit: int = 200) -> list[ChatMessage]:
        """The newest ``limit`` messages of a room, returned oldest first.

        Senders are loaded so responses carry names and avatars.
        """
        result = await self.db.execute(
            select(ChatMessage)
            .options(selectinload(ChatMessage.sender))
            .where(ChatMessage.room_id == room_id)
            .order_by(ChatMessage.created_at.desc(), ChatMessage.message_id.desc())
            .limit(limit)
        )
        return list(reversed(result.scalars().all()))

    async def send_message(
        self,
        room_id: UUID,
        sender: SessionContext,
        message_data: ChatMessageCreate,
    ) -> ChatMessageResponse:
        """Validate, store and broadcast one message.

        Text content that breaks the content policy is rejected before
        anything is written. Non-text messages carry no text content.

        Raises:
            ContentRejectedError: Text content is empty, too long or shares contact details
            StorageUnavailableError: The insert failed
        """
        content = None
        if message_data.message_type == MessageType.TEXT:
            validation = validate_chat_message(
                message_data.content or "", max_length=settings.CHAT_MESSAGE_MAX_LENGTH
            )
            if not validation.is_valid:
                record_chat_message("rejected")
                logger.info(f"Rejected chat message in room {room_id} from {sender.user_id}")
                raise ContentRejectedError("CONTENT_REJECTED", validation.message)
            content = validation.sanitized

        message = ChatMessage(
            room_id=room_id,
            sender_id=sender.user_id,
            content=content,
            message_type=message_data.message_type.value,
            file_url=message_data.file_url,
            file_name=message_data.file_name,
            file_size=message_data.file_size,
            voice_duration=message_data.voice_duration,
            is_read=False,
        )

        try:
            self.db.add(message)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            logger.exception(f"Failed to store chat message in room {room_id}")
            raise StorageUnavailableError("MESSAGE_SEND_FAILED", "Impossible d'envoyer le message.")

        # Re-read with sender metadata for the broadcast
        result = await self.db.execute(
            select(ChatMessage)
            .options(selectinload(ChatMessage.sender))
            .where(ChatMessage.message_id == message.message_id)
        )
        response = to_message_response(result.scalar_one())

        record_chat_message("sent")
        await publish_event(room_topic(room_id), ChatMessageEvent(data=response))
        return response

    async def mark_read(self, room_id: UUID, reader: SessionContext) -> int:
        """Mark messages from other members as read.

        Returns:
            Number of messages updated
        """
        result = await self.db.execute(
            update(ChatMessage)
            .where(
                ChatMessage.room_id == room_id,
                ChatMessage.sender_id != reader.user_id,
                ChatMessage.is_read.is_(False),
            )
            .values(is_read=True)
        )
        await self.db.commit()
        return result.rowcount

    async def count_unread(self, room_id: UUID, reader: SessionContext) -> int:
        result = await self.db.execute(
            select(func.count(ChatMessage.message_id)).where(
                ChatMessage.room_id == room_id,
                ChatMessage.sender_id != reader.user_id,
                ChatMessage.is_read.is_(False),
            )
        )
        return result.scalar_one()
