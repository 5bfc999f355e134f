"""Chat room, membership and message models."""

import enum
import uuid
from typing import TYPE_CHECKING, List

from sqlalchemy import BigInteger, Boolean, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from yafoy.core.database import Base
from yafoy.models.base import CreatedAtMixin

if TYPE_CHECKING:
    from yafoy.models.user import User


class MessageType(str, enum.Enum):
    TEXT = "text"
    IMAGE = "image"
    FILE = "file"
    VOICE = "voice"


class ChatRoom(Base, CreatedAtMixin):
    """Conversation scoped to an event-planning context."""

    __tablename__ = "chat_rooms"

    room_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    event_planning_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        nullable=True,
    )
    created_by: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.user_id"),
        nullable=False,
    )

    # Relationships
    members: Mapped[List["ChatRoomMember"]] = relationship(
        "ChatRoomMember", back_populates="room"
    )
    messages: Mapped[List["ChatMessage"]] = relationship(
        "ChatMessage", back_populates="room"
    )


class ChatRoomMember(Base):
    """Membership of a user in a chat room."""

    __tablename__ = "chat_room_members"

    member_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    room_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("chat_rooms.room_id"),
        nullable=False,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.user_id"),
        nullable=False,
    )

    room: Mapped["ChatRoom"] = relationship("ChatRoom", back_populates="members")

    __table_args__ = (
        UniqueConstraint("room_id", "user_id", name="uq_chat_room_member"),
    )


class ChatMessage(Base, CreatedAtMixin):
    """Single message in a room. Immutable except for ``is_read``."""

    __tablename__ = "chat_messages"

    message_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    room_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("chat_rooms.room_id"),
        nullable=False,
    )
    sender_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.user_id"),
        nullable=False,
    )
    content: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    message_type: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        default=MessageType.TEXT.value,
    )
    file_url: Mapped[str | None] = mapped_column(
        String(500),
        nullable=True,
    )
    file_name: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )
    file_size: Mapped[int | None] = mapped_column(
        BigInteger,
        nullable=True,
    )
    voice_duration: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
    )
    is_read: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    # Relationships
    room: Mapped["ChatRoom"] = relationship("ChatRoom", back_populates="messages")
    sender: Mapped["User"] = relationship("User")

    __table_args__ = (
        Index("idx_chat_messages_room_created", "room_id", "created_at"),
    )
