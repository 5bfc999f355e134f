"""Chat schemas for request/response validation."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from yafoy.models.chat import MessageType


class ChatRoomCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    event_planning_id: UUID | None = None
    member_ids: list[UUID] = []


class ChatRoomResponse(BaseModel):
    room_id: UUID
    name: str
    event_planning_id: UUID | None
    created_by: UUID
    created_at: datetime

    model_config = {"from_attributes": True}


class SenderInfo(BaseModel):
    full_name: str | None = None
    avatar_url: str | None = None

    model_config = {"from_attributes": True}


class ChatMessageCreate(BaseModel):
    """Schema for sending a message. Text messages require ``content``."""

    content: str | None = None
    message_type: MessageType = MessageType.TEXT
    file_url: str | None = Field(None, max_length=500)
    file_name: str | None = Field(None, max_length=255)
    file_size: int | None = Field(None, ge=0)
    voice_duration: int | None = Field(None, ge=0)


class ChatMessageResponse(BaseModel):
    message_id: UUID
    room_id: UUID
    sender_id: UUID
    content: str | None
    message_type: MessageType
    file_url: str | None
    file_name: str | None
    file_size: int | None
    voice_duration: int | None
    is_read: bool
    created_at: datetime
    sender: SenderInfo | None = None

    model_config = {"from_attributes": True}


class ChatMessageListResponse(BaseModel):
    messages: list[ChatMessageResponse]
    total: int


class UploadResponse(BaseModel):
    file_url: str
    file_name: str
    file_size: int
