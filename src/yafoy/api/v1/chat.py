"""Chat API endpoints: rooms, messages and attachments."""

import time
from pathlib import PurePosixPath
from uuid import UUID

from fastapi import APIRouter, Query, UploadFile, status

from yafoy.api.deps import CurrentSession, DbSession, StorageServiceDep, http_error
from yafoy.core.exceptions import ServiceError
from yafoy.schemas.chat import (
    ChatMessageCreate,
    ChatMessageListResponse,
    ChatMessageResponse,
    ChatRoomCreate,
    ChatRoomResponse,
    UploadResponse,
)
from yafoy.services.chat_service import ChatService, to_message_response
from yafoy.services.storage_service import CHAT_FILES_BUCKET, read_limited

router = APIRouter()


@router.post("/rooms", response_model=ChatRoomResponse, status_code=status.HTTP_201_CREATED)
async def create_room(room_data: ChatRoomCreate, db: DbSession, session: CurrentSession):
    """Create a room with the caller and the given members."""
    try:
        return await ChatService(db).create_room(
            name=room_data.name,
            creator=session,
            member_ids=room_data.member_ids,
            event_planning_id=room_data.event_planning_id,
        )
    except ServiceError as e:
        raise http_error(e)


@router.get("/rooms", response_model=list[ChatRoomResponse])
async def list_rooms(db: DbSession, session: CurrentSession):
    return await ChatService(db).list_rooms_for_user(session.user_id)


@router.get("/rooms/{room_id}/messages", response_model=ChatMessageListResponse)
async def list_messages(
    room_id: UUID,
    db: DbSession,
    session: CurrentSession,
    limit: int = Query(200, ge=1, le=500),
):
    """The latest messages of a room, oldest first, with sender names and avatars."""
    service = ChatService(db)
    try:
        await service.ensure_member(room_id, session.user_id)
    except ServiceError as e:
        raise http_error(e)

    messages = await service.list_messages(room_id, limit=limit)
    return ChatMessageListResponse(
        messages=[to_message_response(m) for m in messages],
        total=len(messages),
    )


@router.post(
    "/rooms/{room_id}/messages",
    response_model=ChatMessageResponse,
    status_code=status.HTTP_201_CREATED,
)
async def send_message(
    room_id: UUID,
    message_data: ChatMessageCreate,
    db: DbSession,
    session: CurrentSession,
):
    """Send a message to a room.

    Raises:
        403: Caller is not a member of the room
        422: Text is empty, too long or shares contact details
        503: The message could not be stored
    """
    service = ChatService(db)
    try:
        await service.ensure_member(room_id, session.user_id)
        return await service.send_message(room_id, session, message_data)
    except ServiceError as e:
        raise http_error(e)


@router.post("/rooms/{room_id}/read")
async def mark_room_read(room_id: UUID, db: DbSession, session: CurrentSession):
    service = ChatService(db)
    try:
        await service.ensure_member(room_id, session.user_id)
    except ServiceError as e:
        raise http_error(e)
    updated = await service.mark_read(room_id, session)
    return {"updated": updated}


@router.post("/rooms/{room_id}/files", response_model=UploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_file(
    room_id: UUID,
    file: UploadFile,
    db: DbSession,
    storage: StorageServiceDep,
    session: CurrentSession,
):
    """Upload an attachment; the returned URL goes into a file, image or voice message."""
    try:
        await ChatService(db).ensure_member(room_id, session.user_id)
    except ServiceError as e:
        raise http_error(e)

    try:
        data = await read_limited(file)
    except ServiceError as e:
        raise http_error(e)

    file_name = file.filename or "fichier"
    extension = PurePosixPath(file_name).suffix.lstrip(".") or "bin"
    path = f"{session.user_id}/{int(time.time() * 1000)}.{extension}"

    try:
        stored = await storage.upload(CHAT_FILES_BUCKET, path, data)
    except ServiceError as e:
        raise http_error(e)

    return UploadResponse(
        file_url=storage.public_url(CHAT_FILES_BUCKET, stored),
        file_name=file_name,
        file_size=len(data),
    )
