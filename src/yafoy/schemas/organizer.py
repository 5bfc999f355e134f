"""Organizer assignment schemas."""

from uuid import UUID

from pydantic import BaseModel


class AssignedOrganizer(BaseModel):
    id: UUID
    name: str
    avatar: str | None = None
