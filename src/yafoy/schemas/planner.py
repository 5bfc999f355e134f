"""Event planner assistant schemas."""

from typing import Literal

from pydantic import BaseModel, Field


class PlannerMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class EventContext(BaseModel):
    event_type: str | None = None
    budget_min: float | None = None
    budget_max: float | None = None
    guest_count: int | None = None
    event_date: str | None = None
    event_location: str | None = None
    services_needed: list[str] = []


class PlannerChatRequest(BaseModel):
    messages: list[PlannerMessage] = Field(..., min_length=1)
    event_context: EventContext | None = None
