"""Order schemas for request/response validation."""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field

from yafoy.models.order import OrderStatus
from yafoy.schemas.pagination import PageMeta


class OrderCreate(BaseModel):
    """Schema for order creation by a client."""

    provider_id: UUID
    total_amount: Decimal = Field(..., ge=0)
    deposit_paid: Decimal = Field(Decimal("0"), ge=0)
    event_date: date | None = None
    event_location: str | None = Field(None, max_length=255)
    notes: str | None = None


class OrderAction(BaseModel):
    """A status transition control offered to the fulfilling party."""

    target: OrderStatus
    label: str
    requires_confirmation: bool = False


class OrderResponse(BaseModel):
    """Schema for order response."""

    order_id: UUID
    client_id: UUID
    provider_id: UUID
    total_amount: Decimal
    deposit_paid: Decimal
    event_date: date | None
    event_location: str | None
    notes: str | None
    status: OrderStatus
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class OrderDetailResponse(OrderResponse):
    """Order with the transitions available to the caller."""

    available_actions: list[OrderAction] = []


class OrderListResponse(BaseModel):
    """Schema for order list response."""

    orders: list[OrderResponse]
    page: PageMeta


class OrderStatusUpdate(BaseModel):
    """Request body for an immediate status transition."""

    status: OrderStatus


class OrderTransitionResponse(BaseModel):
    """Outcome of a successful transition."""

    order_id: UUID
    status: OrderStatus
    message: str


class CancellationRequestResponse(BaseModel):
    """First step of a cancellation: the token to confirm with."""

    order_id: UUID
    token: str
    expires_in: int
    message: str


class CancellationConfirm(BaseModel):
    token: str = Field(..., min_length=1)
