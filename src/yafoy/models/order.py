"""Order model for rental agreements."""

import enum
import uuid
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, Numeric, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from yafoy.core.database import Base
from yafoy.models.base import TimestampMixin

if TYPE_CHECKING:
    from yafoy.models.user import User


class OrderStatus(str, enum.Enum):
    """Lifecycle states of a rental order."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Order(Base, TimestampMixin):
    """Order between a requesting client and a fulfilling provider."""

    __tablename__ = "orders"

    order_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    client_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.user_id"),
        nullable=False,
    )
    provider_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.user_id"),
        nullable=False,
    )
    total_amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        default=Decimal("0"),
    )
    deposit_paid: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        default=Decimal("0"),
    )
    event_date: Mapped[date | None] = mapped_column(
        Date,
        nullable=True,
    )
    event_location: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )
    notes: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=OrderStatus.PENDING.value,
    )

    # Relationships
    client: Mapped["User"] = relationship("User", foreign_keys=[client_id])
    provider: Mapped["User"] = relationship("User", foreign_keys=[provider_id])

    __table_args__ = (
        CheckConstraint("total_amount >= 0", name="chk_order_total_positive"),
        CheckConstraint("deposit_paid >= 0", name="chk_order_deposit_positive"),
        Index("idx_orders_client_created", "client_id", "created_at"),
        Index("idx_orders_provider_created", "provider_id", "created_at"),
        Index("idx_orders_status", "status"),
    )
