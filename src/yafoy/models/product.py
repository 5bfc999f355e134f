"""Product model for rentable equipment and services."""

import uuid
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from yafoy.core.database import Base
from yafoy.models.base import TimestampMixin

if TYPE_CHECKING:
    from yafoy.models.user import User


class Product(Base, TimestampMixin):
    """Product offered for rental by a provider."""

    __tablename__ = "products"

    product_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    provider_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.user_id"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    category_name: Mapped[str | None] = mapped_column(
        String(100),
        nullable=True,
    )
    price_per_day: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
    )
    deposit_amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        default=Decimal("0"),
    )
    quantity_available: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=1,
    )
    images: Mapped[list[str]] = mapped_column(
        JSONB,
        nullable=False,
        default=list,
    )
    location: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
    )
    is_verified: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    # Relationships
    provider: Mapped["User"] = relationship("User", back_populates="products")

    __table_args__ = (
        CheckConstraint("price_per_day >= 0", name="chk_product_price_positive"),
        CheckConstraint("quantity_available >= 0", name="chk_product_quantity_positive"),
        Index("idx_products_provider", "provider_id"),
        Index("idx_products_active_verified", "is_active", "is_verified"),
    )
