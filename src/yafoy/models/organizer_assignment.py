"""Assignment of an organizer to a client."""

import uuid

from sqlalchemy import ForeignKey, Index, String, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from yafoy.core.database import Base
from yafoy.models.base import CreatedAtMixin


class OrganizerAssignment(Base, CreatedAtMixin):
    """Links a client to the organizer following their events."""

    __tablename__ = "client_organizer_assignments"

    assignment_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    client_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.user_id"),
        nullable=False,
    )
    organizer_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.user_id"),
        nullable=False,
    )
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="active",
    )

    __table_args__ = (
        # At most one active assignment per client
        Index(
            "uq_assignment_active_client",
            "client_id",
            unique=True,
            postgresql_where=text("status = 'active'"),
        ),
        Index("idx_assignments_organizer_status", "organizer_id", "status"),
    )
