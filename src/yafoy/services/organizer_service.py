"""Organizer assignment: each client is followed by one organizer."""

import logging
from uuid import UUID

from sqlalchemy import and_, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from yafoy.models.organizer_assignment import OrganizerAssignment
from yafoy.models.user import User, UserRole
from yafoy.schemas.organizer import AssignedOrganizer

logger = logging.getLogger(__name__)

DEFAULT_ORGANIZER_NAME = "Équipe YAFOY"
ACTIVE = "active"


def pick_least_loaded(loads: list[tuple[UUID, int]]) -> UUID | None:
    """Organizer with the fewest active assignments; ties go to the first listed."""
    best: tuple[UUID, int] | None = None
    for organizer_id, load in loads:
        if best is None or load < best[1]:
            best = (organizer_id, load)
    return best[0] if best else None


class OrganizerService:
    """Service class for organizer assignment."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_active_assignment(self, client_id: UUID) -> OrganizerAssignment | None:
        result = await self.db.execute(
            select(OrganizerAssignment).where(
                OrganizerAssignment.client_id == client_id,
                OrganizerAssignment.status == ACTIVE,
            )
        )
        return result.scalar_one_or_none()

    async def get_organizer_loads(self) -> list[tuple[UUID, int]]:
        """Active organizers with their active assignment count, oldest account first."""
        result = await self.db.execute(
            select(User.user_id, func.count(OrganizerAssignment.assignment_id))
            .outerjoin(
                OrganizerAssignment,
                and_(
                    OrganizerAssignment.organizer_id == User.user_id,
                    OrganizerAssignment.status == ACTIVE,
                ),
            )
            .where(User.role == UserRole.ORGANIZER.value, User.status == "active")
            .group_by(User.user_id, User.created_at)
            .order_by(User.created_at.asc())
        )
        return [(row[0], row[1]) for row in result.all()]

    async def assign_organizer(self, client_id: UUID) -> UUID | None:
        """Assign an organizer to a client, or return the existing one.

        Returns:
            The organizer id, or None when no organizer is available
        """
        existing = await self.get_active_assignment(client_id)
        if existing:
            return existing.organizer_id

        organizer_id = pick_least_loaded(await self.get_organizer_loads())
        if organizer_id is None:
            logger.warning(f"No organizer available for client {client_id}")
            return None

        try:
            self.db.add(
                OrganizerAssignment(
                    client_id=client_id,
                    organizer_id=organizer_id,
                    status=ACTIVE,
                )
            )
            await self.db.commit()
        except IntegrityError:
            # A concurrent request assigned this client first
            await self.db.rollback()
            logger.info(f"Concurrent organizer assignment for client {client_id}")
            winner = await self.get_active_assignment(client_id)
            return winner.organizer_id if winner else None

        logger.info(f"Assigned organizer {organizer_id} to client {client_id}")
        return organizer_id

    async def get_assigned_organizer(self, client_id: UUID) -> AssignedOrganizer | None:
        """Public profile of the client's organizer, if any."""
        assignment = await self.get_active_assignment(client_id)
        if assignment is None:
            return None

        result = await self.db.execute(
            select(User.full_name, User.avatar_url).where(User.user_id == assignment.organizer_id)
        )
        row = result.one_or_none()
        full_name, avatar_url = row if row else (None, None)
        return AssignedOrganizer(
            id=assignment.organizer_id,
            name=full_name or DEFAULT_ORGANIZER_NAME,
            avatar=avatar_url,
        )
