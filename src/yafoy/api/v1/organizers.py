"""Organizer assignment API endpoints."""

from fastapi import APIRouter, HTTPException, status

from yafoy.api.deps import CurrentSession, DbSession
from yafoy.schemas.organizer import AssignedOrganizer
from yafoy.services.organizer_service import OrganizerService

router = APIRouter()


@router.post("/assignment", response_model=AssignedOrganizer)
async def assign_organizer(db: DbSession, session: CurrentSession):
    """Assign an organizer to the calling client, or return the current one.

    Raises:
        503: No organizer is available
    """
    service = OrganizerService(db)
    organizer_id = await service.assign_organizer(session.user_id)
    if organizer_id is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"code": "NO_ORGANIZER", "message": "Aucun organisateur disponible pour le moment."},
        )
    return await service.get_assigned_organizer(session.user_id)


@router.get("/assignment", response_model=AssignedOrganizer)
async def get_assigned_organizer(db: DbSession, session: CurrentSession):
    organizer = await OrganizerService(db).get_assigned_organizer(session.user_id)
    if organizer is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"code": "NOT_ASSIGNED", "message": "Aucun organisateur assigné."},
        )
    return organizer
