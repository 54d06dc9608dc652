"""
ChurchApp Backend — Event Routes
==================================

Agenda of the caller's branch. GET /events/next returns the first event
starting now or later, or null when nothing is scheduled.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from churchapp.database import get_db_session
from churchapp.dependencies import require_branch, require_permissions, require_roles
from churchapp.models import Role
from churchapp.schemas.auth import CurrentUser
from churchapp.schemas.common import ErrorResponse
from churchapp.schemas.ministry import EventCreate, EventResponse, EventUpdate
from churchapp.services.event_service import event_service

router = APIRouter(prefix="/events", tags=["Events"])

WRITE_GATES = [
    Depends(require_roles(Role.ADMINGERAL, Role.ADMINFILIAL, Role.COORDINATOR)),
    Depends(require_permissions("events_manage")),
]
ERROR_RESPONSES = {
    400: {"description": "Invalid body or no branch", "model": ErrorResponse},
    401: {"description": "Missing or invalid token", "model": ErrorResponse},
    403: {"description": "Role or permission missing", "model": ErrorResponse},
    404: {"description": "Event not found", "model": ErrorResponse},
}


@router.get("", response_model=List[EventResponse], responses=ERROR_RESPONSES)
async def list_events(
    user: CurrentUser = Depends(require_branch),
    db: AsyncSession = Depends(get_db_session),
):
    return await event_service.list_events(db, user.branch_id)


@router.get("/next", response_model=Optional[EventResponse], responses=ERROR_RESPONSES)
async def next_event(
    user: CurrentUser = Depends(require_branch),
    db: AsyncSession = Depends(get_db_session),
):
    return await event_service.next_event(db, user.branch_id)


@router.get("/{event_id}", response_model=EventResponse, responses=ERROR_RESPONSES)
async def get_event(
    event_id: str,
    user: CurrentUser = Depends(require_branch),
    db: AsyncSession = Depends(get_db_session),
):
    return await event_service.get_event(db, event_id, user.branch_id)


@router.post(
    "",
    status_code=201,
    response_model=EventResponse,
    responses=ERROR_RESPONSES,
    dependencies=WRITE_GATES,
)
async def create_event(
    body: EventCreate,
    user: CurrentUser = Depends(require_branch),
    db: AsyncSession = Depends(get_db_session),
):
    return await event_service.create_event(db, user.branch_id, body)


@router.put(
    "/{event_id}",
    response_model=EventResponse,
    responses=ERROR_RESPONSES,
    dependencies=WRITE_GATES,
)
async def update_event(
    event_id: str,
    body: EventUpdate,
    user: CurrentUser = Depends(require_branch),
    db: AsyncSession = Depends(get_db_session),
):
    return await event_service.update_event(db, event_id, user.branch_id, body)


@router.delete(
    "/{event_id}",
    status_code=204,
    responses=ERROR_RESPONSES,
    dependencies=WRITE_GATES,
)
async def delete_event(
    event_id: str,
    user: CurrentUser = Depends(require_branch),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await event_service.delete_event(db, event_id, user.branch_id)
    return Response(status_code=204)
