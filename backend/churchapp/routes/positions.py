"""
ChurchApp Backend — Position Routes
=====================================

What:  Church positions under /positions, scoped to the caller's church.
How:   Listing seeds the default positions first, so a church always sees
       the six defaults. Writes are ADMINGERAL-only; a position of another
       church is reported as not found.
"""

from typing import List

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from churchapp.database import get_db_session
from churchapp.dependencies import require_branch, require_roles
from churchapp.exceptions import NotFoundError
from churchapp.models import ChurchPosition, Role
from churchapp.schemas.auth import CurrentUser
from churchapp.schemas.common import ErrorResponse
from churchapp.schemas.position import PositionResponse, PositionWrite
from churchapp.services.position_service import position_service

router = APIRouter(prefix="/positions", tags=["Positions"])

ERROR_RESPONSES = {
    401: {"description": "Missing or invalid token", "model": ErrorResponse},
    403: {"description": "Only ADMINGERAL may change positions", "model": ErrorResponse},
    404: {"description": "Position not found", "model": ErrorResponse},
    409: {"description": "Default or referenced position", "model": ErrorResponse},
}


async def _own_position(db: AsyncSession, position_id: str, user: CurrentUser) -> ChurchPosition:
    position = await position_service.get_position(db, position_id)
    if position.church_id != user.church_id:
        raise NotFoundError(message="Cargo não encontrado", resource="position", resource_id=position_id)
    return position


@router.get("", response_model=List[PositionResponse], responses=ERROR_RESPONSES)
async def list_positions(
    user: CurrentUser = Depends(require_branch),
    db: AsyncSession = Depends(get_db_session),
) -> List[PositionResponse]:
    await position_service.ensure_default_positions(db, user.church_id)
    return await position_service.list_positions(db, user.church_id)


@router.post(
    "",
    status_code=201,
    response_model=PositionResponse,
    responses=ERROR_RESPONSES,
    dependencies=[Depends(require_roles(Role.ADMINGERAL))],
)
async def create_position(
    body: PositionWrite,
    user: CurrentUser = Depends(require_branch),
    db: AsyncSession = Depends(get_db_session),
):
    return await position_service.create_position(db, user.church_id, body.name)


@router.put(
    "/{position_id}",
    response_model=PositionResponse,
    responses=ERROR_RESPONSES,
    dependencies=[Depends(require_roles(Role.ADMINGERAL))],
)
async def update_position(
    position_id: str,
    body: PositionWrite,
    user: CurrentUser = Depends(require_branch),
    db: AsyncSession = Depends(get_db_session),
):
    await _own_position(db, position_id, user)
    return await position_service.update_position(db, position_id, body.name)


@router.delete(
    "/{position_id}",
    status_code=204,
    responses=ERROR_RESPONSES,
    dependencies=[Depends(require_roles(Role.ADMINGERAL))],
)
async def delete_position(
    position_id: str,
    user: CurrentUser = Depends(require_branch),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await _own_position(db, position_id, user)
    await position_service.delete_position(db, position_id)
    return Response(status_code=204)
