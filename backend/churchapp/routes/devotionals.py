"""
ChurchApp Backend — Devotional Routes
=======================================

Everyone in the branch reads and likes devotionals; publishing needs
`devotional_manage`; editing and deleting are limited to the author and
branch administrators (checked in DevotionalService).
"""

from typing import List

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from churchapp.database import get_db_session
from churchapp.dependencies import require_branch, require_permissions
from churchapp.schemas.auth import CurrentUser
from churchapp.schemas.common import ErrorResponse
from churchapp.schemas.ministry import DevotionalCreate, DevotionalResponse, DevotionalUpdate
from churchapp.services.devotional_service import devotional_service

router = APIRouter(prefix="/devotionals", tags=["Devotionals"])

ERROR_RESPONSES = {
    400: {"description": "Invalid body or no branch", "model": ErrorResponse},
    401: {"description": "Missing or invalid token", "model": ErrorResponse},
    403: {"description": "Not allowed", "model": ErrorResponse},
    404: {"description": "Devotional not found", "model": ErrorResponse},
}


@router.get("", response_model=List[DevotionalResponse], responses=ERROR_RESPONSES)
async def list_devotionals(
    user: CurrentUser = Depends(require_branch),
    db: AsyncSession = Depends(get_db_session),
) -> List[DevotionalResponse]:
    return await devotional_service.list_devotionals(db, user)


@router.get("/{devotional_id}", response_model=DevotionalResponse, responses=ERROR_RESPONSES)
async def get_devotional(
    devotional_id: str,
    user: CurrentUser = Depends(require_branch),
    db: AsyncSession = Depends(get_db_session),
) -> DevotionalResponse:
    return await devotional_service.get_devotional(db, devotional_id, user)


@router.post(
    "",
    status_code=201,
    response_model=DevotionalResponse,
    responses=ERROR_RESPONSES,
    dependencies=[Depends(require_permissions("devotional_manage"))],
)
async def create_devotional(
    body: DevotionalCreate,
    user: CurrentUser = Depends(require_branch),
    db: AsyncSession = Depends(get_db_session),
) -> DevotionalResponse:
    return await devotional_service.create_devotional(db, body, user)


@router.post("/{devotional_id}/like", response_model=DevotionalResponse, responses=ERROR_RESPONSES)
async def like_devotional(
    devotional_id: str,
    user: CurrentUser = Depends(require_branch),
    db: AsyncSession = Depends(get_db_session),
) -> DevotionalResponse:
    return await devotional_service.like(db, devotional_id, user)


@router.delete(
    "/{devotional_id}/unlike", response_model=DevotionalResponse, responses=ERROR_RESPONSES
)
async def unlike_devotional(
    devotional_id: str,
    user: CurrentUser = Depends(require_branch),
    db: AsyncSession = Depends(get_db_session),
) -> DevotionalResponse:
    return await devotional_service.unlike(db, devotional_id, user)


@router.put("/{devotional_id}", response_model=DevotionalResponse, responses=ERROR_RESPONSES)
async def update_devotional(
    devotional_id: str,
    body: DevotionalUpdate,
    user: CurrentUser = Depends(require_branch),
    db: AsyncSession = Depends(get_db_session),
) -> DevotionalResponse:
    return await devotional_service.update_devotional(db, devotional_id, body, user)


@router.delete("/{devotional_id}", status_code=204, responses=ERROR_RESPONSES)
async def delete_devotional(
    devotional_id: str,
    user: CurrentUser = Depends(require_branch),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await devotional_service.delete_devotional(db, devotional_id, user)
    return Response(status_code=204)
