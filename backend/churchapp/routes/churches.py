"""
ChurchApp Backend — Church Routes
===================================

    POST /churches        onboarding: church + main branch + ADMINGERAL member
    GET  /churches        churches visible to the caller
    GET  /churches/{id}   one church with its branches
    PUT  /churches/{id}   settings update (the church's ADMINGERAL only)

After onboarding the caller's token still carries the old (empty) member
claims; clients log in again to pick up the new role and branch.
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from churchapp.database import get_db_session
from churchapp.dependencies import authenticate
from churchapp.schemas.auth import CurrentUser
from churchapp.schemas.church import (
    ChurchCreate,
    ChurchCreateResponse,
    ChurchResponse,
    ChurchUpdate,
)
from churchapp.schemas.common import ErrorResponse
from churchapp.services.church_service import church_service

router = APIRouter(prefix="/churches", tags=["Churches"])

ERROR_RESPONSES = {
    401: {"description": "Missing or invalid token", "model": ErrorResponse},
    403: {"description": "Not the caller's church", "model": ErrorResponse},
    404: {"description": "Church not found", "model": ErrorResponse},
}


@router.post(
    "",
    status_code=201,
    response_model=ChurchCreateResponse,
    responses=ERROR_RESPONSES,
    summary="Create a church with its main branch",
)
async def create_church(
    body: ChurchCreate,
    user: CurrentUser = Depends(authenticate),
    db: AsyncSession = Depends(get_db_session),
) -> ChurchCreateResponse:
    return await church_service.create_church_with_main_branch(db, body, user.sub)


@router.get("", response_model=List[ChurchResponse], responses=ERROR_RESPONSES)
async def list_churches(
    user: CurrentUser = Depends(authenticate),
    db: AsyncSession = Depends(get_db_session),
):
    return await church_service.list_for_user(db, user)


@router.get("/{church_id}", response_model=ChurchResponse, responses=ERROR_RESPONSES)
async def get_church(
    church_id: str,
    user: CurrentUser = Depends(authenticate),
    db: AsyncSession = Depends(get_db_session),
):
    church = await church_service.get_church(db, church_id)
    church_service.ensure_access(church, user)
    return church


@router.put("/{church_id}", response_model=ChurchResponse, responses=ERROR_RESPONSES)
async def update_church(
    church_id: str,
    body: ChurchUpdate,
    user: CurrentUser = Depends(authenticate),
    db: AsyncSession = Depends(get_db_session),
):
    return await church_service.update_church(db, church_id, body, user)
