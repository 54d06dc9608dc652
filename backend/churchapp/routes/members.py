"""
ChurchApp Backend — Member Routes
===================================

Reading the member list needs `members_view` (ADMINGERAL always passes);
creating needs `members_manage`; editing follows the role-based edit rules
in MemberService; deletion is limited to ADMINGERAL and ADMINFILIAL.
"""

from typing import List

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from churchapp.database import get_db_session
from churchapp.dependencies import require_branch, require_permissions, require_roles
from churchapp.models import Role
from churchapp.schemas.auth import CurrentUser
from churchapp.schemas.common import ErrorResponse
from churchapp.schemas.member import MemberCreate, MemberResponse, MemberUpdate
from churchapp.services.member_service import member_service

router = APIRouter(prefix="/members", tags=["Members"])

ERROR_RESPONSES = {
    400: {"description": "Invalid body or no branch", "model": ErrorResponse},
    401: {"description": "Missing or invalid token", "model": ErrorResponse},
    403: {"description": "Not allowed or plan limit reached", "model": ErrorResponse},
    404: {"description": "Member not found", "model": ErrorResponse},
    409: {"description": "Email already in use", "model": ErrorResponse},
}


@router.get(
    "",
    response_model=List[MemberResponse],
    responses=ERROR_RESPONSES,
    dependencies=[Depends(require_permissions("members_view"))],
)
async def list_members(
    user: CurrentUser = Depends(require_branch),
    db: AsyncSession = Depends(get_db_session),
):
    return await member_service.list_members(db, user)


@router.get("/me", response_model=MemberResponse, responses=ERROR_RESPONSES)
async def get_me(
    user: CurrentUser = Depends(require_branch),
    db: AsyncSession = Depends(get_db_session),
):
    return await member_service.get_me(db, user)


@router.get("/{member_id}", response_model=MemberResponse, responses=ERROR_RESPONSES)
async def get_member(
    member_id: str,
    user: CurrentUser = Depends(require_branch),
    db: AsyncSession = Depends(get_db_session),
):
    return await member_service.get_member(db, member_id, user)


@router.post(
    "",
    status_code=201,
    response_model=MemberResponse,
    responses=ERROR_RESPONSES,
    dependencies=[Depends(require_permissions("members_manage"))],
)
async def create_member(
    body: MemberCreate,
    user: CurrentUser = Depends(require_branch),
    db: AsyncSession = Depends(get_db_session),
):
    return await member_service.create_member(db, body, user)


@router.put("/{member_id}", response_model=MemberResponse, responses=ERROR_RESPONSES)
async def update_member(
    member_id: str,
    body: MemberUpdate,
    user: CurrentUser = Depends(require_branch),
    db: AsyncSession = Depends(get_db_session),
):
    return await member_service.update_member(db, member_id, body, user)


@router.delete(
    "/{member_id}",
    status_code=204,
    responses=ERROR_RESPONSES,
    dependencies=[Depends(require_roles(Role.ADMINGERAL, Role.ADMINFILIAL))],
)
async def delete_member(
    member_id: str,
    user: CurrentUser = Depends(require_branch),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await member_service.delete_member(db, member_id, user)
    return Response(status_code=204)
