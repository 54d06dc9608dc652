"""
ChurchApp Backend — Branch Routes
===================================

    POST   /branches                  create a branch (201)
    GET    /branches/branches         branches of the caller's church, each
                                      with its church embedded
    GET    /branches/branches/{id}    one branch or 404
    DELETE /branches/{id}             delete a non-main branch (204)

The doubled /branches/branches paths are what the shipped web and mobile
clients call.
"""

from typing import List

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from churchapp.database import get_db_session
from churchapp.dependencies import authenticate, require_roles
from churchapp.exceptions import NotFoundError
from churchapp.models import Role
from churchapp.schemas.auth import CurrentUser
from churchapp.schemas.church import BranchCreate, BranchResponse, BranchWithChurch
from churchapp.schemas.common import ErrorResponse
from churchapp.services.branch_service import branch_service

router = APIRouter(prefix="/branches", tags=["Branches"])

ERROR_RESPONSES = {
    401: {"description": "Missing or invalid token", "model": ErrorResponse},
    403: {"description": "Not allowed or plan limit reached", "model": ErrorResponse},
    404: {"description": "Branch or church not found", "model": ErrorResponse},
    409: {"description": "Main branch cannot be deleted", "model": ErrorResponse},
}


@router.post("", status_code=201, response_model=BranchResponse, responses=ERROR_RESPONSES)
async def create_branch(
    body: BranchCreate,
    user: CurrentUser = Depends(authenticate),
    db: AsyncSession = Depends(get_db_session),
):
    return await branch_service.create_branch(db, body, user)


@router.get("/branches", response_model=List[BranchWithChurch], responses=ERROR_RESPONSES)
async def list_branches(
    user: CurrentUser = Depends(authenticate),
    db: AsyncSession = Depends(get_db_session),
):
    if not user.church_id:
        return []
    return await branch_service.list_branches(db, user.church_id)


@router.get("/branches/{branch_id}", response_model=BranchWithChurch, responses=ERROR_RESPONSES)
async def get_branch(
    branch_id: str,
    user: CurrentUser = Depends(authenticate),
    db: AsyncSession = Depends(get_db_session),
):
    branch = await branch_service.get_branch(db, branch_id)
    if branch.church_id != user.church_id:
        raise NotFoundError(message="Filial não encontrada", resource="branch", resource_id=branch_id)
    return branch


@router.delete(
    "/{branch_id}",
    status_code=204,
    responses=ERROR_RESPONSES,
    dependencies=[Depends(require_roles(Role.ADMINGERAL))],
)
async def delete_branch(
    branch_id: str,
    user: CurrentUser = Depends(authenticate),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    branch = await branch_service.get_branch(db, branch_id)
    if branch.church_id != user.church_id:
        raise NotFoundError(message="Filial não encontrada", resource="branch", resource_id=branch_id)
    await branch_service.delete_branch(db, branch_id)
    return Response(status_code=204)
