"""Contribution campaign routes (/contributions) for the caller's branch."""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from churchapp.database import get_db_session
from churchapp.dependencies import require_branch, require_permissions
from churchapp.schemas.auth import CurrentUser
from churchapp.schemas.common import ErrorResponse
from churchapp.schemas.ministry import ContributionCreate, ContributionResponse
from churchapp.services.contribution_service import contribution_service

router = APIRouter(prefix="/contributions", tags=["Contributions"])

ERROR_RESPONSES = {
    400: {"description": "Invalid body or no branch", "model": ErrorResponse},
    401: {"description": "Missing or invalid token", "model": ErrorResponse},
    403: {"description": "Permission contributions_manage missing", "model": ErrorResponse},
    404: {"description": "Contribution not found", "model": ErrorResponse},
}


@router.get("", response_model=List[ContributionResponse], responses=ERROR_RESPONSES)
async def list_contributions(
    user: CurrentUser = Depends(require_branch),
    db: AsyncSession = Depends(get_db_session),
):
    return await contribution_service.list_contributions(db, user.branch_id)


@router.get("/{contribution_id}", response_model=ContributionResponse, responses=ERROR_RESPONSES)
async def get_contribution(
    contribution_id: str,
    user: CurrentUser = Depends(require_branch),
    db: AsyncSession = Depends(get_db_session),
):
    return await contribution_service.get_contribution(db, contribution_id, user.branch_id)


@router.post(
    "",
    status_code=201,
    response_model=ContributionResponse,
    responses=ERROR_RESPONSES,
    dependencies=[Depends(require_permissions("contributions_manage"))],
)
async def create_contribution(
    body: ContributionCreate,
    user: CurrentUser = Depends(require_branch),
    db: AsyncSession = Depends(get_db_session),
):
    return await contribution_service.create_contribution(db, user.branch_id, body)


@router.patch(
    "/{contribution_id}/toggle",
    response_model=ContributionResponse,
    responses=ERROR_RESPONSES,
    dependencies=[Depends(require_permissions("contributions_manage"))],
    summary="Activate or deactivate a campaign",
)
async def toggle_contribution(
    contribution_id: str,
    user: CurrentUser = Depends(require_branch),
    db: AsyncSession = Depends(get_db_session),
):
    return await contribution_service.toggle_active(db, contribution_id, user.branch_id)
