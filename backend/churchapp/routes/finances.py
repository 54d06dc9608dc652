"""
ChurchApp Backend — Finance Routes
====================================

What:  The branch ledger under /finances. Reads need a branch-bound member;
       writes additionally need a management role and `finances_manage`.
"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from churchapp.database import get_db_session
from churchapp.dependencies import require_branch, require_permissions, require_roles
from churchapp.models import Role
from churchapp.schemas.auth import CurrentUser
from churchapp.schemas.common import ErrorResponse
from churchapp.schemas.finance import (
    FinanceOverview,
    TransactionCreate,
    TransactionResponse,
    TransactionUpdate,
)
from churchapp.services.finance_service import finance_service

router = APIRouter(prefix="/finances", tags=["Finances"])

WRITE_GATES = [
    Depends(require_roles(Role.ADMINGERAL, Role.ADMINFILIAL, Role.COORDINATOR)),
    Depends(require_permissions("finances_manage")),
]
ERROR_RESPONSES = {
    400: {"description": "Invalid body or no branch", "model": ErrorResponse},
    401: {"description": "Missing or invalid token", "model": ErrorResponse},
    403: {"description": "Role or permission missing", "model": ErrorResponse},
    404: {"description": "Transaction not found", "model": ErrorResponse},
}


@router.get(
    "",
    response_model=FinanceOverview,
    responses=ERROR_RESPONSES,
    summary="Branch transactions with entries/exits/total summary",
)
async def get_finances(
    user: CurrentUser = Depends(require_branch),
    db: AsyncSession = Depends(get_db_session),
) -> FinanceOverview:
    return await finance_service.get_by_branch_with_summary(db, user.branch_id)


@router.post(
    "",
    status_code=201,
    response_model=TransactionResponse,
    responses=ERROR_RESPONSES,
    dependencies=WRITE_GATES,
    summary="Record an entry or exit",
)
async def create_transaction(
    body: TransactionCreate,
    user: CurrentUser = Depends(require_branch),
    db: AsyncSession = Depends(get_db_session),
):
    return await finance_service.create(db, user.branch_id, body, created_by=user.sub)


@router.get("/{transaction_id}", response_model=TransactionResponse, responses=ERROR_RESPONSES)
async def get_transaction(
    transaction_id: str,
    user: CurrentUser = Depends(require_branch),
    db: AsyncSession = Depends(get_db_session),
):
    return await finance_service.get_by_id(db, transaction_id, user.branch_id)


@router.put(
    "/{transaction_id}",
    response_model=TransactionResponse,
    responses=ERROR_RESPONSES,
    dependencies=WRITE_GATES,
)
async def update_transaction(
    transaction_id: str,
    body: TransactionUpdate,
    user: CurrentUser = Depends(require_branch),
    db: AsyncSession = Depends(get_db_session),
):
    return await finance_service.update(db, transaction_id, user.branch_id, body)


@router.delete(
    "/{transaction_id}",
    status_code=204,
    responses=ERROR_RESPONSES,
    dependencies=WRITE_GATES,
)
async def delete_transaction(
    transaction_id: str,
    user: CurrentUser = Depends(require_branch),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await finance_service.delete(db, transaction_id, user.branch_id)
    return Response(status_code=204)
