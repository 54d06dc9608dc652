"""
ChurchApp Backend — Platform Admin Routes
===========================================

What:  Admin login and the operator listings under /admin.

Gates (churchapp.dependencies.admin_guard):
    no admin principal            -> 401, role never evaluated
    role not in the route's list  -> 403
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from churchapp.database import get_db_session
from churchapp.dependencies import admin_guard
from churchapp.models import AdminRole, AdminUser
from churchapp.schemas.admin import AdminChurchListItem, AdminUserListItem
from churchapp.schemas.auth import AdminLoginRequest, AdminLoginResponse, AdminView
from churchapp.schemas.common import ErrorResponse
from churchapp.services.admin_auth_service import admin_auth_service
from churchapp.services.admin_service import admin_service

router = APIRouter(prefix="/admin", tags=["Admin"])

GATE_RESPONSES = {
    401: {"description": "No admin principal", "model": ErrorResponse},
    403: {"description": "Admin role not allowed", "model": ErrorResponse},
}


@router.post(
    "/auth/login",
    response_model=AdminLoginResponse,
    responses={401: {"description": "Invalid credentials", "model": ErrorResponse}},
    summary="Platform admin login",
)
async def admin_login(
    body: AdminLoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> AdminLoginResponse:
    return await admin_auth_service.login(db, body.email, body.password)


@router.get("/auth/me", response_model=AdminView, responses=GATE_RESPONSES)
async def admin_me(admin: AdminUser = Depends(admin_guard())) -> AdminUser:
    return admin


@router.get(
    "/users",
    response_model=List[AdminUserListItem],
    responses=GATE_RESPONSES,
    summary="All platform users with their plan",
)
async def list_users(
    _admin: AdminUser = Depends(admin_guard(AdminRole.SUPERADMIN, AdminRole.SUPPORT)),
    db: AsyncSession = Depends(get_db_session),
) -> List[AdminUserListItem]:
    return await admin_service.list_users(db)


@router.get(
    "/churches",
    response_model=List[AdminChurchListItem],
    responses=GATE_RESPONSES,
    summary="All churches with branch counts",
)
async def list_churches(
    _admin: AdminUser = Depends(
        admin_guard(AdminRole.SUPERADMIN, AdminRole.SUPPORT, AdminRole.FINANCE)
    ),
    db: AsyncSession = Depends(get_db_session),
) -> List[AdminChurchListItem]:
    return await admin_service.list_churches(db)
