"""
ChurchApp Backend — Permission Routes
=======================================

    GET    /permissions              catalog of known permission types
    GET    /permissions/{member_id}  the member's permission types
    POST   /permissions/{member_id}  grant (idempotent)  -> {success, added}
    DELETE /permissions/{member_id}  revoke              -> {success, removed}

Grant and revoke are limited to ADMINGERAL and ADMINFILIAL, and only for
members of the caller's own church.
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from churchapp.database import get_db_session
from churchapp.dependencies import authenticate, require_roles
from churchapp.models import Role
from churchapp.schemas.auth import CurrentUser
from churchapp.schemas.common import ErrorResponse
from churchapp.schemas.permission import (
    PermissionAssignRequest,
    PermissionAssignResponse,
    PermissionRevokeResponse,
    PermissionView,
)
from churchapp.services.member_service import member_service
from churchapp.services.permission_service import permission_service

router = APIRouter(prefix="/permissions", tags=["Permissions"])

MANAGERS = (Role.ADMINGERAL, Role.ADMINFILIAL)
ERROR_RESPONSES = {
    401: {"description": "Missing or invalid token", "model": ErrorResponse},
    403: {"description": "Role not allowed", "model": ErrorResponse},
    404: {"description": "Member not found", "model": ErrorResponse},
}


@router.get("", response_model=List[PermissionView], summary="List permission types")
async def list_permission_types(
    _user: CurrentUser = Depends(authenticate),
    db: AsyncSession = Depends(get_db_session),
) -> List[PermissionView]:
    types = await permission_service.list_permission_types(db)
    return [PermissionView(type=t) for t in types]


@router.get(
    "/{member_id}",
    response_model=List[PermissionView],
    responses=ERROR_RESPONSES,
    summary="List a member's permissions",
)
async def list_member_permissions(
    member_id: str,
    user: CurrentUser = Depends(authenticate),
    db: AsyncSession = Depends(get_db_session),
) -> List[PermissionView]:
    await member_service.get_member(db, member_id, user)
    types = await permission_service.list_member_permissions(db, member_id)
    return [PermissionView(type=t) for t in types]


@router.post(
    "/{member_id}",
    response_model=PermissionAssignResponse,
    responses=ERROR_RESPONSES,
    summary="Grant permissions to a member",
    description="Pairs the member already holds are skipped; `added` counts new rows only.",
)
async def assign_permissions(
    member_id: str,
    body: PermissionAssignRequest,
    user: CurrentUser = Depends(require_roles(*MANAGERS)),
    db: AsyncSession = Depends(get_db_session),
) -> PermissionAssignResponse:
    await member_service.get_member(db, member_id, user)
    added = await permission_service.assign_permissions(db, member_id, body.permissions)
    return PermissionAssignResponse(added=added)


@router.delete(
    "/{member_id}",
    response_model=PermissionRevokeResponse,
    responses=ERROR_RESPONSES,
    summary="Revoke permissions from a member",
)
async def revoke_permissions(
    member_id: str,
    body: PermissionAssignRequest,
    user: CurrentUser = Depends(require_roles(*MANAGERS)),
    db: AsyncSession = Depends(get_db_session),
) -> PermissionRevokeResponse:
    await member_service.get_member(db, member_id, user)
    removed = await permission_service.revoke_permissions(db, member_id, body.permissions)
    return PermissionRevokeResponse(removed=removed)
