"""
ChurchApp Backend — Authentication and Authorization Dependencies
===================================================================

What:  FastAPI dependencies that turn a bearer token into a principal and
       gate routes by branch, role, permission, or platform-admin role.
How:   Routes declare what they need in their signature or `dependencies=`;
       each gate raises a typed ChurchAppError that the global handlers map
       to 400/401/403.

Member gates:
    authenticate               -> CurrentUser (401 without a valid token)
    require_branch             -> CurrentUser with a branch (400 otherwise)
    require_roles(*roles)      -> 403 unless the token role is listed
    require_permissions(*t)    -> 403 unless the member currently holds all
                                  of `t` (read from the database, not the
                                  token); ADMINGERAL always passes

Admin gates:
    authenticate_admin         -> loads request.state.admin_user (or leaves
                                  it unset) from an admin token
    require_admin(request)     -> 401 when no admin principal
    require_admin_role(...)    -> 403 when the admin role is not allowed
    admin_guard(*roles)        -> presence check, then role check
"""

import logging
from typing import Callable, Iterable, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from churchapp.database import get_db_session
from churchapp.exceptions import ForbiddenError, UnauthorizedError, ValidationError
from churchapp.models import AdminRole, AdminUser, Member, Permission, Role
from churchapp.schemas.auth import CurrentUser
from churchapp.security import decode_access_token

logger = logging.getLogger(__name__)

# auto_error=False: a missing header becomes our own 401 body instead of
# FastAPI's default 403
bearer_scheme = HTTPBearer(auto_error=False)

ADMIN_TOKEN_TYPE = "admin"


# ══════════════════════════════════════════════════════════════════════════
# Member / user principal
# ══════════════════════════════════════════════════════════════════════════

async def authenticate(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> CurrentUser:
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError()

    claims = decode_access_token(credentials.credentials)
    if claims.get("type") == ADMIN_TOKEN_TYPE or not claims.get("sub"):
        raise UnauthorizedError(message="Token inválido")

    request.state.principal_id = claims["sub"]
    return CurrentUser.model_validate(claims)


async def require_branch(user: CurrentUser = Depends(authenticate)) -> CurrentUser:
    """Branch-scoped routes need a member profile; plain users get a 400."""
    if not user.branch_id or not user.member_id:
        raise ValidationError(
            message="Usuário não está vinculado a uma filial",
            context={"user_id": user.sub},
        )
    return user


def require_roles(*roles: Role) -> Callable:
    allowed = set(roles)

    async def dependency(user: CurrentUser = Depends(authenticate)) -> CurrentUser:
        if user.role not in allowed:
            logger.warning(
                "Role %s denied (allowed: %s) for user %s",
                user.role.value if user.role else None,
                sorted(r.value for r in allowed),
                user.sub,
            )
            raise ForbiddenError(message="Você não tem permissão para esta ação")
        return user

    return dependency


async def load_member_permissions(db: AsyncSession, member_id: str) -> set:
    result = await db.execute(
        select(Permission.type).where(Permission.member_id == member_id)
    )
    return set(result.scalars().all())


def require_permissions(*types: str) -> Callable:
    """
    Gate on live permission state.

    Tokens carry a login-time permission snapshot; this dependency ignores it
    and reads the current Permission rows so revocations apply immediately.
    The role is re-read as well, so a demoted ADMINGERAL loses the bypass.
    """
    required = set(types)

    async def dependency(
        user: CurrentUser = Depends(authenticate),
        db: AsyncSession = Depends(get_db_session),
    ) -> CurrentUser:
        if not user.member_id:
            raise ForbiddenError(message="Perfil de membro necessário")

        role = (
            await db.execute(select(Member.role).where(Member.id == user.member_id))
        ).scalar_one_or_none()
        if role is None:
            raise ForbiddenError(message="Perfil de membro não encontrado")
        if role == Role.ADMINGERAL:
            return user

        held = await load_member_permissions(db, user.member_id)
        missing = required - held
        if missing:
            logger.warning(
                "Member %s missing permissions %s", user.member_id, sorted(missing)
            )
            raise ForbiddenError(
                message="Você não tem permissão para esta ação",
                context={"missing": sorted(missing)},
            )
        return user

    return dependency


# ══════════════════════════════════════════════════════════════════════════
# Platform admin principal
# ══════════════════════════════════════════════════════════════════════════

async def authenticate_admin(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> Optional[AdminUser]:
    """
    Resolve the admin principal into request.state.admin_user.

    Never raises: an absent, invalid or non-admin token simply leaves the
    principal unset and the gates below decide the status code.
    """
    request.state.admin_user = None
    if credentials is None or not credentials.credentials:
        return None

    try:
        claims = decode_access_token(credentials.credentials)
    except UnauthorizedError:
        return None
    if claims.get("type") != ADMIN_TOKEN_TYPE:
        return None

    admin = await db.get(AdminUser, claims.get("adminUserId") or claims.get("sub"))
    if admin is None or not admin.is_active:
        return None

    request.state.admin_user = admin
    return admin


def require_admin(request: Request) -> AdminUser:
    admin = getattr(request.state, "admin_user", None)
    if admin is None:
        raise UnauthorizedError(message="Autenticação de administrador necessária")
    return admin


def require_admin_role(request: Request, allowed_roles: Iterable[AdminRole]) -> AdminUser:
    """Role check only; callers run require_admin first."""
    admin = request.state.admin_user
    if admin.admin_role not in set(allowed_roles):
        logger.warning(
            "Admin %s with role %s denied", admin.email, admin.admin_role.value
        )
        raise ForbiddenError(message="Acesso restrito a administradores autorizados")
    return admin


def admin_guard(*allowed_roles: AdminRole) -> Callable:
    roles = allowed_roles or tuple(AdminRole)

    async def dependency(
        request: Request,
        _admin: Optional[AdminUser] = Depends(authenticate_admin),
    ) -> AdminUser:
        require_admin(request)
        return require_admin_role(request, roles)

    return dependency
