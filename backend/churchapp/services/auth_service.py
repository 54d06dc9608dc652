"""
ChurchApp Backend — Login Service
===================================

What:  Verifies email/password and issues the member bearer token.
Why:   Every other route trusts the token this service signs, so the claims
       must mirror the persisted Member row at login time.
How:   One query loads the User with its Member, the Member's permissions and
       branch; bcrypt verifies the password; the claims snapshot the member's
       persisted role, branch and permissions at this instant.
Who:   POST /auth/login (routes/auth.py).
When:  Once per session; tokens live settings.jwt_expires_days days.

Enumeration safety:
    An unknown email and a wrong password raise the same
    InvalidCredentialsError. For unknown emails the password is still checked
    against a throwaway hash so both paths cost one bcrypt verification.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from churchapp.exceptions import InvalidCredentialsError
from churchapp.models import Member, User
from churchapp.schemas.auth import LoginMember, LoginResponse, LoginUser
from churchapp.security import create_access_token, hash_password, verify_password
from churchapp.services import plan_service

logger = logging.getLogger(__name__)

DUMMY_PASSWORD_HASH = hash_password("churchapp-timing-equalizer")


class AuthService:
    """
    Member/user login.

    Responsibilities:
        - login(): credentials -> signed token + user/member summary

    Admin users log in through AdminAuthService; their table is disjoint
    from users and their tokens carry type="admin".
    """

    async def login(self, db: AsyncSession, email: str, password: str) -> LoginResponse:
        """
        Authenticate and build the LoginResponse.

        Claims:
            sub, email, type ("member" | "user"), memberId, role, branchId,
            churchId, permissions (list, [] without a member), iat, exp

        Returns:
            LoginResponse whose user.plan is the active plan name or "free"

        Raises:
            InvalidCredentialsError: unknown email or wrong password, with
                the same message for both
        """
        email = email.strip().lower()
        stmt = (
            select(User)
            .where(User.email == email)
            .options(
                selectinload(User.member).selectinload(Member.permissions),
                selectinload(User.member).selectinload(Member.branch),
            )
        )
        user = (await db.execute(stmt)).scalar_one_or_none()

        if user is None:
            # Why: same bcrypt cost as a wrong password, so response time
            # does not reveal which emails are registered
            verify_password(password, DUMMY_PASSWORD_HASH)
            logger.warning("Login failed: unknown email")
            raise InvalidCredentialsError()
        if not verify_password(password, user.password_hash):
            logger.warning("Login failed: wrong password for user %s", user.id)
            raise InvalidCredentialsError()

        member = user.member
        permissions = member.permission_types if member else []
        claims = {
            "sub": user.id,
            "email": user.email,
            "type": "member" if member else "user",
            "memberId": member.id if member else None,
            "role": member.role.value if member else None,
            "branchId": member.branch_id if member else None,
            "churchId": member.branch.church_id if member else None,
            "permissions": permissions,
        }
        # iat/exp are added by create_access_token
        token = create_access_token(claims)

        plan = await plan_service.get_active_plan(db, user.id)
        logger.info("Login succeeded for user %s (member=%s)", user.id, claims["memberId"])

        return LoginResponse(
            token=token,
            user=LoginUser(
                id=user.id,
                name=user.name,
                email=user.email,
                plan=plan_service.resolve_plan_name(plan),
            ),
            member=LoginMember(
                id=member.id,
                name=member.name,
                role=member.role,
                branch_id=member.branch_id,
                permissions=permissions,
            ) if member else None,
        )


auth_service = AuthService()
