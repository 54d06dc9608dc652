"""Login for platform operators (AdminUser), separate from church members."""

import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from churchapp.exceptions import InvalidCredentialsError
from churchapp.models import AdminUser
from churchapp.schemas.auth import AdminLoginResponse, AdminView
from churchapp.security import create_access_token, verify_password
from churchapp.services.auth_service import DUMMY_PASSWORD_HASH

logger = logging.getLogger(__name__)


class AdminAuthService:
    async def login(self, db: AsyncSession, email: str, password: str) -> AdminLoginResponse:
        """Unknown email, inactive account and wrong password all give the same 401."""
        email = email.strip().lower()
        admin = (
            await db.execute(select(AdminUser).where(AdminUser.email == email))
        ).scalar_one_or_none()

        if admin is None:
            verify_password(password, DUMMY_PASSWORD_HASH)
            raise InvalidCredentialsError()
        if not admin.is_active or not verify_password(password, admin.password_hash):
            logger.warning("Admin login rejected for %s", admin.id)
            raise InvalidCredentialsError()

        admin.last_login_at = datetime.now(timezone.utc)
        await db.flush()

        token = create_access_token({
            "sub": admin.id,
            "adminUserId": admin.id,
            "adminRole": admin.admin_role.value,
            "email": admin.email,
            "type": "admin",
        })
        logger.info("Admin login succeeded for %s (%s)", admin.id, admin.admin_role.value)
        return AdminLoginResponse(token=token, admin=AdminView.model_validate(admin))


admin_auth_service = AdminAuthService()
