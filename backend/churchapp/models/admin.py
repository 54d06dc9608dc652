"""Platform operator accounts, disjoint from church Users and Members."""

import enum
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Enum, String
from sqlalchemy.orm import Mapped, mapped_column

from churchapp.database import Base
from churchapp.models.base import new_id, utcnow


class AdminRole(str, enum.Enum):
    SUPERADMIN = "SUPERADMIN"
    SUPPORT = "SUPPORT"
    FINANCE = "FINANCE"


class AdminUser(Base):
    __tablename__ = "admin_users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    admin_role: Mapped[AdminRole] = mapped_column(
        Enum(AdminRole, native_enum=False, length=20), nullable=False, default=AdminRole.SUPPORT
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    last_login_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    def __repr__(self) -> str:
        return f"<AdminUser(email='{self.email}', role={self.admin_role.value})>"
