"""
ChurchApp Backend — Member and Permission Models
==================================================

What:  A Member is a User's role-bearing identity inside one Branch.
       Permissions are free-form capability tags attached to a Member.

Invariant:
    (member_id, type) is unique; a member never holds the same permission
    twice. Granting is idempotent on top of this constraint.
"""

import enum
from datetime import date, datetime
from typing import List, Optional, TYPE_CHECKING

from sqlalchemy import Date, DateTime, Enum, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from churchapp.database import Base
from churchapp.models.base import new_id, utcnow

if TYPE_CHECKING:
    from churchapp.models.church import Branch, ChurchPosition
    from churchapp.models.user import User


class Role(str, enum.Enum):
    ADMINGERAL = "ADMINGERAL"
    ADMINFILIAL = "ADMINFILIAL"
    COORDINATOR = "COORDINATOR"
    MEMBER = "MEMBER"


# Canonical permission vocabulary. The catalog exposed by
# GET /permissions is whatever is stored, which starts from this list.
PERMISSION_TYPES = (
    "members_view",
    "members_manage",
    "events_manage",
    "contributions_manage",
    "finances_manage",
    "devotional_manage",
    "church_manage",
)


class Member(Base):
    __tablename__ = "members"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    role: Mapped[Role] = mapped_column(
        Enum(Role, native_enum=False, length=20), nullable=False, default=Role.MEMBER
    )
    branch_id: Mapped[str] = mapped_column(
        ForeignKey("branches.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True, unique=True
    )
    position_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("church_positions.id", ondelete="SET NULL"), nullable=True, index=True
    )
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    birth_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    avatar_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    branch: Mapped["Branch"] = relationship(back_populates="members")
    user: Mapped[Optional["User"]] = relationship(back_populates="member")
    position: Mapped[Optional["ChurchPosition"]] = relationship(back_populates="members")
    permissions: Mapped[List["Permission"]] = relationship(
        back_populates="member", cascade="all, delete-orphan", passive_deletes=True
    )

    @property
    def permission_types(self) -> List[str]:
        return sorted(p.type for p in self.permissions)

    def __repr__(self) -> str:
        return f"<Member(id={self.id}, role={self.role.value}, branch_id={self.branch_id})>"


class Permission(Base):
    __tablename__ = "permissions"
    __table_args__ = (
        UniqueConstraint("member_id", "type", name="uq_permissions_member_type"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    member_id: Mapped[str] = mapped_column(
        ForeignKey("members.id", ondelete="CASCADE"), nullable=False, index=True
    )
    type: Mapped[str] = mapped_column(String(100), nullable=False)

    member: Mapped[Member] = relationship(back_populates="permissions")
