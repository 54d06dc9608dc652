"""
ChurchApp Backend — Church, Branch and Position Models
========================================================

What:  The tenant hierarchy. A Church owns one or more Branches; a Branch is
       the scoping unit for members, events, transactions, contributions and
       devotionals. ChurchPosition is a named office scoped to the Church.

Position rules (enforced in PositionService, not in the schema):
    - Default positions are seeded per church and can never be deleted.
    - A position referenced by any Member cannot be deleted.
"""

from datetime import datetime
from typing import List, Optional, TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from churchapp.database import Base
from churchapp.models.base import new_id, utcnow

if TYPE_CHECKING:
    from churchapp.models.member import Member


class Church(Base):
    __tablename__ = "churches"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    logo_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    avatar_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    website: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_by_user_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    branches: Mapped[List["Branch"]] = relationship(
        back_populates="church", cascade="all, delete-orphan"
    )
    positions: Mapped[List["ChurchPosition"]] = relationship(
        back_populates="church", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Church(id={self.id}, name='{self.name}')>"


class Branch(Base):
    __tablename__ = "branches"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    pastor_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    church_id: Mapped[str] = mapped_column(
        ForeignKey("churches.id", ondelete="CASCADE"), nullable=False, index=True
    )
    is_main_branch: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    church: Mapped[Church] = relationship(back_populates="branches")
    members: Mapped[List["Member"]] = relationship(back_populates="branch", passive_deletes=True)

    def __repr__(self) -> str:
        return f"<Branch(id={self.id}, name='{self.name}', church_id={self.church_id})>"


class ChurchPosition(Base):
    __tablename__ = "church_positions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    church_id: Mapped[str] = mapped_column(
        ForeignKey("churches.id", ondelete="CASCADE"), nullable=False, index=True
    )
    is_default: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    church: Mapped[Church] = relationship(back_populates="positions")
    members: Mapped[List["Member"]] = relationship(back_populates="position", passive_deletes=True)

    def __repr__(self) -> str:
        return f"<ChurchPosition(name='{self.name}', default={self.is_default})>"
