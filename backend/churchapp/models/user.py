"""
ChurchApp Backend — User, Plan and Subscription Models
========================================================

What:  Credential holders and the commercial tier attached to them.
How:   A User has at most one Member profile and any number of Subscriptions;
       the one with status 'active' determines the effective Plan.

Plan limits:
    max_members / max_branches of NULL mean "unlimited".
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional, TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from churchapp.database import Base
from churchapp.models.base import new_id, utcnow

if TYPE_CHECKING:
    from churchapp.models.member import Member

SUBSCRIPTION_ACTIVE = "active"
SUBSCRIPTION_PENDING = "pending"
SUBSCRIPTION_CANCELED = "canceled"


class User(Base):
    """A login identity. Email is the unique credential key."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    member: Mapped[Optional["Member"]] = relationship(
        back_populates="user", uselist=False
    )
    subscriptions: Mapped[List["Subscription"]] = relationship(
        back_populates="user", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"


class Plan(Base):
    __tablename__ = "plans"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    max_members: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    max_branches: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<Plan(name='{self.name}')>"


class Subscription(Base):
    __tablename__ = "subscriptions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    plan_id: Mapped[str] = mapped_column(ForeignKey("plans.id"), nullable=False)
    # Values: active, pending, canceled
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=SUBSCRIPTION_ACTIVE)
    started_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    user: Mapped[User] = relationship(back_populates="subscriptions")
    plan: Mapped[Plan] = relationship()
