"""
ChurchApp Backend — Transaction Model
=======================================

What:  A financial entry (ENTRY) or exit (EXIT) recorded against a Branch.
Invariant: amount is strictly positive; direction is carried by `type`,
           never by the sign of the amount. A CHECK constraint backs the
           schema-level validation.
"""

import enum
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, Enum, ForeignKey, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from churchapp.database import Base
from churchapp.models.base import new_id, utcnow


class TransactionType(str, enum.Enum):
    ENTRY = "ENTRY"
    EXIT = "EXIT"


class Transaction(Base):
    __tablename__ = "transactions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    type: Mapped[TransactionType] = mapped_column(
        Enum(TransactionType, native_enum=False, length=10), nullable=False
    )
    category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    branch_id: Mapped[str] = mapped_column(
        ForeignKey("branches.id", ondelete="CASCADE"), nullable=False
    )
    created_by_user_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_transactions_amount_positive"),
        # Branch ledger listing: WHERE branch_id = ? ORDER BY created_at DESC
        Index("idx_transactions_branch_created", "branch_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Transaction(id={self.id}, type={self.type.value}, amount={self.amount})>"
