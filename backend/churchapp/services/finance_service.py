"""
ChurchApp Backend — Finance Service
=====================================

What:  Branch ledger: list, summarize, create, update, delete Transactions.
How:   Sums are computed in Decimal over the same rows that are returned, so
       the summary always matches the list the client renders.
Who:   routes/finances.py; writes are gated by role and the finances_manage
       permission before reaching this layer.

Summary:
    entries = sum(amount | type == ENTRY)
    exits   = sum(amount | type == EXIT)
    total   = entries - exits

Every read and write is scoped by branch_id; a transaction id from another
branch behaves as missing (404).
"""

import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from churchapp.exceptions import NotFoundError
from churchapp.models import Transaction, TransactionType
from churchapp.schemas.finance import (
    FinanceOverview,
    FinanceSummary,
    TransactionCreate,
    TransactionResponse,
    TransactionUpdate,
)

logger = logging.getLogger(__name__)


def summarize(transactions: List[Transaction]) -> FinanceSummary:
    # Why Decimal: Numeric(12, 2) columns come back as Decimal; float sums
    # drift by cents on long ledgers
    entries = Decimal("0")
    exits = Decimal("0")
    for t in transactions:
        if t.type == TransactionType.ENTRY:
            entries += t.amount
        else:
            exits += t.amount
    return FinanceSummary(entries=entries, exits=exits, total=entries - exits)


class FinanceService:
    """
    Branch-scoped ledger operations.

    Responsibilities:
        - get_by_branch() / get_by_branch_with_summary(): reads
        - create() / update() / delete(): writes (validated by the schemas)
        - get_by_id(): lookup that treats other branches as missing
    """

    async def get_by_branch(self, db: AsyncSession, branch_id: str) -> List[Transaction]:
        """Newest first; created_at ties fall back to id for a stable order."""
        result = await db.execute(
            select(Transaction)
            .where(Transaction.branch_id == branch_id)
            .order_by(Transaction.created_at.desc(), Transaction.id.desc())
        )
        return list(result.scalars().all())

    async def get_by_branch_with_summary(self, db: AsyncSession, branch_id: str) -> FinanceOverview:
        transactions = await self.get_by_branch(db, branch_id)
        return FinanceOverview(
            transactions=[TransactionResponse.model_validate(t) for t in transactions],
            summary=summarize(transactions),
        )

    async def create(
        self,
        db: AsyncSession,
        branch_id: str,
        data: TransactionCreate,
        created_by: Optional[str] = None,
    ) -> Transaction:
        transaction = Transaction(
            title=data.title,
            amount=data.amount,
            type=data.type,
            category=data.category,
            branch_id=branch_id,
            created_by_user_id=created_by,
        )
        db.add(transaction)
        await db.flush()
        await db.refresh(transaction)
        logger.info(
            "Transaction %s created in branch %s (%s %s)",
            transaction.id, branch_id, data.type.value, data.amount,
        )
        return transaction

    async def get_by_id(self, db: AsyncSession, transaction_id: str, branch_id: str) -> Transaction:
        transaction = await db.get(Transaction, transaction_id)
        # Why 404 and not 403: ids from other branches are not confirmed to exist
        if transaction is None or transaction.branch_id != branch_id:
            raise NotFoundError(
                message="Transação não encontrada",
                resource="transaction",
                resource_id=transaction_id,
            )
        return transaction

    async def update(
        self,
        db: AsyncSession,
        transaction_id: str,
        branch_id: str,
        data: TransactionUpdate,
    ) -> Transaction:
        """Last write wins; fields absent from the body are left untouched."""
        transaction = await self.get_by_id(db, transaction_id, branch_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            # category is the only nullable field; null clears it
            if value is None and field != "category":
                continue
            setattr(transaction, field, value)
        await db.flush()
        await db.refresh(transaction)
        return transaction

    async def delete(self, db: AsyncSession, transaction_id: str, branch_id: str) -> None:
        transaction = await self.get_by_id(db, transaction_id, branch_id)
        await db.delete(transaction)
        await db.flush()
        logger.info("Transaction %s deleted from branch %s", transaction_id, branch_id)


finance_service = FinanceService()
