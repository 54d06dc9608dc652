"""Contribution campaigns (fundraising goals) published by a branch."""

import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from churchapp.exceptions import NotFoundError
from churchapp.models import Contribution
from churchapp.schemas.ministry import ContributionCreate

logger = logging.getLogger(__name__)


class ContributionService:

    async def list_contributions(self, db: AsyncSession, branch_id: str) -> List[Contribution]:
        result = await db.execute(
            select(Contribution)
            .where(Contribution.branch_id == branch_id)
            .order_by(Contribution.created_at.desc(), Contribution.id.desc())
        )
        return list(result.scalars().all())

    async def get_contribution(
        self, db: AsyncSession, contribution_id: str, branch_id: str
    ) -> Contribution:
        contribution = await db.get(Contribution, contribution_id)
        if contribution is None or contribution.branch_id != branch_id:
            raise NotFoundError(
                message="Contribuição não encontrada",
                resource="contribution",
                resource_id=contribution_id,
            )
        return contribution

    async def create_contribution(
        self, db: AsyncSession, branch_id: str, data: ContributionCreate
    ) -> Contribution:
        contribution = Contribution(branch_id=branch_id, **data.model_dump())
        db.add(contribution)
        await db.flush()
        await db.refresh(contribution)
        logger.info("Contribution %s created in branch %s", contribution.id, branch_id)
        return contribution

    async def toggle_active(
        self, db: AsyncSession, contribution_id: str, branch_id: str
    ) -> Contribution:
        contribution = await self.get_contribution(db, contribution_id, branch_id)
        contribution.is_active = not contribution.is_active
        await db.flush()
        logger.info(
            "Contribution %s is now %s",
            contribution_id, "active" if contribution.is_active else "inactive",
        )
        return contribution


contribution_service = ContributionService()
