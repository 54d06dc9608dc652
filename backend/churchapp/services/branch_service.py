"""
ChurchApp Backend — Branch Service
====================================

What:  Create, list, fetch and delete branches of a church.

Rules:
    - Only the church's ADMINGERAL (or the user who created the church) may
      add a branch; anyone else gets 403.
    - The church owner's plan caps the number of branches (PlanLimitError).
    - The main branch cannot be deleted (409).
"""

import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from churchapp.exceptions import ForbiddenError, InvariantViolationError, NotFoundError
from churchapp.models import Branch, Church, Role
from churchapp.schemas.auth import CurrentUser
from churchapp.schemas.church import BranchCreate
from churchapp.services import plan_service

logger = logging.getLogger(__name__)


def _branch_not_found(branch_id: str) -> NotFoundError:
    return NotFoundError(message="Filial não encontrada", resource="branch", resource_id=branch_id)


class BranchService:

    async def create_branch(
        self, db: AsyncSession, data: BranchCreate, principal: CurrentUser
    ) -> Branch:
        church = await db.get(Church, data.church_id)
        if church is None:
            raise NotFoundError(
                message="Igreja não encontrada", resource="church", resource_id=data.church_id
            )
        owns = church.created_by_user_id == principal.sub
        administers = principal.role == Role.ADMINGERAL and principal.church_id == church.id
        if not (owns or administers):
            raise ForbiddenError(message="Você não pode criar filiais nesta igreja")

        await plan_service.check_branches_limit(db, church.created_by_user_id, church.id)

        branch = Branch(
            name=data.name,
            pastor_name=data.pastor_name,
            church_id=church.id,
            is_main_branch=False,
        )
        db.add(branch)
        await db.flush()
        await db.refresh(branch)
        logger.info("Branch %s created in church %s", branch.id, church.id)
        return branch

    async def list_branches(self, db: AsyncSession, church_id: str) -> List[Branch]:
        result = await db.execute(
            select(Branch)
            .where(Branch.church_id == church_id)
            .options(selectinload(Branch.church))
            .order_by(Branch.is_main_branch.desc(), Branch.name)
        )
        return list(result.scalars().all())

    async def get_branch(self, db: AsyncSession, branch_id: str) -> Branch:
        branch = (
            await db.execute(
                select(Branch)
                .where(Branch.id == branch_id)
                .options(selectinload(Branch.church))
            )
        ).scalar_one_or_none()
        if branch is None:
            raise _branch_not_found(branch_id)
        return branch

    async def delete_branch(self, db: AsyncSession, branch_id: str) -> None:
        branch = await db.get(Branch, branch_id)
        if branch is None:
            raise _branch_not_found(branch_id)
        if branch.is_main_branch:
            raise InvariantViolationError(message="A filial principal não pode ser excluída")
        await db.delete(branch)
        await db.flush()
        logger.info("Branch %s deleted", branch_id)


branch_service = BranchService()
