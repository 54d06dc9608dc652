"""
ChurchApp Backend — Church Position Service
=============================================

What:  CRUD for church positions (cargos) plus default seeding.

Seeding:
    Every church gets DEFAULT_POSITIONS. Names are compared lowercased
    against what the church already has, so "pastor" blocks a second
    "Pastor". The church row is locked (SELECT ... FOR UPDATE) for the
    duration of the request transaction, serializing concurrent seeders.

Deletion checks, in order:
    1. position exists            else NotFoundError (404)
    2. position is not a default  else InvariantViolationError (409)
    3. no member references it    else InvariantViolationError (409)
The position row is locked before the checks, and the delete lands in the
same transaction, so a concurrent delete cannot pass the same checks.

Renames:
    Default positions keep their names (ForbiddenError, 403). Seeding matches
    defaults by name, so a renamed "Pastor" would be seeded again next to
    it and the church would end up with a default it can never delete.
"""

import logging
from typing import List

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from churchapp.exceptions import ForbiddenError, InvariantViolationError, NotFoundError
from churchapp.models import Church, ChurchPosition, Member
from churchapp.schemas.position import PositionResponse

logger = logging.getLogger(__name__)

DEFAULT_POSITIONS = (
    "Pastor",
    "Obreiro",
    "Tesoureiro",
    "Líder dos Jovens",
    "Líder dos Adolescentes",
    "Líder das Crianças",
)


def _not_found(position_id: str) -> NotFoundError:
    return NotFoundError(
        message="Cargo não encontrado", resource="position", resource_id=position_id
    )


class PositionService:

    async def ensure_default_positions(self, db: AsyncSession, church_id: str) -> int:
        """
        Create the missing defaults for `church_id`.

        Who:     GET /positions (every listing) and church creation.
        When:    Usually a no-op; only the first call per church inserts.

        Returns:
            How many positions were created (0 when all defaults exist)
        """
        # Why lock the church: two first listings racing would both see no
        # defaults and both insert them
        church = (
            await db.execute(select(Church).where(Church.id == church_id).with_for_update())
        ).scalar_one_or_none()
        if church is None:
            raise NotFoundError(message="Igreja não encontrada", resource="church", resource_id=church_id)

        existing = (
            await db.execute(
                select(ChurchPosition.name).where(ChurchPosition.church_id == church_id)
            )
        ).scalars().all()
        taken = {name.strip().lower() for name in existing}

        created = 0
        for name in DEFAULT_POSITIONS:
            if name.lower() in taken:
                continue
            db.add(ChurchPosition(name=name, church_id=church_id, is_default=True))
            taken.add(name.lower())
            created += 1

        if created:
            await db.flush()
            logger.info("Seeded %d default position(s) for church %s", created, church_id)
        return created

    async def list_positions(self, db: AsyncSession, church_id: str) -> List[PositionResponse]:
        member_count = (
            select(func.count(Member.id))
            .where(Member.position_id == ChurchPosition.id)
            .correlate(ChurchPosition)
            .scalar_subquery()
        )
        result = await db.execute(
            select(ChurchPosition, member_count)
            .where(ChurchPosition.church_id == church_id)
            .order_by(ChurchPosition.is_default.desc(), ChurchPosition.name)
        )
        return [
            PositionResponse.model_validate(position).model_copy(update={"member_count": count})
            for position, count in result.all()
        ]

    async def get_position(self, db: AsyncSession, position_id: str) -> ChurchPosition:
        position = await db.get(ChurchPosition, position_id)
        if position is None:
            raise _not_found(position_id)
        return position

    async def create_position(self, db: AsyncSession, church_id: str, name: str) -> ChurchPosition:
        position = ChurchPosition(name=name, church_id=church_id, is_default=False)
        db.add(position)
        await db.flush()
        await db.refresh(position)
        logger.info("Position %s (%s) created for church %s", position.id, name, church_id)
        return position

    async def update_position(self, db: AsyncSession, position_id: str, name: str) -> ChurchPosition:
        """
        Rename a custom position.

        Raises:
            NotFoundError:  no such position
            ForbiddenError: the position is one of DEFAULT_POSITIONS
        """
        position = await self._locked(db, position_id)
        if position.is_default:
            logger.warning("Rename of default position %s (%s) refused", position_id, position.name)
            raise ForbiddenError(
                message="Não é possível editar cargos padrão do sistema",
                context={"position_id": position_id},
            )
        position.name = name
        await db.flush()
        await db.refresh(position)
        return position

    async def _locked(self, db: AsyncSession, position_id: str) -> ChurchPosition:
        # populate_existing: the row may already sit in the identity map
        position = (
            await db.execute(
                select(ChurchPosition)
                .where(ChurchPosition.id == position_id)
                .with_for_update()
                .execution_options(populate_existing=True)
            )
        ).scalar_one_or_none()
        if position is None:
            raise _not_found(position_id)
        return position

    async def delete_position(self, db: AsyncSession, position_id: str) -> None:
        """
        Delete a custom position nobody holds.

        Raises:
            NotFoundError:           no such position
            InvariantViolationError: default position (checked first, so it
                                     wins over member references), or a
                                     position still referenced by members
        """
        position = await self._locked(db, position_id)

        if position.is_default:
            raise InvariantViolationError(
                message="Cargos padrão não podem ser excluídos",
                context={"position_id": position_id},
            )

        in_use = (
            await db.execute(
                select(func.count(Member.id)).where(Member.position_id == position_id)
            )
        ).scalar_one()
        if in_use:
            raise InvariantViolationError(
                message="Cargo está em uso por membros e não pode ser excluído",
                context={"position_id": position_id, "members": in_use},
            )

        await db.delete(position)
        await db.flush()
        logger.info("Position %s deleted", position_id)


position_service = PositionService()
