"""
ChurchApp Backend — Devotional Service
========================================

What:  Daily devotionals for a branch, with per-member likes.
How:   Likes are rows in devotional_likes, unique per (devotional, member),
       so liking twice is a no-op. Responses carry the like count and
       whether the calling member liked it.

Only the author, an ADMINGERAL or an ADMINFILIAL may edit or delete.
"""

import logging
from typing import List

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from churchapp.exceptions import ForbiddenError, NotFoundError
from churchapp.models import Devotional, DevotionalLike, Role
from churchapp.schemas.auth import CurrentUser
from churchapp.schemas.ministry import (
    DevotionalAuthor,
    DevotionalCreate,
    DevotionalResponse,
    DevotionalUpdate,
)

logger = logging.getLogger(__name__)

EDITOR_ROLES = (Role.ADMINGERAL, Role.ADMINFILIAL)


def to_response(devotional: Devotional, member_id: str) -> DevotionalResponse:
    return DevotionalResponse(
        id=devotional.id,
        title=devotional.title,
        passage=devotional.passage,
        content=devotional.content,
        date=devotional.date,
        branch_id=devotional.branch_id,
        author=DevotionalAuthor.model_validate(devotional.author),
        likes=len(devotional.likes),
        liked=any(like.member_id == member_id for like in devotional.likes),
        created_at=devotional.created_at,
    )


class DevotionalService:

    def _query(self):
        return select(Devotional).options(
            selectinload(Devotional.author),
            selectinload(Devotional.likes),
        ).execution_options(populate_existing=True)

    async def list_devotionals(
        self, db: AsyncSession, principal: CurrentUser
    ) -> List[DevotionalResponse]:
        result = await db.execute(
            self._query()
            .where(Devotional.branch_id == principal.branch_id)
            .order_by(Devotional.date.desc(), Devotional.created_at.desc())
        )
        return [to_response(d, principal.member_id) for d in result.scalars().all()]

    async def _get(self, db: AsyncSession, devotional_id: str, branch_id: str) -> Devotional:
        devotional = (
            await db.execute(self._query().where(Devotional.id == devotional_id))
        ).scalar_one_or_none()
        if devotional is None or devotional.branch_id != branch_id:
            raise NotFoundError(
                message="Devocional não encontrado",
                resource="devotional",
                resource_id=devotional_id,
            )
        return devotional

    async def get_devotional(
        self, db: AsyncSession, devotional_id: str, principal: CurrentUser
    ) -> DevotionalResponse:
        devotional = await self._get(db, devotional_id, principal.branch_id)
        return to_response(devotional, principal.member_id)

    async def create_devotional(
        self, db: AsyncSession, data: DevotionalCreate, principal: CurrentUser
    ) -> DevotionalResponse:
        values = data.model_dump(exclude_none=True)
        devotional = Devotional(
            author_id=principal.member_id,
            branch_id=principal.branch_id,
            **values,
        )
        db.add(devotional)
        await db.flush()
        logger.info("Devotional %s created by member %s", devotional.id, principal.member_id)
        return await self.get_devotional(db, devotional.id, principal)

    async def like(
        self, db: AsyncSession, devotional_id: str, principal: CurrentUser
    ) -> DevotionalResponse:
        devotional = await self._get(db, devotional_id, principal.branch_id)
        if not any(like.member_id == principal.member_id for like in devotional.likes):
            db.add(DevotionalLike(devotional_id=devotional.id, member_id=principal.member_id))
            await db.flush()
        return await self.get_devotional(db, devotional_id, principal)

    async def unlike(
        self, db: AsyncSession, devotional_id: str, principal: CurrentUser
    ) -> DevotionalResponse:
        await self._get(db, devotional_id, principal.branch_id)
        await db.execute(
            delete(DevotionalLike).where(
                DevotionalLike.devotional_id == devotional_id,
                DevotionalLike.member_id == principal.member_id,
            )
        )
        await db.flush()
        return await self.get_devotional(db, devotional_id, principal)

    def _ensure_can_edit(self, devotional: Devotional, principal: CurrentUser) -> None:
        if devotional.author_id != principal.member_id and principal.role not in EDITOR_ROLES:
            raise ForbiddenError(message="Apenas o autor ou um administrador pode alterar este devocional")

    async def update_devotional(
        self,
        db: AsyncSession,
        devotional_id: str,
        data: DevotionalUpdate,
        principal: CurrentUser,
    ) -> DevotionalResponse:
        devotional = await self._get(db, devotional_id, principal.branch_id)
        self._ensure_can_edit(devotional, principal)
        for field, value in data.model_dump(exclude_unset=True).items():
            if value is None and field != "content":
                continue
            setattr(devotional, field, value)
        await db.flush()
        return await self.get_devotional(db, devotional_id, principal)

    async def delete_devotional(
        self, db: AsyncSession, devotional_id: str, principal: CurrentUser
    ) -> None:
        devotional = await self._get(db, devotional_id, principal.branch_id)
        self._ensure_can_edit(devotional, principal)
        await db.delete(devotional)
        await db.flush()
        logger.info("Devotional %s deleted by member %s", devotional_id, principal.member_id)


devotional_service = DevotionalService()
