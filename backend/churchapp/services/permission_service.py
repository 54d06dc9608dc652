"""
ChurchApp Backend — Permission Service
========================================

What:  The permission catalog plus grant/revoke for a single member.
Who:   routes/permissions.py, ChurchService (owner gets every type on
       church creation) and MemberService (initial grants on creation).

Catalog scope:
    list_permission_types returns the distinct types stored across ALL
    members. Types form a shared vocabulary (members_view, events_manage,
    ...); which member holds which type stays behind the tenant-scoped
    routes.

Idempotent grant:
    assign_permissions inserts only (member, type) pairs that do not exist
    yet and ignores duplicates inside the request; the unique constraint
    uq_permissions_member_type backs this at the database level.
"""

import logging
from typing import Iterable, List

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from churchapp.exceptions import NotFoundError
from churchapp.models import Member, Permission

logger = logging.getLogger(__name__)


def _unique(types: Iterable[str]) -> List[str]:
    # Why not set(): keep the request order so log lines read like the input
    seen = []
    for t in types:
        if t not in seen:
            seen.append(t)
    return seen


class PermissionService:

    async def list_permission_types(self, db: AsyncSession) -> List[str]:
        stored = (await db.execute(select(Permission.type).distinct())).scalars().all()
        return sorted(stored)

    async def _require_member(self, db: AsyncSession, member_id: str) -> Member:
        member = await db.get(Member, member_id)
        if member is None:
            raise NotFoundError(
                message="Membro não encontrado", resource="member", resource_id=member_id
            )
        return member

    async def list_member_permissions(self, db: AsyncSession, member_id: str) -> List[str]:
        await self._require_member(db, member_id)
        result = await db.execute(
            select(Permission.type)
            .where(Permission.member_id == member_id)
            .order_by(Permission.type)
        )
        return list(result.scalars().all())

    async def assign_permissions(
        self, db: AsyncSession, member_id: str, types: Iterable[str]
    ) -> int:
        """
        Grant `types` to a member, skipping the ones already held.

        What:    ["members_view", "members_view"] on a member that holds
                 nothing inserts one row; calling it again inserts none.
        Who:     POST /permissions/{member_id}, church and member creation.

        Returns:
            Number of rows inserted (the route reports it as `added`)

        Raises:
            NotFoundError: unknown member
        """
        await self._require_member(db, member_id)
        requested = _unique(types)
        if not requested:
            return 0

        existing = set(
            (
                await db.execute(
                    select(Permission.type).where(
                        Permission.member_id == member_id,
                        Permission.type.in_(requested),
                    )
                )
            ).scalars().all()
        )
        missing = [t for t in requested if t not in existing]
        db.add_all(Permission(member_id=member_id, type=t) for t in missing)
        await db.flush()

        if missing:
            logger.info("Granted %s to member %s", missing, member_id)
        return len(missing)

    async def revoke_permissions(
        self, db: AsyncSession, member_id: str, types: Iterable[str]
    ) -> int:
        await self._require_member(db, member_id)
        requested = _unique(types)
        if not requested:
            return 0
        result = await db.execute(
            delete(Permission).where(
                Permission.member_id == member_id,
                Permission.type.in_(requested),
            )
        )
        await db.flush()
        if result.rowcount:
            logger.info("Revoked %d permission(s) from member %s", result.rowcount, member_id)
        return result.rowcount


permission_service = PermissionService()
