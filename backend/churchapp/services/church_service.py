"""
ChurchApp Backend — Church Onboarding and Settings
====================================================

What:  Creates a church together with its main branch and promotes the
       creator to ADMINGERAL; reads and updates church settings.
Why:   A church without a main branch and an ADMINGERAL is unusable, so the
       pieces are created together or not at all.
Who:   POST /churches, GET /churches, GET|PUT /churches/{id}.
When:  Onboarding (once per church); settings edits afterwards.

create_church_with_main_branch runs inside the request transaction:
    1. Church row (created_by_user_id = caller)
    2. Main branch, named data.branch_name or "Sede"
    3. Caller's Member (matched by user id, then by email) moved to the main
       branch as ADMINGERAL, or created if none exists
    4. Every permission type granted to that member (idempotent)
    5. Default positions seeded
A failure at any step rolls all of them back.

The plan branch limit does not apply to the first (main) branch.
"""

import logging
from typing import List

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from churchapp.exceptions import ForbiddenError, NotFoundError
from churchapp.models import PERMISSION_TYPES, Branch, Church, Member, Role, User
from churchapp.schemas.auth import CurrentUser
from churchapp.schemas.church import (
    BranchResponse,
    ChurchCreate,
    ChurchCreateResponse,
    ChurchResponse,
    ChurchUpdate,
)
from churchapp.services.permission_service import permission_service
from churchapp.services.position_service import position_service

logger = logging.getLogger(__name__)

MAIN_BRANCH_NAME = "Sede"


class ChurchService:
    """
    Responsibilities:
        - create_church_with_main_branch(): onboarding
        - list_for_user() / get_church() / ensure_access(): reads
        - update_church(): settings, ADMINGERAL of that church only
    """

    async def create_church_with_main_branch(
        self, db: AsyncSession, data: ChurchCreate, user_id: str
    ) -> ChurchCreateResponse:
        user = await db.get(User, user_id)
        if user is None:
            raise NotFoundError(message="Usuário não encontrado", resource="user", resource_id=user_id)

        church = Church(
            name=data.name,
            logo_url=data.logo_url,
            avatar_url=data.avatar_url,
            address=data.address,
            phone=data.phone,
            email=data.email,
            website=data.website,
            is_active=True,
            created_by_user_id=user.id,
        )
        db.add(church)
        await db.flush()

        branch = Branch(
            name=(data.branch_name or "").strip() or MAIN_BRANCH_NAME,
            pastor_name=data.pastor_name,
            church_id=church.id,
            is_main_branch=True,
        )
        db.add(branch)
        await db.flush()

        member = (
            await db.execute(
                select(Member)
                .where(or_(Member.user_id == user.id, Member.email == user.email))
                # Why this order: a member already linked to the user wins over
                # an unlinked one that only shares the email
                .order_by(Member.user_id.is_(None))
                .limit(1)
            )
        ).scalar_one_or_none()
        if member is None:
            member = Member(
                name=user.name or user.email,
                email=user.email,
                role=Role.ADMINGERAL,
                branch_id=branch.id,
                user_id=user.id,
            )
            db.add(member)
        else:
            member.role = Role.ADMINGERAL
            member.branch_id = branch.id
            member.user_id = user.id
        await db.flush()

        await permission_service.assign_permissions(db, member.id, PERMISSION_TYPES)
        positions_created = await position_service.ensure_default_positions(db, church.id)

        # Claims in the caller's current token are stale from here on; the
        # client logs in again to pick up ADMINGERAL
        await db.refresh(church, attribute_names=["branches"])
        logger.info(
            "Church %s created by user %s (main branch %s, member %s)",
            church.id, user.id, branch.id, member.id,
        )
        return ChurchCreateResponse(
            church=ChurchResponse.model_validate(church),
            branch=BranchResponse.model_validate(branch),
            member_id=member.id,
            positions_created=positions_created,
        )

    async def list_for_user(self, db: AsyncSession, principal: CurrentUser) -> List[Church]:
        """The caller's own church (via their branch) plus churches they created."""
        conditions = [Church.created_by_user_id == principal.sub]
        if principal.church_id:
            conditions.append(Church.id == principal.church_id)
        result = await db.execute(
            select(Church)
            .where(or_(*conditions))
            .options(selectinload(Church.branches))
            .order_by(Church.created_at)
        )
        return list(result.scalars().all())

    async def get_church(self, db: AsyncSession, church_id: str) -> Church:
        church = (
            await db.execute(
                select(Church)
                .where(Church.id == church_id)
                .options(selectinload(Church.branches))
            )
        ).scalar_one_or_none()
        if church is None:
            raise NotFoundError(message="Igreja não encontrada", resource="church", resource_id=church_id)
        return church

    def ensure_access(self, church: Church, principal: CurrentUser) -> None:
        """403 unless the caller belongs to the church or created it."""
        if church.id != principal.church_id and church.created_by_user_id != principal.sub:
            raise ForbiddenError(message="Você não tem acesso a esta igreja")

    async def update_church(
        self, db: AsyncSession, church_id: str, data: ChurchUpdate, principal: CurrentUser
    ) -> Church:
        church = await self.get_church(db, church_id)
        if principal.role != Role.ADMINGERAL or principal.church_id != church.id:
            raise ForbiddenError(message="Apenas o administrador geral pode editar a igreja")

        for field, value in data.model_dump(exclude_unset=True).items():
            if field == "name" and value is None:
                continue
            setattr(church, field, value)
        await db.flush()
        logger.info("Church %s updated by user %s", church.id, principal.sub)
        return church


church_service = ChurchService()
