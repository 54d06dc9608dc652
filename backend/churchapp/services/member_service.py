"""
ChurchApp Backend — Member Service
====================================

What:  Member listing, profile, creation and editing with the church's
       role hierarchy.
Who:   routes/members.py. Route-level gates (role, members_view,
       members_manage) run first; the rules below depend on the target row
       and therefore live here.

Role hierarchy (validate_role_hierarchy):
    - Nobody assigns ADMINGERAL through this API; it is only granted by
      church creation.
    - COORDINATOR assigns only MEMBER.
    - MEMBER assigns no role.

Creation (validate_member_creation):
    - Target branch must exist and belong to the creator's church.
    - ADMINFILIAL and COORDINATOR create only inside their own branch.
    - The church owner's plan caps the member count (PlanLimitError).

Editing (validate_member_edit):
    - An ADMINGERAL profile is edited only by an ADMINGERAL of the same
      church. Without this an ADMINFILIAL of the main branch could demote
      the church owner and leave the church without a general admin.
    - ADMINGERAL edits anyone in the church.
    - ADMINFILIAL edits anyone in their branch.
    - Everyone else edits only themselves, and never their own role.
"""

import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from churchapp.exceptions import ForbiddenError, InvariantViolationError, NotFoundError
from churchapp.models import Branch, ChurchPosition, Member, Role, User
from churchapp.schemas.auth import CurrentUser
from churchapp.schemas.member import MemberCreate, MemberUpdate
from churchapp.security import hash_password
from churchapp.services import plan_service
from churchapp.services.permission_service import permission_service

logger = logging.getLogger(__name__)

MEMBER_LOAD_OPTIONS = (
    selectinload(Member.permissions),
    selectinload(Member.position),
    selectinload(Member.branch),
)


def validate_role_hierarchy(creator_role: Role, target_role: Role) -> None:
    """
    Raise ForbiddenError unless `creator_role` may hand out `target_role`.

    Used for creation and for role changes on edit. ADMINGERAL and
    ADMINFILIAL may assign ADMINFILIAL, COORDINATOR and MEMBER.
    """
    if target_role == Role.ADMINGERAL:
        raise ForbiddenError(message="Apenas o sistema pode criar um Administrador Geral")
    if creator_role == Role.COORDINATOR and target_role != Role.MEMBER:
        raise ForbiddenError(message="Coordenadores só podem criar membros com papel MEMBER")
    if creator_role == Role.MEMBER:
        raise ForbiddenError(message="Membros não podem atribuir papéis")


class MemberService:
    """
    Responsibilities:
        - list_members() / get_member() / get_me(): reads, tenant-scoped
        - create_member(): hierarchy, branch scope, plan limit, unique email
        - update_member() / delete_member(): editing rules (module docstring)

    The acting member is always re-read from the database (_creator), so a
    role change applies to the next request even with an old token.
    """

    async def _load(self, db: AsyncSession, member_id: str) -> Member:
        member = (
            await db.execute(
                select(Member)
                .where(Member.id == member_id)
                .options(*MEMBER_LOAD_OPTIONS)
                .execution_options(populate_existing=True)
            )
        ).scalar_one_or_none()
        if member is None:
            raise NotFoundError(message="Membro não encontrado", resource="member", resource_id=member_id)
        return member

    async def _creator(self, db: AsyncSession, principal: CurrentUser) -> Member:
        if not principal.member_id:
            raise ForbiddenError(message="Perfil de membro necessário")
        creator = (
            await db.execute(
                select(Member)
                .where(Member.id == principal.member_id)
                .options(selectinload(Member.branch))
            )
        ).scalar_one_or_none()
        if creator is None:
            raise ForbiddenError(message="Perfil de membro não encontrado")
        return creator

    async def list_members(self, db: AsyncSession, principal: CurrentUser) -> List[Member]:
        """ADMINGERAL sees the whole church; everyone else sees their own branch."""
        stmt = select(Member).options(*MEMBER_LOAD_OPTIONS).order_by(Member.name)
        if principal.role == Role.ADMINGERAL and principal.church_id:
            stmt = stmt.join(Branch, Branch.id == Member.branch_id).where(
                Branch.church_id == principal.church_id
            )
        else:
            stmt = stmt.where(Member.branch_id == principal.branch_id)
        return list((await db.execute(stmt)).scalars().all())

    async def get_member(self, db: AsyncSession, member_id: str, principal: CurrentUser) -> Member:
        member = await self._load(db, member_id)
        if member.branch.church_id != principal.church_id:
            # Other tenants' members are indistinguishable from missing ones
            raise NotFoundError(message="Membro não encontrado", resource="member", resource_id=member_id)
        return member

    async def get_me(self, db: AsyncSession, principal: CurrentUser) -> Member:
        if not principal.member_id:
            raise NotFoundError(message="Perfil de membro não encontrado", resource="member")
        return await self._load(db, principal.member_id)

    async def validate_member_creation(
        self, db: AsyncSession, creator: Member, target_branch_id: str, target_role: Role
    ) -> Branch:
        target_branch = (
            await db.execute(
                select(Branch)
                .where(Branch.id == target_branch_id)
                .options(selectinload(Branch.church))
            )
        ).scalar_one_or_none()
        if target_branch is None:
            raise NotFoundError(message="Filial não encontrada", resource="branch", resource_id=target_branch_id)
        if creator.role in (Role.ADMINFILIAL, Role.COORDINATOR) and creator.branch_id != target_branch_id:
            raise ForbiddenError(message="Você só pode criar membros na sua própria filial")
        if target_branch.church_id != creator.branch.church_id:
            raise ForbiddenError(message="Você não pode criar membros em filiais de outras igrejas")
        validate_role_hierarchy(creator.role, target_role)
        return target_branch

    async def create_member(
        self, db: AsyncSession, data: MemberCreate, principal: CurrentUser
    ) -> Member:
        creator = await self._creator(db, principal)
        target_branch_id = data.branch_id or creator.branch_id
        branch = await self.validate_member_creation(db, creator, target_branch_id, data.role)

        # Why the owner: limits follow the subscription of whoever created the
        # church, not of the admin adding members
        church_owner = branch.church.created_by_user_id
        await plan_service.check_members_limit(db, church_owner or principal.sub, branch.church_id)

        taken = (
            await db.execute(select(Member.id).where(Member.email == data.email))
        ).scalar_one_or_none()
        if taken:
            raise InvariantViolationError(message="Já existe um membro com este email")

        await self._check_position(db, data.position_id, branch.church_id)

        user_id = None
        if data.password:
            existing_user = (
                await db.execute(select(User).where(User.email == data.email))
            ).scalar_one_or_none()
            if existing_user is not None:
                raise InvariantViolationError(message="Já existe um usuário com este email")
            user = User(name=data.name, email=data.email, password_hash=hash_password(data.password))
            db.add(user)
            await db.flush()
            user_id = user.id

        member = Member(
            name=data.name,
            email=data.email,
            role=data.role,
            branch_id=branch.id,
            user_id=user_id,
            position_id=data.position_id,
            phone=data.phone,
            address=data.address,
            birth_date=data.birth_date,
            avatar_url=data.avatar_url,
        )
        db.add(member)
        await db.flush()

        if data.permissions:
            await permission_service.assign_permissions(db, member.id, data.permissions)

        logger.info(
            "Member %s created in branch %s with role %s by member %s",
            member.id, branch.id, data.role.value, creator.id,
        )
        return await self._load(db, member.id)

    async def _check_position(self, db: AsyncSession, position_id, church_id: str) -> None:
        if position_id is None:
            return
        position = await db.get(ChurchPosition, position_id)
        if position is None or position.church_id != church_id:
            raise NotFoundError(message="Cargo não encontrado", resource="position", resource_id=position_id)

    def validate_member_edit(self, editor: Member, target: Member) -> None:
        if target.role == Role.ADMINGERAL and editor.role != Role.ADMINGERAL:
            raise ForbiddenError(
                message="Apenas um administrador geral pode editar o administrador geral"
            )
        if editor.role == Role.ADMINGERAL:
            if editor.branch.church_id != target.branch.church_id:
                raise ForbiddenError(message="Você só pode editar membros da sua igreja")
            return
        if editor.role == Role.ADMINFILIAL:
            if editor.branch_id != target.branch_id:
                raise ForbiddenError(message="Você só pode editar membros da sua filial")
            return
        if editor.id != target.id:
            raise ForbiddenError(message="Você só pode editar seu próprio perfil")

    async def update_member(
        self, db: AsyncSession, member_id: str, data: MemberUpdate, principal: CurrentUser
    ) -> Member:
        editor = await self._creator(db, principal)
        target = await self._load(db, member_id)
        self.validate_member_edit(editor, target)

        changes = data.model_dump(exclude_unset=True)
        new_role = changes.pop("role", None)
        if new_role is not None and new_role != target.role:
            if editor.id == target.id:
                raise ForbiddenError(message="Você não pode alterar seu próprio papel")
            validate_role_hierarchy(editor.role, new_role)
            target.role = new_role

        if "position_id" in changes:
            await self._check_position(db, changes["position_id"], target.branch.church_id)

        for field, value in changes.items():
            if field == "name" and value is None:
                continue
            setattr(target, field, value)
        await db.flush()
        logger.info("Member %s updated by member %s", target.id, editor.id)
        return await self._load(db, target.id)

    async def delete_member(self, db: AsyncSession, member_id: str, principal: CurrentUser) -> None:
        editor = await self._creator(db, principal)
        target = await self._load(db, member_id)
        if editor.id == target.id:
            raise InvariantViolationError(message="Você não pode excluir seu próprio perfil")
        if target.role == Role.ADMINGERAL:
            raise ForbiddenError(message="O administrador geral não pode ser excluído")
        self.validate_member_edit(editor, target)

        await db.delete(target)
        await db.flush()
        logger.info("Member %s deleted by member %s", member_id, editor.id)


member_service = MemberService()
