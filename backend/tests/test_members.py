"""
ChurchApp Backend — Member Tests
==================================

What we test:
    ✅ Role hierarchy: nobody grants ADMINGERAL, COORDINATOR grants MEMBER only
    ✅ Creation honours branch scope, plan limits and unique email
    ✅ Editing: self-edit allowed, own role change refused
    ✅ Only an ADMINGERAL edits (or re-roles) an ADMINGERAL
    ✅ Deletion: never yourself, never an ADMINGERAL
"""

import pytest
from sqlalchemy import select

from churchapp.exceptions import ForbiddenError
from churchapp.models import Member, Role
from churchapp.services.member_service import validate_role_hierarchy

from conftest import DEFAULT_PASSWORD


class TestRoleHierarchy:

    @pytest.mark.parametrize("creator", list(Role))
    def test_nobody_assigns_admingeral(self, creator):
        with pytest.raises(ForbiddenError):
            validate_role_hierarchy(creator, Role.ADMINGERAL)

    @pytest.mark.parametrize(
        "creator,target",
        [
            (Role.ADMINGERAL, Role.ADMINFILIAL),
            (Role.ADMINGERAL, Role.MEMBER),
            (Role.ADMINFILIAL, Role.COORDINATOR),
            (Role.COORDINATOR, Role.MEMBER),
        ],
    )
    def test_allowed(self, creator, target):
        validate_role_hierarchy(creator, target)

    @pytest.mark.parametrize(
        "creator,target",
        [
            (Role.COORDINATOR, Role.COORDINATOR),
            (Role.COORDINATOR, Role.ADMINFILIAL),
            (Role.MEMBER, Role.MEMBER),
        ],
    )
    def test_refused(self, creator, target):
        with pytest.raises(ForbiddenError):
            validate_role_hierarchy(creator, target)


class TestMemberCreation:

    @pytest.mark.asyncio
    async def test_admin_creates_member_with_login(self, client, factory):
        _, branch = await factory.church()
        admin = await factory.member(branch, role=Role.ADMINGERAL)

        response = await client.post(
            "/members",
            json={
                "name": "Débora",
                "email": "Debora@Igreja.com",
                "password": "segredo1",
                "role": "COORDINATOR",
                "birthDate": "1990-05-17",
                "permissions": ["events_manage"],
            },
            headers=await factory.headers_for(admin),
        )

        assert response.status_code == 201
        body = response.json()
        assert body["email"] == "debora@igreja.com"
        assert body["role"] == "COORDINATOR"
        assert body["branchId"] == branch.id
        assert body["permissions"] == ["events_manage"]
        assert body["userId"] is not None

        login = await client.post(
            "/auth/login", json={"email": "debora@igreja.com", "password": "segredo1"}
        )
        assert login.status_code == 200
        assert login.json()["member"]["id"] == body["id"]

    @pytest.mark.asyncio
    async def test_duplicate_email(self, client, factory):
        _, branch = await factory.church()
        admin = await factory.member(branch, role=Role.ADMINGERAL)
        existing = await factory.member(branch)

        response = await client.post(
            "/members",
            json={"name": "Cópia", "email": existing.email},
            headers=await factory.headers_for(admin),
        )
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_invalid_email(self, client, factory):
        _, branch = await factory.church()
        admin = await factory.member(branch, role=Role.ADMINGERAL)
        response = await client.post(
            "/members",
            json={"name": "Sem Email", "email": "sem-arroba"},
            headers=await factory.headers_for(admin),
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Email inválido"

    @pytest.mark.asyncio
    async def test_plan_member_limit(self, client, factory):
        owner = await factory.user()
        await factory.plan(name="mini", max_members=2, subscriber=owner)
        _, branch = await factory.church(owner=owner)
        admin = await factory.member(branch, role=Role.ADMINGERAL)
        await factory.member(branch)

        response = await client.post(
            "/members",
            json={"name": "Terceiro", "email": "terceiro@igreja.com"},
            headers=await factory.headers_for(admin),
        )

        assert response.status_code == 403
        assert response.json()["error"] == "plan_limit_reached"
        assert response.json()["details"]["resource"] == "membros"

    @pytest.mark.asyncio
    async def test_branch_admin_stays_in_own_branch(self, client, factory):
        church, branch = await factory.church()
        other_branch = await factory.branch(church)
        branch_admin = await factory.member(
            branch, role=Role.ADMINFILIAL, permissions=["members_manage"]
        )

        response = await client.post(
            "/members",
            json={"name": "Fora", "email": "fora@igreja.com", "branchId": other_branch.id},
            headers=await factory.headers_for(branch_admin),
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_coordinator_cannot_create_coordinator(self, client, factory):
        _, branch = await factory.church()
        coordinator = await factory.member(
            branch, role=Role.COORDINATOR, permissions=["members_manage"]
        )

        response = await client.post(
            "/members",
            json={"name": "Par", "email": "par@igreja.com", "role": "COORDINATOR"},
            headers=await factory.headers_for(coordinator),
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_needs_members_manage(self, client, factory):
        _, branch = await factory.church()
        branch_admin = await factory.member(branch, role=Role.ADMINFILIAL)

        response = await client.post(
            "/members",
            json={"name": "Novo", "email": "novo@igreja.com"},
            headers=await factory.headers_for(branch_admin),
        )
        assert response.status_code == 403


class TestMemberReads:

    @pytest.mark.asyncio
    async def test_list_requires_members_view(self, client, factory):
        _, branch = await factory.church()
        plain = await factory.member(branch)
        viewer = await factory.member(branch, permissions=["members_view"])

        denied = await client.get("/members", headers=await factory.headers_for(plain))
        allowed = await client.get("/members", headers=await factory.headers_for(viewer))

        assert denied.status_code == 403
        assert allowed.status_code == 200
        assert len(allowed.json()) == 2

    @pytest.mark.asyncio
    async def test_admingeral_sees_whole_church(self, client, factory):
        church, branch = await factory.church()
        other_branch = await factory.branch(church)
        admin = await factory.member(branch, role=Role.ADMINGERAL)
        await factory.member(other_branch)
        _, foreign = await factory.church(name="Igreja Vizinha")
        await factory.member(foreign)

        response = await client.get("/members", headers=await factory.headers_for(admin))
        assert len(response.json()) == 2

    @pytest.mark.asyncio
    async def test_me_and_foreign_member(self, client, factory):
        _, branch = await factory.church()
        me = await factory.member(branch, name="Eu Mesmo", permissions=["members_view"])
        _, foreign_branch = await factory.church(name="Igreja Vizinha")
        stranger = await factory.member(foreign_branch)
        headers = await factory.headers_for(me)

        own = await client.get("/members/me", headers=headers)
        foreign = await client.get(f"/members/{stranger.id}", headers=headers)

        assert own.json()["name"] == "Eu Mesmo"
        assert own.json()["permissions"] == ["members_view"]
        assert foreign.status_code == 404


class TestMemberEdits:

    @pytest.mark.asyncio
    async def test_self_edit(self, client, factory):
        _, branch = await factory.church()
        member = await factory.member(branch, role=Role.COORDINATOR)
        headers = await factory.headers_for(member)

        profile = await client.put(
            f"/members/{member.id}", json={"phone": "(11) 99999-0000"}, headers=headers
        )
        role_change = await client.put(
            f"/members/{member.id}", json={"role": "MEMBER"}, headers=headers
        )

        assert profile.status_code == 200
        assert profile.json()["phone"] == "(11) 99999-0000"
        assert role_change.status_code == 403
        assert role_change.json()["message"] == "Você não pode alterar seu próprio papel"

    @pytest.mark.asyncio
    async def test_member_cannot_edit_others(self, client, factory):
        _, branch = await factory.church()
        member = await factory.member(branch)
        other = await factory.member(branch)

        response = await client.put(
            f"/members/{other.id}", json={"phone": "123"}, headers=await factory.headers_for(member)
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_admin_assigns_position(self, client, factory):
        church, branch = await factory.church()
        admin = await factory.member(branch, role=Role.ADMINGERAL)
        target = await factory.member(branch)
        deacon = await factory.position(church, "Diácono")

        response = await client.put(
            f"/members/{target.id}",
            json={"positionId": deacon.id, "role": "COORDINATOR"},
            headers=await factory.headers_for(admin),
        )

        assert response.status_code == 200
        assert response.json()["position"] == {"id": deacon.id, "name": "Diácono"}
        assert response.json()["role"] == "COORDINATOR"


    @pytest.mark.asyncio
    async def test_branch_admin_cannot_demote_general_admin(self, client, factory, db):
        _, branch = await factory.church()
        general = await factory.member(branch, role=Role.ADMINGERAL)
        branch_admin = await factory.member(branch, role=Role.ADMINFILIAL)
        headers = await factory.headers_for(branch_admin)

        demote = await client.put(f"/members/{general.id}", json={"role": "MEMBER"}, headers=headers)
        profile = await client.put(f"/members/{general.id}", json={"phone": "123"}, headers=headers)

        assert demote.status_code == 403
        assert profile.status_code == 403
        role = (await db.execute(select(Member.role).where(Member.id == general.id))).scalar_one()
        assert role == Role.ADMINGERAL

    @pytest.mark.asyncio
    async def test_general_admin_edits_own_profile(self, client, factory):
        _, branch = await factory.church()
        general = await factory.member(branch, role=Role.ADMINGERAL)

        response = await client.put(
            f"/members/{general.id}", json={"phone": "(11) 3333-0000"},
            headers=await factory.headers_for(general),
        )

        assert response.status_code == 200
        assert response.json()["role"] == "ADMINGERAL"

class TestMemberDeletion:

    @pytest.mark.asyncio
    async def test_rules(self, client, factory):
        _, branch = await factory.church()
        general = await factory.member(branch, role=Role.ADMINGERAL)
        branch_admin = await factory.member(branch, role=Role.ADMINFILIAL)
        target = await factory.member(branch)
        headers = await factory.headers_for(branch_admin)

        self_delete = await client.delete(f"/members/{branch_admin.id}", headers=headers)
        general_delete = await client.delete(f"/members/{general.id}", headers=headers)
        target_delete = await client.delete(f"/members/{target.id}", headers=headers)

        assert self_delete.status_code == 409
        assert general_delete.status_code == 403
        assert target_delete.status_code == 204

        gone = await client.get(f"/members/{target.id}", headers=headers)
        assert gone.status_code == 404

    @pytest.mark.asyncio
    async def test_member_role_cannot_delete(self, client, factory):
        _, branch = await factory.church()
        member = await factory.member(branch)
        other = await factory.member(branch)
        response = await client.delete(
            f"/members/{other.id}", headers=await factory.headers_for(member)
        )
        assert response.status_code == 403
