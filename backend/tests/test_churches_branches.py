"""
ChurchApp Backend — Church Onboarding and Branch Tests
========================================================

What we test:
    ✅ Creating a church creates its main branch, promotes the caller to
       ADMINGERAL with every permission, and seeds default positions
    ✅ An existing member with the caller's email is reused
    ✅ The free plan allows one branch; paid plans lift the limit
    ✅ The main branch cannot be deleted
    ✅ Branch listings embed the church; other churches are off limits
"""

import pytest
from sqlalchemy import select

from churchapp.models import PERMISSION_TYPES, Member, Role

from conftest import DEFAULT_PASSWORD


class TestOnboarding:

    @pytest.mark.asyncio
    async def test_create_church(self, client, factory):
        user = await factory.user(email="pastor@igreja.com", name="Pr. João")

        response = await client.post(
            "/churches",
            json={"name": "Igreja Esperança", "pastorName": "Pr. João"},
            headers=factory.user_headers(user),
        )

        assert response.status_code == 201
        body = response.json()
        assert body["church"]["name"] == "Igreja Esperança"
        assert body["church"]["createdByUserId"] == user.id
        assert len(body["church"]["branches"]) == 1
        assert body["branch"]["name"] == "Sede"
        assert body["branch"]["isMainBranch"] is True
        assert body["branch"]["pastorName"] == "Pr. João"
        assert body["positionsCreated"] == 6

        login = await client.post(
            "/auth/login", json={"email": "pastor@igreja.com", "password": DEFAULT_PASSWORD}
        )
        member = login.json()["member"]
        assert member["id"] == body["memberId"]
        assert member["role"] == "ADMINGERAL"
        assert member["branchId"] == body["branch"]["id"]
        assert member["permissions"] == sorted(PERMISSION_TYPES)

    @pytest.mark.asyncio
    async def test_custom_branch_name(self, client, factory):
        user = await factory.user()
        response = await client.post(
            "/churches",
            json={"name": "Igreja Nova", "branchName": "Matriz"},
            headers=factory.user_headers(user),
        )
        assert response.json()["branch"]["name"] == "Matriz"

    @pytest.mark.asyncio
    async def test_reuses_member_with_same_email(self, client, factory, db):
        _, old_branch = await factory.church(name="Igreja Antiga")
        existing = await factory.member(old_branch, with_user=False, email="lider@igreja.com")
        user = await factory.user(email="lider@igreja.com")

        response = await client.post(
            "/churches", json={"name": "Igreja Nova"}, headers=factory.user_headers(user)
        )

        assert response.json()["memberId"] == existing.id
        row = (
            await db.execute(
                select(Member.role, Member.user_id, Member.branch_id).where(Member.id == existing.id)
            )
        ).one()
        assert row.role == Role.ADMINGERAL
        assert row.user_id == user.id
        assert row.branch_id == response.json()["branch"]["id"]

    @pytest.mark.asyncio
    async def test_blank_name(self, client, factory):
        user = await factory.user()
        response = await client.post(
            "/churches", json={"name": "  "}, headers=factory.user_headers(user)
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Nome é obrigatório"


class TestChurchAccess:

    @pytest.mark.asyncio
    async def test_get_own_and_foreign_church(self, client, factory):
        church, branch = await factory.church()
        other, _ = await factory.church(name="Igreja Vizinha")
        member = await factory.member(branch)
        headers = await factory.headers_for(member)

        own = await client.get(f"/churches/{church.id}", headers=headers)
        foreign = await client.get(f"/churches/{other.id}", headers=headers)
        missing = await client.get("/churches/nao-existe", headers=headers)

        assert own.status_code == 200
        assert own.json()["branches"][0]["isMainBranch"] is True
        assert foreign.status_code == 403
        assert missing.status_code == 404

    @pytest.mark.asyncio
    async def test_update_is_admingeral_only(self, client, factory):
        church, branch = await factory.church()
        admin = await factory.member(branch, role=Role.ADMINGERAL)
        branch_admin = await factory.member(branch, role=Role.ADMINFILIAL)

        denied = await client.put(
            f"/churches/{church.id}", json={"phone": "1111"},
            headers=await factory.headers_for(branch_admin),
        )
        allowed = await client.put(
            f"/churches/{church.id}", json={"name": "Igreja Renovada", "phone": "2222"},
            headers=await factory.headers_for(admin),
        )

        assert denied.status_code == 403
        assert allowed.status_code == 200
        assert allowed.json()["name"] == "Igreja Renovada"
        assert allowed.json()["phone"] == "2222"


class TestBranches:

    @pytest.mark.asyncio
    async def test_free_plan_allows_one_branch(self, client, factory):
        owner = await factory.user()
        church, branch = await factory.church(owner=owner)
        admin = await factory.member(branch, role=Role.ADMINGERAL)

        response = await client.post(
            "/branches",
            json={"name": "Filial Sul", "churchId": church.id},
            headers=await factory.headers_for(admin),
        )

        assert response.status_code == 403
        body = response.json()
        assert body["error"] == "plan_limit_reached"
        assert body["details"] == {"resource": "filiais", "limit": 1, "current": 1}

    @pytest.mark.asyncio
    async def test_paid_plan_creates_branch(self, client, factory):
        owner = await factory.user()
        await factory.plan(name="igreja-plus", max_branches=5, subscriber=owner)
        church, branch = await factory.church(owner=owner)
        admin = await factory.member(branch, role=Role.ADMINGERAL)

        response = await client.post(
            "/branches",
            json={"name": "Filial Sul", "churchId": church.id},
            headers=await factory.headers_for(admin),
        )

        assert response.status_code == 201
        assert response.json()["isMainBranch"] is False
        assert response.json()["churchId"] == church.id

    @pytest.mark.asyncio
    async def test_outsider_cannot_create_branch(self, client, factory):
        church, _ = await factory.church()
        _, other_branch = await factory.church(name="Igreja Vizinha")
        outsider = await factory.member(other_branch, role=Role.ADMINGERAL)

        response = await client.post(
            "/branches",
            json={"name": "Filial Sul", "churchId": church.id},
            headers=await factory.headers_for(outsider),
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_listing_embeds_church(self, client, factory):
        church, branch = await factory.church(name="Igreja Central")
        await factory.branch(church, name="Filial Norte")
        member = await factory.member(branch)

        response = await client.get("/branches/branches", headers=await factory.headers_for(member))

        assert response.status_code == 200
        branches = response.json()
        assert [b["name"] for b in branches] == ["Sede", "Filial Norte"]
        assert all(b["church"]["name"] == "Igreja Central" for b in branches)

    @pytest.mark.asyncio
    async def test_get_branch(self, client, factory):
        church, branch = await factory.church()
        _, foreign_branch = await factory.church(name="Igreja Vizinha")
        member = await factory.member(branch)
        headers = await factory.headers_for(member)

        own = await client.get(f"/branches/branches/{branch.id}", headers=headers)
        foreign = await client.get(f"/branches/branches/{foreign_branch.id}", headers=headers)

        assert own.status_code == 200
        assert own.json()["church"]["id"] == church.id
        assert foreign.status_code == 404

    @pytest.mark.asyncio
    async def test_main_branch_cannot_be_deleted(self, client, factory):
        church, main = await factory.church()
        extra = await factory.branch(church)
        admin = await factory.member(main, role=Role.ADMINGERAL)
        headers = await factory.headers_for(admin)

        blocked = await client.delete(f"/branches/{main.id}", headers=headers)
        removed = await client.delete(f"/branches/{extra.id}", headers=headers)

        assert blocked.status_code == 409
        assert blocked.json()["message"] == "A filial principal não pode ser excluída"
        assert removed.status_code == 204
