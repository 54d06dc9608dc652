"""
ChurchApp Backend — Permission Tests
======================================

What we test:
    ✅ Granting is idempotent: a second identical grant adds nothing
    ✅ Revocation removes only the listed types
    ✅ Revocation applies to the next request even with an older token
    ✅ Only ADMINGERAL / ADMINFILIAL of the same church manage permissions
"""

import pytest
from sqlalchemy import func, select

from churchapp.models import Permission, Role
from churchapp.services.permission_service import permission_service


class TestPermissionService:

    @pytest.mark.asyncio
    async def test_assign_skips_existing_pairs(self, db, factory):
        _, branch = await factory.church()
        member = await factory.member(branch, permissions=["members_view"])

        added = await permission_service.assign_permissions(
            db, member.id, ["members_view", "events_manage", "events_manage"]
        )
        await db.commit()

        assert added == 1
        count = (
            await db.execute(select(func.count(Permission.id)).where(Permission.member_id == member.id))
        ).scalar_one()
        assert count == 2

    @pytest.mark.asyncio
    async def test_catalog_is_distinct_stored_types(self, db, factory):
        _, branch = await factory.church()
        await factory.member(branch, permissions=["members_view", "finances_manage"])
        await factory.member(branch, permissions=["members_view"])

        assert await permission_service.list_permission_types(db) == [
            "finances_manage",
            "members_view",
        ]


class TestPermissionRoutes:

    async def _setup(self, factory):
        church, branch = await factory.church()
        admin = await factory.member(branch, role=Role.ADMINGERAL)
        target = await factory.member(branch)
        return church, branch, admin, target

    @pytest.mark.asyncio
    async def test_grant_twice_adds_once(self, client, factory):
        _, _, admin, target = await self._setup(factory)
        headers = await factory.headers_for(admin)
        body = {"permissions": ["events_manage", "members_view"]}

        first = await client.post(f"/permissions/{target.id}", json=body, headers=headers)
        second = await client.post(f"/permissions/{target.id}", json=body, headers=headers)

        assert first.json() == {"success": True, "added": 2}
        assert second.json() == {"success": True, "added": 0}

        listed = await client.get(f"/permissions/{target.id}", headers=headers)
        assert [p["type"] for p in listed.json()] == ["events_manage", "members_view"]

    @pytest.mark.asyncio
    async def test_revoke(self, client, factory):
        _, branch, admin, _ = await self._setup(factory)
        target = await factory.member(branch, permissions=["events_manage", "members_view"])
        headers = await factory.headers_for(admin)

        response = await client.request(
            "DELETE",
            f"/permissions/{target.id}",
            json={"permissions": ["events_manage", "church_manage"]},
            headers=headers,
        )

        assert response.status_code == 200
        assert response.json() == {"success": True, "removed": 1}
        listed = await client.get(f"/permissions/{target.id}", headers=headers)
        assert [p["type"] for p in listed.json()] == ["members_view"]

    @pytest.mark.asyncio
    async def test_revocation_applies_before_token_expiry(self, client, factory):
        _, branch, admin, _ = await self._setup(factory)
        coordinator = await factory.member(
            branch, role=Role.COORDINATOR, permissions=["finances_manage"]
        )
        stale_headers = await factory.headers_for(coordinator)
        transaction = {"title": "Oferta", "amount": 10, "type": "ENTRY"}

        allowed = await client.post("/finances", json=transaction, headers=stale_headers)
        assert allowed.status_code == 201

        await client.request(
            "DELETE",
            f"/permissions/{coordinator.id}",
            json={"permissions": ["finances_manage"]},
            headers=await factory.headers_for(admin),
        )

        denied = await client.post("/finances", json=transaction, headers=stale_headers)
        assert denied.status_code == 403
        assert denied.json()["details"] == {"missing": ["finances_manage"]}

    @pytest.mark.asyncio
    async def test_member_role_cannot_grant(self, client, factory):
        _, branch, _, target = await self._setup(factory)
        plain = await factory.member(branch)

        response = await client.post(
            f"/permissions/{target.id}",
            json={"permissions": ["members_view"]},
            headers=await factory.headers_for(plain),
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_other_church_member_is_not_found(self, client, factory):
        _, _, admin, _ = await self._setup(factory)
        _, other_branch = await factory.church(name="Igreja Vizinha")
        stranger = await factory.member(other_branch)

        response = await client.post(
            f"/permissions/{stranger.id}",
            json={"permissions": ["members_view"]},
            headers=await factory.headers_for(admin),
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_empty_list_is_rejected(self, client, factory):
        _, _, admin, target = await self._setup(factory)
        response = await client.post(
            f"/permissions/{target.id}",
            json={"permissions": []},
            headers=await factory.headers_for(admin),
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_blank_type_is_rejected(self, client, factory):
        _, _, admin, target = await self._setup(factory)
        response = await client.post(
            f"/permissions/{target.id}",
            json={"permissions": ["members_view", "  "]},
            headers=await factory.headers_for(admin),
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Tipo de permissão não pode ser vazio"
