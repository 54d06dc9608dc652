"""
ChurchApp Backend — Contribution Campaign Tests
=================================================

What we test:
    ✅ Create with goal and dd/MM/yyyy end date
    ✅ Goal must be positive
    ✅ Toggle flips is_active
    ✅ Creating needs contributions_manage
"""

import pytest

from churchapp.models import Role


class TestContributions:

    async def _headers(self, factory, permissions=("contributions_manage",)):
        _, branch = await factory.church()
        member = await factory.member(branch, role=Role.COORDINATOR, permissions=permissions)
        return await factory.headers_for(member)

    @pytest.mark.asyncio
    async def test_create_and_toggle(self, client, factory):
        headers = await self._headers(factory)

        created = await client.post(
            "/contributions",
            json={"title": "Reforma do templo", "goal": "15000.00", "endDate": "31/12/2030"},
            headers=headers,
        )
        assert created.status_code == 201
        body = created.json()
        assert body["goal"] == 15000.0
        assert body["isActive"] is True

        toggled = await client.patch(f"/contributions/{body['id']}/toggle", headers=headers)
        assert toggled.json()["isActive"] is False
        toggled = await client.patch(f"/contributions/{body['id']}/toggle", headers=headers)
        assert toggled.json()["isActive"] is True

    @pytest.mark.asyncio
    @pytest.mark.parametrize("goal", [0, -100])
    async def test_goal_must_be_positive(self, client, factory, goal):
        headers = await self._headers(factory)
        response = await client.post(
            "/contributions", json={"title": "Missões", "goal": goal}, headers=headers
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Meta deve ser positiva"

    @pytest.mark.asyncio
    async def test_needs_permission(self, client, factory):
        headers = await self._headers(factory, permissions=())
        response = await client.post("/contributions", json={"title": "Missões"}, headers=headers)
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_list_and_missing(self, client, factory):
        headers = await self._headers(factory)
        await client.post("/contributions", json={"title": "Missões"}, headers=headers)
        await client.post("/contributions", json={"title": "Cestas básicas"}, headers=headers)

        listed = await client.get("/contributions", headers=headers)
        missing = await client.get("/contributions/nao-existe", headers=headers)

        assert len(listed.json()) == 2
        assert missing.status_code == 404
        assert missing.json()["message"] == "Contribuição não encontrada"
