"""
ChurchApp Backend — Platform Admin Tests
==========================================

What we test:
    ✅ No admin principal → 401, before any role evaluation
    ✅ Admin role outside the route's list → 403
    ✅ Allowed role → 200 with the listing
    ✅ Admin login: same 401 for unknown, inactive and wrong password
"""

import pytest
from fastapi import FastAPI, Request

from churchapp.dependencies import require_admin, require_admin_role
from churchapp.exceptions import ForbiddenError, UnauthorizedError
from churchapp.models import AdminRole, Role
from churchapp.security import decode_access_token

from conftest import DEFAULT_PASSWORD


def _request_with(admin) -> Request:
    request = Request({"type": "http", "app": FastAPI(), "headers": []})
    request.state.admin_user = admin
    return request


class TestGateOrdering:

    def test_missing_principal_is_401(self):
        with pytest.raises(UnauthorizedError):
            require_admin(_request_with(None))

    def test_unset_state_is_401(self):
        request = Request({"type": "http", "app": FastAPI(), "headers": []})
        with pytest.raises(UnauthorizedError):
            require_admin(request)

    @pytest.mark.asyncio
    async def test_role_outside_list_is_403(self, factory):
        admin = await factory.admin(role=AdminRole.FINANCE)
        request = _request_with(admin)
        require_admin(request)
        with pytest.raises(ForbiddenError):
            require_admin_role(request, [AdminRole.SUPERADMIN, AdminRole.SUPPORT])


class TestAdminRoutes:

    @pytest.mark.asyncio
    async def test_no_token_is_401(self, client):
        response = await client.get("/admin/users")
        assert response.status_code == 401
        assert response.json()["message"] == "Autenticação de administrador necessária"

    @pytest.mark.asyncio
    async def test_member_token_is_401(self, client, factory):
        _, branch = await factory.church()
        member = await factory.member(branch, role=Role.ADMINGERAL)
        response = await client.get("/admin/churches", headers=await factory.headers_for(member))
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_inactive_admin_is_401(self, client, factory):
        admin = await factory.admin(is_active=False)
        response = await client.get("/admin/churches", headers=factory.admin_headers(admin))
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_finance_admin_cannot_list_users(self, client, factory):
        admin = await factory.admin(role=AdminRole.FINANCE)
        headers = factory.admin_headers(admin)

        users = await client.get("/admin/users", headers=headers)
        churches = await client.get("/admin/churches", headers=headers)

        assert users.status_code == 403
        assert churches.status_code == 200

    @pytest.mark.asyncio
    async def test_superadmin_lists_users_with_plan(self, client, factory):
        admin = await factory.admin(role=AdminRole.SUPERADMIN)
        free_user = await factory.user(email="gratis@igreja.com")
        paying = await factory.user(email="pagante@igreja.com")
        await factory.plan(name="premium", subscriber=paying)

        response = await client.get("/admin/users", headers=factory.admin_headers(admin))

        assert response.status_code == 200
        plans = {u["email"]: u["plan"] for u in response.json()}
        assert plans[free_user.email] == "free"
        assert plans[paying.email] == "premium"

    @pytest.mark.asyncio
    async def test_churches_with_branch_count(self, client, factory):
        admin = await factory.admin(role=AdminRole.SUPPORT)
        church, _ = await factory.church()
        await factory.branch(church)

        response = await client.get("/admin/churches", headers=factory.admin_headers(admin))

        assert response.status_code == 200
        assert response.json()[0]["branchCount"] == 2


class TestAdminLogin:

    @pytest.mark.asyncio
    async def test_login(self, client, factory):
        admin = await factory.admin(role=AdminRole.SUPPORT, email="suporte@churchapp.com")

        response = await client.post(
            "/admin/auth/login", json={"email": "suporte@churchapp.com", "password": DEFAULT_PASSWORD}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["admin"]["adminRole"] == "SUPPORT"
        assert body["admin"]["lastLoginAt"] is not None
        claims = decode_access_token(body["token"])
        assert claims["type"] == "admin"
        assert claims["adminUserId"] == admin.id

        me = await client.get(
            "/admin/auth/me", headers={"Authorization": f"Bearer {body['token']}"}
        )
        assert me.status_code == 200
        assert me.json()["email"] == "suporte@churchapp.com"

    @pytest.mark.asyncio
    async def test_rejections_share_one_response(self, client, factory):
        await factory.admin(email="ativo@churchapp.com")
        await factory.admin(email="inativo@churchapp.com", is_active=False)

        attempts = [
            ("ativo@churchapp.com", "errada"),
            ("inativo@churchapp.com", DEFAULT_PASSWORD),
            ("ninguem@churchapp.com", DEFAULT_PASSWORD),
        ]
        bodies = []
        for email, password in attempts:
            response = await client.post(
                "/admin/auth/login", json={"email": email, "password": password}
            )
            assert response.status_code == 401
            bodies.append((response.json()["error"], response.json()["message"]))

        assert len(set(bodies)) == 1
