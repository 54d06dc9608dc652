"""
ChurchApp Backend — Finance Tests
===================================

What we test:
    ✅ Summary: entries, exits and total over the branch ledger
    ✅ Amount must be strictly positive; type must be ENTRY or EXIT
    ✅ Writes need a management role AND finances_manage
    ✅ Users without a branch get 400; other branches' rows are 404
"""

from decimal import Decimal

import pytest

from churchapp.models import Role, Transaction, TransactionType
from churchapp.services.finance_service import summarize


class TestSummarize:

    def test_totals(self):
        rows = [
            Transaction(title="Dízimo", amount=Decimal("100.00"), type=TransactionType.ENTRY),
            Transaction(title="Oferta", amount=Decimal("50.00"), type=TransactionType.ENTRY),
            Transaction(title="Luz", amount=Decimal("30.00"), type=TransactionType.EXIT),
        ]
        summary = summarize(rows)
        assert (summary.entries, summary.exits, summary.total) == (150, 30, 120)

    def test_empty_ledger(self):
        summary = summarize([])
        assert (summary.entries, summary.exits, summary.total) == (0, 0, 0)

    def test_decimal_precision(self):
        rows = [
            Transaction(title="a", amount=Decimal("0.10"), type=TransactionType.ENTRY),
            Transaction(title="b", amount=Decimal("0.20"), type=TransactionType.ENTRY),
        ]
        assert summarize(rows).entries == 0.3


class TestFinanceRoutes:

    async def _treasurer(self, factory, role=Role.ADMINGERAL, permissions=()):
        _, branch = await factory.church()
        member = await factory.member(branch, role=role, permissions=permissions)
        return branch, await factory.headers_for(member)

    @pytest.mark.asyncio
    async def test_ledger_with_summary(self, client, factory):
        _, headers = await self._treasurer(factory)
        for title, amount, kind in [("Dízimo", 100, "ENTRY"), ("Oferta", "50.00", "ENTRY"), ("Luz", 30, "EXIT")]:
            created = await client.post(
                "/finances", json={"title": title, "amount": amount, "type": kind}, headers=headers
            )
            assert created.status_code == 201

        response = await client.get("/finances", headers=headers)

        assert response.status_code == 200
        body = response.json()
        assert len(body["transactions"]) == 3
        assert body["summary"] == {"entries": 150.0, "exits": 30.0, "total": 120.0}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", [0, -5, "-0.01"])
    async def test_non_positive_amount(self, client, factory, amount):
        _, headers = await self._treasurer(factory)
        response = await client.post(
            "/finances", json={"title": "Oferta", "amount": amount, "type": "ENTRY"}, headers=headers
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Valor deve ser positivo"

    @pytest.mark.asyncio
    async def test_unknown_type(self, client, factory):
        _, headers = await self._treasurer(factory)
        response = await client.post(
            "/finances", json={"title": "Oferta", "amount": 10, "type": "TRANSFER"}, headers=headers
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Tipo deve ser ENTRY ou EXIT"

    @pytest.mark.asyncio
    async def test_blank_title(self, client, factory):
        _, headers = await self._treasurer(factory)
        response = await client.post(
            "/finances", json={"title": " ", "amount": 10, "type": "EXIT"}, headers=headers
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Título é obrigatório"

    @pytest.mark.asyncio
    async def test_member_role_is_forbidden_even_with_permission(self, client, factory):
        _, headers = await self._treasurer(factory, role=Role.MEMBER, permissions=["finances_manage"])
        response = await client.post(
            "/finances", json={"title": "Oferta", "amount": 10, "type": "ENTRY"}, headers=headers
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_coordinator_needs_permission(self, client, factory):
        _, headers = await self._treasurer(factory, role=Role.COORDINATOR)
        response = await client.post(
            "/finances", json={"title": "Oferta", "amount": 10, "type": "ENTRY"}, headers=headers
        )
        assert response.status_code == 403
        assert response.json()["details"]["missing"] == ["finances_manage"]

    @pytest.mark.asyncio
    async def test_coordinator_with_permission(self, client, factory):
        branch, headers = await self._treasurer(
            factory, role=Role.COORDINATOR, permissions=["finances_manage"]
        )
        response = await client.post(
            "/finances",
            json={"title": "Oferta", "amount": "12.50", "type": "ENTRY", "category": "ofertas"},
            headers=headers,
        )
        assert response.status_code == 201
        body = response.json()
        assert body["amount"] == 12.5
        assert body["branchId"] == branch.id
        assert body["category"] == "ofertas"

    @pytest.mark.asyncio
    async def test_user_without_branch(self, client, factory):
        user = await factory.user()
        response = await client.get("/finances", headers=factory.user_headers(user))
        assert response.status_code == 400
        assert response.json()["message"] == "Usuário não está vinculado a uma filial"

    @pytest.mark.asyncio
    async def test_other_branch_transaction_is_not_found(self, client, factory):
        _, own_headers = await self._treasurer(factory)
        _, other_headers = await self._treasurer(factory)
        created = await client.post(
            "/finances", json={"title": "Oferta", "amount": 10, "type": "ENTRY"}, headers=other_headers
        )

        response = await client.get(f"/finances/{created.json()['id']}", headers=own_headers)
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_update_and_delete(self, client, factory):
        _, headers = await self._treasurer(factory)
        created = (await client.post(
            "/finances", json={"title": "Oferta", "amount": 10, "type": "ENTRY"}, headers=headers
        )).json()

        updated = await client.put(
            f"/finances/{created['id']}", json={"amount": 25}, headers=headers
        )
        assert updated.status_code == 200
        assert updated.json()["amount"] == 25.0
        assert updated.json()["title"] == "Oferta"

        deleted = await client.delete(f"/finances/{created['id']}", headers=headers)
        assert deleted.status_code == 204
        missing = await client.get(f"/finances/{created['id']}", headers=headers)
        assert missing.status_code == 404
