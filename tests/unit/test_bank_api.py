# tests/unit/test_bank_api.py
"""API tests for the bank and assignment endpoints (in-memory store)."""

import pytest
from httpx import AsyncClient

from src.mt_bank.application.wiring import ReferenceData


def _seed_bank(store, bank_id: str, name: str, **kwargs) -> None:
    data = {"name": name, "accountHolder": "Platform", "balance": 100, "isActive": True}
    data.update(kwargs)
    store.seed("platformBanks", bank_id, data)


class TestAuth:
    @pytest.mark.asyncio
    async def test_missing_token_is_401(self, client: AsyncClient) -> None:
        resp = await client.get("/api/v1/banks/active")
        assert resp.status_code == 401

    @pytest.mark.asyncio
    async def test_exchange_cannot_list_all_banks(
        self, client: AsyncClient, exchange_headers
    ) -> None:
        resp = await client.get("/api/v1/banks", headers=exchange_headers)
        assert resp.status_code == 403
        assert resp.json()["code"] == 1002

    @pytest.mark.asyncio
    async def test_exchange_cannot_read_other_exchange(
        self, client: AsyncClient, exchange_headers
    ) -> None:
        resp = await client.get("/api/v1/exchanges/ex2/banks", headers=exchange_headers)
        assert resp.status_code == 403


class TestBanks:
    @pytest.mark.asyncio
    async def test_create_then_list(self, client: AsyncClient, admin_headers) -> None:
        resp = await client.post("/api/v1/banks", headers=admin_headers, json={
            "name": "Arab Bank",
            "account_holder": "MT Platform",
            "cliq_details": {"type": "alias", "value": "MTPAY"},
            "balance": 1000,
        })
        assert resp.status_code == 201
        bank_id = resp.json()["data"]["id"]

        listed = await client.get("/api/v1/banks", headers=admin_headers)
        body = listed.json()
        assert body["code"] == 0
        assert body["degraded"] is False
        assert [b["id"] for b in body["data"]] == [bank_id]
        assert body["data"][0]["cliq_value"] == "MTPAY"

    @pytest.mark.asyncio
    async def test_create_validation_is_422(self, client: AsyncClient, admin_headers) -> None:
        resp = await client.post("/api/v1/banks", headers=admin_headers, json={
            "name": "Arab Bank", "account_holder": "MT", "balance": -5,
        })
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_update_unknown_bank_is_404(self, client: AsyncClient, admin_headers) -> None:
        resp = await client.patch(
            "/api/v1/banks/ghost", headers=admin_headers, json={"name": "New"}
        )
        assert resp.status_code == 404
        assert resp.json()["code"] == 2001

    @pytest.mark.asyncio
    async def test_update_balance(
        self, client: AsyncClient, admin_headers, refdata: ReferenceData, store
    ) -> None:
        _seed_bank(store, "b1", "Arab Bank")

        resp = await client.put(
            "/api/v1/banks/b1/balance", headers=admin_headers, json={"balance": 77.777}
        )

        assert resp.status_code == 200
        assert (await refdata.banks.get_bank("b1")).balance == 77.78

    @pytest.mark.asyncio
    async def test_delete_assigned_bank_is_409(
        self, client: AsyncClient, admin_headers, refdata: ReferenceData, store
    ) -> None:
        _seed_bank(store, "b1", "Arab Bank")
        await refdata.registry.assign("ex1", "b1", "private", "admin-1")

        resp = await client.delete("/api/v1/banks/b1", headers=admin_headers)

        assert resp.status_code == 409
        assert resp.json()["code"] == 2002

    @pytest.mark.asyncio
    async def test_active_list_for_exchange_user(
        self, client: AsyncClient, exchange_headers, store
    ) -> None:
        _seed_bank(store, "b1", "Arab Bank")
        _seed_bank(store, "b2", "Closed", isActive=False)

        resp = await client.get("/api/v1/banks/active", headers=exchange_headers)

        assert [b["id"] for b in resp.json()["data"]] == ["b1"]

    @pytest.mark.asyncio
    async def test_bulk_status(self, client: AsyncClient, admin_headers, store) -> None:
        _seed_bank(store, "b1", "Arab Bank")
        _seed_bank(store, "b2", "Housing Bank")

        resp = await client.post("/api/v1/banks/bulk-status", headers=admin_headers, json={
            "bank_ids": ["b1", "b2"], "is_active": False,
        })

        assert resp.json()["data"] == {"updated": 2, "is_active": False}
        assert (await store.get("platformBanks", "b2")).get("isActive") is False

    @pytest.mark.asyncio
    async def test_bulk_status_failure_is_500(
        self, client: AsyncClient, admin_headers, store
    ) -> None:
        _seed_bank(store, "b1", "Arab Bank")

        resp = await client.post("/api/v1/banks/bulk-status", headers=admin_headers, json={
            "bank_ids": ["b1", "ghost"], "is_active": False,
        })

        assert resp.status_code == 500
        assert resp.json()["code"] == 9002
        assert (await store.get("platformBanks", "b1")).get("isActive") is True


class TestAssignments:
    @pytest.mark.asyncio
    async def test_assign_list_remove(
        self, client: AsyncClient, admin_headers, exchange_headers, store
    ) -> None:
        _seed_bank(store, "b1", "Arab Bank")

        created = await client.post("/api/v1/assignments", headers=admin_headers, json={
            "exchange_id": "ex1", "bank_id": "b1",
        })
        assert created.status_code == 201

        dup = await client.post("/api/v1/assignments", headers=admin_headers, json={
            "exchange_id": "ex1", "bank_id": "b1",
        })
        assert dup.status_code == 409

        banks = await client.get("/api/v1/exchanges/ex1/banks", headers=exchange_headers)
        data = banks.json()["data"]
        assert [item["bank"]["id"] for item in data] == ["b1"]
        assert data[0]["assignment"]["assigned_by"] == "admin-1"

        removed = await client.delete("/api/v1/assignments/ex1/b1", headers=admin_headers)
        assert removed.json()["data"] == {"deactivated": 1}

        again = await client.get("/api/v1/exchanges/ex1/banks", headers=exchange_headers)
        assert again.json()["data"] == []

    @pytest.mark.asyncio
    async def test_list_all_assignments(self, client: AsyncClient, admin_headers, store) -> None:
        store.seed("bankAssignments", "a1", {"exchangeId": "ex1", "bankId": "b1", "isActive": True})

        resp = await client.get("/api/v1/assignments", headers=admin_headers)

        assert [a["id"] for a in resp.json()["data"]] == ["a1"]


class TestDegraded:
    @pytest.mark.asyncio
    async def test_offline_read_is_empty_and_flagged(
        self, client: AsyncClient, exchange_headers, refdata: ReferenceData, store
    ) -> None:
        _seed_bank(store, "b1", "Arab Bank")
        refdata.gateway.disable_network()

        resp = await client.get("/api/v1/banks/active", headers=exchange_headers)

        assert resp.status_code == 200
        assert resp.json()["data"] == []
        assert resp.json()["degraded"] is True

    @pytest.mark.asyncio
    async def test_offline_write_is_503(
        self, client: AsyncClient, admin_headers, refdata: ReferenceData
    ) -> None:
        refdata.gateway.disable_network()

        resp = await client.post("/api/v1/assignments", headers=admin_headers, json={
            "exchange_id": "ex1", "bank_id": "b1",
        })

        assert resp.status_code == 503
        assert resp.json()["code"] == 9001


class TestHealth:
    @pytest.mark.asyncio
    async def test_reports_store_and_cache(self, client: AsyncClient) -> None:
        resp = await client.get("/health")
        body = resp.json()
        assert body["status"] == "ok"
        assert body["store"] == "online"
        assert body["cache"] == {"size": 0, "hit_rate": 0.0}
