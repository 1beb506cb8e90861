# tests/unit/test_commission_api.py
"""API tests for the commission endpoints."""

import pytest
from httpx import AsyncClient


@pytest.fixture
def exchange_user(store):
    store.seed("users", "ex1", {
        "role": "exchange",
        "commissionRates": {"outgoing": {"type": "percentage", "value": 1}},
    })
    return store


class TestRate:
    @pytest.mark.asyncio
    async def test_configured_rate(
        self, client: AsyncClient, exchange_headers, exchange_user
    ) -> None:
        resp = await client.get(
            "/api/v1/commission/rate", params={"direction": "outgoing"}, headers=exchange_headers
        )
        assert resp.status_code == 200
        assert resp.json()["data"] == {"type": "percentage", "value": 1.0}

    @pytest.mark.asyncio
    async def test_default_rate(self, client: AsyncClient, exchange_headers, exchange_user) -> None:
        resp = await client.get(
            "/api/v1/commission/rate", params={"direction": "incoming"}, headers=exchange_headers
        )
        assert resp.json()["data"] == {"type": "fixed", "value": 0.0}

    @pytest.mark.asyncio
    async def test_admin_zero(self, client: AsyncClient, admin_headers) -> None:
        resp = await client.get(
            "/api/v1/commission/rate", params={"direction": "outgoing"}, headers=admin_headers
        )
        assert resp.json()["data"] == {"type": "percentage", "value": 0.0}

    @pytest.mark.asyncio
    async def test_bad_direction_is_422(self, client: AsyncClient, admin_headers) -> None:
        resp = await client.get(
            "/api/v1/commission/rate", params={"direction": "up"}, headers=admin_headers
        )
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_unknown_user_is_404(self, client: AsyncClient, exchange_headers) -> None:
        resp = await client.get(
            "/api/v1/commission/rate", params={"direction": "outgoing"}, headers=exchange_headers
        )
        assert resp.status_code == 404
        assert resp.json()["code"] == 4002


class TestQuote:
    @pytest.mark.asyncio
    async def test_outgoing_quote(
        self, client: AsyncClient, exchange_headers, exchange_user
    ) -> None:
        resp = await client.post("/api/v1/commission/quote", headers=exchange_headers, json={
            "amount": 2500, "direction": "outgoing",
        })
        data = resp.json()["data"]
        assert data["commission"] == 25.0
        assert data["commission_display"] == "JOD 25.00"
        assert data["net_amount"] == 2500.0
        assert data["net_amount_display"] == "JOD 2,500.00"

    @pytest.mark.asyncio
    async def test_non_positive_amount_is_422(self, client: AsyncClient, admin_headers) -> None:
        resp = await client.post("/api/v1/commission/quote", headers=admin_headers, json={
            "amount": 0, "direction": "incoming",
        })
        assert resp.status_code == 422
