"""Shared test fixtures."""

# ruff: noqa: E402  -- environment must be set before settings are imported

import os

# Settings() requires JWT_SECRET at import time; set it before src.main loads.
os.environ.setdefault("JWT_SECRET", "test-secret-not-for-production")
os.environ.setdefault("STORE_BACKEND", "memory")

import pytest
from httpx import ASGITransport, AsyncClient

from src.main import app
from src.mt_bank.application.wiring import ReferenceData, build_reference_data
from src.mt_common.ttl_cache import TTLCache
from src.mt_gateway.auth.jwt_handler import create_access_token
from src.mt_store.infrastructure.memory_store import InMemoryDocumentStore


class FakeClock:
    """Manually advanced monotonic clock for TTL expiry tests."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def cache(clock: FakeClock) -> TTLCache:
    return TTLCache(ttl_seconds=300.0, clock=clock)


@pytest.fixture
def refdata(store: InMemoryDocumentStore, cache: TTLCache) -> ReferenceData:
    return build_reference_data(store, cache=cache, timeout_seconds=1.0)


@pytest.fixture
async def client(refdata: ReferenceData) -> AsyncClient:
    """Async HTTP client for testing FastAPI endpoints.

    ASGITransport does not run the lifespan, so the per-test ReferenceData
    is installed on app.state directly.
    """
    app.state.refdata = refdata
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.state.refdata = None


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token('admin-1', 'admin')}"}


@pytest.fixture
def exchange_headers() -> dict[str, str]:
    token = create_access_token("ex1", "exchange", exchange_name="Amman Central")
    return {"Authorization": f"Bearer {token}"}
