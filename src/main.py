"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from config.settings import settings
from src.mt_bank.api.router import router as bank_router
from src.mt_bank.application.wiring import build_reference_data
from src.mt_commission.api.router import router as commission_router
from src.mt_common.database import dispose_engine
from src.mt_common.errors import AppError
from src.mt_common.redis_client import close_redis
from src.mt_common.response import error_response
from src.mt_common.ttl_cache import TTLCache
from src.mt_gateway.middleware.request_log import RequestLogMiddleware
from src.mt_store.infrastructure.factory import create_store

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: build the store adapter and services. Shutdown: release pools."""
    store = create_store(settings)
    app.state.refdata = build_reference_data(
        store,
        cache=TTLCache(ttl_seconds=settings.CACHE_TTL_SECONDS),
        timeout_seconds=settings.STORE_TIMEOUT_SECONDS,
        slow_query_ms=settings.SLOW_QUERY_MS,
    )
    logger.info("Reference data services ready (store=%s)", settings.STORE_BACKEND)
    yield
    await dispose_engine()
    await close_redis()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response(exc.code, exc.message)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


app.include_router(bank_router, prefix="/api/v1")
app.include_router(commission_router, prefix="/api/v1")


@app.get("/health")
async def health(request: Request) -> dict[str, Any]:
    refdata = getattr(request.app.state, "refdata", None)
    if refdata is None:
        return {"status": "starting", "version": "0.1.0"}
    stats = refdata.cache.stats()
    return {
        "status": "ok" if refdata.gateway.is_online else "degraded",
        "version": "0.1.0",
        "store": "online" if refdata.gateway.is_online else "offline",
        "cache": {"size": stats.size, "hit_rate": round(stats.hit_rate, 1)},
    }
