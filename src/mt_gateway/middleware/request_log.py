"""Request logging middleware.

Logs every HTTP request with method, path, status code, latency, request ID
and whether the document store was reachable at the time. The request_id
is injected into request.state so router handlers can echo it in
ApiResponse.

Log format:
    INFO [GET] /api/v1/exchanges/ex1/banks → 200 (12ms) req_a1b2c3d4e5f6 store=online
"""

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("mt.request")


def _store_state(request: Request) -> str:
    refdata = getattr(request.app.state, "refdata", None)
    if refdata is None:
        return "unset"
    return "online" if refdata.gateway.is_online else "offline"


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request.state.request_id = f"req_{uuid.uuid4().hex[:12]}"

        start = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000

        log = logger.warning if response.status_code >= 500 else logger.info
        log(
            "[%s] %s → %d (%.0fms) %s store=%s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            request.state.request_id,
            _store_state(request),
        )
        return response
