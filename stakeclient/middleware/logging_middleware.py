"""
Request logging for the local control API.

Each request gets a short id bound into structlog's context, so backend
and probe logs emitted while serving it carry the same id. The access
line also records which wallet backend was active when the request ended.
"""

import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from ..core.wallet.session_manager import get_session_manager

logger = structlog.stdlib.get_logger("stakeclient.http")

# Polled by local UIs; logged at debug only
QUIET_PATHS = frozenset({"/healthz", "/network/status"})


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Bind a request id and log one access line per request."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex[:8]
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        started = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers["x-request-id"] = request_id
            return response
        finally:
            fields = {
                "method": request.method,
                "path": request.url.path,
                "status": status_code,
                "duration_ms": round((time.perf_counter() - started) * 1000, 1),
                "backend": get_session_manager().session.backend_kind.value,
            }
            if status_code >= 500:
                logger.error("request", **fields)
            elif status_code >= 400:
                logger.warning("request", **fields)
            elif request.url.path in QUIET_PATHS:
                logger.debug("request", **fields)
            else:
                logger.info("request", **fields)
