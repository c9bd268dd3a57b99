"""
Request logging middleware.

Binds the request id and the caller's scope headers to every event logged
while the request runs, and stamps ``X-Request-ID`` / ``X-Response-Time`` on
the response.
"""

import time
import uuid
from collections.abc import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from warehouse.config import bind_request_context, clear_request_context, get_logger

logger = get_logger(__name__)

# Probes hit these every few seconds
QUIET_PATHS = ("/health", "/api/health")


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Request/response logging with gateway-supplied correlation ids."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # Reuse the gateway's id when it sent one
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:8]
        request.state.request_id = request_id

        bind_request_context(
            request_id=request_id,
            owner_id=request.headers.get("X-Owner-ID"),
            user_id=request.headers.get("X-User-ID"),
            role=request.headers.get("X-User-Role"),
        )
        quiet = request.url.path in QUIET_PATHS
        log_start = logger.debug if quiet else logger.info
        start = time.perf_counter()

        log_start("request_started", method=request.method, path=request.url.path)

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "request_failed",
                method=request.method,
                path=request.url.path,
                error=str(e),
                duration_ms=_elapsed_ms(start),
            )
            clear_request_context()
            raise

        duration_ms = _elapsed_ms(start)
        if response.status_code >= 500:
            log_done = logger.error
        elif response.status_code >= 400:
            log_done = logger.warning
        else:
            log_done = log_start
        log_done(
            "request_completed",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            duration_ms=duration_ms,
        )
        clear_request_context()

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"
        return response
