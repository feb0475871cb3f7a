"""
iShop Payments Backend — Request Logging Middleware
=====================================================

What:  One access log line per HTTP request.
How:   Measures wall time around the handler and logs method, path, status,
       duration, request ID, client IP and, for failed requests, the error
       code the exception handler answered with.
Who:   Applied to every request via Starlette middleware.

Levels:
    5xx                         → ERROR
    4xx with a domain error code → INFO (the handler already logged it)
    other 4xx (404, 405, ...)    → WARNING
    everything else             → INFO

What we log vs what we DON'T log:
    ✅ Log: method, path, status, error code, duration, IP, request ID
    ❌ Don't log: request bodies (they carry payment signatures), auth headers
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from ishop.middleware.request_id import request_id_var

logger = logging.getLogger("ishop.access")

SKIP_PATHS = frozenset({"/health"})


def access_log_level(status: int, error_code: str) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.INFO if error_code else logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs each request with its outcome. Health checks are skipped."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in SKIP_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        rid = request_id_var.get("")
        status = response.status_code
        # Set by the exception handlers in main.py
        error_code = getattr(request.state, "error_code", "") or ""

        logger.log(
            access_log_level(status, error_code),
            "%s %s %d%s %.1fms [%s] from %s",
            request.method,
            request.url.path,
            status,
            f" {error_code}" if error_code else "",
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": request.url.path,
                "status": status,
                "error_code": error_code,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )

        return response
