"""
iShop Payments Backend — Request ID Middleware
================================================

What:  Assigns an ID to each incoming request and echoes it in the response.
How:   Uses the client's X-Request-ID header when it is a short token of
       letters, digits, '-', '_' or '.'; otherwise a short UUID. Stores it in
       a ContextVar and request.state.
Who:   Applied to every request via Starlette middleware.

Payment logs (signature rejections, storage failures) carry this ID so a
customer support ticket can be matched to the exact log lines. The ID is
written into every log line unescaped; only allow-listed characters pass.
"""

import re
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local request ID, read by loggers and exception handlers
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

_CLIENT_ID_PATTERN = re.compile(r"[A-Za-z0-9._-]{1,64}")


def new_request_id() -> str:
    return uuid.uuid4().hex[:8]


def resolve_request_id(header_value: str) -> str:
    """Client-supplied ID if it is log-safe, else a fresh one."""
    if header_value and _CLIENT_ID_PATTERN.fullmatch(header_value):
        return header_value
    return new_request_id()


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Sets request_id_var for the request and adds X-Request-ID to the response."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = resolve_request_id(request.headers.get("X-Request-ID", ""))

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers["X-Request-ID"] = rid

        return response
