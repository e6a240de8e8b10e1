"""
design_bridge.observability.middleware

HTTP middleware for request-scoped logging context.

Responsibilities:
- Generate/propagate request IDs.
- Bind request metadata (never credential values) into structlog contextvars.
"""

from __future__ import annotations

import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response


def auth_scheme(request: Request) -> str:
    # Only the scheme word is logged, e.g. "bearer" or "basic".
    header = request.headers.get("authorization")
    if not header:
        return "none"
    return header.split(" ", 1)[0].lower() or "none"


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            path=request.url.path,
            method=request.method,
            auth_scheme=auth_scheme(request),
            has_cookie="cookie" in request.headers,
        )
        try:
            response: Response = await call_next(request)
        finally:
            structlog.contextvars.clear_contextvars()

        response.headers["x-request-id"] = request_id
        return response


# --- Module Notes -----------------------------------------------------------
# Query strings are not bound either; the shared-secret parameter may appear there.
