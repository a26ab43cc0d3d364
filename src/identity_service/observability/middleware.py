"""
identity_service.observability.middleware

HTTP middleware for request-scoped logging context and token-response headers.

Responsibilities:
- Generate/propagate request IDs and bind them, with method and path, into structlog
  contextvars.
- Log one `request_completed` line per request with status and duration.
- Mark responses that can carry an access token as non-cacheable.
"""

from __future__ import annotations

import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from identity_service.observability.logging import get_logger

log = get_logger(__name__)

# Sign-in answers, the OAuth2 callback redirect and the landing page all put a
# token in the body, a header or the Location URL.
TOKEN_BEARING_PREFIXES: tuple[str, ...] = ("/auth/", "/login/oauth2/", "/redirect")


def carries_token(path: str) -> bool:
    return path.startswith(TOKEN_BEARING_PREFIXES)


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        path = request.url.path
        structlog.contextvars.clear_contextvars()
        # Only the path is bound; query strings can carry tokens and OAuth2 codes.
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            path=path,
            method=request.method,
        )
        started = time.perf_counter()
        try:
            response: Response = await call_next(request)
            log.info(
                "request_completed",
                status_code=response.status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
        finally:
            structlog.contextvars.clear_contextvars()

        response.headers["x-request-id"] = request_id
        if carries_token(path):
            response.headers["Cache-Control"] = "no-store"
            response.headers["Pragma"] = "no-cache"
        return response


# --- Module Notes -----------------------------------------------------------
# Token responses follow RFC 6749 section 5.1: `Cache-Control: no-store` and
# `Pragma: no-cache`.
