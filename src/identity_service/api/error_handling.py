"""
identity_service.api.error_handling

Top-level translation of faults into HTTP responses.

Responsibilities:
- Map `ServiceError` subclasses to their status code and client-safe message.
- Map token failures that escape a route to 401.
- Turn anything unexpected into a generic 500 without internal detail.
"""

from __future__ import annotations

from datetime import UTC, datetime
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from identity_service.auth.jwt import TokenError
from identity_service.observability.logging import get_logger
from identity_service.services.errors import ServiceError

log = get_logger(__name__)


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "timestamp": datetime.now(tz=UTC).isoformat(),
            "status": status_code,
            "error": HTTPStatus(status_code).phrase,
            "message": message,
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ServiceError)
    async def handle_service_error(request: Request, exc: ServiceError) -> JSONResponse:
        log_fn = log.error if exc.status_code >= 500 else log.warning
        log_fn(
            "service_error",
            error_type=type(exc).__name__,
            status_code=exc.status_code,
            detail=exc.detail,
        )
        return error_response(exc.status_code, exc.message)

    @app.exception_handler(TokenError)
    async def handle_token_error(request: Request, exc: TokenError) -> JSONResponse:
        log.info("token_rejected", error_type=type(exc).__name__)
        return error_response(401, "Invalid or expired token")

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        log.exception("unhandled_error", error_type=type(exc).__name__)
        return error_response(500, "An unexpected error occurred")


# --- Module Notes -----------------------------------------------------------
# HTTPException raised by routers keeps FastAPI's default `{"detail": ...}` body.
