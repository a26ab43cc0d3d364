"""
identity_service.api.app

FastAPI app factory for the identity service.

Responsibilities:
- Build the FastAPI application and register routers, middleware and error handlers.
- Build the immutable process-wide collaborators (token codec, password hasher).
- Initialize and dispose shared infrastructure (DB engine, provider HTTP client).
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from identity_service import __version__
from identity_service.api.error_handling import register_exception_handlers
from identity_service.api.routers.auth import router as auth_router
from identity_service.api.routers.health import router as health_router
from identity_service.api.routers.login import router as login_router
from identity_service.api.routers.oauth import router as oauth_router
from identity_service.api.routers.user_roles import router as user_roles_router
from identity_service.auth.jwt import TokenCodec, TokenConfig
from identity_service.auth.passwords import PasswordHasher
from identity_service.db.init_db import init_db, seed_reference_data
from identity_service.db.session import create_engine, create_sessionmaker
from identity_service.federation.google import GoogleIdentityProvider, GoogleOAuthConfig
from identity_service.observability.logging import configure_logging, get_logger
from identity_service.observability.middleware import RequestContextMiddleware
from identity_service.settings import Settings

log = get_logger(__name__)


def create_app(*, settings: Settings) -> FastAPI:
    configure_logging(service_name=settings.service_name, level=settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env)
        engine = create_engine(settings)
        app.state.engine = engine
        app.state.sessionmaker = create_sessionmaker(engine)
        if settings.env in ("dev", "test"):
            # Dev/test convenience: create tables and reference data on boot.
            await init_db(engine)
            await seed_reference_data(
                app.state.sessionmaker,
                settings=settings,
                hasher=app.state.password_hasher,
            )

        http = httpx.AsyncClient(timeout=settings.provider_timeout_seconds)
        app.state.identity_provider = GoogleIdentityProvider(
            config=GoogleOAuthConfig.from_settings(settings), http=http
        )
        try:
            yield
        finally:
            await http.aclose()
            await engine.dispose()
            log.info("shutdown")

    app = FastAPI(
        title="Identity Service",
        version=__version__,
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Fixed for the process lifetime.
    app.state.settings = settings
    app.state.token_codec = TokenCodec(TokenConfig.from_settings(settings))
    app.state.password_hasher = PasswordHasher(rounds=settings.bcrypt_rounds)

    app.add_middleware(RequestContextMiddleware)
    register_exception_handlers(app)
    app.include_router(health_router, tags=["health"])
    app.include_router(auth_router)
    app.include_router(user_roles_router)
    app.include_router(oauth_router)
    app.include_router(login_router)

    return app


# --- Module Notes -----------------------------------------------------------
# App composition stays here; business logic stays in services.
