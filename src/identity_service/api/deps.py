"""
identity_service.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Provide dependency functions for settings, DB sessions and the process-wide
  collaborators stored on app.state (password hasher, identity provider).
"""

from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from identity_service.auth.passwords import PasswordHasher
from identity_service.federation.google import GoogleIdentityProvider
from identity_service.settings import Settings


def settings_dep(request: Request) -> Settings:
    return request.app.state.settings  # type: ignore[attr-defined]


def sessionmaker_from_app(request: Request) -> async_sessionmaker[AsyncSession]:
    # Created in the app lifespan (`identity_service.api.app.create_app`).
    return request.app.state.sessionmaker  # type: ignore[attr-defined]


async def db_session(
    session_factory: async_sessionmaker[AsyncSession] = Depends(sessionmaker_from_app),
) -> AsyncIterator[AsyncSession]:
    # Request-scoped DB session. Commit/rollback is owned by the service layer.
    async with session_factory() as session:
        yield session


def password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.password_hasher  # type: ignore[attr-defined]


def identity_provider(request: Request) -> GoogleIdentityProvider:
    return request.app.state.identity_provider  # type: ignore[attr-defined]
