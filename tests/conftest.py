"""
tests.conftest

Shared fixtures: in-memory account store, collaborators and an in-process HTTP client.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from datetime import timedelta

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from identity_service.api.app import create_app
from identity_service.auth.jwt import TokenCodec, TokenConfig
from identity_service.auth.passwords import PasswordHasher
from identity_service.db.init_db import init_db
from identity_service.db.models import Account, AccountOrigin
from identity_service.db.repositories.accounts import AccountRepo
from identity_service.db.repositories.roles import RoleRepo
from identity_service.db.session import create_engine, create_sessionmaker
from identity_service.settings import Settings

TEST_SECRET = "test-signing-secret"


@pytest.fixture
def settings() -> Settings:
    return Settings(
        env="test",
        database_url="sqlite+aiosqlite://",
        jwt_secret=TEST_SECRET,
        jwt_lifetime=timedelta(hours=1),
        bcrypt_rounds=4,
        seed_admin=True,
        admin_login="ADMIN",
        admin_password="password123",
        admin_email="admin@example.com",
    )


@pytest.fixture
def hasher() -> PasswordHasher:
    # Minimum bcrypt cost keeps the suite fast.
    return PasswordHasher(rounds=4)


@pytest.fixture
def codec() -> TokenCodec:
    return TokenCodec(TokenConfig(secret=TEST_SECRET, lifetime=timedelta(hours=1)))


@pytest_asyncio.fixture
async def engine(settings: Settings) -> AsyncIterator[AsyncEngine]:
    engine = create_engine(settings)
    await init_db(engine)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_sessionmaker(engine)


@pytest_asyncio.fixture
async def session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncSession]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def reference_roles(session_factory: async_sessionmaker[AsyncSession]) -> None:
    async with session_factory() as session:
        roles = RoleRepo(session)
        await roles.get_or_create("USER")
        await roles.get_or_create("ADMIN")
        await session.commit()


@pytest.fixture
def add_account(session_factory: async_sessionmaker[AsyncSession], hasher: PasswordHasher):
    """Insert an account directly, bypassing the services under test."""

    async def _add(
        *,
        login_name: str | None,
        email: str,
        origin: AccountOrigin = AccountOrigin.password,
        secret: str | None = None,
        roles: tuple[str, ...] = (),
    ) -> Account:
        async with session_factory() as session:
            repo = RoleRepo(session)
            resolved = set()
            for name in roles:
                role = await repo.find_by_name(name)
                assert role is not None, name
                resolved.add(role)
            account = Account(
                login_name=login_name,
                email=email,
                secret_hash=hasher.hash(secret) if secret is not None else None,
                origin=origin,
                roles=resolved,
            )
            session.add(account)
            await session.commit()
            return account

    return _add


@pytest.fixture
def load_account(session_factory: async_sessionmaker[AsyncSession]):
    """Read an account back through a fresh session."""

    async def _load(login_name: str) -> Account | None:
        async with session_factory() as session:
            return await AccountRepo(session).find_by_login(login_name)

    return _load


@pytest_asyncio.fixture
async def app(settings: Settings):
    app = create_app(settings=settings)
    # httpx ASGITransport does not drive the lifespan; do it explicitly.
    async with app.router.lifespan_context(app):
        yield app


@pytest_asyncio.fixture
async def client(app) -> AsyncIterator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
