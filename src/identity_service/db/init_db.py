"""
identity_service.db.init_db

DB initialization helpers (dev/test convenience).

Responsibilities:
- Create tables for local development and tests.
- Seed reference roles and the bootstrap administrator account.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from identity_service.auth.models import ADMIN_ROLE
from identity_service.auth.passwords import PasswordHasher
from identity_service.db.base import Base
from identity_service.db.models import Account, AccountOrigin
from identity_service.db.repositories.accounts import AccountRepo
from identity_service.db.repositories.roles import RoleRepo
from identity_service.observability.logging import get_logger
from identity_service.settings import Settings

log = get_logger(__name__)


async def init_db(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def seed_reference_data(
    session_factory: async_sessionmaker[AsyncSession],
    *,
    settings: Settings,
    hasher: PasswordHasher,
) -> None:
    """
    Insert missing reference roles, then create the administrator account if it
    does not exist yet and the ADMIN role is available. Safe to run on every start.
    """

    async with session_factory() as session:
        roles = RoleRepo(session)
        for name in settings.seed_roles:
            await roles.get_or_create(name)

        if settings.seed_admin:
            await _seed_admin(session, settings=settings, hasher=hasher)

        await session.commit()


async def _seed_admin(session: AsyncSession, *, settings: Settings, hasher: PasswordHasher) -> None:
    accounts = AccountRepo(session)
    if await accounts.find_by_login(settings.admin_login) is not None:
        return

    admin_role = await RoleRepo(session).find_by_name(ADMIN_ROLE)
    if admin_role is None:
        log.warning("admin_seed_skipped", reason="role_missing", role=ADMIN_ROLE)
        return

    await accounts.save(
        Account(
            login_name=settings.admin_login,
            email=settings.admin_email,
            secret_hash=hasher.hash(settings.admin_password),
            origin=AccountOrigin.password,
            roles={admin_role},
        )
    )
    log.info("admin_seeded", login_name=settings.admin_login)


# --- Module Notes -----------------------------------------------------------
# Only called for env in ("dev", "test"); production schemas and reference data are
# provisioned out of band.
