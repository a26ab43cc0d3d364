"""
identity_service.services.roles

Role authority.

Responsibilities:
- Replace the full role set of an existing account, all-or-nothing.
- Answer which roles an account currently holds.
- Resolve the default role handed to newly created accounts.

Authorization policy (who may view or change whose roles) is applied by the API
layer; this service only reads and writes role assignments.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from identity_service.auth.models import USER_ROLE
from identity_service.db.models import Role
from identity_service.db.repositories.accounts import AccountRepo
from identity_service.db.repositories.roles import RoleRepo
from identity_service.observability.logging import get_logger
from identity_service.services.errors import UnknownRole
from identity_service.services.results import Failure, Result, Success

log = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class AssignedRoles:
    login_name: str
    # None when the account does not exist.
    roles: frozenset[str] | None


async def resolve_default_roles(roles: RoleRepo, name: str = USER_ROLE) -> set[Role]:
    role = await roles.find_by_name(name)
    if role is None:
        # Accounts are still created, just without roles.
        log.warning("default_role_missing", role=name)
        return set()
    return {role}


class RoleAuthority:
    def __init__(self, *, session: AsyncSession) -> None:
        self._session = session
        self._accounts = AccountRepo(session)
        self._roles = RoleRepo(session)

    async def replace_roles(
        self, *, login_name: str, role_names: Iterable[str]
    ) -> Result[AssignedRoles, AssignedRoles]:
        account = await self._accounts.find_by_login(login_name)
        if account is None:
            log.info("roles_rejected_unknown_account", login_name=login_name)
            return Failure(AssignedRoles(login_name=login_name, roles=None))

        # Resolve everything before touching the account so a bad name changes nothing.
        resolved: set[Role] = set()
        for name in set(role_names):
            role = await self._roles.find_by_name(name)
            if role is None:
                log.error("unknown_role", login_name=login_name, role=name)
                raise UnknownRole(name)
            resolved.add(role)

        account.roles = resolved
        await self._session.commit()

        assigned = frozenset(role.name for role in resolved)
        log.info("roles_replaced", login_name=login_name, roles=sorted(assigned))
        return Success(AssignedRoles(login_name=login_name, roles=assigned))

    async def roles_of(self, login_name: str) -> frozenset[str]:
        account = await self._accounts.find_by_login(login_name)
        if account is None:
            return frozenset()
        return account.role_names
