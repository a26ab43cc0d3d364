"""
identity_service.services.identity_linking

Reconciliation of a federated identity assertion with the account store.

Responsibilities:
- Create a federated account for a first-time email, reuse an existing federated
  account, or reject an email that belongs to a password-based account.
- Mint the access token handed back through the post-login redirect.

Note:
- The provider's email claim is trusted but not verified here. Refusing to link it to
  a password account is what prevents an account takeover through a spoofed claim.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlencode

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from identity_service.auth.jwt import TokenCodec
from identity_service.auth.models import Principal
from identity_service.db.models import Account, AccountOrigin
from identity_service.db.repositories.accounts import AccountRepo
from identity_service.db.repositories.roles import RoleRepo
from identity_service.observability.logging import get_logger
from identity_service.services.errors import IdentityConflict, MissingIdentityAttribute
from identity_service.services.roles import resolve_default_roles

log = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class LinkedIdentity:
    account: Account
    principal: Principal
    token: str
    created: bool


class IdentityLinker:
    def __init__(
        self,
        *,
        session: AsyncSession,
        codec: TokenCodec,
        callback_path: str = "/redirect",
    ) -> None:
        self._session = session
        self._codec = codec
        self._callback_path = callback_path
        self._accounts = AccountRepo(session)
        self._roles = RoleRepo(session)

    async def link(
        self,
        *,
        email: str | None,
        display_name: str | None,
        attributes: Mapping[str, Any] | None = None,
    ) -> LinkedIdentity:
        if email is None:
            raise MissingIdentityAttribute("email")

        created = False
        account = await self._accounts.find_by_email(email)
        if account is None:
            account, created = await self._create_federated(email=email, display_name=display_name)
        elif account.origin == AccountOrigin.password:
            log.warning("identity_conflict", account_id=str(account.id))
            raise IdentityConflict()

        principal = Principal.from_account(account, attributes=attributes)
        token = self._codec.issue(principal)
        log.info("identity_linked", account_id=str(account.id), created=created)
        return LinkedIdentity(account=account, principal=principal, token=token, created=created)

    def redirect_url(self, token: str) -> str:
        return f"{self._callback_path}?{urlencode({'token': token})}"

    async def _create_federated(
        self, *, email: str, display_name: str | None
    ) -> tuple[Account, bool]:
        # The display name becomes the login name as-is, including None or "".
        account = Account(
            login_name=display_name,
            email=email,
            secret_hash=None,
            origin=AccountOrigin.federated,
            roles=await resolve_default_roles(self._roles),
        )
        try:
            await self._accounts.save(account)
            await self._session.commit()
        except IntegrityError:
            await self._session.rollback()
            return await self._resolve_create_race(email), False
        return account, True

    async def _resolve_create_race(self, email: str) -> Account:
        # Either a concurrent callback created the same federated account, or the
        # display name collides with another account's login name.
        existing = await self._accounts.find_by_email(email)
        if existing is not None and existing.origin == AccountOrigin.federated:
            return existing
        log.warning("identity_conflict", email_taken=existing is not None)
        raise IdentityConflict()
