"""
identity_service.services.registration

Registration of password-based accounts.

Responsibilities:
- Validate the email shape, then login and email uniqueness (first failure wins).
- Hash the secret, attach the default role and persist the account.
- Translate a unique-key race at write time into the same duplicate outcome
  as the pre-checks.
"""

from __future__ import annotations

import asyncio
import re
from typing import TypeGuard

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from identity_service.auth.passwords import PasswordHasher
from identity_service.db.models import Account, AccountOrigin
from identity_service.db.repositories.accounts import AccountRepo
from identity_service.db.repositories.roles import RoleRepo
from identity_service.observability.logging import get_logger
from identity_service.services.results import Failure, RegistrationFailure, Result, Success
from identity_service.services.roles import resolve_default_roles

log = get_logger(__name__)

EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")


def is_email_valid(email: str | None) -> TypeGuard[str]:
    if not email:
        return False
    # Trimmed for matching only; the stored value is what the caller sent.
    return EMAIL_PATTERN.fullmatch(email.strip()) is not None


class RegistrationService:
    def __init__(self, *, session: AsyncSession, hasher: PasswordHasher) -> None:
        self._session = session
        self._hasher = hasher
        self._accounts = AccountRepo(session)
        self._roles = RoleRepo(session)

    async def register(
        self, *, login_name: str, secret: str, email: str | None
    ) -> Result[Account, RegistrationFailure]:
        # First failing check wins: email shape, then login, then email uniqueness.
        if not is_email_valid(email):
            return self._reject(login_name, RegistrationFailure.invalid_email)
        failure = await self._precheck(login_name=login_name, email=email)
        if failure is not None:
            return self._reject(login_name, failure)

        # bcrypt is CPU-bound; keep it off the event loop.
        secret_hash = await asyncio.to_thread(self._hasher.hash, secret)
        account = Account(
            login_name=login_name,
            email=email,
            secret_hash=secret_hash,
            origin=AccountOrigin.password,
            roles=await resolve_default_roles(self._roles),
        )

        try:
            await self._accounts.save(account)
            await self._session.commit()
        except IntegrityError:
            # A concurrent registration won the race between pre-check and insert.
            await self._session.rollback()
            return self._reject(login_name, await self._classify_conflict(login_name))

        log.info("account_registered", login_name=login_name, account_id=str(account.id))
        return Success(account)

    async def _precheck(self, *, login_name: str, email: str) -> RegistrationFailure | None:
        if await self._accounts.find_by_login(login_name) is not None:
            return RegistrationFailure.duplicate_login
        if await self._accounts.find_by_email(email) is not None:
            return RegistrationFailure.duplicate_email
        return None

    @staticmethod
    def _reject(login_name: str, failure: RegistrationFailure) -> Failure[RegistrationFailure]:
        log.info("registration_rejected", login_name=login_name, reason=failure.value)
        return Failure(failure)

    async def _classify_conflict(self, login_name: str) -> RegistrationFailure:
        if await self._accounts.find_by_login(login_name) is not None:
            return RegistrationFailure.duplicate_login
        return RegistrationFailure.duplicate_email
