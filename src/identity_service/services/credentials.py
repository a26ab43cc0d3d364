"""
identity_service.services.credentials

Credential authentication (login name + secret).

Responsibilities:
- Verify a secret against the stored hash and resolve the caller's `Principal`.
- Never reveal whether a login name exists: every failure is the same outcome.
"""

from __future__ import annotations

import asyncio

from sqlalchemy.ext.asyncio import AsyncSession

from identity_service.auth.models import Principal
from identity_service.auth.passwords import PasswordHasher
from identity_service.db.repositories.accounts import AccountRepo
from identity_service.observability.logging import get_logger
from identity_service.services.results import AuthFailure, Failure, Result, Success

log = get_logger(__name__)


class CredentialAuthenticator:
    def __init__(self, *, session: AsyncSession, hasher: PasswordHasher) -> None:
        self._accounts = AccountRepo(session)
        self._hasher = hasher

    async def authenticate(
        self, *, login_name: str, secret: str
    ) -> Result[Principal, AuthFailure]:
        account = await self._accounts.find_by_login(login_name)
        # Federated accounts have no secret hash and cannot log in by password.
        if account is None or account.secret_hash is None:
            # One bcrypt check per attempt on every branch, so timing does not
            # tell an unknown login from a wrong secret.
            await asyncio.to_thread(self._hasher.verify, secret, self._hasher.dummy_hash)
            log.info("login_failed", login_name=login_name)
            return Failure(AuthFailure.bad_credentials)

        verified = await asyncio.to_thread(self._hasher.verify, secret, account.secret_hash)
        if not verified:
            log.info("login_failed", login_name=login_name)
            return Failure(AuthFailure.bad_credentials)

        principal = Principal.from_account(account)
        log.info("login_succeeded", login_name=login_name, account_id=str(account.id))
        return Success(principal)
