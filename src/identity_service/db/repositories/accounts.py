"""
identity_service.db.repositories.accounts

Repository for `Account` entities.

Responsibilities:
- Look accounts up by login name or email.
- Stage inserts/updates; committing is left to the calling service.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from identity_service.db.models import Account


class AccountRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_by_login(self, login_name: str) -> Account | None:
        stmt = select(Account).where(Account.login_name == login_name)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def find_by_email(self, email: str) -> Account | None:
        stmt = select(Account).where(Account.email == email)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def save(self, account: Account) -> Account:
        # Flush so unique-constraint violations surface inside the caller's unit of work.
        self._session.add(account)
        await self._session.flush()
        return account
