from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from identity_service.db.models import Role


class RoleRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_by_name(self, name: str) -> Role | None:
        stmt = select(Role).where(Role.name == name)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def get_or_create(self, name: str) -> Role:
        # Used by startup seeding only; request-time code never creates roles.
        existing = await self.find_by_name(name)
        if existing is not None:
            return existing
        role = Role(name=name)
        self._session.add(role)
        await self._session.flush()
        return role
