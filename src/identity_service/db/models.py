"""
identity_service.db.models

Persistence schema for accounts and roles.

Responsibilities:
- Account: a user identity, password-based or federated.
- Role: named permission bucket (reference data).
- account_roles: many-to-many link between the two.
"""

from __future__ import annotations

import enum
import uuid
from datetime import datetime

from sqlalchemy import Column, Enum, ForeignKey, String, Table, Uuid as SAUuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from identity_service.db.base import Base


def _utcnow() -> datetime:
    return datetime.utcnow()


class AccountOrigin(enum.StrEnum):
    # Fixed at creation; never changes for the lifetime of an account.
    password = "PASSWORD"
    federated = "FEDERATED"


account_roles = Table(
    "account_roles",
    Base.metadata,
    Column("account_id", SAUuid(as_uuid=True), ForeignKey("accounts.id"), primary_key=True),
    Column("role_id", ForeignKey("roles.id"), primary_key=True),
)


class Role(Base):
    __tablename__ = "roles"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)


class Account(Base):
    __tablename__ = "accounts"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    # Nullable because a federated account adopts the provider display name verbatim.
    login_name: Mapped[str | None] = mapped_column(String(256), nullable=True, unique=True)
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)
    secret_hash: Mapped[str | None] = mapped_column(String(128), nullable=True)
    origin: Mapped[AccountOrigin] = mapped_column(Enum(AccountOrigin), nullable=False)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)

    # selectin keeps role loading explicit under AsyncSession (no lazy IO on access).
    roles: Mapped[set[Role]] = relationship(secondary=account_roles, lazy="selectin")

    @property
    def role_names(self) -> frozenset[str]:
        return frozenset(role.name for role in self.roles)


# --- Module Notes -----------------------------------------------------------
# The unique constraints on login_name and email are the backstop for concurrent
# registrations that both pass the service-level uniqueness checks.
