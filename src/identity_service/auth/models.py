"""
identity_service.auth.models

Auth domain models.

Responsibilities:
- Define the authenticated identity type (`Principal`) used by services and endpoints.
- Define the decoded token content (`TokenClaims`).
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from identity_service.db.models import Account

# Well-known reference roles.
USER_ROLE = "USER"
ADMIN_ROLE = "ADMIN"


@dataclass(frozen=True, slots=True)
class Principal:
    """
    Authenticated caller identity for one login or token validation.

    Provider-specific attributes (e.g. the raw OIDC userinfo of a federated login)
    ride along in `attributes` instead of a separate identity type.
    """

    account_id: uuid.UUID
    login_name: str | None
    email: str | None
    roles: frozenset[str]
    attributes: Mapping[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @property
    def is_admin(self) -> bool:
        return ADMIN_ROLE in self.roles

    def has_role(self, role: str) -> bool:
        return role in self.roles

    @classmethod
    def from_account(
        cls, account: Account, *, attributes: Mapping[str, Any] | None = None
    ) -> Principal:
        return cls(
            account_id=account.id,
            login_name=account.login_name,
            email=account.email,
            roles=account.role_names,
            attributes=dict(attributes or {}),
        )

    @classmethod
    def from_claims(cls, claims: TokenClaims) -> Principal:
        # Tokens do not carry the email; it is only known at login time.
        return cls(
            account_id=claims.account_id,
            login_name=claims.subject,
            email=None,
            roles=claims.roles,
        )


@dataclass(frozen=True, slots=True)
class TokenClaims:
    subject: str | None
    account_id: uuid.UUID
    roles: frozenset[str]
    issued_at: datetime
    expires_at: datetime
