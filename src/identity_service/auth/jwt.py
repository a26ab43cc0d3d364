"""
identity_service.auth.jwt

Token codec: issues and validates signed, time-bounded access tokens.

Responsibilities:
- Encode a principal's identity and role names into an HS256-signed JWT.
- Decode and validate tokens, separating malformed, badly-signed and expired input.
- Offer a non-raising expiry probe for liveness checks.

Note:
- The configured secret is never used as key material directly; it is normalized
  through SHA-256 into a fixed 32-byte HMAC key.
"""

from __future__ import annotations

import hashlib
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from jwt import ExpiredSignatureError, InvalidTokenError

from identity_service.auth.models import Principal, TokenClaims
from identity_service.settings import Settings


@dataclass(frozen=True, slots=True)
class TokenConfig:
    secret: str = field(repr=False)
    lifetime: timedelta
    alg: str = "HS256"

    @classmethod
    def from_settings(cls, settings: Settings) -> TokenConfig:
        return cls(secret=settings.jwt_secret, lifetime=settings.jwt_lifetime, alg=settings.jwt_alg)


class TokenError(Exception):
    pass


class InvalidToken(TokenError):
    """Any decode failure other than expiry."""


class MalformedToken(InvalidToken):
    pass


class InvalidSignature(InvalidToken):
    pass


class ExpiredToken(TokenError):
    pass


def derive_signing_key(secret: str) -> bytes:
    return hashlib.sha256(secret.encode("utf-8")).digest()


class TokenCodec:
    def __init__(self, config: TokenConfig) -> None:
        self._config = config
        self._key = derive_signing_key(config.secret)

    @property
    def lifetime(self) -> timedelta:
        return self._config.lifetime

    def issue(self, principal: Principal, *, now: datetime | None = None) -> str:
        now = now or datetime.now(tz=UTC)
        payload: dict[str, Any] = {
            "uid": str(principal.account_id),
            "username": principal.login_name,
            "roles": sorted(principal.roles),
            "iat": int(now.timestamp()),
            "exp": int((now + self._config.lifetime).timestamp()),
        }
        # A federated account may have no login name; the token then has no subject.
        if principal.login_name is not None:
            payload["sub"] = principal.login_name
        return jwt.encode(payload, self._key, algorithm=self._config.alg)

    def decode(self, token: str | None) -> TokenClaims:
        if token is None or not token.strip():
            raise MalformedToken("Token cannot be null or empty")
        try:
            # Signature is verified before registered claims, so a forged token
            # never reports as merely expired.
            payload = jwt.decode(
                token,
                self._key,
                algorithms=[self._config.alg],
                options={"require": ["exp", "iat", "uid"]},
            )
        except ExpiredSignatureError as e:
            raise ExpiredToken("Token has expired") from e
        except InvalidTokenError as e:
            raise InvalidSignature(f"Invalid JWT token: {e}") from e
        return _claims_from_payload(payload)

    def is_expired(self, token: str | None) -> bool:
        try:
            self.decode(token)
        except ExpiredToken:
            return True
        return False


def _claims_from_payload(payload: dict[str, Any]) -> TokenClaims:
    try:
        account_id = uuid.UUID(str(payload["uid"]))
    except ValueError as e:
        raise InvalidSignature("Invalid JWT token: malformed account id") from e

    roles_raw = payload.get("roles")
    roles = frozenset(str(r) for r in roles_raw) if isinstance(roles_raw, list) else frozenset()

    subject = payload.get("sub")
    return TokenClaims(
        subject=str(subject) if subject is not None else None,
        account_id=account_id,
        roles=roles,
        issued_at=datetime.fromtimestamp(payload["iat"], tz=UTC),
        expires_at=datetime.fromtimestamp(payload["exp"], tz=UTC),
    )


# --- Module Notes -----------------------------------------------------------
# Tokens are self-contained: there is no server-side session table and no revocation
# list. Validity is signature + expiry only.
