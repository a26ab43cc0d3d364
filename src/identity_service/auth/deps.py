"""
identity_service.auth.deps

FastAPI dependency functions for authentication and authorization.

Responsibilities:
- Convert a bearer token into a typed `Principal`.
- Enforce RBAC via reusable dependency factories.
"""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from starlette.status import HTTP_401_UNAUTHORIZED, HTTP_403_FORBIDDEN

from identity_service.auth.jwt import TokenCodec, TokenError
from identity_service.auth.models import Principal

_bearer = HTTPBearer(auto_error=False)


def token_codec(request: Request) -> TokenCodec:
    # Built once in `identity_service.api.app.create_app` from immutable settings.
    return request.app.state.token_codec  # type: ignore[attr-defined]


def get_principal(
    creds: HTTPAuthorizationCredentials | None = Depends(_bearer),
    codec: TokenCodec = Depends(token_codec),
) -> Principal:
    if creds is None or not creds.credentials:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Missing bearer token")

    try:
        claims = codec.decode(creds.credentials)
    except TokenError as e:
        # Expired, malformed and forged tokens all look the same to the caller.
        raise HTTPException(
            status_code=HTTP_401_UNAUTHORIZED, detail="Invalid or expired token"
        ) from e

    return Principal.from_claims(claims)


def require_roles(*required: str):
    required_set = frozenset(required)

    def _dep(principal: Principal = Depends(get_principal)) -> Principal:
        if principal.is_admin:
            return principal
        if not required_set.issubset(principal.roles):
            raise HTTPException(status_code=HTTP_403_FORBIDDEN, detail="Insufficient role")
        return principal

    return _dep


# --- Module Notes -----------------------------------------------------------
# Role checks here trust the roles embedded in the token; a role change takes
# effect for a caller once they obtain a new token.
