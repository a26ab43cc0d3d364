"""
identity_service.federation.google

Google OAuth2 / OpenID Connect client.

Responsibilities:
- Build the consent URL for the authorization-code flow.
- Exchange an authorization code for an access token and fetch userinfo.
- Present a stable boundary that the callback route and tests can swap out.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlencode

import httpx

from identity_service.services.errors import IdentityProviderError
from identity_service.settings import Settings


@dataclass(frozen=True, slots=True)
class FederatedIdentity:
    # Both values are asserted by the provider; either may be missing.
    email: str | None
    display_name: str | None
    attributes: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class GoogleOAuthConfig:
    client_id: str
    client_secret: str = field(repr=False)
    redirect_uri: str
    authorize_url: str
    token_url: str
    userinfo_url: str
    scope: str = "openid email profile"

    @classmethod
    def from_settings(cls, settings: Settings) -> GoogleOAuthConfig:
        return cls(
            client_id=settings.google_client_id,
            client_secret=settings.google_client_secret,
            redirect_uri=settings.google_redirect_uri,
            authorize_url=settings.google_authorize_url,
            token_url=settings.google_token_url,
            userinfo_url=settings.google_userinfo_url,
        )


class GoogleIdentityProvider:
    def __init__(self, *, config: GoogleOAuthConfig, http: httpx.AsyncClient) -> None:
        self._config = config
        self._http = http

    def authorization_url(self, *, state: str) -> str:
        params = {
            "response_type": "code",
            "client_id": self._config.client_id,
            "redirect_uri": self._config.redirect_uri,
            "scope": self._config.scope,
            "state": state,
        }
        return f"{self._config.authorize_url}?{urlencode(params)}"

    async def fetch_identity(self, *, code: str) -> FederatedIdentity:
        try:
            r = await self._http.post(
                self._config.token_url,
                data={
                    "grant_type": "authorization_code",
                    "code": code,
                    "client_id": self._config.client_id,
                    "client_secret": self._config.client_secret,
                    "redirect_uri": self._config.redirect_uri,
                },
                headers={"Accept": "application/json"},
            )
            r.raise_for_status()
            access_token = r.json().get("access_token")
            if not access_token:
                raise IdentityProviderError(detail="token response without access_token")

            r = await self._http.get(
                self._config.userinfo_url,
                headers={"Authorization": f"Bearer {access_token}"},
            )
            r.raise_for_status()
            userinfo: dict[str, Any] = r.json()
        except (httpx.HTTPError, ValueError) as e:
            # ValueError: a response body that is not JSON.
            raise IdentityProviderError(detail=type(e).__name__) from e

        return FederatedIdentity(
            email=userinfo.get("email"),
            display_name=userinfo.get("name"),
            attributes=userinfo,
        )


# --- Module Notes -----------------------------------------------------------
# The shared httpx.AsyncClient is owned by the app lifespan (`api.app`); this class
# never opens or closes connections itself.
