"""
identity_service.api.routers.oauth

Federated (Google) login.

Responsibilities:
- Start the authorization-code flow with a CSRF `state` cookie.
- On callback, fetch the provider's identity assertion, link it to an account and
  redirect to the continuation path with the access token as a query parameter.
"""

from __future__ import annotations

import secrets

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_302_FOUND, HTTP_400_BAD_REQUEST

from identity_service.api.deps import db_session, identity_provider, settings_dep
from identity_service.auth.deps import token_codec
from identity_service.auth.jwt import TokenCodec
from identity_service.federation.google import GoogleIdentityProvider
from identity_service.services.identity_linking import IdentityLinker
from identity_service.settings import Settings

router = APIRouter(tags=["oauth2"])

STATE_COOKIE = "oauth2_state"


@router.get("/oauth2/authorization/google")
async def start_google_login(
    provider: GoogleIdentityProvider = Depends(identity_provider),
) -> RedirectResponse:
    state = secrets.token_urlsafe(24)
    response = RedirectResponse(provider.authorization_url(state=state), status_code=HTTP_302_FOUND)
    response.set_cookie(STATE_COOKIE, state, max_age=600, httponly=True, samesite="lax")
    return response


@router.get("/login/oauth2/code/google")
async def google_callback(
    request: Request,
    code: str,
    state: str,
    session: AsyncSession = Depends(db_session),
    provider: GoogleIdentityProvider = Depends(identity_provider),
    codec: TokenCodec = Depends(token_codec),
    settings: Settings = Depends(settings_dep),
) -> RedirectResponse:
    expected = request.cookies.get(STATE_COOKIE)
    if not expected or not secrets.compare_digest(expected, state):
        raise HTTPException(status_code=HTTP_400_BAD_REQUEST, detail="Invalid OAuth2 state")

    identity = await provider.fetch_identity(code=code)

    # IdentityConflict / MissingIdentityAttribute propagate to api.error_handling.
    linker = IdentityLinker(
        session=session, codec=codec, callback_path=settings.oauth_redirect_path
    )
    linked = await linker.link(
        email=identity.email,
        display_name=identity.display_name,
        attributes=identity.attributes,
    )

    response = RedirectResponse(linker.redirect_url(linked.token), status_code=HTTP_302_FOUND)
    response.delete_cookie(STATE_COOKIE)
    return response
