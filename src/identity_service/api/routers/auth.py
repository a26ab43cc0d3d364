"""
identity_service.api.routers.auth

Password sign-up and sign-in.

Responsibilities:
- Register password-based accounts (`PUT /auth/signup`).
- Authenticate credentials and hand out a bearer token (`POST /auth/signin`).
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_200_OK, HTTP_400_BAD_REQUEST, HTTP_403_FORBIDDEN

from identity_service.api.deps import db_session, password_hasher
from identity_service.auth.deps import token_codec
from identity_service.auth.jwt import TokenCodec
from identity_service.auth.passwords import PasswordHasher
from identity_service.services.credentials import CredentialAuthenticator
from identity_service.services.registration import RegistrationService
from identity_service.services.results import Failure

router = APIRouter(prefix="/auth", tags=["authentication"])


class RegistrationRequest(BaseModel):
    username: str
    password: str
    email: str | None = None


class LoginRequest(BaseModel):
    username: str
    password: str


class AuthStatusResponse(BaseModel):
    code: int
    token: str | None = None


@router.put("/signup", response_model=AuthStatusResponse)
async def sign_up(
    body: RegistrationRequest,
    response: Response,
    session: AsyncSession = Depends(db_session),
    hasher: PasswordHasher = Depends(password_hasher),
) -> AuthStatusResponse:
    result = await RegistrationService(session=session, hasher=hasher).register(
        login_name=body.username,
        secret=body.password,
        email=body.email,
    )
    if isinstance(result, Failure):
        # Invalid email, taken login and taken email all answer the same way.
        response.status_code = HTTP_400_BAD_REQUEST
        return AuthStatusResponse(code=HTTP_400_BAD_REQUEST)
    return AuthStatusResponse(code=HTTP_200_OK)


@router.post("/signin", response_model=AuthStatusResponse)
async def sign_in(
    body: LoginRequest,
    response: Response,
    session: AsyncSession = Depends(db_session),
    hasher: PasswordHasher = Depends(password_hasher),
    codec: TokenCodec = Depends(token_codec),
) -> AuthStatusResponse:
    result = await CredentialAuthenticator(session=session, hasher=hasher).authenticate(
        login_name=body.username,
        secret=body.password,
    )
    if isinstance(result, Failure):
        response.status_code = HTTP_403_FORBIDDEN
        return AuthStatusResponse(code=HTTP_403_FORBIDDEN)

    token = codec.issue(result.value)
    response.headers["Authorization"] = f"Bearer {token}"
    return AuthStatusResponse(code=HTTP_200_OK, token=token)
