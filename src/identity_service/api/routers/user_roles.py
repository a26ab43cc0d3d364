"""
identity_service.api.routers.user_roles

Role management endpoints.

Responsibilities:
- Replace an account's roles (administrators only).
- Show an account's roles, subject to the viewing policy below.

Viewing policy:
- A caller whose stored roles include ADMIN may view anyone's roles; an account
  with no roles (or no account at all) is answered with 404.
- Any other caller may view only their own roles.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import (
    HTTP_200_OK,
    HTTP_400_BAD_REQUEST,
    HTTP_403_FORBIDDEN,
    HTTP_404_NOT_FOUND,
)

from identity_service.api.deps import db_session
from identity_service.auth.deps import get_principal, require_roles
from identity_service.auth.models import ADMIN_ROLE, Principal
from identity_service.services.results import Failure
from identity_service.services.roles import RoleAuthority

router = APIRouter(prefix="/user-roles", tags=["user-roles"])


class ChangeUserRolesRequest(BaseModel):
    username: str
    roles: set[str] = Field(default_factory=set)


class RoleStatusResponse(BaseModel):
    code: int
    username: str
    roles: list[str] | None


@router.put(
    "/save",
    response_model=RoleStatusResponse,
    dependencies=[Depends(require_roles(ADMIN_ROLE))],
)
async def save_roles(
    body: ChangeUserRolesRequest,
    response: Response,
    session: AsyncSession = Depends(db_session),
) -> RoleStatusResponse:
    # An unknown role name raises UnknownRole, translated to 500 by api.error_handling.
    result = await RoleAuthority(session=session).replace_roles(
        login_name=body.username,
        role_names=body.roles,
    )
    if isinstance(result, Failure):
        response.status_code = HTTP_400_BAD_REQUEST
        return RoleStatusResponse(code=HTTP_400_BAD_REQUEST, username=body.username, roles=None)

    return RoleStatusResponse(
        code=HTTP_200_OK,
        username=result.value.login_name,
        roles=sorted(result.value.roles or ()),
    )


@router.get("/{login}", response_model=list[str])
async def get_user_roles(
    login: str,
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> list[str]:
    authority = RoleAuthority(session=session)
    # The caller's current stored roles decide, not the (possibly stale) token roles.
    caller_roles = (
        await authority.roles_of(principal.login_name)
        if principal.login_name is not None
        else frozenset()
    )

    if ADMIN_ROLE in caller_roles:
        roles = await authority.roles_of(login)
        if not roles:
            raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="User has no roles")
        return sorted(roles)

    if principal.login_name == login:
        return sorted(caller_roles)

    raise HTTPException(status_code=HTTP_403_FORBIDDEN, detail="Access denied")
