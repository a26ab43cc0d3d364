"""
identity_service.api.routers.health

Health and readiness endpoints.

Responsibilities:
- Provide liveness probe (`/healthz`).
- Provide readiness probe (`/readyz`): the account store answers and the default
  `USER` role exists.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_200_OK, HTTP_503_SERVICE_UNAVAILABLE

from identity_service.api.deps import db_session
from identity_service.auth.models import USER_ROLE
from identity_service.db.repositories.roles import RoleRepo
from identity_service.observability.logging import get_logger

router = APIRouter()
log = get_logger(__name__)


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/readyz")
async def readyz(session: AsyncSession = Depends(db_session)) -> JSONResponse:
    # Without the default role, new accounts would be created with no roles at all.
    if await RoleRepo(session).find_by_name(USER_ROLE) is None:
        log.warning("not_ready", reason="default_role_missing", role=USER_ROLE)
        return JSONResponse(
            status_code=HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "reason": "default_role_missing"},
        )
    return JSONResponse(status_code=HTTP_200_OK, content={"status": "ready"})


# --- Module Notes -----------------------------------------------------------
# A store that is down raises from the query and surfaces as a 500 via
# api.error_handling, which orchestrators treat as not ready too.
