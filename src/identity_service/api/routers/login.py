from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse, RedirectResponse

router = APIRouter(tags=["login"])


@router.get("/login")
async def login_page() -> RedirectResponse:
    # The form itself is served by the front end.
    return RedirectResponse("/login.html")


@router.get("/redirect", response_class=PlainTextResponse)
async def federated_login_landing(token: str) -> str:
    return f"Success login with Google. Token: {token}"
