"""
tests.test_api

End-to-end HTTP scenarios through the FastAPI app (in-process, seeded reference data).
"""

from __future__ import annotations

from urllib.parse import parse_qs, urlsplit

import httpx
import pytest

from identity_service.api.deps import identity_provider
from identity_service.api.routers.oauth import STATE_COOKIE
from identity_service.federation.google import FederatedIdentity


async def _signup(client: httpx.AsyncClient, username: str, password: str, email: str):
    return await client.put(
        "/auth/signup", json={"username": username, "password": password, "email": email}
    )


async def _signin(client: httpx.AsyncClient, username: str, password: str) -> str:
    r = await client.post("/auth/signin", json={"username": username, "password": password})
    assert r.status_code == 200, r.text
    return r.json()["token"]


def _bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.mark.asyncio
async def test_signup_then_duplicate_login_is_rejected(client: httpx.AsyncClient) -> None:
    r = await _signup(client, "bob", "pw1", "bob@x.com")
    assert r.status_code == 200
    assert r.json() == {"code": 200, "token": None}

    r = await _signup(client, "bob", "pw2", "other@x.com")
    assert r.status_code == 400
    assert r.json() == {"code": 400, "token": None}


@pytest.mark.asyncio
async def test_duplicate_email_and_invalid_email_look_the_same(client: httpx.AsyncClient) -> None:
    await _signup(client, "bob", "pw1", "bob@x.com")

    taken = await _signup(client, "robert", "pw2", "bob@x.com")
    invalid = await _signup(client, "carol", "pw3", "carol-at-x")

    assert taken.status_code == invalid.status_code == 400
    assert taken.json() == invalid.json()


@pytest.mark.asyncio
async def test_signin_returns_token_in_body_and_header(app, client: httpx.AsyncClient) -> None:
    await _signup(client, "bob", "pw1", "bob@x.com")

    r = await client.post("/auth/signin", json={"username": "bob", "password": "pw1"})

    assert r.status_code == 200
    token = r.json()["token"]
    assert r.headers["authorization"] == f"Bearer {token}"
    claims = app.state.token_codec.decode(token)
    assert claims.subject == "bob"
    assert claims.roles == {"USER"}


@pytest.mark.asyncio
async def test_signin_failures_are_undifferentiated(client: httpx.AsyncClient) -> None:
    await _signup(client, "bob", "pw1", "bob@x.com")

    wrong = await client.post("/auth/signin", json={"username": "bob", "password": "nope"})
    unknown = await client.post("/auth/signin", json={"username": "ghost", "password": "pw1"})

    assert wrong.status_code == unknown.status_code == 403
    assert wrong.json() == unknown.json() == {"code": 403, "token": None}
    assert "authorization" not in wrong.headers


@pytest.mark.asyncio
async def test_admin_replaces_roles_fully(client: httpx.AsyncClient) -> None:
    await _signup(client, "bob", "pw1", "bob@x.com")
    admin = await _signin(client, "ADMIN", "password123")

    r = await client.put(
        "/user-roles/save", json={"username": "bob", "roles": ["ADMIN"]}, headers=_bearer(admin)
    )
    assert r.status_code == 200
    assert r.json() == {"code": 200, "username": "bob", "roles": ["ADMIN"]}

    r = await client.get("/user-roles/bob", headers=_bearer(admin))
    assert r.status_code == 200
    assert r.json() == ["ADMIN"]


@pytest.mark.asyncio
async def test_replace_roles_for_unknown_account_is_400(client: httpx.AsyncClient) -> None:
    admin = await _signin(client, "ADMIN", "password123")

    r = await client.put(
        "/user-roles/save", json={"username": "ghost", "roles": ["USER"]}, headers=_bearer(admin)
    )

    assert r.status_code == 400
    assert r.json() == {"code": 400, "username": "ghost", "roles": None}


@pytest.mark.asyncio
async def test_unknown_role_is_a_server_fault_and_changes_nothing(client: httpx.AsyncClient) -> None:
    await _signup(client, "alice", "pw", "alice@x.com")
    admin = await _signin(client, "ADMIN", "password123")

    r = await client.put(
        "/user-roles/save",
        json={"username": "alice", "roles": ["USER", "GHOST"]},
        headers=_bearer(admin),
    )
    assert r.status_code == 500
    assert r.json()["message"] == "There is no role with that name"

    r = await client.get("/user-roles/alice", headers=_bearer(admin))
    assert r.json() == ["USER"]


@pytest.mark.asyncio
async def test_replace_roles_requires_admin(client: httpx.AsyncClient) -> None:
    await _signup(client, "bob", "pw1", "bob@x.com")
    token = await _signin(client, "bob", "pw1")

    r = await client.put(
        "/user-roles/save", json={"username": "bob", "roles": ["ADMIN"]}, headers=_bearer(token)
    )
    assert r.status_code == 403

    r = await client.put("/user-roles/save", json={"username": "bob", "roles": ["ADMIN"]})
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_role_viewing_policy(client: httpx.AsyncClient) -> None:
    await _signup(client, "bob", "pw1", "bob@x.com")
    await _signup(client, "carol", "pw2", "carol@x.com")
    bob = await _signin(client, "bob", "pw1")
    admin = await _signin(client, "ADMIN", "password123")

    own = await client.get("/user-roles/bob", headers=_bearer(bob))
    assert own.status_code == 200 and own.json() == ["USER"]

    other = await client.get("/user-roles/carol", headers=_bearer(bob))
    assert other.status_code == 403

    as_admin = await client.get("/user-roles/carol", headers=_bearer(admin))
    assert as_admin.status_code == 200 and as_admin.json() == ["USER"]

    missing = await client.get("/user-roles/ghost", headers=_bearer(admin))
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_invalid_bearer_token_is_401(client: httpx.AsyncClient) -> None:
    r = await client.get("/user-roles/bob", headers=_bearer("invalid.token.format"))
    assert r.status_code == 401
    assert r.json()["detail"] == "Invalid or expired token"


class _FakeProvider:
    def __init__(self, identity: FederatedIdentity) -> None:
        self._identity = identity
        self.codes: list[str] = []

    def authorization_url(self, *, state: str) -> str:
        return f"https://provider.test/auth?state={state}"

    async def fetch_identity(self, *, code: str) -> FederatedIdentity:
        self.codes.append(code)
        return self._identity


async def _federated_callback(app, client: httpx.AsyncClient, identity: FederatedIdentity):
    provider = _FakeProvider(identity)
    app.dependency_overrides[identity_provider] = lambda: provider

    start = await client.get("/oauth2/authorization/google")
    assert start.status_code == 302
    state = parse_qs(urlsplit(start.headers["location"]).query)["state"][0]
    assert client.cookies.get(STATE_COOKIE) == state

    return await client.get("/login/oauth2/code/google", params={"code": "abc", "state": state})


@pytest.mark.asyncio
async def test_federated_login_creates_account_and_redirects_with_token(
    app, client: httpx.AsyncClient
) -> None:
    r = await _federated_callback(
        app, client, FederatedIdentity(email="new@x.com", display_name="New")
    )

    assert r.status_code == 302
    location = urlsplit(r.headers["location"])
    assert location.path == "/redirect"
    token = parse_qs(location.query)["token"][0]
    claims = app.state.token_codec.decode(token)
    assert claims.subject == "New"
    assert claims.roles == {"USER"}

    landing = await client.get("/redirect", params={"token": token})
    assert landing.text == f"Success login with Google. Token: {token}"


@pytest.mark.asyncio
async def test_federated_login_on_password_email_is_rejected(app, client: httpx.AsyncClient) -> None:
    await _signup(client, "bob", "pw1", "bob@x.com")

    r = await _federated_callback(
        app, client, FederatedIdentity(email="bob@x.com", display_name="Bob")
    )

    assert r.status_code == 400
    assert r.json()["message"] == "User already exists"
    assert "location" not in r.headers


@pytest.mark.asyncio
async def test_federated_login_without_email_is_rejected(app, client: httpx.AsyncClient) -> None:
    r = await _federated_callback(app, client, FederatedIdentity(email=None, display_name="X"))

    assert r.status_code == 400


@pytest.mark.asyncio
async def test_federated_callback_with_wrong_state_is_rejected(
    app, client: httpx.AsyncClient
) -> None:
    provider = _FakeProvider(FederatedIdentity(email="new@x.com", display_name="New"))
    app.dependency_overrides[identity_provider] = lambda: provider

    r = await client.get("/login/oauth2/code/google", params={"code": "abc", "state": "forged"})

    assert r.status_code == 400
    assert provider.codes == []


@pytest.mark.asyncio
async def test_login_page_redirects_to_front_end(client: httpx.AsyncClient) -> None:
    r = await client.get("/login")

    assert r.status_code == 307
    assert r.headers["location"] == "/login.html"


@pytest.mark.asyncio
async def test_unexpected_error_is_a_generic_500(app) -> None:
    async def _boom() -> None:
        raise RuntimeError("db password is hunter2")

    app.add_api_route("/boom", _boom)
    # Starlette re-raises after answering; keep the response instead.
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        r = await client.get("/boom")

    assert r.status_code == 500
    body = r.json()
    assert body["status"] == 500
    assert body["error"] == "Internal Server Error"
    assert body["message"] == "An unexpected error occurred"
    assert "hunter2" not in r.text
    assert "RuntimeError" not in r.text
