import httpx
import pytest

from typeboard.app import create_app
from typeboard.core.errors import NoQualifyingResult
from typeboard.models import ProbeResult


@pytest.fixture
async def client_for(make_context):
    """Build a client over a customised context."""

    clients = []

    async def factory(**overrides):
        app = create_app(make_context(**overrides), refresh_enabled=False)
        ac = httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test")
        clients.append(ac)
        return ac

    yield factory
    for ac in clients:
        await ac.aclose()


@pytest.mark.anyio
@pytest.mark.parametrize("path", ["/health", "/healthz"])
async def test_health(client, path):
    response = await client.get(path)

    assert response.status_code == 200
    assert response.json() == {"ok": True}


@pytest.mark.anyio
async def test_api_join_creates_and_logs_in(client, context):
    response = await client.post("/api/join", json={"username": "Shira", "credential": "ape_1"})

    assert response.status_code == 200
    assert response.json() == {"ok": True, "username": "Shira", "created": True}
    assert await context.credentials.get_credential("shira") == "ape_1"

    session = await client.get("/api/session")
    assert session.json() == {"loggedIn": True, "username": "Shira"}


@pytest.mark.anyio
async def test_api_join_relogin_uses_bound_name(client, context):
    await context.credentials.upsert_binding("shira", "ape_1")

    response = await client.post("/api/join", json={"username": "impostor", "credential": "ape_1"})

    assert response.json() == {"ok": True, "username": "shira", "relogin": True}


@pytest.mark.anyio
async def test_api_join_conflict(client, context):
    await context.credentials.upsert_binding("shira", "ape_1")

    response = await client.post("/api/join", json={"username": "SHIRA", "credential": "ape_2"})

    assert response.status_code == 409
    assert response.json() == {"ok": False, "error": "Username is already taken."}
    assert (await client.get("/api/session")).json()["loggedIn"] is False


@pytest.mark.anyio
async def test_api_join_bad_input(client):
    response = await client.post("/api/join", json={"username": "x"})

    assert response.status_code == 400
    assert response.json()["ok"] is False


@pytest.mark.anyio
async def test_api_join_unauthorized(client, validator):
    validator.default = ProbeResult.INVALID

    response = await client.post("/api/join", json={"username": "shira", "credential": "ape_1"})

    assert response.status_code == 401


@pytest.mark.anyio
async def test_api_join_scoring_failure(client, scores):
    scores.results["shira"] = NoQualifyingResult()

    response = await client.post("/api/join", json={"username": "shira", "credential": "ape_1"})

    assert response.status_code == 500
    assert response.json()["ok"] is False


@pytest.mark.anyio
async def test_api_join_outside_region(client_for, validator):
    client = await client_for(country="US")

    response = await client.post("/api/join", json={"username": "shira", "credential": "ape_1"})

    assert response.status_code == 403
    assert validator.calls == []


@pytest.mark.anyio
async def test_join_cooldown(client_for):
    client = await client_for(join_cooldown_seconds=10)

    first = await client.post("/api/join", json={"username": "shira", "credential": "ape_1"})
    second = await client.post("/api/join", json={"username": "shira", "credential": "ape_1"})

    assert first.status_code == 200
    assert second.status_code == 429
    assert second.json()["ok"] is False


@pytest.mark.anyio
async def test_form_join_redirects_home(client):
    response = await client.post("/join", data={"username": "shira", "credential": "ape_1"})

    assert response.status_code == 302
    assert response.headers["location"] == "/"
    assert (await client.get("/api/session")).json()["username"] == "shira"


@pytest.mark.anyio
async def test_form_join_error_is_plain_text(client, context):
    await context.credentials.upsert_binding("shira", "ape_1")

    response = await client.post("/join", data={"username": "shira", "credential": "ape_2"})

    assert response.status_code == 409
    assert response.text == "Username is already taken."


@pytest.mark.anyio
async def test_logout_clears_session(client):
    await client.post("/api/join", json={"username": "shira", "credential": "ape_1"})

    response = await client.post("/api/logout")
    assert response.json() == {"ok": True}
    assert (await client.get("/api/session")).json() == {"loggedIn": False, "username": None}

    await client.post("/api/join", json={"username": "shira", "credential": "ape_1"})
    response = await client.post("/logout")
    assert response.status_code == 302
    assert (await client.get("/api/session")).json()["loggedIn"] is False


@pytest.mark.anyio
async def test_admin_delete_requires_configuration(client):
    response = await client.delete("/api/admin/users/shira", auth=("admin", "pw"))

    assert response.status_code == 503


@pytest.mark.anyio
async def test_admin_delete_user(client, context, monkeypatch):
    monkeypatch.setattr("typeboard.api.routers.admin.ADMIN_USER", "admin")
    monkeypatch.setattr("typeboard.api.routers.admin.ADMIN_PASS", "pw")
    await client.post("/api/join", json={"username": "shira", "credential": "ape_1"})

    denied = await client.delete("/api/admin/users/shira", auth=("admin", "nope"))
    assert denied.status_code == 401

    response = await client.delete("/api/admin/users/SHIRA", auth=("admin", "pw"))
    assert response.status_code == 200
    assert response.json() == {"ok": True, "deleted_binding": True, "deleted_profile": True}
    assert await context.credentials.get_binding("shira") is None
    assert await context.profiles.load_all() == []

    missing = await client.delete("/api/admin/users/shira", auth=("admin", "pw"))
    assert missing.status_code == 404


@pytest.mark.anyio
@pytest.mark.parametrize("content", [b"[]", b'"shira"', b"{not json", b"\xff\xfe"])
async def test_api_join_rejects_non_object_bodies(client, validator, content):
    response = await client.post(
        "/api/join", content=content, headers={"content-type": "application/json"}
    )

    assert response.status_code == 400
    assert response.json() == {"ok": False, "error": "Username and credential are required."}
    assert validator.calls == []


def test_all_routers_are_mounted(context):
    app = create_app(context, refresh_enabled=False)
    paths = {route.path for route in app.routes}

    assert {
        "/health",
        "/healthz",
        "/api/leaderboard",
        "/join",
        "/api/join",
        "/api/session",
        "/logout",
        "/api/logout",
        "/api/admin/users/{username}",
    } <= paths
