"""Shared fixtures for the typeboard test suite."""

from __future__ import annotations

import os

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("REFRESH_ENABLED", "false")
os.environ.setdefault("LOG_LEVEL", "CRITICAL")
os.environ.setdefault("COOKIE_SECURE", "false")

from typing import AsyncIterator, Callable  # noqa: E402

import httpx  # noqa: E402
import pytest  # noqa: E402

from typeboard.app import create_app  # noqa: E402
from typeboard.context import AppContext, build_context  # noqa: E402
from typeboard.stores import CredentialStore, ProfileStore  # noqa: E402

from .stubs import StubScores, StubValidator, static_region_gate  # noqa: E402


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def credential_store(tmp_path) -> CredentialStore:
    return CredentialStore(tmp_path / "keystore.json")


@pytest.fixture
def profile_store(tmp_path) -> ProfileStore:
    return ProfileStore(tmp_path / "users.json")


@pytest.fixture
def validator() -> StubValidator:
    return StubValidator()


@pytest.fixture
def scores() -> StubScores:
    return StubScores()


@pytest.fixture
def make_context(tmp_path, validator, scores) -> Callable[..., AppContext]:
    def factory(*, country: str = "IL", **overrides) -> AppContext:
        options = {
            "validator": validator,
            "scores": scores,
            "region_gate": static_region_gate(country),
            "join_cooldown_seconds": 0,
            "refresh_user_delay_ms": 0,
        }
        options.update(overrides)
        return build_context(tmp_path / "data", **options)

    return factory


@pytest.fixture
def context(make_context) -> AppContext:
    return make_context()


@pytest.fixture
async def client(context) -> AsyncIterator[httpx.AsyncClient]:
    """HTTPX client over ASGI, no real server."""

    app = create_app(context, refresh_enabled=False)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
