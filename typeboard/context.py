"""Process context: the stores, caches and services one app instance owns."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import httpx
from fastapi import Request

from .core import (
    ALLOWED_REGION,
    DATA_DIR,
    IS_PRODUCTION,
    JOIN_COOLDOWN_SECONDS,
    MONKEYTYPE_API_BASE,
    REFRESH_MINUTES,
    REFRESH_USER_DELAY_MS,
    SCORE_SOURCE,
    TTLCache,
)
from .services import (
    CredentialValidator,
    DemoScoreSource,
    DemoValidator,
    GeoLocator,
    JoinThrottle,
    JoinWorkflow,
    MonkeytypeClient,
    RefreshSweep,
    RegionGate,
    ScoreSource,
    UpstreamScoreSource,
    Validator,
)
from .stores import CredentialStore, ProfileStore

KEYSTORE_FILE = "keystore.json"
PROFILES_FILE = "users.json"


@dataclass
class AppContext:
    credentials: CredentialStore
    profiles: ProfileStore
    validator: Validator
    scores: ScoreSource
    region_gate: RegionGate
    join_throttle: JoinThrottle
    workflow: JoinWorkflow
    sweep: RefreshSweep
    region: str = ALLOWED_REGION


def build_context(
    data_dir: Path | str = DATA_DIR,
    *,
    score_source: str = SCORE_SOURCE,
    region: str = ALLOWED_REGION,
    upstream_transport: Optional[httpx.AsyncBaseTransport] = None,
    region_gate: Optional[RegionGate] = None,
    validator: Optional[Validator] = None,
    scores: Optional[ScoreSource] = None,
    join_cooldown_seconds: float = JOIN_COOLDOWN_SECONDS,
    refresh_minutes: float = REFRESH_MINUTES,
    refresh_user_delay_ms: float = REFRESH_USER_DELAY_MS,
) -> AppContext:
    """Wire up one process context.

    The score source mode is decided here, once; explicit ``validator`` and
    ``scores`` arguments override it.
    """

    data_dir = Path(data_dir)
    credentials = CredentialStore(data_dir / KEYSTORE_FILE)
    profiles = ProfileStore(data_dir / PROFILES_FILE)

    if score_source == "demo":
        validator = validator or DemoValidator()
        scores = scores or DemoScoreSource()
    else:
        client = MonkeytypeClient(MONKEYTYPE_API_BASE, transport=upstream_transport)
        validator = validator or CredentialValidator(client)
        scores = scores or UpstreamScoreSource(client)

    if region_gate is None:
        region_gate = RegionGate(
            GeoLocator(TTLCache(maxsize=4096)),
            region=region,
            allow_private=not IS_PRODUCTION,
        )

    return AppContext(
        credentials=credentials,
        profiles=profiles,
        validator=validator,
        scores=scores,
        region_gate=region_gate,
        join_throttle=JoinThrottle(TTLCache(maxsize=10_000), join_cooldown_seconds),
        workflow=JoinWorkflow(credentials, profiles, validator, scores, region=region),
        sweep=RefreshSweep(
            credentials,
            profiles,
            validator,
            scores,
            interval_seconds=refresh_minutes * 60,
            per_user_delay=refresh_user_delay_ms / 1000,
            region=region,
        ),
        region=region,
    )


def get_context(request: Request) -> AppContext:
    """FastAPI dependency returning the app's process context."""

    return request.app.state.context


__all__ = ["AppContext", "build_context", "get_context"]
