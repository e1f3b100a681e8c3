"""Application settings and environment helpers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, List

from dotenv import load_dotenv

load_dotenv(override=False)


def _require_env(name: str) -> str:
    """Return a required environment variable or raise an error."""

    value = os.getenv(name)
    if not value:
        raise RuntimeError(f"Missing required environment variable: {name}")
    return value


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_number(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be a number") from exc


def _split_csv(raw: str | None) -> List[str]:
    if not raw:
        return []
    return [item.strip() for item in raw.split(",") if item.strip()]


def _unique(values: Iterable[str]) -> List[str]:
    seen = set()
    ordered: List[str] = []
    for value in values:
        if value not in seen:
            seen.add(value)
            ordered.append(value)
    return ordered


# Application security -------------------------------------------------------
SECRET_KEY = _require_env("SECRET_KEY")

# FRONTEND_ORIGIN can contain a comma-separated list for multi-domain deploys.
_frontend_origins = _split_csv(os.getenv("FRONTEND_ORIGIN"))
_additional_origins = _split_csv(os.getenv("ADDITIONAL_ALLOWED_ORIGINS"))

_local_dev_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

ALLOWED_CORS_ORIGINS = _unique(
    [
        *_frontend_origins,
        *_additional_origins,
        *_local_dev_origins,
    ]
)

COOKIE_DOMAIN = os.getenv("COOKIE_DOMAIN") or None
COOKIE_SECURE = _env_bool("COOKIE_SECURE", False)
COOKIE_SAMESITE = os.getenv("COOKIE_SAMESITE", "lax")

ADMIN_USER = os.getenv("ADMIN_USER") or None
ADMIN_PASS = os.getenv("ADMIN_PASS") or None


# Upstream typing-test API -----------------------------------------------------
MONKEYTYPE_API_BASE = os.getenv(
    "MONKEYTYPE_API_BASE", "https://api.monkeytype.com"
).rstrip("/")

SCORE_SOURCE = os.getenv("SCORE_SOURCE", "monkeytype").strip().lower()
if SCORE_SOURCE not in {"monkeytype", "demo"}:
    raise RuntimeError("SCORE_SOURCE must be 'monkeytype' or 'demo'")


# Runtime behaviour ----------------------------------------------------------
APP_ENV = os.getenv("APP_ENV", "development").strip().lower()
IS_PRODUCTION = APP_ENV == "production"

ALLOWED_REGION = os.getenv("ALLOWED_REGION", "IL").strip().upper()
DATA_DIR = Path(os.getenv("DATA_DIR", "data"))

REFRESH_ENABLED = _env_bool("REFRESH_ENABLED", True)
REFRESH_MINUTES = _env_number("REFRESH_MINUTES", 3)
REFRESH_USER_DELAY_MS = _env_number("REFRESH_USER_DELAY_MS", 250)

JOIN_COOLDOWN_SECONDS = _env_number("JOIN_COOLDOWN_SECONDS", 10)

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").strip().upper()


__all__ = [
    "ADMIN_PASS",
    "ADMIN_USER",
    "ALLOWED_CORS_ORIGINS",
    "ALLOWED_REGION",
    "APP_ENV",
    "COOKIE_DOMAIN",
    "COOKIE_SAMESITE",
    "COOKIE_SECURE",
    "DATA_DIR",
    "IS_PRODUCTION",
    "JOIN_COOLDOWN_SECONDS",
    "LOG_LEVEL",
    "MONKEYTYPE_API_BASE",
    "REFRESH_ENABLED",
    "REFRESH_MINUTES",
    "REFRESH_USER_DELAY_MS",
    "SCORE_SOURCE",
    "SECRET_KEY",
]
