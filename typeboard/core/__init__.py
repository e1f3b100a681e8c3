"""Core configuration and infrastructure helpers."""

from .cache import TTLCache
from .config import (
    ADMIN_PASS,
    ADMIN_USER,
    ALLOWED_CORS_ORIGINS,
    ALLOWED_REGION,
    COOKIE_DOMAIN,
    COOKIE_SAMESITE,
    COOKIE_SECURE,
    DATA_DIR,
    IS_PRODUCTION,
    JOIN_COOLDOWN_SECONDS,
    MONKEYTYPE_API_BASE,
    REFRESH_ENABLED,
    REFRESH_MINUTES,
    REFRESH_USER_DELAY_MS,
    SCORE_SOURCE,
    SECRET_KEY,
)
from .log import get_logger
from .time import isoformat_z, utcnow

__all__ = [
    "ADMIN_PASS",
    "ADMIN_USER",
    "ALLOWED_CORS_ORIGINS",
    "ALLOWED_REGION",
    "COOKIE_DOMAIN",
    "COOKIE_SAMESITE",
    "COOKIE_SECURE",
    "DATA_DIR",
    "IS_PRODUCTION",
    "JOIN_COOLDOWN_SECONDS",
    "MONKEYTYPE_API_BASE",
    "REFRESH_ENABLED",
    "REFRESH_MINUTES",
    "REFRESH_USER_DELAY_MS",
    "SCORE_SOURCE",
    "SECRET_KEY",
    "TTLCache",
    "get_logger",
    "isoformat_z",
    "utcnow",
]
