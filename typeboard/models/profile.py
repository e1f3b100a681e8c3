"""Leaderboard profile records."""

from __future__ import annotations

import unicodedata
from typing import Any, Dict

from sqlmodel import Field, SQLModel

from ..core.config import ALLOWED_REGION
from ..core.time import isoformat_z


def normalize_username(raw: str | None) -> str:
    """Unicode-normalize and trim a username."""

    return unicodedata.normalize("NFKC", raw or "").strip()


def username_key(raw: str | None) -> str:
    """Case-insensitive identity of a username."""

    return normalize_username(raw).casefold()


class LeaderboardProfile(SQLModel):
    """One leaderboard row, keyed case-insensitively by username."""

    username: str
    score: int = 0
    accuracy: float = 0.0
    timestamp: str = Field(default_factory=isoformat_z)
    region: str = Field(default=ALLOWED_REGION)

    @property
    def key(self) -> str:
        return username_key(self.username)

    def public_dict(self) -> Dict[str, Any]:
        """Fields exposed by the leaderboard endpoint."""

        return {
            "username": self.username,
            "score": self.score,
            "accuracy": self.accuracy,
            "timestamp": self.timestamp,
        }


__all__ = ["LeaderboardProfile", "normalize_username", "username_key"]
