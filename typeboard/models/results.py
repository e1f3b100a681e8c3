"""Upstream result and probe models."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict

from sqlmodel import Field, SQLModel


class ProbeResult(str, Enum):
    VALID = "valid"
    INVALID = "invalid"
    INDETERMINATE = "indeterminate"


class QualifyingResult(SQLModel):
    """Best qualifying typing-test result for one account."""

    score: int
    accuracy: float
    raw: Dict[str, Any] = Field(default_factory=dict)


__all__ = ["ProbeResult", "QualifyingResult"]
