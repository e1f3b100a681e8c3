"""Join request and outcome models."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from sqlmodel import SQLModel


class JoinStatus(str, Enum):
    REJECTED_REGION = "rejected_region"
    REJECTED_BAD_INPUT = "rejected_bad_input"
    REJECTED_UNAUTHORIZED = "rejected_unauthorized"
    REJECTED_CONFLICT = "rejected_conflict"
    SUCCESS_RELOGIN = "success_relogin"
    SUCCESS_CREATED = "success_created"
    ERROR_SERVER = "error_server"


_STATUS_CODES = {
    JoinStatus.REJECTED_REGION: 403,
    JoinStatus.REJECTED_BAD_INPUT: 400,
    JoinStatus.REJECTED_UNAUTHORIZED: 401,
    JoinStatus.REJECTED_CONFLICT: 409,
    JoinStatus.SUCCESS_RELOGIN: 200,
    JoinStatus.SUCCESS_CREATED: 200,
    JoinStatus.ERROR_SERVER: 500,
}


class JoinRequest(SQLModel):
    """Body of ``POST /api/join``."""

    username: str = ""
    credential: str = ""


class JoinOutcome(SQLModel):
    """Terminal result of one pass through the join workflow."""

    status: JoinStatus
    username: Optional[str] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status in (JoinStatus.SUCCESS_RELOGIN, JoinStatus.SUCCESS_CREATED)

    @property
    def http_status(self) -> int:
        return _STATUS_CODES[self.status]


__all__ = ["JoinOutcome", "JoinRequest", "JoinStatus"]
