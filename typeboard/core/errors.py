"""Error taxonomy for joins, stores and upstream calls."""

from __future__ import annotations


class TypeboardError(Exception):
    """Base error carrying the HTTP status it maps to."""

    status_code = 500
    message = "Server error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)
        self.message = message or self.message


class BadInput(TypeboardError):
    status_code = 400
    message = "Username and credential are required."


class Unauthorized(TypeboardError):
    status_code = 401
    message = "Credential invalid or not authorized."


class RegionDenied(TypeboardError):
    status_code = 403
    message = "This leaderboard is restricted to its region."


class Conflict(TypeboardError):
    status_code = 409
    message = "Username is already taken."


class TooManyAttempts(TypeboardError):
    status_code = 429
    message = "Too many attempts. Please wait a few seconds and try again."


class NoQualifyingResult(TypeboardError):
    message = "No qualifying result found for this account."


class StoreIOError(TypeboardError):
    message = "Storage unavailable."


class UpstreamAuthRejected(TypeboardError):
    """The upstream API refused the credential while fetching results."""

    status_code = 401
    message = "Credential invalid or not authorized."


__all__ = [
    "BadInput",
    "Conflict",
    "NoQualifyingResult",
    "RegionDenied",
    "StoreIOError",
    "TooManyAttempts",
    "TypeboardError",
    "Unauthorized",
    "UpstreamAuthRejected",
]
