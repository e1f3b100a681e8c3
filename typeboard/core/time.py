"""Time helpers."""

from __future__ import annotations

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Return the current UTC datetime."""
    return datetime.now(timezone.utc)


def isoformat_z(moment: datetime | None = None) -> str:
    """ISO-8601 UTC timestamp with a ``Z`` suffix."""

    moment = moment or utcnow()
    return moment.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def parse_timestamp(raw: str | None) -> datetime:
    """Parse a stored timestamp; unparseable values sort as the epoch."""

    if not raw:
        return datetime.fromtimestamp(0, tz=timezone.utc)
    try:
        parsed = datetime.fromisoformat(str(raw).replace("Z", "+00:00"))
    except ValueError:
        return datetime.fromtimestamp(0, tz=timezone.utc)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


__all__ = ["isoformat_z", "parse_timestamp", "utcnow"]
