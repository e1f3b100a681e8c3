"""Per-client cooldown between join attempts."""

from __future__ import annotations

from ..core.cache import TTLCache


class JoinThrottle:
    """Allow one join attempt per key (client IP) per cooldown window."""

    def __init__(self, cache: TTLCache, cooldown_seconds: float) -> None:
        self._cache = cache
        self._cooldown = cooldown_seconds

    def attempt(self, key: str) -> bool:
        """Record an attempt; False when the previous one is too recent."""

        if self._cooldown <= 0:
            return True
        key = key or "unknown"
        if key in self._cache:
            return False
        self._cache.put(key, True, self._cooldown)
        return True


__all__ = ["JoinThrottle"]
