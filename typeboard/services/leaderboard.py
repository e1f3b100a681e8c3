"""Leaderboard ordering."""

from __future__ import annotations

from typing import Iterable, List

from ..core.time import parse_timestamp
from ..models.profile import LeaderboardProfile


def rank_profiles(
    profiles: Iterable[LeaderboardProfile], region: str
) -> List[LeaderboardProfile]:
    """Filter to ``region`` and sort by score, then accuracy, then recency."""

    in_region = [profile for profile in profiles if (profile.region or region) == region]
    return sorted(
        in_region,
        key=lambda profile: (
            profile.score,
            profile.accuracy,
            parse_timestamp(profile.timestamp),
        ),
        reverse=True,
    )


__all__ = ["rank_profiles"]
