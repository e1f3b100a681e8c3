"""Profile store: the ordered list of leaderboard rows."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

from ..core.log import get_logger
from ..models.profile import LeaderboardProfile, username_key
from .documents import JsonDocument

logger = get_logger("stores.profiles")


def _row_to_profile(row: Mapping[str, Any]) -> Optional[LeaderboardProfile]:
    if not isinstance(row, Mapping) or not row.get("username"):
        return None
    data = dict(row)
    # Rows written before the score/region rename.
    if "score" not in data and "wpm15" in data:
        data["score"] = data.pop("wpm15")
    if "region" not in data and "country" in data:
        data["region"] = data.pop("country")
    return LeaderboardProfile.model_validate(data)


def _coerce(data: Any) -> List[Dict[str, Any]]:
    return data if isinstance(data, list) else []


class ProfileStore:
    """Durable list of :class:`LeaderboardProfile` rows, unique by username."""

    def __init__(self, path: Path | str) -> None:
        self._doc = JsonDocument(path, list, _coerce)

    async def load_all(self) -> List[LeaderboardProfile]:
        rows = await self._doc.read()
        profiles = []
        for row in rows:
            profile = _row_to_profile(row)
            if profile is not None:
                profiles.append(profile)
        return profiles

    async def get(self, username: str) -> Optional[LeaderboardProfile]:
        want = username_key(username)
        for profile in await self.load_all():
            if profile.key == want:
                return profile
        return None

    async def save_all(self, profiles: Iterable[LeaderboardProfile]) -> None:
        await self._doc.overwrite([profile.model_dump() for profile in profiles])

    async def upsert(self, profile: LeaderboardProfile) -> LeaderboardProfile:
        """Replace-merge the row with the same username, or append a new one."""

        async with self._doc.transaction() as rows:
            for idx, row in enumerate(rows):
                if username_key(str(row.get("username", ""))) == profile.key:
                    merged = {**row, **profile.model_dump()}
                    merged.pop("wpm15", None)
                    merged.pop("country", None)
                    rows[idx] = merged
                    break
            else:
                rows.append(profile.model_dump())
        return profile

    async def delete(self, username: str) -> bool:
        want = username_key(username)
        async with self._doc.transaction() as rows:
            kept = [row for row in rows if username_key(str(row.get("username", ""))) != want]
            removed = len(kept) != len(rows)
            rows[:] = kept
        return removed

    async def commit_sweep(
        self,
        refreshed: Mapping[str, LeaderboardProfile],
        dropped: Iterable[str],
        seen: Mapping[str, str],
    ) -> List[LeaderboardProfile]:
        """Apply one sweep's results as a single overwrite.

        ``seen`` maps each username key to the timestamp the sweep read.
        Rows whose timestamp changed since then were written by a join while
        the sweep was running and are left as they are now.
        """

        dropped = set(dropped)
        async with self._doc.transaction() as rows:
            survivors: List[Dict[str, Any]] = []
            present = set()
            for row in rows:
                profile = _row_to_profile(row)
                if profile is None:
                    continue
                key = profile.key
                present.add(key)
                unchanged = seen.get(key) == profile.timestamp
                if key in dropped and unchanged:
                    continue
                if key in refreshed and unchanged:
                    survivors.append(refreshed[key].model_dump())
                else:
                    survivors.append(profile.model_dump())
            for key, profile in refreshed.items():
                if key not in seen and key not in present:
                    survivors.append(profile.model_dump())
            rows[:] = survivors

        logger.debug("Sweep committed %d profiles", len(survivors))
        return [LeaderboardProfile.model_validate(row) for row in survivors]


__all__ = ["ProfileStore"]
