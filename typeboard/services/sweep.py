"""Periodic revalidation of stored credentials and score refresh."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Optional, Set, Tuple

from ..core.config import ALLOWED_REGION
from ..core.log import get_logger
from ..core.time import isoformat_z
from ..models.profile import LeaderboardProfile, username_key
from ..models.results import ProbeResult
from ..stores.credentials import CredentialStore
from ..stores.profiles import ProfileStore
from .scores import ScoreSource
from .validator import Validator

logger = get_logger("services.sweep")


@dataclass
class SweepReport:
    refreshed: int = 0
    evicted: int = 0
    orphaned: int = 0
    skipped: int = 0
    failed: int = 0
    kept: int = 0


class RefreshSweep:
    """Revalidate every credential, evict invalid ones, refresh scores.

    ``run_forever`` sleeps for the interval between sweeps, so a sweep never
    starts while the previous one is still running.
    """

    def __init__(
        self,
        credentials: CredentialStore,
        profiles: ProfileStore,
        validator: Validator,
        scores: ScoreSource,
        *,
        interval_seconds: float = 180.0,
        per_user_delay: float = 0.25,
        region: str = ALLOWED_REGION,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._credentials = credentials
        self._profiles = profiles
        self._validator = validator
        self._scores = scores
        self.interval_seconds = interval_seconds
        self._per_user_delay = per_user_delay
        self._region = region
        self._sleep = sleep
        self._task: Optional[asyncio.Task] = None

    async def _pace(self, calls: int) -> None:
        if calls and self._per_user_delay > 0:
            await self._sleep(self._per_user_delay)

    async def _rescore(
        self, username: str, credential: str, report: SweepReport
    ) -> Tuple[ProbeResult, Optional[LeaderboardProfile]]:
        """Probe one account and, if valid, score it.

        The profile is ``None`` unless a fresh result was fetched.
        """

        verdict = await self._validator.probe(credential)
        if verdict is ProbeResult.INDETERMINATE:
            report.skipped += 1
        if verdict is not ProbeResult.VALID:
            return verdict, None

        try:
            result = await self._scores.fetch_best(username, credential)
        except Exception as exc:
            logger.warning("Refresh failed for %s: %s", username, type(exc).__name__)
            report.failed += 1
            return verdict, None

        report.refreshed += 1
        return verdict, LeaderboardProfile(
            username=username,
            score=result.score,
            accuracy=result.accuracy,
            timestamp=isoformat_z(),
            region=self._region,
        )

    async def run_once(self) -> SweepReport:
        report = SweepReport()
        profiles = await self._profiles.load_all()
        seen: Dict[str, str] = {profile.key: profile.timestamp for profile in profiles}
        refreshed: Dict[str, LeaderboardProfile] = {}
        dropped: Set[str] = set()
        calls = 0

        for profile in profiles:
            credential = await self._credentials.get_credential(profile.username)
            if not credential:
                dropped.add(profile.key)
                report.orphaned += 1
                continue

            await self._pace(calls)
            calls += 1
            try:
                verdict, updated = await self._rescore(profile.username, credential, report)
                if verdict is ProbeResult.INVALID:
                    logger.warning("Credential for %s is invalid; removing user", profile.username)
                    await self._credentials.delete_binding(profile.username)
                    dropped.add(profile.key)
                    report.evicted += 1
                elif updated is not None:
                    refreshed[profile.key] = updated
            except Exception as exc:
                logger.error("Sweep skipped %s: %s", profile.username, type(exc).__name__)
                report.failed += 1

        # Bound accounts that never got a profile, e.g. a join whose scoring failed.
        for binding in await self._credentials.list_bindings():
            key = username_key(binding.username)
            if key in seen:
                continue
            await self._pace(calls)
            calls += 1
            try:
                verdict, created = await self._rescore(binding.username, binding.credential, report)
                if verdict is ProbeResult.INVALID:
                    logger.warning("Credential for unscored %s is invalid; unbinding", binding.username)
                    await self._credentials.delete_binding(binding.username)
                    report.evicted += 1
                elif created is not None:
                    refreshed[key] = created
            except Exception as exc:
                logger.error("Sweep skipped %s: %s", binding.username, type(exc).__name__)
                report.failed += 1

        survivors = await self._profiles.commit_sweep(refreshed, dropped, seen)
        report.kept = len(survivors)
        logger.info(
            "Sweep done: refreshed=%d evicted=%d orphaned=%d skipped=%d failed=%d",
            report.refreshed,
            report.evicted,
            report.orphaned,
            report.skipped,
            report.failed,
        )
        return report

    async def run_forever(self) -> None:
        while True:
            await self._sleep(self.interval_seconds)
            try:
                await self.run_once()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Auto-refresh failed")

    def start(self) -> asyncio.Task:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run_forever(), name="refresh-sweep")
        return self._task

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass


__all__ = ["RefreshSweep", "SweepReport"]
