"""Score sources: produce a qualifying result for a username.

Two implementations share one interface. :class:`UpstreamScoreSource` talks to
the typing-test API; :class:`DemoScoreSource` derives stable pseudo-results
for local runs. The process picks one at startup.
"""

from __future__ import annotations

import asyncio
import hashlib
import math
from typing import Any, Awaitable, Callable, Dict, Iterable, Optional, Protocol, Sequence

import httpx

from ..core.errors import NoQualifyingResult, UpstreamAuthRejected
from ..core.log import get_logger
from ..models.results import QualifyingResult
from .upstream import (
    MonkeytypeClient,
    is_auth_rejection,
    is_transient,
    personal_best_entries,
    read_json,
    result_entries,
)

logger = get_logger("services.scores")

SCORE_UPPER_BOUND = 2000
TARGET_MODE = "time"
TARGET_MODE2 = 15
PB_RETRY_DELAYS = (0.0, 0.4, 0.9)
RECENT_WINDOW = 50


def _as_number(value: Any) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _finite(value: Any) -> float:
    number = _as_number(value)
    return 0.0 if number is None else number


def clamp_score(value: Any, upper: int = SCORE_UPPER_BOUND) -> int:
    return int(round(min(upper, max(0.0, _finite(value)))))


def clamp_accuracy(value: Any) -> float:
    return round(min(100.0, max(0.0, _finite(value))), 2)


class ScoreSource(Protocol):
    async def fetch_best(self, username: str, credential: str) -> QualifyingResult:
        ...


class UpstreamScoreSource:
    """Best qualifying result via an ordered fallback chain.

    1. personal bests for the target mode (max score wins), retried with backoff
    2. the most recent result, if it matches
    3. the first matching result within the recent window

    An authentication rejection at any step aborts the chain.
    """

    def __init__(
        self,
        client: MonkeytypeClient,
        *,
        mode: str = TARGET_MODE,
        mode2: int = TARGET_MODE2,
        retry_delays: Sequence[float] = PB_RETRY_DELAYS,
        window: int = RECENT_WINDOW,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._client = client
        self.mode = mode
        self.mode2 = mode2
        self._retry_delays = tuple(retry_delays) or (0.0,)
        self._window = window
        self._sleep = sleep

    def matches(self, entry: Dict[str, Any], *, assume_filtered: bool = False) -> bool:
        """True when ``entry`` is a result for the target test configuration.

        Personal-best entries come from an already-filtered query and may
        omit mode fields; ``assume_filtered`` accepts those.
        """

        if _as_number(entry.get("wpm")) is None:
            return False
        mode = entry.get("mode")
        mode2 = entry.get("mode2")
        if mode is None and mode2 is None:
            return assume_filtered
        return mode == self.mode and str(mode2) == str(self.mode2)

    def _to_result(self, entry: Dict[str, Any]) -> QualifyingResult:
        return QualifyingResult(
            score=clamp_score(entry.get("wpm")),
            accuracy=clamp_accuracy(entry.get("acc")),
            raw=entry,
        )

    def pick_best(self, entries: Iterable[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        best = None
        for entry in entries:
            if not self.matches(entry, assume_filtered=True):
                continue
            if best is None or _finite(entry.get("wpm")) > _finite(best.get("wpm")):
                best = entry
        return best

    async def fetch_best(self, username: str, credential: str) -> QualifyingResult:
        for step in (self._from_personal_bests, self._from_last_result, self._from_recent):
            entry = await step(credential)
            if entry is not None:
                logger.debug("Qualifying result for %s via %s", username, step.__name__)
                return self._to_result(entry)
        raise NoQualifyingResult(
            f"No {self.mode} {self.mode2} result found for this account."
        )

    async def _from_personal_bests(self, credential: str) -> Optional[Dict[str, Any]]:
        for delay in self._retry_delays:
            if delay:
                await self._sleep(delay)
            try:
                response = await self._client.personal_bests(credential, self.mode, self.mode2)
            except httpx.TransportError as exc:
                logger.debug("Personal bests request failed: %s", type(exc).__name__)
                continue
            if is_auth_rejection(response):
                raise UpstreamAuthRejected(
                    f"Credential not authorized (status {response.status_code})"
                )
            if is_transient(response):
                continue
            if not response.is_success:
                return None
            return self.pick_best(personal_best_entries(read_json(response)))
        return None

    async def _from_last_result(self, credential: str) -> Optional[Dict[str, Any]]:
        try:
            response = await self._client.last_result(credential)
        except httpx.TransportError:
            return None
        if is_auth_rejection(response):
            raise UpstreamAuthRejected(
                f"Credential not authorized (status {response.status_code})"
            )
        if not response.is_success:
            return None
        payload = read_json(response)
        entry = payload.get("data") if isinstance(payload, dict) else None
        if isinstance(entry, dict) and self.matches(entry):
            return entry
        return None

    async def _from_recent(self, credential: str) -> Optional[Dict[str, Any]]:
        try:
            response = await self._client.recent_results(credential, self._window)
        except httpx.TransportError:
            return None
        if is_auth_rejection(response):
            raise UpstreamAuthRejected(
                f"Credential not authorized (status {response.status_code})"
            )
        if not response.is_success:
            return None
        for entry in result_entries(read_json(response))[: self._window]:
            if self.matches(entry):
                return entry
        return None


class DemoScoreSource:
    """Deterministic pseudo-results keyed on the username."""

    async def fetch_best(self, username: str, credential: str) -> QualifyingResult:
        digest = hashlib.sha256(username.casefold().encode("utf-8")).digest()
        wpm = 40 + digest[0] % 100
        acc = 90 + (int.from_bytes(digest[1:3], "big") % 1000) / 100
        raw = {"mode": TARGET_MODE, "mode2": TARGET_MODE2, "wpm": wpm, "acc": acc, "demo": True}
        return QualifyingResult(score=clamp_score(wpm), accuracy=clamp_accuracy(acc), raw=raw)


__all__ = [
    "DemoScoreSource",
    "SCORE_UPPER_BOUND",
    "ScoreSource",
    "UpstreamScoreSource",
    "clamp_accuracy",
    "clamp_score",
]
