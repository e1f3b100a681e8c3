"""Test doubles for the validator, score source and region gate."""

from __future__ import annotations

from typing import Dict, List, Optional, Union

from typeboard.core.cache import TTLCache
from typeboard.models import ProbeResult, QualifyingResult
from typeboard.services.region import GeoLocator, RegionGate


class StubValidator:
    """Answers from a credential -> verdict table, ``default`` otherwise."""

    def __init__(self, default: ProbeResult = ProbeResult.VALID) -> None:
        self.default = default
        self.verdicts: Dict[str, ProbeResult] = {}
        self.calls: List[str] = []

    async def probe(self, credential: str) -> ProbeResult:
        self.calls.append(credential)
        return self.verdicts.get(credential, self.default)


class StubScores:
    """Answers from a username -> result/exception table."""

    def __init__(self, score: int = 100, accuracy: float = 97.5) -> None:
        self.score = score
        self.accuracy = accuracy
        self.results: Dict[str, Union[QualifyingResult, Exception]] = {}
        self.calls: List[tuple] = []

    async def fetch_best(self, username: str, credential: str) -> QualifyingResult:
        self.calls.append((username, credential))
        outcome = self.results.get(username.casefold())
        if isinstance(outcome, Exception):
            raise outcome
        if outcome is not None:
            return outcome
        return QualifyingResult(score=self.score, accuracy=self.accuracy)


def static_region_gate(country: Optional[str], region: str = "IL") -> RegionGate:
    async def provider(ip: str) -> Optional[str]:
        return country

    return RegionGate(
        GeoLocator(TTLCache(), providers=[provider]),
        region=region,
        allow_private=False,
    )
