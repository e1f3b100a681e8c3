"""Credential validation against the upstream API."""

from __future__ import annotations

from typing import Protocol

import httpx

from ..core.log import get_logger
from ..models.results import ProbeResult
from .upstream import MonkeytypeClient, is_auth_rejection

logger = get_logger("services.validator")

PROBE_TIMEOUT = 4.0


class Validator(Protocol):
    async def probe(self, credential: str) -> ProbeResult:
        ...


class CredentialValidator:
    """Classify a credential as valid, invalid or indeterminate.

    The probe asks for the target-mode personal bests, which answers with a
    success (possibly empty) for any authorized key, even one with no history.
    Only an authentication rejection counts as invalid; rate limits, server
    errors, timeouts and anything unexpected are indeterminate. No retries.
    """

    def __init__(
        self,
        client: MonkeytypeClient,
        *,
        mode: str = "time",
        mode2: int = 15,
        timeout: float = PROBE_TIMEOUT,
    ) -> None:
        self._client = client
        self._mode = mode
        self._mode2 = mode2
        self._timeout = timeout

    async def probe(self, credential: str) -> ProbeResult:
        try:
            response = await self._client.personal_bests(
                credential, self._mode, self._mode2, timeout=self._timeout
            )
        except httpx.TransportError as exc:
            logger.info("Credential probe inconclusive: %s", type(exc).__name__)
            return ProbeResult.INDETERMINATE

        if is_auth_rejection(response):
            return ProbeResult.INVALID
        if response.is_success:
            return ProbeResult.VALID
        logger.info("Credential probe inconclusive: status %s", response.status_code)
        return ProbeResult.INDETERMINATE


class DemoValidator:
    """Accepts any non-empty credential."""

    async def probe(self, credential: str) -> ProbeResult:
        return ProbeResult.VALID if credential else ProbeResult.INVALID


__all__ = ["CredentialValidator", "DemoValidator", "Validator"]
