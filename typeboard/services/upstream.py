"""HTTP client for the upstream typing-test API."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx

from ..core.config import MONKEYTYPE_API_BASE

# Invalid, inactive and malformed key variants.
AUTH_REJECT_STATUSES = frozenset({401, 470, 471, 472})

DEFAULT_TIMEOUT = 6.0


def is_auth_rejection(response: httpx.Response) -> bool:
    return response.status_code in AUTH_REJECT_STATUSES


def is_transient(response: httpx.Response) -> bool:
    return response.status_code == 429 or response.status_code >= 500


def read_json(response: httpx.Response) -> Optional[Any]:
    try:
        return response.json()
    except ValueError:
        return None


def personal_best_entries(payload: Any) -> List[Dict[str, Any]]:
    """Normalize the personal-bests response shapes to a list of entries."""

    if not isinstance(payload, dict):
        return []
    data = payload.get("data")
    if isinstance(data, list):
        return [entry for entry in data if isinstance(entry, dict)]
    if isinstance(data, dict) and isinstance(data.get("personalBests"), list):
        return [entry for entry in data["personalBests"] if isinstance(entry, dict)]
    return []


def result_entries(payload: Any) -> List[Dict[str, Any]]:
    if not isinstance(payload, dict):
        return []
    items = payload.get("data") or payload.get("results") or []
    if not isinstance(items, list):
        return []
    return [entry for entry in items if isinstance(entry, dict)]


class MonkeytypeClient:
    """Thin async wrapper over the three read endpoints we use.

    Every call opens a one-shot ``httpx.AsyncClient`` bounded by a timeout;
    ``transport`` lets tests substitute ``httpx.MockTransport``.
    """

    def __init__(
        self,
        base_url: str = MONKEYTYPE_API_BASE,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @staticmethod
    def _headers(credential: str) -> Dict[str, str]:
        return {"Authorization": f"ApeKey {credential}"}

    async def api_get(
        self,
        credential: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        *,
        timeout: Optional[float] = None,
    ) -> httpx.Response:
        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout or self.timeout,
            transport=self._transport,
        ) as client:
            return await client.get(
                path, headers=self._headers(credential), params=params or {}
            )

    async def personal_bests(
        self,
        credential: str,
        mode: str,
        mode2: int | str,
        *,
        timeout: Optional[float] = None,
    ) -> httpx.Response:
        return await self.api_get(
            credential,
            "/users/personalBests",
            params={"mode": mode, "mode2": str(mode2)},
            timeout=timeout,
        )

    async def last_result(self, credential: str) -> httpx.Response:
        return await self.api_get(credential, "/results/last")

    async def recent_results(self, credential: str, limit: int = 50) -> httpx.Response:
        return await self.api_get(credential, "/results", params={"limit": limit})


__all__ = [
    "AUTH_REJECT_STATUSES",
    "MonkeytypeClient",
    "is_auth_rejection",
    "is_transient",
    "personal_best_entries",
    "read_json",
    "result_entries",
]
