"""Region gate: admit requests geolocated to the configured country."""

from __future__ import annotations

import ipaddress
import re
from typing import Awaitable, Callable, Mapping, Optional, Sequence

import httpx
from starlette.requests import Request

from ..core.cache import TTLCache
from ..core.log import get_logger

logger = get_logger("services.region")

GEO_TTL_OK = 10 * 60
GEO_TTL_FAILED = 60
GEO_TIMEOUT = 5.0
USER_AGENT = "typeboard"

_COUNTRY_RE = re.compile(r"^[A-Z]{2}$")

GeoProvider = Callable[[str], Awaitable[Optional[str]]]


def normalize_ip(ip: str | None) -> str:
    """Strip the IPv4-mapped IPv6 prefix and whitespace."""

    ip = (ip or "").strip()
    if ip.lower().startswith("::ffff:"):
        ip = ip[7:]
    return ip


def is_valid_ip(ip: str) -> bool:
    try:
        ipaddress.ip_address(ip)
    except ValueError:
        return False
    return True


def is_private_ip(ip: str) -> bool:
    try:
        address = ipaddress.ip_address(ip)
    except ValueError:
        return False
    return address.is_private or address.is_loopback


def client_ip(headers: Mapping[str, str], fallback: str | None = None) -> str:
    """Prefer CDN/ingress headers, then the first forwarded hop, then the socket."""

    forwarded = (headers.get("x-forwarded-for") or "").split(",")[0].strip()
    return normalize_ip(
        headers.get("cf-connecting-ip")
        or headers.get("x-real-ip")
        or forwarded
        or fallback
        or ""
    )


def request_ip(request: Request) -> str:
    return client_ip(request.headers, request.client.host if request.client else None)


class GeoLocator:
    """IP -> country lookup with provider failover and a TTL cache."""

    def __init__(
        self,
        cache: TTLCache,
        *,
        providers: Optional[Sequence[GeoProvider]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = GEO_TIMEOUT,
    ) -> None:
        self._cache = cache
        self._transport = transport
        self._timeout = timeout
        self._providers = list(providers) if providers is not None else [
            self._ipapi,
            self._ipwho,
        ]

    async def _fetch_json(self, url: str) -> Optional[dict]:
        async with httpx.AsyncClient(
            timeout=self._timeout,
            transport=self._transport,
            headers={"User-Agent": USER_AGENT},
        ) as client:
            response = await client.get(url)
        if not response.is_success:
            return None
        try:
            payload = response.json()
        except ValueError:
            return None
        return payload if isinstance(payload, dict) else None

    async def _ipapi(self, ip: str) -> Optional[str]:
        payload = await self._fetch_json(f"https://ipapi.co/{ip}/json/")
        country = (payload or {}).get("country")
        return country if isinstance(country, str) else None

    async def _ipwho(self, ip: str) -> Optional[str]:
        payload = await self._fetch_json(f"https://ipwho.is/{ip}")
        if not payload or not payload.get("success"):
            return None
        country = payload.get("country_code")
        return country if isinstance(country, str) else None

    async def country_for(self, ip: str) -> Optional[str]:
        ip = normalize_ip(ip)
        if not ip or not is_valid_ip(ip):
            return None
        if ip in self._cache:
            return self._cache.get(ip)

        country = None
        for provider in self._providers:
            try:
                country = await provider(ip)
            except httpx.HTTPError as exc:
                logger.debug("Geo provider failed: %s", type(exc).__name__)
                country = None
            if country:
                country = country.strip().upper()
                break

        self._cache.put(ip, country, GEO_TTL_OK if country else GEO_TTL_FAILED)
        return country


class RegionGate:
    """Admission check; fails closed when no provider can place the address."""

    def __init__(
        self,
        locator: GeoLocator,
        *,
        region: str,
        allow_private: bool = False,
    ) -> None:
        self._locator = locator
        self.region = region.upper()
        self._allow_private = allow_private

    async def country_for_request(self, request: Request) -> Optional[str]:
        header_country = (request.headers.get("cf-ipcountry") or "").strip().upper()
        if _COUNTRY_RE.match(header_country):
            return header_country
        return await self._locator.country_for(request_ip(request))

    async def is_admitted(self, request: Request) -> bool:
        ip = request_ip(request)
        if self._allow_private and is_private_ip(ip):
            return True
        country = await self.country_for_request(request)
        logger.debug("Geo check: country=%s", country)
        return country == self.region


__all__ = [
    "GeoLocator",
    "RegionGate",
    "client_ip",
    "is_private_ip",
    "is_valid_ip",
    "normalize_ip",
    "request_ip",
]
