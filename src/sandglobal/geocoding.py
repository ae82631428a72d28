"""Best-effort address geocoding through Nominatim."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from sandglobal.config import SandGlobalConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeocodeResult:
    lat: float
    lon: float
    display_name: str


class NominatimGeocoder:
    """Resolve a free-form address to coordinates.

    Every failure (empty query, network error, bad status, empty or
    malformed body) yields ``None``.
    """

    def __init__(
        self,
        config: SandGlobalConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self.transport = transport

    async def geocode(self, query: str) -> GeocodeResult | None:
        query = (query or "").strip()
        if not query:
            return None

        try:
            async with httpx.AsyncClient(
                headers={"User-Agent": self.config.geocoder_user_agent},
                timeout=10.0,
                transport=self.transport,
            ) as client:
                response = await client.get(
                    self.config.geocoder_url,
                    params={"q": query, "format": "json", "limit": 1},
                )
            if response.status_code != 200:
                logger.debug(
                    "Geocoder returned %d for %r", response.status_code, query
                )
                return None
            results = response.json()
            if not results:
                return None
            first = results[0]
            return GeocodeResult(
                lat=float(first["lat"]),
                lon=float(first["lon"]),
                display_name=str(first.get("display_name", "")),
            )
        except (
            httpx.HTTPError,
            ValueError,
            KeyError,
            IndexError,
            TypeError,
        ) as exc:
            logger.debug("Geocoding %r failed: %s", query, exc)
            return None
