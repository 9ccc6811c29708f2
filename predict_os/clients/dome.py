"""
Dome API client for cross-platform market data (Polymarket and Kalshi).

Endpoints used (Bearer auth):
  GET /v1/markets/polymarket/<slug>
  GET /v1/markets/kalshi/<ticker>

Market URLs are accepted as pasted from the browser:
  https://polymarket.com/event/<slug>
  https://kalshi.com/trade/<ticker>
"""

from __future__ import annotations

import logging
from urllib.parse import urlparse

import httpx

from .models import MarketSnapshot, Outcome, Platform
from .utils import API_TIMEOUT, bearer, request_json, safe_float
from ..errors import ExternalApiError, ValidationError

logger = logging.getLogger(__name__)

DOME_API_BASE = "https://api.dome.xyz/v1"

_PATH_PREFIX = {
    Platform.POLYMARKET: "/event/",
    Platform.KALSHI: "/trade/",
}


class DomeClient:

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: str | None,
        timeout: float = API_TIMEOUT,
    ):
        if not api_key:
            raise ValidationError("DOME_API_KEY not set")
        self._client = client
        self._api_key = api_key
        self.timeout = timeout

    async def get_market_by_url(self, url: str) -> MarketSnapshot:
        """Resolve a market URL to a snapshot via Dome."""
        platform = detect_platform(url)
        identifier = extract_identifier(url, platform)

        raw = await request_json(
            self._client,
            "GET",
            f"{DOME_API_BASE}/markets/{platform.value}/{identifier}",
            service="Dome API",
            timeout=self.timeout,
            not_found=f"Market not found: {identifier}",
            headers=bearer(self._api_key),
        )

        try:
            snapshot = MarketSnapshot(
                id=str(raw["id"]),
                question=raw["question"],
                slug=raw.get("slug"),
                ticker=raw.get("ticker"),
                platform=platform,
                outcomes=[
                    Outcome(
                        id=str(o["id"]),
                        name=o["name"],
                        price=float(o["price"]),
                        volume=safe_float(o.get("volume_24h")),
                    )
                    for o in raw["outcomes"]
                ],
                volume=safe_float(raw.get("volume_24h")),
                liquidity=safe_float(raw.get("liquidity")),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ExternalApiError(f"Failed to parse Dome response: {e}") from e

        logger.info("Fetched %s market %s via Dome", platform.value, identifier)
        return snapshot


def detect_platform(url: str) -> Platform:
    """Determine the market platform from the URL host."""
    host = (_parse(url).hostname or "").lower()
    if "polymarket" in host:
        return Platform.POLYMARKET
    if "kalshi" in host:
        return Platform.KALSHI
    raise ValidationError(f"Unsupported platform in URL: {url}")


def extract_identifier(url: str, platform: Platform | None = None) -> str:
    """Extract the slug (Polymarket) or ticker (Kalshi) from a market URL."""
    platform = platform or detect_platform(url)
    path = _parse(url).path
    prefix = _PATH_PREFIX[platform]
    if path.startswith(prefix) and len(path) > len(prefix):
        return path[len(prefix):]
    raise ValidationError(f"Could not extract identifier from URL: {url}")


def _parse(url: str):
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        raise ValidationError(f"Invalid URL: {url}")
    return parsed
