"""
Gamma API client for Polymarket market lookups.

Endpoints used:
  GET /markets/<slug>            -- single market with outcomes and prices

The live API encodes ``outcomes``, ``outcomePrices`` and ``clobTokenIds`` as
JSON strings; some deployments return outcome objects instead. Both shapes
normalise to the same MarketSnapshot.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from .models import MarketSnapshot, Outcome, Platform
from .utils import API_TIMEOUT, bearer, request_json, safe_float, safe_json
from ..errors import ExternalApiError, ValidationError

logger = logging.getLogger(__name__)

GAMMA_BASE = "https://gamma-api.polymarket.com"


class GammaClient:
    """Fetches Polymarket markets by slug."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: str | None = None,
        timeout: float = API_TIMEOUT,
    ):
        self._client = client
        self._api_key = api_key
        self.timeout = timeout

    async def get_market_by_slug(self, slug: str) -> MarketSnapshot:
        """Fetch a single market by its slug."""
        if not slug:
            raise ValidationError("Market slug is required")

        raw = await request_json(
            self._client,
            "GET",
            f"{GAMMA_BASE}/markets/{slug}",
            service="Gamma API",
            timeout=self.timeout,
            not_found=f"Market not found: {slug}",
            headers=bearer(self._api_key),
        )
        if isinstance(raw, list):
            if not raw:
                raise ExternalApiError(f"Gamma API returned no market for {slug}")
            raw = raw[0]
        if not isinstance(raw, dict):
            raise ExternalApiError("Failed to parse Gamma response: expected an object")

        snapshot = parse_market(raw, slug)
        logger.info("Fetched market %s (%d outcomes)", snapshot.slug, len(snapshot.outcomes))
        return snapshot


def parse_market(raw: dict[str, Any], slug: str = "") -> MarketSnapshot:
    """Normalise a Gamma market payload into a MarketSnapshot."""
    if "question" not in raw:
        raise ExternalApiError("Failed to parse Gamma response: missing question")

    outcomes = _parse_outcomes(raw)
    try:
        return MarketSnapshot(
            id=str(raw.get("id", "")),
            question=raw["question"],
            slug=raw.get("slug") or slug or None,
            platform=Platform.POLYMARKET,
            outcomes=outcomes,
            volume=safe_float(raw.get("volume")),
            liquidity=safe_float(raw.get("liquidity")),
        )
    except ValueError as e:
        raise ExternalApiError(f"Failed to parse Gamma response: {e}") from e


def _parse_outcomes(raw: dict[str, Any]) -> list[Outcome]:
    raw_outcomes = raw.get("outcomes", [])

    # Object form: [{"id", "name", "price", "volume"}, ...]
    if isinstance(raw_outcomes, list) and raw_outcomes and isinstance(raw_outcomes[0], dict):
        try:
            return [
                Outcome(
                    id=str(o["id"]),
                    name=o["name"],
                    price=float(o["price"]),
                    volume=safe_float(o.get("volume")),
                )
                for o in raw_outcomes
            ]
        except (KeyError, TypeError, ValueError) as e:
            raise ExternalApiError(f"Failed to parse Gamma outcomes: {e}") from e

    # String-encoded form used by the public API
    names = safe_json(raw_outcomes)
    prices = safe_json(raw.get("outcomePrices", "[]"))
    token_ids = safe_json(raw.get("clobTokenIds", "[]"))

    outcomes: list[Outcome] = []
    for i, name in enumerate(names):
        price = safe_float(prices[i]) if i < len(prices) else None
        outcomes.append(
            Outcome(
                id=str(token_ids[i]) if i < len(token_ids) else "",
                name=str(name),
                price=price if price is not None else 0.0,
            )
        )
    return outcomes
