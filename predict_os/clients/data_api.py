"""
Polymarket Data API client for wallet positions.

Endpoints used (public, no auth):
  GET /positions?user=<wallet>   -- all open positions of a wallet
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

import httpx

from .models import PositionHolding
from .utils import API_TIMEOUT, request_json, safe_float
from ..errors import ExternalApiError

logger = logging.getLogger(__name__)

DATA_API_BASE = "https://data-api.polymarket.com"


class DataApiClient:

    def __init__(self, client: httpx.AsyncClient, timeout: float = API_TIMEOUT):
        self._client = client
        self.timeout = timeout

    async def get_market_positions(
        self,
        wallet_address: str,
        token_ids: Iterable[str],
    ) -> list[PositionHolding]:
        """Return the wallet's positions restricted to ``token_ids``."""
        data = await request_json(
            self._client,
            "GET",
            f"{DATA_API_BASE}/positions",
            service="Data API",
            timeout=self.timeout,
            params={"user": wallet_address},
        )

        rows = data.get("positions") if isinstance(data, dict) else data
        if not isinstance(rows, list):
            raise ExternalApiError("Failed to parse position response: expected a list")

        wanted = set(token_ids)
        holdings = [h for h in (_parse_holding(r) for r in rows) if h.token_id in wanted]
        logger.info(
            "Wallet %s holds %d of %d requested tokens",
            wallet_address, len(holdings), len(wanted),
        )
        return holdings


def _parse_holding(row: Any) -> PositionHolding:
    """Accept both snake_case rows and the live API's camelCase rows."""
    if not isinstance(row, dict):
        raise ExternalApiError("Failed to parse position response: expected objects")

    token_id = row.get("token_id") or row.get("asset")
    shares = safe_float(row.get("shares", row.get("size")))
    avg_price = safe_float(row.get("avg_price", row.get("avgPrice")))
    current_price = safe_float(row.get("current_price", row.get("curPrice")))

    if not token_id or shares is None or avg_price is None or current_price is None:
        raise ExternalApiError(f"Failed to parse position response: incomplete row {row!r}")

    return PositionHolding(
        token_id=str(token_id),
        outcome=str(row.get("outcome", "")),
        shares=shares,
        avg_price=avg_price,
        current_price=current_price,
    )
