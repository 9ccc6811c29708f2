"""
Request handlers.

Each handler takes the shared ``AppState`` plus a validated request and
returns a response model, raising ``PredictOSError`` subclasses on failure.
Outer surfaces (the MCP server) render those errors with
``errors.error_payload``.
"""

from __future__ import annotations

import logging
import math
import time
from datetime import datetime, timezone
from typing import Optional

from .schemas import (
    AnalyzeEventMarketsRequest,
    AnalyzeEventMarketsResponse,
    LimitOrderBotRequest,
    LimitOrderBotResponse,
    OrderMode,
    PolyfactualResearchRequest,
    PolyfactualResearchResponse,
    PositionTrackerRequest,
    PositionTrackerResponse,
)
from .state import AppState
from ..analysis import ProviderName
from ..clients.models import MarketSnapshot, ResponseMetadata
from ..errors import PredictOSError, ValidationError
from ..trading import (
    OrderInstruction,
    build_positions,
    classify_pair,
    ladder_orders,
    straddle_orders,
    submit_orders,
)
from ..trading.windows import current_window_start, next_window_start, window_slug

logger = logging.getLogger(__name__)


def _metadata(start: float, model_used: Optional[str] = None, retries: int = 0) -> ResponseMetadata:
    return ResponseMetadata(
        timestamp=datetime.now(timezone.utc).isoformat(),
        execution_time_ms=int((time.perf_counter() - start) * 1000),
        model_used=model_used,
        retries=retries,
    )


def _require_pair(market: MarketSnapshot) -> None:
    if len(market.outcomes) < 2:
        raise ValidationError("Market must have at least 2 outcomes")


# ── Market analysis ──────────────────────────────────────────────────

async def analyze_event_markets(
    state: AppState,
    request: AnalyzeEventMarketsRequest,
) -> AnalyzeEventMarketsResponse:
    start = time.perf_counter()

    if not request.url:
        raise ValidationError("URL is required")
    if state.dome is None:
        raise ValidationError("DOME_API_KEY not set")

    provider = ProviderName.from_request(request.model)

    try:
        market = await state.dome.get_market_by_url(request.url)
    except PredictOSError as e:
        logger.error("Failed to fetch market data: %s", e)
        raise

    result = await state.gateway.analyze(market, request.question, provider)
    logger.info(
        "%s recommends %s (confidence %.0f%%) after %d call(s)",
        result.model_used, result.verdict.recommendation.value,
        result.verdict.confidence * 100, result.attempts,
    )

    return AnalyzeEventMarketsResponse(
        recommendation=result.verdict.recommendation,
        analysis=result.verdict,
        market_data=market,
        metadata=_metadata(start, model_used=result.model_used, retries=result.retries),
    )


# ── Limit order bot ──────────────────────────────────────────────────

async def limit_order_bot(
    state: AppState,
    request: LimitOrderBotRequest,
) -> LimitOrderBotResponse:
    """
    Place a straddle or a pair of ladders on a 15-minute Up/Down market.

    Orders are submitted one at a time (Up side first). If the sink fails
    partway, the orders already submitted are returned with ``error`` set.
    """
    start = time.perf_counter()
    logs: list[str] = []

    if not request.wallet_private_key:
        raise ValidationError("Wallet private key is required")
    if not math.isfinite(request.bankroll_usd) or request.bankroll_usd <= 0:
        raise ValidationError("Bankroll must be greater than 0")

    slug = request.market_slug or window_slug(next_window_start(state.clock()))
    logs.append(f"Target market: {slug}")

    market = await state.gamma.get_market_by_slug(slug)
    logs.append(f"Fetched market: {market.question}")

    _require_pair(market)
    up, down = market.outcomes[0], market.outcomes[1]
    logs.append(f"Up token: {up.id}, Down token: {down.id}")

    trading = state.settings.trading
    half = request.bankroll_usd / 2.0
    instructions: list[OrderInstruction] = []

    if request.mode == OrderMode.SIMPLE:
        logs.append("Mode: Simple (straddle)")
        up_order, down_order = straddle_orders(
            request.bankroll_usd, up.price, down.price, min_shares=trading.min_shares
        )
        instructions.append(OrderInstruction(up.id, up.name, up_order))
        instructions.append(OrderInstruction(down.id, down.name, down_order))
    else:
        logs.append("Mode: Ladder (exponential taper)")
        levels = (
            request.price_levels if request.price_levels is not None else trading.ladder_levels
        )
        for outcome in (up, down):
            for order in ladder_orders(
                half,
                levels,
                trading.ladder_min_price,
                trading.ladder_max_price,
                min_shares=trading.min_shares,
            ):
                instructions.append(OrderInstruction(outcome.id, outcome.name, order))
        logs.append(f"Calculated {levels} price levels per side")

    sink = state.order_sink_factory(request.wallet_private_key)
    batch = await submit_orders(sink, instructions)
    for order in batch.orders:
        logs.append(f"Placed {order.outcome} order: {order.size:.2f} shares @ ${order.price:.4f}")

    error = None
    if batch.error is not None:
        error = batch.error.to_payload()
        logs.append(
            f"Stopped after {len(batch.orders)}/{len(instructions)} orders: {batch.error.message}"
        )

    metadata = _metadata(start)
    logs.append(f"Completed in {metadata.execution_time_ms}ms")

    return LimitOrderBotResponse(
        orders=batch.orders,
        market=market,
        logs=logs,
        metadata=metadata,
        error=error,
    )


# ── Position tracker ─────────────────────────────────────────────────

async def position_tracker(
    state: AppState,
    request: PositionTrackerRequest,
) -> PositionTrackerResponse:
    start = time.perf_counter()

    if not request.wallet_address:
        raise ValidationError("Wallet address is required")

    slug = request.market_slug or window_slug(current_window_start(state.clock()))
    market = await state.gamma.get_market_by_slug(slug)
    _require_pair(market)

    holdings = await state.data_api.get_market_positions(
        request.wallet_address, [o.id for o in market.outcomes]
    )
    positions = build_positions(holdings, market)
    verdict = classify_pair(positions)

    return PositionTrackerResponse(
        market=market,
        positions=positions,
        pair_status=verdict.status,
        profit_lock=verdict.profit_lock,
        break_even=verdict.break_even,
        metadata=_metadata(start),
    )


# ── Research ─────────────────────────────────────────────────────────

async def polyfactual_research(
    state: AppState,
    request: PolyfactualResearchRequest,
) -> PolyfactualResearchResponse:
    start = time.perf_counter()

    if not request.query:
        raise ValidationError("Query is required")
    if state.polyfactual is None:
        raise ValidationError("POLYFACTUAL_API_KEY not set")

    answer, citations = await state.polyfactual.research(request.query)
    return PolyfactualResearchResponse(
        answer=answer,
        citations=citations,
        metadata=_metadata(start),
    )


async def health(state: AppState) -> str:
    return "OK"
