"""Request and response schemas for the request handlers."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from ..clients.models import (
    AnalysisVerdict,
    Citation,
    MarketSnapshot,
    OrderResult,
    PairStatus,
    Position,
    Recommendation,
    ResponseMetadata,
)


# ── Requests ─────────────────────────────────────────────────────────

class AnalyzeEventMarketsRequest(BaseModel):
    url: str
    question: Optional[str] = None
    model: Optional[str] = None  # "grok" or "openai"


class OrderMode(str, Enum):
    SIMPLE = "simple"
    LADDER = "ladder"


class LimitOrderBotRequest(BaseModel):
    wallet_private_key: str
    market_slug: Optional[str] = None
    mode: OrderMode
    bankroll_usd: float
    price_levels: Optional[int] = None  # ladder mode only


class PositionTrackerRequest(BaseModel):
    wallet_address: str
    market_slug: Optional[str] = None


class PolyfactualResearchRequest(BaseModel):
    query: str


# ── Responses ────────────────────────────────────────────────────────

class AnalyzeEventMarketsResponse(BaseModel):
    recommendation: Recommendation
    analysis: AnalysisVerdict
    market_data: MarketSnapshot
    metadata: ResponseMetadata


class LimitOrderBotResponse(BaseModel):
    orders: list[OrderResult] = Field(default_factory=list)
    market: MarketSnapshot
    logs: list[str] = Field(default_factory=list)
    metadata: ResponseMetadata
    error: Optional[dict] = None  # set when submission stopped partway


class PositionTrackerResponse(BaseModel):
    market: MarketSnapshot
    positions: list[Position]
    pair_status: PairStatus
    profit_lock: Optional[float] = None
    break_even: Optional[float] = None
    metadata: ResponseMetadata


class PolyfactualResearchResponse(BaseModel):
    answer: str
    citations: list[Citation]
    metadata: ResponseMetadata
