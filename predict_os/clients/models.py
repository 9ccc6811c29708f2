"""
Pydantic models for market, analysis, order and position data.

Shared type definitions used across clients, the analysis gateway,
trading logic and request handlers.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# ── Markets ──────────────────────────────────────────────────────────

class Platform(str, Enum):
    POLYMARKET = "polymarket"
    KALSHI = "kalshi"


class Outcome(BaseModel):
    """A single tradable outcome of a market."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    price: float
    volume: Optional[float] = None  # 24h volume when the source reports it


class MarketSnapshot(BaseModel):
    """
    Point-in-time read of a market.

    Outcome order is significant: ``outcomes[0]`` and ``outcomes[1]`` are the
    two sides of a binary pair (Up / Down on 15-minute markets).
    """
    model_config = ConfigDict(frozen=True)

    id: str
    question: str
    slug: Optional[str] = None
    ticker: Optional[str] = None
    platform: Platform = Platform.POLYMARKET
    outcomes: list[Outcome] = Field(default_factory=list)
    volume: Optional[float] = None
    liquidity: Optional[float] = None

    def outcome_by_id(self, token_id: str) -> Optional[Outcome]:
        for outcome in self.outcomes:
            if outcome.id == token_id:
                return outcome
        return None


# ── AI analysis ──────────────────────────────────────────────────────

class ProviderName(str, Enum):
    GROK = "grok"
    OPENAI = "openai"

    @classmethod
    def from_request(cls, model: Optional[str]) -> Optional["ProviderName"]:
        """Map a request's ``model`` field; unknown or missing names mean "use the default"."""
        for member in cls:
            if model == member.value:
                return member
        return None


class Recommendation(str, Enum):
    BUY_YES = "BUY_YES"
    BUY_NO = "BUY_NO"
    NO_TRADE = "NO_TRADE"


class AnalysisVerdict(BaseModel):
    """Structured recommendation returned by an analysis provider."""
    model_config = ConfigDict(frozen=True)

    recommendation: Recommendation
    confidence: float = Field(ge=0.0, le=1.0)
    reasoning: str
    key_factors: list[str] = Field(default_factory=list)


# ── Orders ───────────────────────────────────────────────────────────

class LadderOrder(BaseModel):
    """One price level of a ladder (or one leg of a straddle)."""
    price: float
    size: float


class OrderSide(str, Enum):
    BUY = "buy"
    SELL = "sell"


class OrderStatus(str, Enum):
    PENDING = "pending"
    FILLED = "filled"
    CANCELLED = "cancelled"
    FAILED = "failed"


class OrderResult(BaseModel):
    token_id: str
    outcome: str
    side: OrderSide
    price: float
    size: float
    order_id: Optional[str] = None
    status: OrderStatus = OrderStatus.PENDING


# ── Positions ────────────────────────────────────────────────────────

class PositionHolding(BaseModel):
    """Raw position row as reported by the Data API."""
    token_id: str
    outcome: str = ""
    shares: float
    avg_price: float
    current_price: float


class Position(BaseModel):
    token_id: str
    outcome: str  # resolved label, e.g. "Up" / "Down"
    shares: float
    avg_price: float
    current_price: float
    unrealized_pnl: float


class PairStatus(str, Enum):
    PROFIT_LOCKED = "PROFIT_LOCKED"
    BREAK_EVEN = "BREAK_EVEN"
    AT_RISK = "AT_RISK"
    NO_POSITION = "NO_POSITION"


class PairVerdict(BaseModel):
    """Profit/loss classification of an Up/Down position pair."""
    model_config = ConfigDict(frozen=True)

    status: PairStatus
    profit_lock: Optional[float] = None
    break_even: Optional[float] = None


# ── Research ─────────────────────────────────────────────────────────

class Citation(BaseModel):
    source: str
    url: Optional[str] = None
    relevance: float = 0.0


# ── Response envelope ────────────────────────────────────────────────

class ResponseMetadata(BaseModel):
    timestamp: str  # ISO-8601
    execution_time_ms: int
    model_used: Optional[str] = None
    retries: int = 0
