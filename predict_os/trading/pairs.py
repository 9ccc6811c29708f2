"""
Up/Down pair classification.

Sides are found by substring match on the resolved outcome label ("Up" /
"Down"), not by token id. Renamed or localised labels make a held pair look
like NO_POSITION.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence

from ..clients.models import MarketSnapshot, PairStatus, PairVerdict, Position, PositionHolding

logger = logging.getLogger(__name__)

UP_LABEL = "Up"
DOWN_LABEL = "Down"


def build_positions(
    holdings: Iterable[PositionHolding],
    snapshot: MarketSnapshot,
) -> list[Position]:
    """Attach outcome labels from the market and derive unrealized P&L."""
    positions = []
    for h in holdings:
        outcome = snapshot.outcome_by_id(h.token_id)
        positions.append(
            Position(
                token_id=h.token_id,
                outcome=outcome.name if outcome else "Unknown",
                shares=h.shares,
                avg_price=h.avg_price,
                current_price=h.current_price,
                unrealized_pnl=(h.current_price - h.avg_price) * h.shares,
            )
        )
    return positions


def _find(positions: Sequence[Position], label: str) -> Optional[Position]:
    for pos in positions:
        if label in pos.outcome:
            return pos
    return None


def classify_pair(positions: Sequence[Position]) -> PairVerdict:
    """
    Classify a simultaneously-held Up/Down pair.

    PROFIT_LOCKED carries ``profit_lock``; AT_RISK and BREAK_EVEN carry
    ``break_even``; NO_POSITION carries neither.
    """
    if len(positions) < 2:
        return PairVerdict(status=PairStatus.NO_POSITION)

    up = _find(positions, UP_LABEL)
    down = _find(positions, DOWN_LABEL)
    if up is None or down is None:
        logger.debug("No Up/Down pair among outcomes %s", [p.outcome for p in positions])
        return PairVerdict(status=PairStatus.NO_POSITION)

    total_pnl = up.unrealized_pnl + down.unrealized_pnl

    if total_pnl > 0:
        return PairVerdict(status=PairStatus.PROFIT_LOCKED, profit_lock=total_pnl)
    if total_pnl == 0:
        return PairVerdict(status=PairStatus.BREAK_EVEN, break_even=0.0)
    return PairVerdict(
        status=PairStatus.AT_RISK,
        break_even=(up.avg_price + down.avg_price) / 2.0,
    )
