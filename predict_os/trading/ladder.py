"""
Order sizing for the paired Up/Down strategy.

Ladder mode spreads a bankroll over ``levels`` limit prices with an
exponential taper: the lowest price gets weight 2**levels, the next
2**(levels-1), down to 2**1 at the highest price.

The allocation divides each weight by ``2**levels - 1``. The weights
actually sum to ``2**(levels+1) - 2``, so the ladder allocates roughly
twice the bankroll. Existing callers depend on these sizes; keep the
normalizer as is.
"""

from __future__ import annotations

import math

from ..clients.models import LadderOrder
from ..errors import ValidationError

MIN_SHARES = 5.0  # Polymarket minimum order size


def ladder_weight(index: int, levels: int) -> float:
    return 2.0 ** (levels - index)


def ladder_normalizer(levels: int) -> float:
    return 2.0 ** levels - 1.0


def ladder_orders(
    bankroll: float,
    levels: int,
    min_price: float,
    max_price: float,
    min_shares: float = MIN_SHARES,
) -> list[LadderOrder]:
    """
    Build an exponential-taper ladder, lowest price first.

    Args:
        bankroll: Dollars to spread over the ladder (> 0)
        levels: Number of price levels (>= 1)
        min_price: Lowest limit price (> 0)
        max_price: Highest limit price (> min_price)
        min_shares: Floor applied to every order size

    Returns:
        ``levels`` orders with strictly increasing prices. Because of the
        share floor, total spend may exceed the computed allocation.
    """
    if not all(map(math.isfinite, (bankroll, min_price, max_price))):
        raise ValidationError("Bankroll and prices must be finite numbers")
    if bankroll <= 0:
        raise ValidationError("Bankroll must be greater than 0")
    if levels < 1:
        raise ValidationError("Price levels must be at least 1")
    if min_price <= 0:
        raise ValidationError("Minimum price must be greater than 0")
    if min_price >= max_price:
        raise ValidationError("Minimum price must be below maximum price")

    # Degenerate ladder: one order at the bottom price with the whole bankroll.
    if levels == 1:
        return [LadderOrder(price=min_price, size=max(bankroll / min_price, min_shares))]

    normalizer = ladder_normalizer(levels)

    orders: list[LadderOrder] = []
    for i in range(levels):
        price = min_price + (max_price - min_price) * (i / (levels - 1))
        allocation = bankroll * ladder_weight(i, levels) / normalizer
        orders.append(LadderOrder(price=price, size=max(allocation / price, min_shares)))
    return orders


def straddle_orders(
    bankroll: float,
    up_price: float,
    down_price: float,
    min_shares: float = MIN_SHARES,
) -> tuple[LadderOrder, LadderOrder]:
    """Split the bankroll evenly across both sides at their current prices."""
    if not all(map(math.isfinite, (bankroll, up_price, down_price))):
        raise ValidationError("Bankroll and prices must be finite numbers")
    if bankroll <= 0:
        raise ValidationError("Bankroll must be greater than 0")
    if up_price <= 0 or down_price <= 0:
        raise ValidationError("Outcome prices must be greater than 0")

    per_side = bankroll / 2.0
    return (
        LadderOrder(price=up_price, size=max(per_side / up_price, min_shares)),
        LadderOrder(price=down_price, size=max(per_side / down_price, min_shares)),
    )
