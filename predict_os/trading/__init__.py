"""
Pure trading logic for the paired Up/Down strategy.

Nothing here awaits except ``orders.submit_orders``.
"""

from .ladder import MIN_SHARES, ladder_orders, straddle_orders
from .orders import OrderBatch, OrderInstruction, submit_orders
from .pairs import build_positions, classify_pair

__all__ = [
    "MIN_SHARES",
    "ladder_orders",
    "straddle_orders",
    "OrderBatch",
    "OrderInstruction",
    "submit_orders",
    "build_positions",
    "classify_pair",
]
