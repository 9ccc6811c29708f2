"""
CLOB order submission.

Order signing is out of scope for this backend: ``ClobOrderSink`` honours the
submission contract (return immediately, never block until fill) and reports
every order as ``pending`` without an exchange order id.
"""

from __future__ import annotations

import logging
from typing import Protocol

from .models import OrderResult, OrderSide, OrderStatus

logger = logging.getLogger(__name__)


class OrderSink(Protocol):
    """Anything that accepts a single limit-order instruction."""

    async def submit(
        self,
        token_id: str,
        side: OrderSide,
        price: float,
        size: float,
        outcome: str = "Unknown",
    ) -> OrderResult:
        ...


class ClobOrderSink:
    """Contract-only CLOB sink: records the instruction as a pending order."""

    def __init__(self, wallet_private_key: str):
        self._wallet_private_key = wallet_private_key

    async def submit(
        self,
        token_id: str,
        side: OrderSide,
        price: float,
        size: float,
        outcome: str = "Unknown",
    ) -> OrderResult:
        logger.warning(
            "CLOB order placement not implemented; recording %s %.4f @ %.4f on %s as pending",
            side.value, size, price, token_id,
        )
        return OrderResult(
            token_id=token_id,
            outcome=outcome,
            side=side,
            price=price,
            size=size,
            order_id=None,
            status=OrderStatus.PENDING,
        )
