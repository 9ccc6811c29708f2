"""Sequential order submission with partial-completion reporting."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from ..clients.clob import OrderSink
from ..clients.models import LadderOrder, OrderResult, OrderSide
from ..errors import PredictOSError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrderInstruction:
    token_id: str
    outcome: str
    order: LadderOrder
    side: OrderSide = OrderSide.BUY


@dataclass
class OrderBatch:
    """Orders submitted so far, plus the error that stopped the batch (if any)."""
    orders: list[OrderResult] = field(default_factory=list)
    error: Optional[PredictOSError] = None

    @property
    def complete(self) -> bool:
        return self.error is None


async def submit_orders(
    sink: OrderSink,
    instructions: Iterable[OrderInstruction],
) -> OrderBatch:
    """
    Submit instructions one at a time, in order.

    The first failure stops the batch. Earlier orders stay submitted and are
    returned alongside the error; nothing is retried.
    """
    batch = OrderBatch()
    for ins in instructions:
        try:
            result = await sink.submit(
                ins.token_id,
                ins.side,
                ins.order.price,
                ins.order.size,
                outcome=ins.outcome,
            )
        except PredictOSError as e:
            logger.error(
                "Order %d failed (%s %.4f @ %.4f on %s): %s",
                len(batch.orders) + 1, ins.side.value, ins.order.size,
                ins.order.price, ins.token_id, e.message,
            )
            batch.error = e
            break
        batch.orders.append(result)
    return batch
