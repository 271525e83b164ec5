"""
Order total calculator.

The total of an order with lines is always derived from them:
sum(quantity * unit_price - discount), zero for an empty line set.
"""

import logging
from typing import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from app.db.repositories.order_line_repository import OrderLineRepository
from app.domain.models.order_line import OrderLineDomain
from app.domain.value_objects.money import Money

logger = logging.getLogger(__name__)


def calculate_order_total(lines: Iterable[OrderLineDomain], currency: str = "USD") -> Money:
    """Sum of the extended amounts of the given lines."""
    total = Money.zero(currency)
    for line in lines:
        total = total + line.extended_amount
    return total


class OrderTotalCalculator:
    """Reads the current line set of an order and derives its total."""

    def __init__(self, line_repo: OrderLineRepository):
        self.line_repo = line_repo

    async def recalc_order_total(self, session: AsyncSession, order_id: int) -> Money:
        """
        Derive the total from the lines currently visible in the session.

        Read-only; the caller persists the result and forwards the delta
        to the ledger.
        """
        lines = await self.line_repo.list_for_order(session, order_id)
        total = calculate_order_total(lines, self.line_repo.currency)
        logger.debug(f"Order {order_id} total recalculated from {len(lines)} lines: {total}")
        return total
