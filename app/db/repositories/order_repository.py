"""
OrderRepository: order header operations.

The stored total is written through ``set_total`` only; orchestrators
pair every total change with the matching ledger adjustment.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.repositories.base import BaseRepository, log_operation
from app.db.schema import order_header, order_line, payment
from app.domain.models.order import OrderChannel, OrderDomain, OrderStatus
from app.domain.value_objects.money import Money

logger = logging.getLogger(__name__)


class OrderRepository(BaseRepository):
    """Repository for order headers."""

    # API field -> column
    ORDER_COLUMN_MAP = {
        "order_datetime": "order_datetime",
        "channel": "channel",
        "customer_id": "customer_id",
        "account_id": "account_id",
        "location_id": "location_id",
        "total_amount": "total_amount_cents",
        "status": "status",
    }

    async def _verify_table_access(self, session: AsyncSession) -> None:
        await self._count_rows(session, order_header, order_line, payment)

    def _to_domain(self, row: Any) -> OrderDomain:
        return OrderDomain.from_row(row, self.currency)

    def _column_values(self, values: Dict[str, Any]) -> Dict[str, Any]:
        column_values = {}
        for field, value in values.items():
            if isinstance(value, Money):
                value = value.cents
            elif isinstance(value, (OrderChannel, OrderStatus)):
                value = value.value
            column_values[self.ORDER_COLUMN_MAP[field]] = value
        return column_values

    @log_operation()
    async def get(self, session: AsyncSession, order_id: int) -> Optional[OrderDomain]:
        row = (
            await session.execute(select(order_header).where(order_header.c.order_id == order_id))
        ).mappings().first()
        return self._to_domain(row) if row else None

    @log_operation()
    async def list(self, session: AsyncSession) -> List[OrderDomain]:
        """All orders, newest first."""
        result = await session.execute(
            select(order_header).order_by(order_header.c.order_datetime.desc(), order_header.c.order_id.desc())
        )
        return [self._to_domain(row) for row in result.mappings()]

    @log_operation()
    async def create(
        self,
        session: AsyncSession,
        order_datetime: datetime,
        channel: OrderChannel,
        customer_id: int,
        account_id: Optional[int] = None,
        location_id: Optional[int] = None,
        total_amount: Optional[Money] = None,
        status: OrderStatus = OrderStatus.PENDING,
    ) -> int:
        """Insert an order header and return its id."""
        result = await session.execute(
            insert(order_header).values(
                order_datetime=order_datetime,
                channel=channel.value,
                customer_id=customer_id,
                account_id=account_id,
                location_id=location_id,
                total_amount_cents=self._cents(total_amount),
                status=status.value,
            )
        )
        order_id = result.inserted_primary_key[0]
        logger.info(f"Order {order_id} inserted (account={account_id}, total={total_amount})")
        return order_id

    @log_operation()
    async def update_fields(self, session: AsyncSession, order_id: int, values: Dict[str, Any]) -> int:
        """
        Update header fields.

        Args:
            values: API field names mapped to domain values
        """
        column_values = self._column_values(values)
        if not column_values:
            return 0
        result = await session.execute(
            update(order_header).where(order_header.c.order_id == order_id).values(**column_values)
        )
        return result.rowcount

    @log_operation()
    async def set_total(self, session: AsyncSession, order_id: int, total: Optional[Money]) -> None:
        await session.execute(
            update(order_header)
            .where(order_header.c.order_id == order_id)
            .values(total_amount_cents=self._cents(total))
        )

    @log_operation()
    async def count_dependents(self, session: AsyncSession, order_id: int) -> Dict[str, int]:
        """Lines and payments that reference the order."""
        lines = await session.execute(
            select(func.count()).select_from(order_line).where(order_line.c.order_id == order_id)
        )
        payments = await session.execute(
            select(func.count()).select_from(payment).where(payment.c.order_id == order_id)
        )
        return {"order_lines": lines.scalar_one(), "payments": payments.scalar_one()}

    @log_operation()
    async def delete(self, session: AsyncSession, order_id: int) -> int:
        result = await session.execute(delete(order_header).where(order_header.c.order_id == order_id))
        return result.rowcount

    @log_operation()
    async def sum_totals_for_account(self, session: AsyncSession, account_id: int) -> Money:
        """Sum of the stored totals of every order on the account."""
        result = await session.execute(
            select(func.coalesce(func.sum(order_header.c.total_amount_cents), 0)).where(
                order_header.c.account_id == account_id
            )
        )
        return Money.from_cents(result.scalar_one(), self.currency)
