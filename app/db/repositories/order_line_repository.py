"""
OrderLineRepository: order line operations.

Lines are keyed by (order_id, line_no) and read joined with the product
catalog for name and SKU.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import and_, delete, func, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.repositories.base import BaseRepository, log_operation
from app.db.schema import order_line, product
from app.domain.models.order_line import OrderLineDomain
from app.domain.value_objects.money import Money
from app.utils.error_handler import ConflictException

logger = logging.getLogger(__name__)

DUPLICATE_LINE_MESSAGE = "Order line already exists for this order and line number"


class OrderLineRepository(BaseRepository):
    """Repository for order lines."""

    # API field -> column
    LINE_COLUMN_MAP = {
        "product_id": "product_id",
        "quantity": "quantity",
        "unit_price": "unit_price_cents",
        "discount_amount": "discount_amount_cents",
    }

    async def _verify_table_access(self, session: AsyncSession) -> None:
        await self._count_rows(session, order_line, product)

    def _select_with_product(self):
        return select(order_line, product.c.name.label("product_name"), product.c.sku).select_from(
            order_line.join(product, order_line.c.product_id == product.c.product_id)
        )

    @staticmethod
    def _key(order_id: int, line_no: int):
        return and_(order_line.c.order_id == order_id, order_line.c.line_no == line_no)

    def _to_domain(self, row: Any) -> OrderLineDomain:
        return OrderLineDomain.from_row(row, self.currency)

    @log_operation()
    async def get(self, session: AsyncSession, order_id: int, line_no: int) -> Optional[OrderLineDomain]:
        row = (
            await session.execute(self._select_with_product().where(self._key(order_id, line_no)))
        ).mappings().first()
        return self._to_domain(row) if row else None

    @log_operation()
    async def list_all(self, session: AsyncSession) -> List[OrderLineDomain]:
        result = await session.execute(
            self._select_with_product().order_by(order_line.c.order_id, order_line.c.line_no)
        )
        return [self._to_domain(row) for row in result.mappings()]

    @log_operation()
    async def list_for_order(self, session: AsyncSession, order_id: int) -> List[OrderLineDomain]:
        result = await session.execute(
            self._select_with_product().where(order_line.c.order_id == order_id).order_by(order_line.c.line_no)
        )
        return [self._to_domain(row) for row in result.mappings()]

    @log_operation()
    async def exists(self, session: AsyncSession, order_id: int, line_no: int) -> bool:
        result = await session.execute(
            select(func.count()).select_from(order_line).where(self._key(order_id, line_no))
        )
        return result.scalar_one() > 0

    @log_operation()
    async def next_line_no(self, session: AsyncSession, order_id: int) -> int:
        """Highest line number on the order plus one."""
        result = await session.execute(
            select(func.coalesce(func.max(order_line.c.line_no), 0)).where(order_line.c.order_id == order_id)
        )
        return result.scalar_one() + 1

    @log_operation()
    async def create(
        self,
        session: AsyncSession,
        order_id: int,
        line_no: int,
        product_id: int,
        quantity: int,
        unit_price: Money,
        discount_amount: Optional[Money] = None,
    ) -> None:
        """
        Insert a line.

        Raises:
            ConflictException: If (order_id, line_no) already exists
        """
        if await self.exists(session, order_id, line_no):
            raise ConflictException(DUPLICATE_LINE_MESSAGE, constraint="pk_order_line")

        await session.execute(
            insert(order_line).values(
                order_id=order_id,
                line_no=line_no,
                product_id=product_id,
                quantity=quantity,
                unit_price_cents=unit_price.cents,
                discount_amount_cents=self._cents(discount_amount),
            )
        )

    @log_operation()
    async def update_fields(self, session: AsyncSession, order_id: int, line_no: int, values: Dict[str, Any]) -> int:
        column_values = {}
        for field, value in values.items():
            if isinstance(value, Money):
                value = value.cents
            column_values[self.LINE_COLUMN_MAP[field]] = value
        if not column_values:
            return 0
        result = await session.execute(update(order_line).where(self._key(order_id, line_no)).values(**column_values))
        return result.rowcount

    @log_operation()
    async def delete(self, session: AsyncSession, order_id: int, line_no: int) -> int:
        result = await session.execute(delete(order_line).where(self._key(order_id, line_no)))
        return result.rowcount
