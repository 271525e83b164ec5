"""
ReferenceRepository: existence checks for foreign keys.
"""

from enum import Enum
from typing import Any, Dict, Tuple

from sqlalchemy import Column, Table, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.repositories.base import BaseRepository, log_operation
from app.db.schema import account, customer, location, order_header, payment_card, product


class EntityKind(str, Enum):
    ACCOUNT = "Account"
    CUSTOMER = "Customer"
    LOCATION = "Location"
    PRODUCT = "Product"
    ORDER = "Order"
    PAYMENT_CARD = "Payment card"


ENTITY_TABLES: Dict[EntityKind, Tuple[Table, Column]] = {
    EntityKind.ACCOUNT: (account, account.c.account_id),
    EntityKind.CUSTOMER: (customer, customer.c.customer_id),
    EntityKind.LOCATION: (location, location.c.location_id),
    EntityKind.PRODUCT: (product, product.c.product_id),
    EntityKind.ORDER: (order_header, order_header.c.order_id),
    EntityKind.PAYMENT_CARD: (payment_card, payment_card.c.card_id),
}


class ReferenceRepository(BaseRepository):
    """Counts rows by primary key across the referenced tables."""

    async def _verify_table_access(self, session: AsyncSession) -> None:
        await self._count_rows(session, *(table for table, _ in ENTITY_TABLES.values()))

    @log_operation()
    async def count_by_id(self, session: AsyncSession, kind: EntityKind, entity_id: Any) -> int:
        table, key_column = ENTITY_TABLES[kind]
        result = await session.execute(select(func.count()).select_from(table).where(key_column == entity_id))
        return result.scalar_one()
