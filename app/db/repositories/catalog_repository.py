"""
CatalogRepository: products and per-location inventory.

The catalog is maintained outside this service. The ledger reads product
prices and decrements stock for point-of-sale transactions.
"""

import logging
from typing import Optional

from sqlalchemy import and_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.repositories.base import BaseRepository, log_operation
from app.db.schema import inventory, product
from app.domain.models.catalog import InventoryDomain, ProductDomain

logger = logging.getLogger(__name__)


class CatalogRepository(BaseRepository):
    """Repository for product prices and stock records."""

    async def _verify_table_access(self, session: AsyncSession) -> None:
        await self._count_rows(session, product, inventory)

    @staticmethod
    def _inventory_key(location_id: int, product_id: int):
        return and_(inventory.c.location_id == location_id, inventory.c.product_id == product_id)

    @log_operation()
    async def get_product(self, session: AsyncSession, product_id: int) -> Optional[ProductDomain]:
        row = (await session.execute(select(product).where(product.c.product_id == product_id))).mappings().first()
        return ProductDomain.from_row(row, self.currency) if row else None

    @log_operation()
    async def get_inventory(
        self, session: AsyncSession, location_id: int, product_id: int
    ) -> Optional[InventoryDomain]:
        row = (
            await session.execute(select(inventory).where(self._inventory_key(location_id, product_id)))
        ).mappings().first()
        return InventoryDomain.from_row(row) if row else None

    @log_operation()
    async def decrement_stock(self, session: AsyncSession, location_id: int, product_id: int, quantity: int) -> bool:
        """
        Remove quantity units from stock if enough are on hand.

        Returns:
            bool: False when stock was insufficient at write time
        """
        result = await session.execute(
            update(inventory)
            .where(self._inventory_key(location_id, product_id))
            .where(inventory.c.quantity_on_hand >= quantity)
            .values(quantity_on_hand=inventory.c.quantity_on_hand - quantity)
        )
        updated = result.rowcount == 1
        if updated:
            logger.debug(f"Stock decremented: location={location_id} product={product_id} qty={quantity}")
        return updated
