"""
SaleService - point-of-sale transaction.

A single in-store sale on account: one completed order with one line at
the catalog price, a charge to the account (subject to the credit limit)
and a stock decrement at the selling location, all in one transaction.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict

from app.db.repositories.reference_repository import EntityKind
from app.domain.models.account import AccountDomain
from app.domain.models.catalog import InventoryDomain
from app.domain.models.ledger_adjustment import LedgerAdjustment
from app.domain.models.order import OrderChannel, OrderDomain, OrderStatus
from app.domain.value_objects.money import Money
from app.services.orders.workflow import LedgerWorkflow, to_storage_datetime
from app.utils.error_handler import NotFoundException, ValidationException

logger = logging.getLogger(__name__)

INSUFFICIENT_STOCK_MESSAGE = "Not enough quantity on hand"


@dataclass
class SaleResult:
    total_cost: Money
    order: OrderDomain
    account: AccountDomain
    inventory: InventoryDomain

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": "Transaction completed successfully",
            "total_cost": self.total_cost.amount,
            "order": self.order.to_dict(),
            "account": self.account.to_dict(),
            "inventory": self.inventory.to_dict(),
        }


class SaleService(LedgerWorkflow):
    """Orchestrates point-of-sale transactions."""

    async def record_sale(
        self,
        customer_id: int,
        account_id: int,
        location_id: int,
        product_id: int,
        quantity: int,
    ) -> SaleResult:
        """
        Sell quantity units of a product on account.

        Steps:
        1. Check the customer and lock the account
        2. Load account, product and stock record
        3. Check stock
        4. Create the order and its line
        5. Charge the account (credit limit applies)
        6. Decrement stock

        Raises:
            ValidationException: If quantity is not positive, the customer does not exist
                or stock is insufficient
            NotFoundException: If the account, product or stock record does not exist
            CreditLimitExceededException: If the sale exceeds the available credit
        """
        if quantity is None or quantity <= 0:
            raise ValidationException("quantity must be greater than 0", field="quantity", invalid_value=quantity)

        async with self.unit_of_work("point_of_sale") as uow:
            session = uow.session
            await self.deps.references.ensure(session, "customer_id", EntityKind.CUSTOMER, customer_id)
            await uow.lock_accounts(account_id)

            # Step 2: load
            account = await self.deps.account_repo.get(session, account_id)
            if account is None:
                raise NotFoundException("Account", account_id)
            product = await self.deps.catalog_repo.get_product(session, product_id)
            if product is None:
                raise NotFoundException("Product", product_id)
            stock = await self.deps.catalog_repo.get_inventory(session, location_id, product_id)
            if stock is None:
                raise NotFoundException("Inventory record", f"{location_id}/{product_id}")

            # Step 3: stock
            if not stock.has_stock_for(quantity):
                raise ValidationException(INSUFFICIENT_STOCK_MESSAGE, field="quantity", invalid_value=quantity)

            # Step 4: order + line
            total_cost = product.unit_price * quantity
            order_id = await self.deps.order_repo.create(
                session,
                order_datetime=to_storage_datetime(datetime.now(timezone.utc)),
                channel=OrderChannel.INSTORE,
                customer_id=customer_id,
                account_id=account_id,
                location_id=location_id,
                total_amount=total_cost,
                status=OrderStatus.COMPLETED,
            )
            await self.deps.line_repo.create(
                session,
                order_id=order_id,
                line_no=1,
                product_id=product_id,
                quantity=quantity,
                unit_price=product.unit_price,
            )

            # Step 5: charge
            await self._apply(uow, account_id, LedgerAdjustment.charge(total_cost, f"sale order {order_id}"))

            # Step 6: stock
            if not await self.deps.catalog_repo.decrement_stock(session, location_id, product_id, quantity):
                raise ValidationException(INSUFFICIENT_STOCK_MESSAGE, field="quantity", invalid_value=quantity)

            result = SaleResult(
                total_cost=total_cost,
                order=await self.deps.order_repo.get(session, order_id),
                account=await self.deps.account_repo.get(session, account_id),
                inventory=await self.deps.catalog_repo.get_inventory(session, location_id, product_id),
            )

        logger.info(
            f"Sale recorded: order {order_id}, {quantity} x product {product_id} = {total_cost} "
            f"on account {account_id}"
        )
        return result

    async def get_inventory(self, location_id: int, product_id: int) -> InventoryDomain:
        async with self.read_session() as session:
            stock = await self.deps.catalog_repo.get_inventory(session, location_id, product_id)
        if stock is None:
            raise NotFoundException("Inventory record", f"{location_id}/{product_id}")
        return stock
