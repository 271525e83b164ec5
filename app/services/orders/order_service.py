"""
OrderService - order header workflows.

Create, update and delete orders while keeping the stored total reflected
exactly once in the balance of the order's account.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from app.db.repositories.reference_repository import EntityKind
from app.domain.models.ledger_adjustment import LedgerAdjustment
from app.domain.models.order import OrderChannel, OrderDomain, OrderStatus
from app.services.orders.workflow import LedgerWorkflow, to_storage_datetime
from app.utils.error_handler import ConflictException, NotFoundException, ValidationException

logger = logging.getLogger(__name__)

ORDER_HAS_DEPENDENTS_MESSAGE = "Cannot delete order with existing order lines or payments"


class OrderService(LedgerWorkflow):
    """Orchestrates order header mutations."""

    async def list_orders(self) -> List[OrderDomain]:
        async with self.read_session() as session:
            return await self.deps.order_repo.list(session)

    async def get_order(self, order_id: int) -> OrderDomain:
        async with self.read_session() as session:
            order = await self.deps.order_repo.get(session, order_id)
        if order is None:
            raise NotFoundException("Order", order_id)
        return order

    async def create_order(
        self,
        order_datetime: datetime,
        channel: OrderChannel,
        customer_id: int,
        account_id: Optional[int] = None,
        location_id: Optional[int] = None,
        total_amount: Optional[Decimal] = None,
        status: OrderStatus = OrderStatus.PENDING,
    ) -> OrderDomain:
        """
        Create an order header.

        A total on an account order is charged to the account; if the
        charge is rejected nothing is persisted.

        Raises:
            ValidationException: If a reference does not exist
            CreditLimitExceededException: If the charge exceeds the credit limit
        """
        total = self.money(total_amount)

        async with self.unit_of_work("create_order") as uow:
            await self.deps.references.ensure_all(
                uow.session,
                [
                    ("customer_id", EntityKind.CUSTOMER, customer_id),
                    ("account_id", EntityKind.ACCOUNT, account_id),
                    ("location_id", EntityKind.LOCATION, location_id),
                ],
            )
            await uow.lock_accounts(account_id)

            order_id = await self.deps.order_repo.create(
                uow.session,
                order_datetime=to_storage_datetime(order_datetime),
                channel=channel,
                customer_id=customer_id,
                account_id=account_id,
                location_id=location_id,
                total_amount=total,
                status=status,
            )

            if total is not None:
                await self._apply(uow, account_id, LedgerAdjustment.charge(total, f"order {order_id} created"))

            order = await self.deps.order_repo.get(uow.session, order_id)

        logger.info(f"Order {order_id} created (account={account_id}, total={total})")
        return order

    async def update_order(self, order_id: int, changes: Dict[str, Any]) -> OrderDomain:
        """
        Partially update an order header.

        Ledger effect of the (account, total) transition:
        - same account: charge the increase or reverse the decrease
        - account changed: reverse the old total on the old account and
          charge the new total on the new account
        - account removed: reversal only; account added: charge only

        Raises:
            NotFoundException: If the order does not exist
            ValidationException: If a reference is invalid, no field is given,
                or a total is set on an order whose total is derived from lines
            CreditLimitExceededException: If a charge exceeds the credit limit
        """
        if not changes:
            raise ValidationException("No fields to update")
        if "customer_id" in changes and changes["customer_id"] is None:
            raise ValidationException("customer_id cannot be null", field="customer_id")
        for field in ("order_datetime", "channel", "status"):
            if field in changes and changes[field] is None:
                raise ValidationException(f"{field} cannot be null", field=field)

        values = dict(changes)
        if "total_amount" in values:
            values["total_amount"] = self.money(values["total_amount"])
        if values.get("order_datetime") is not None:
            values["order_datetime"] = to_storage_datetime(values["order_datetime"])

        async with self.unit_of_work("update_order") as uow:
            await self.deps.references.ensure_all(
                uow.session,
                [
                    ("customer_id", EntityKind.CUSTOMER, values.get("customer_id")),
                    ("account_id", EntityKind.ACCOUNT, values.get("account_id")),
                    ("location_id", EntityKind.LOCATION, values.get("location_id")),
                ],
            )

            new_account_id = values.get("account_id")
            order = await self._load_order_locked(uow, order_id, new_account_id)

            if "total_amount" in values:
                dependents = await self.deps.order_repo.count_dependents(uow.session, order_id)
                if dependents["order_lines"] > 0:
                    raise ValidationException(
                        "total_amount is derived from the order lines and cannot be set directly",
                        field="total_amount",
                        invalid_value=changes["total_amount"],
                    )

            old_account_id = order.account_id
            new_account_id = values["account_id"] if "account_id" in values else old_account_id
            old_total = order.total_amount
            new_total = values["total_amount"] if "total_amount" in values else old_total

            await self.deps.order_repo.update_fields(uow.session, order_id, values)

            if old_account_id == new_account_id:
                await self._apply(
                    uow,
                    new_account_id,
                    LedgerAdjustment.for_total_change(
                        old_total, new_total, self.currency, f"order {order_id} total changed"
                    ),
                )
            else:
                if old_total is not None:
                    await self._apply(
                        uow,
                        old_account_id,
                        LedgerAdjustment.reversal(-old_total, f"order {order_id} moved off account"),
                    )
                if new_total is not None and new_total.is_positive:
                    await self._apply(
                        uow,
                        new_account_id,
                        LedgerAdjustment.charge(new_total, f"order {order_id} moved onto account"),
                    )

            updated = await self.deps.order_repo.get(uow.session, order_id)

        logger.info(f"Order {order_id} updated: {sorted(changes)}")
        return updated

    async def delete_order(self, order_id: int) -> OrderDomain:
        """
        Delete an order without lines or payments and reverse its contribution.

        Raises:
            NotFoundException: If the order does not exist
            ConflictException: If lines or payments still reference it
        """
        async with self.unit_of_work("delete_order") as uow:
            order = await self._load_order_locked(uow, order_id)

            dependents = await self.deps.order_repo.count_dependents(uow.session, order_id)
            if dependents["order_lines"] or dependents["payments"]:
                raise ConflictException(ORDER_HAS_DEPENDENTS_MESSAGE, constraint="order_dependents")

            await self.deps.order_repo.delete(uow.session, order_id)

            if order.total_amount is not None:
                await self._apply(
                    uow,
                    order.account_id,
                    LedgerAdjustment.reversal(-order.total_amount, f"order {order_id} deleted"),
                )

        logger.info(f"Order {order_id} deleted (reversed {order.ledger_contribution(self.currency)})")
        return order
