"""
OrderLineService - order line workflows.

Every line mutation re-derives the owning order's total and forwards the
change to the order's account in the same transaction. A rejected charge
leaves the line, the total and the balance exactly as they were.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

from app.db.repositories.reference_repository import EntityKind
from app.domain.models.order_line import OrderLineDomain
from app.domain.value_objects.money import Money
from app.services.orders.workflow import LedgerWorkflow
from app.utils.error_handler import NotFoundException, ValidationException

logger = logging.getLogger(__name__)

LINE_FIELDS = ("product_id", "quantity", "unit_price", "discount_amount")


class OrderLineService(LedgerWorkflow):
    """Orchestrates order line mutations."""

    async def list_lines(self) -> List[OrderLineDomain]:
        async with self.read_session() as session:
            return await self.deps.line_repo.list_all(session)

    async def list_lines_for_order(self, order_id: int) -> List[OrderLineDomain]:
        async with self.read_session() as session:
            return await self.deps.line_repo.list_for_order(session, order_id)

    async def get_line(self, order_id: int, line_no: int) -> OrderLineDomain:
        async with self.read_session() as session:
            line = await self.deps.line_repo.get(session, order_id, line_no)
        if line is None:
            raise NotFoundException("Order line", f"{order_id}/{line_no}")
        return line

    def _check_line_amounts(self, quantity: int, unit_price: Money, discount: Optional[Money]) -> None:
        if quantity is None or quantity <= 0:
            raise ValidationException("quantity must be greater than 0", field="quantity", invalid_value=quantity)
        if unit_price.is_negative:
            raise ValidationException(
                "unit_price cannot be negative", field="unit_price", invalid_value=unit_price.amount
            )
        if discount is not None:
            if discount.is_negative:
                raise ValidationException(
                    "discount_amount cannot be negative", field="discount_amount", invalid_value=discount.amount
                )
            if discount > unit_price * quantity:
                raise ValidationException(
                    "discount_amount cannot exceed quantity * unit_price",
                    field="discount_amount",
                    invalid_value=discount.amount,
                )

    async def create_line(
        self,
        order_id: int,
        product_id: int,
        quantity: int,
        line_no: Optional[int] = None,
        unit_price: Optional[Decimal] = None,
        discount_amount: Optional[Decimal] = None,
    ) -> OrderLineDomain:
        """
        Add a line to an order.

        The unit price defaults to the catalog price and the line number to
        the next free number on the order.

        Raises:
            ValidationException: If the order or product does not exist, or amounts are invalid
            ConflictException: If the (order, line number) pair already exists
            CreditLimitExceededException: If the new total exceeds the credit limit
        """
        if quantity is None or quantity <= 0:
            raise ValidationException("quantity must be greater than 0", field="quantity", invalid_value=quantity)

        async with self.unit_of_work("create_order_line") as uow:
            await self.deps.references.ensure_all(
                uow.session,
                [
                    ("order_id", EntityKind.ORDER, order_id),
                    ("product_id", EntityKind.PRODUCT, product_id),
                ],
            )
            order = await self._load_order_locked(uow, order_id)

            price = self.money(unit_price)
            if price is None:
                product = await self.deps.catalog_repo.get_product(uow.session, product_id)
                price = product.unit_price
            discount = self.money(discount_amount)
            self._check_line_amounts(quantity, price, discount)

            if line_no is None:
                line_no = await self.deps.line_repo.next_line_no(uow.session, order_id)

            await self.deps.line_repo.create(
                uow.session,
                order_id=order_id,
                line_no=line_no,
                product_id=product_id,
                quantity=quantity,
                unit_price=price,
                discount_amount=discount,
            )

            new_total = await self._apply_derived_total(uow, order, f"line {order_id}/{line_no} added")
            line = await self.deps.line_repo.get(uow.session, order_id, line_no)

        logger.info(f"Order line {order_id}/{line_no} created; order total now {new_total}")
        return line

    async def update_line(self, order_id: int, line_no: int, changes: Dict[str, Any]) -> OrderLineDomain:
        """
        Update product, quantity, unit price or discount of a line.

        Raises:
            NotFoundException: If the line does not exist
            ValidationException: If no field is given, a reference is invalid or amounts are invalid
            CreditLimitExceededException: If the new total exceeds the credit limit
        """
        values = {field: changes[field] for field in LINE_FIELDS if field in changes}
        if not values:
            raise ValidationException("No fields to update")
        for field in ("product_id", "quantity", "unit_price"):
            if field in values and values[field] is None:
                raise ValidationException(f"{field} cannot be null", field=field)

        async with self.unit_of_work("update_order_line") as uow:
            existing = await self.deps.line_repo.get(uow.session, order_id, line_no)
            if existing is None:
                raise NotFoundException("Order line", f"{order_id}/{line_no}")

            await self.deps.references.ensure(
                uow.session, "product_id", EntityKind.PRODUCT, values.get("product_id")
            )
            order = await self._load_order_locked(uow, order_id)

            if "unit_price" in values:
                values["unit_price"] = self.money(values["unit_price"])
            if "discount_amount" in values:
                values["discount_amount"] = self.money(values["discount_amount"])

            self._check_line_amounts(
                values.get("quantity", existing.quantity),
                values.get("unit_price", existing.unit_price),
                values["discount_amount"] if "discount_amount" in values else existing.discount_amount,
            )

            await self.deps.line_repo.update_fields(uow.session, order_id, line_no, values)
            new_total = await self._apply_derived_total(uow, order, f"line {order_id}/{line_no} updated")
            line = await self.deps.line_repo.get(uow.session, order_id, line_no)

        logger.info(f"Order line {order_id}/{line_no} updated; order total now {new_total}")
        return line

    async def delete_line(self, order_id: int, line_no: int) -> OrderLineDomain:
        """
        Delete a line and reverse its contribution to the account.

        Raises:
            NotFoundException: If the line does not exist
        """
        async with self.unit_of_work("delete_order_line") as uow:
            existing = await self.deps.line_repo.get(uow.session, order_id, line_no)
            if existing is None:
                raise NotFoundException("Order line", f"{order_id}/{line_no}")

            order = await self._load_order_locked(uow, order_id)
            await self.deps.line_repo.delete(uow.session, order_id, line_no)
            new_total = await self._apply_derived_total(uow, order, f"line {order_id}/{line_no} deleted")

        logger.info(f"Order line {order_id}/{line_no} deleted; order total now {new_total}")
        return existing
