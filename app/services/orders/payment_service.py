"""
PaymentService - payment workflows.

Payments reduce the balance of their account and are never limited by the
credit ceiling; deleting a payment reverses it.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from app.db.repositories.reference_repository import EntityKind
from app.domain.models.ledger_adjustment import LedgerAdjustment
from app.domain.models.payment import PaymentDomain, PaymentMethod
from app.services.orders.workflow import LedgerWorkflow, to_storage_datetime
from app.utils.error_handler import NotFoundException, ValidationException

logger = logging.getLogger(__name__)


class PaymentService(LedgerWorkflow):
    """Orchestrates payment mutations."""

    async def list_payments(self) -> List[PaymentDomain]:
        async with self.read_session() as session:
            return await self.deps.payment_repo.list(session)

    async def get_payment(self, payment_id: int) -> PaymentDomain:
        async with self.read_session() as session:
            payment = await self.deps.payment_repo.get(session, payment_id)
        if payment is None:
            raise NotFoundException("Payment", payment_id)
        return payment

    async def create_payment(
        self,
        amount: Decimal,
        payment_method: PaymentMethod,
        payment_date: datetime,
        order_id: Optional[int] = None,
        account_id: Optional[int] = None,
        card_id: Optional[int] = None,
    ) -> PaymentDomain:
        """
        Record a payment and credit the account.

        Raises:
            ValidationException: If the amount is not positive or a reference does not exist
        """
        money = self.money(amount)
        if money is None or not money.is_positive:
            raise ValidationException("amount must be greater than 0", field="amount", invalid_value=amount)

        async with self.unit_of_work("create_payment") as uow:
            await self.deps.references.ensure_all(
                uow.session,
                [
                    ("order_id", EntityKind.ORDER, order_id),
                    ("card_id", EntityKind.PAYMENT_CARD, card_id),
                    ("account_id", EntityKind.ACCOUNT, account_id),
                ],
            )
            await uow.lock_accounts(account_id)

            payment_id = await self.deps.payment_repo.create(
                uow.session,
                payment_method=payment_method,
                amount=money,
                payment_date=to_storage_datetime(payment_date),
                order_id=order_id,
                account_id=account_id,
                card_id=card_id,
            )
            await self._apply(uow, account_id, LedgerAdjustment.payment(money, f"payment {payment_id}"))
            payment = await self.deps.payment_repo.get(uow.session, payment_id)

        logger.info(f"Payment {payment_id} recorded: {money} via {payment_method.value} (account={account_id})")
        return payment

    async def delete_payment(self, payment_id: int) -> PaymentDomain:
        """
        Delete a payment and restore the amount on its account.

        Raises:
            NotFoundException: If the payment does not exist
        """
        async with self.unit_of_work("delete_payment") as uow:
            payment = await self.deps.payment_repo.get(uow.session, payment_id)
            if payment is None:
                raise NotFoundException("Payment", payment_id)

            await uow.lock_accounts(payment.account_id)
            await self.deps.payment_repo.delete(uow.session, payment_id)
            await self._apply(
                uow,
                payment.account_id,
                LedgerAdjustment.reversal(payment.amount, f"payment {payment_id} deleted"),
            )

        logger.info(f"Payment {payment_id} deleted (restored {payment.amount} on account {payment.account_id})")
        return payment
