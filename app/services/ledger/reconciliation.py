"""
Account reconciliation.

The stored balance is maintained incrementally. This check recomputes the
balance implied by the rows that exist (order totals less payments) and
reports any difference; it never writes.
"""

import logging
from typing import Any, Dict

from sqlalchemy.ext.asyncio import AsyncSession

from app.db.repositories.account_repository import AccountRepository
from app.db.repositories.order_repository import OrderRepository
from app.db.repositories.payment_repository import PaymentRepository
from app.utils.error_handler import NotFoundException

logger = logging.getLogger(__name__)


class ReconciliationService:
    def __init__(
        self,
        account_repo: AccountRepository,
        order_repo: OrderRepository,
        payment_repo: PaymentRepository,
    ):
        self.account_repo = account_repo
        self.order_repo = order_repo
        self.payment_repo = payment_repo

    async def reconcile(self, session: AsyncSession, account_id: int) -> Dict[str, Any]:
        """
        Compare the stored balance with sum(order totals) - sum(payments).

        Raises:
            NotFoundException: If the account does not exist
        """
        account = await self.account_repo.get(session, account_id)
        if account is None:
            raise NotFoundException("Account", account_id)

        charged = await self.order_repo.sum_totals_for_account(session, account_id)
        paid = await self.payment_repo.sum_amounts_for_account(session, account_id)
        expected = charged - paid
        difference = account.current_balance - expected

        if not difference.is_zero:
            logger.warning(
                f"Account {account_id} out of balance: stored={account.current_balance} "
                f"expected={expected} difference={difference}"
            )

        return {
            "account_id": account_id,
            "stored_balance": account.current_balance.amount,
            "expected_balance": expected.amount,
            "order_totals": charged.amount,
            "payments": paid.amount,
            "difference": difference.amount,
            "consistent": difference.is_zero,
        }
