"""
Shared plumbing for the mutation orchestrators.

LedgerDependencies bundles the repositories and ledger services a
workflow needs; LedgerWorkflow gives each orchestrator the common steps
(transaction scope, money conversion, locked order reads, ledger
application).
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.db.connection import ConnDB
from app.db.repositories.account_repository import AccountRepository
from app.db.repositories.catalog_repository import CatalogRepository
from app.db.repositories.order_line_repository import OrderLineRepository
from app.db.repositories.order_repository import OrderRepository
from app.db.repositories.payment_repository import PaymentRepository
from app.domain.models.ledger_adjustment import AppliedAdjustment, LedgerAdjustment
from app.domain.models.order import OrderDomain
from app.domain.value_objects.money import Money
from app.services.ledger.adjustment_protocol import LedgerAdjustmentProtocol
from app.services.ledger.order_totals import OrderTotalCalculator
from app.services.ledger.reconciliation import ReconciliationService
from app.services.ledger.references import ReferenceValidator
from app.services.orders.unit_of_work import UnitOfWork
from app.utils.error_handler import LedgerConcurrencyException, NotFoundException

logger = logging.getLogger(__name__)


@dataclass
class LedgerDependencies:
    conn_db: ConnDB
    account_repo: AccountRepository
    order_repo: OrderRepository
    line_repo: OrderLineRepository
    payment_repo: PaymentRepository
    catalog_repo: CatalogRepository
    references: ReferenceValidator
    ledger: LedgerAdjustmentProtocol
    totals: OrderTotalCalculator
    reconciliation: ReconciliationService
    currency: str = "USD"


def to_storage_datetime(value: datetime) -> datetime:
    """Store timestamps as naive UTC."""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class LedgerWorkflow:
    """Base class for orchestrators that keep balances and totals consistent."""

    def __init__(self, deps: LedgerDependencies):
        self.deps = deps
        self.currency = deps.currency

    def unit_of_work(self, operation: str) -> UnitOfWork:
        return UnitOfWork(self.deps.conn_db, operation)

    def read_session(self) -> AsyncSession:
        return self.deps.conn_db.get_session()

    def money(self, amount: Optional[Decimal]) -> Optional[Money]:
        if amount is None:
            return None
        return Money(amount=amount, currency=self.currency)

    async def _load_order_locked(self, uow: UnitOfWork, order_id: int, *extra_account_ids: Optional[int]) -> OrderDomain:
        """
        Read an order, lock its account (plus any extra accounts) and re-read it.

        Raises:
            NotFoundException: If the order does not exist
            LedgerConcurrencyException: If the order moved to another account meanwhile
        """
        order = await self.deps.order_repo.get(uow.session, order_id)
        if order is None:
            raise NotFoundException("Order", order_id)

        locked = {order.account_id, *extra_account_ids}
        await uow.lock_accounts(*locked)

        order = await self.deps.order_repo.get(uow.session, order_id)
        if order is None:
            raise NotFoundException("Order", order_id)
        if order.account_id not in locked:
            raise LedgerConcurrencyException(
                message=f"Order {order_id} changed account during the operation, retry later",
                account_id=order.account_id,
            )
        return order

    async def _apply(
        self, uow: UnitOfWork, account_id: Optional[int], adjustment: Optional[LedgerAdjustment]
    ) -> Optional[AppliedAdjustment]:
        """Apply an adjustment; no-op without an account or without a change."""
        if account_id is None or adjustment is None or adjustment.delta.is_zero:
            return None
        applied = await self.deps.ledger.apply(uow.session, account_id, adjustment)
        return uow.record(applied)

    async def _apply_derived_total(self, uow: UnitOfWork, order: OrderDomain, reason: str) -> Money:
        """
        Recompute the order total from its lines, forward the change to the
        ledger and persist the new total.
        """
        new_total = await self.deps.totals.recalc_order_total(uow.session, order.order_id)
        adjustment = LedgerAdjustment.for_total_change(order.total_amount, new_total, self.currency, reason)
        await self._apply(uow, order.account_id, adjustment)
        await self.deps.order_repo.set_total(uow.session, order.order_id, new_total)
        logger.debug(f"Order {order.order_id} total: {order.total_amount} -> {new_total}")
        return new_total
