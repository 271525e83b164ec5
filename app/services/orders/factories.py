"""
Factory functions for the ledger services.

Builds every repository and service around one ConnDB so the endpoints
only depend on the connection.
"""

from typing import Optional

from app.core.config import get_settings
from app.db.connection import ConnDB
from app.db.repositories import (
    AccountRepository,
    CatalogRepository,
    OrderLineRepository,
    OrderRepository,
    PaymentRepository,
    ReferenceRepository,
)
from app.services.accounts.account_service import AccountService
from app.services.ledger.adjustment_protocol import LedgerAdjustmentProtocol
from app.services.ledger.order_totals import OrderTotalCalculator
from app.services.ledger.reconciliation import ReconciliationService
from app.services.ledger.references import ReferenceValidator
from app.services.orders.order_line_service import OrderLineService
from app.services.orders.order_service import OrderService
from app.services.orders.payment_service import PaymentService
from app.services.orders.sale_service import SaleService
from app.services.orders.workflow import LedgerDependencies


def create_dependencies(conn_db: ConnDB, currency: Optional[str] = None) -> LedgerDependencies:
    """
    Wire repositories and ledger services on top of a connection.

    Args:
        conn_db: Database connection shared by every repository
        currency: Currency of stored amounts; defaults to CURRENCY

    Returns:
        LedgerDependencies: Fully configured dependencies
    """
    currency = currency or get_settings().CURRENCY

    account_repo = AccountRepository(conn_db, currency)
    order_repo = OrderRepository(conn_db, currency)
    line_repo = OrderLineRepository(conn_db, currency)
    payment_repo = PaymentRepository(conn_db, currency)
    catalog_repo = CatalogRepository(conn_db, currency)
    reference_repo = ReferenceRepository(conn_db, currency)

    return LedgerDependencies(
        conn_db=conn_db,
        account_repo=account_repo,
        order_repo=order_repo,
        line_repo=line_repo,
        payment_repo=payment_repo,
        catalog_repo=catalog_repo,
        references=ReferenceValidator(reference_repo),
        ledger=LedgerAdjustmentProtocol(account_repo),
        totals=OrderTotalCalculator(line_repo),
        reconciliation=ReconciliationService(account_repo, order_repo, payment_repo),
        currency=currency,
    )


def create_order_service(conn_db: ConnDB) -> OrderService:
    return OrderService(create_dependencies(conn_db))


def create_order_line_service(conn_db: ConnDB) -> OrderLineService:
    return OrderLineService(create_dependencies(conn_db))


def create_payment_service(conn_db: ConnDB) -> PaymentService:
    return PaymentService(create_dependencies(conn_db))


def create_sale_service(conn_db: ConnDB) -> SaleService:
    return SaleService(create_dependencies(conn_db))


def create_account_service(conn_db: ConnDB) -> AccountService:
    return AccountService(create_dependencies(conn_db))
