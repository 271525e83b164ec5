"""
Domain models for business entities.

These models represent core business concepts and contain
business logic and invariants.
"""

from .account import AccountDomain, AccountStatus
from .catalog import InventoryDomain, ProductDomain
from .ledger_adjustment import AdjustmentKind, AppliedAdjustment, LedgerAdjustment
from .order import OrderChannel, OrderDomain, OrderStatus
from .order_line import OrderLineDomain
from .payment import PaymentDomain, PaymentMethod

__all__ = [
    "AccountDomain",
    "AccountStatus",
    "AdjustmentKind",
    "AppliedAdjustment",
    "InventoryDomain",
    "LedgerAdjustment",
    "OrderChannel",
    "OrderDomain",
    "OrderLineDomain",
    "OrderStatus",
    "PaymentDomain",
    "PaymentMethod",
    "ProductDomain",
]
