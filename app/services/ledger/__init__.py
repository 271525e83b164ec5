"""
Ledger services: balance adjustments, derived order totals,
reference validation and reconciliation.
"""

from .adjustment_protocol import LedgerAdjustmentProtocol
from .order_totals import OrderTotalCalculator, calculate_order_total
from .reconciliation import ReconciliationService
from .references import ReferenceValidator

__all__ = [
    "LedgerAdjustmentProtocol",
    "OrderTotalCalculator",
    "ReconciliationService",
    "ReferenceValidator",
    "calculate_order_total",
]
