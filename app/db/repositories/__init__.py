"""
Back-office repository package.

Repository Structure:
- BaseRepository: Abstract base with connection access and error translation
- AccountRepository: Accounts and the guarded balance write
- OrderRepository: Order headers and stored totals
- OrderLineRepository: Order lines joined with the catalog
- PaymentRepository: Payments
- CatalogRepository: Product prices and inventory
- ReferenceRepository: Foreign-key existence checks
"""

from .account_repository import AccountRepository
from .base import BaseRepository, log_operation
from .catalog_repository import CatalogRepository
from .order_line_repository import OrderLineRepository
from .order_repository import OrderRepository
from .payment_repository import PaymentRepository
from .reference_repository import EntityKind, ReferenceRepository

__all__ = [
    "AccountRepository",
    "BaseRepository",
    "CatalogRepository",
    "EntityKind",
    "OrderLineRepository",
    "OrderRepository",
    "PaymentRepository",
    "ReferenceRepository",
    "log_operation",
]
