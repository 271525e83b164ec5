"""
Catalog domain models: products and per-location stock.

These entities are maintained outside this service; the ledger reads
them as price sources and stock records.
"""

from dataclasses import dataclass
from typing import Any

from app.domain.value_objects.money import Money


@dataclass
class ProductDomain:
    product_id: int
    name: str
    unit_price: Money
    sku: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "product_id": self.product_id,
            "sku": self.sku,
            "name": self.name,
            "unit_price": self.unit_price.amount,
        }

    @classmethod
    def from_row(cls, row: Any, currency: str = "USD") -> "ProductDomain":
        return cls(
            product_id=row["product_id"],
            sku=row["sku"],
            name=row["name"],
            unit_price=Money.from_cents(row["unit_price_cents"], currency),
        )


@dataclass
class InventoryDomain:
    """Stock of one product at one location."""

    location_id: int
    product_id: int
    quantity_on_hand: int
    reorder_level: int | None = None
    reorder_quantity: int | None = None

    def has_stock_for(self, quantity: int) -> bool:
        return self.quantity_on_hand >= quantity

    @property
    def needs_reorder(self) -> bool:
        return self.reorder_level is not None and self.quantity_on_hand <= self.reorder_level

    def to_dict(self) -> dict[str, Any]:
        return {
            "location_id": self.location_id,
            "product_id": self.product_id,
            "quantity_on_hand": self.quantity_on_hand,
            "reorder_level": self.reorder_level,
            "reorder_quantity": self.reorder_quantity,
            "needs_reorder": self.needs_reorder,
        }

    @classmethod
    def from_row(cls, row: Any) -> "InventoryDomain":
        return cls(
            location_id=row["location_id"],
            product_id=row["product_id"],
            quantity_on_hand=row["quantity_on_hand"],
            reorder_level=row["reorder_level"],
            reorder_quantity=row["reorder_quantity"],
        )
