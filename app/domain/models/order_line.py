"""
Order line domain model.
"""

from dataclasses import dataclass
from typing import Any

from app.domain.value_objects.money import Money


@dataclass
class OrderLineDomain:
    """
    Domain model representing one line of an order.

    Identified by (order_id, line_no). The product name and SKU are
    read-only enrichments joined from the catalog.
    """

    order_id: int
    line_no: int
    product_id: int
    quantity: int
    unit_price: Money
    discount_amount: Money | None = None
    product_name: str | None = None
    sku: str | None = None

    def __post_init__(self) -> None:
        """Validate line data after initialization."""
        if self.quantity <= 0:
            raise ValueError(f"quantity must be greater than 0: {self.quantity}")

    @property
    def gross_amount(self) -> Money:
        return self.unit_price * self.quantity

    @property
    def extended_amount(self) -> Money:
        """quantity x unit_price less the discount."""
        if self.discount_amount is None:
            return self.gross_amount
        return self.gross_amount - self.discount_amount

    def to_dict(self) -> dict[str, Any]:
        return {
            "order_id": self.order_id,
            "line_no": self.line_no,
            "product_id": self.product_id,
            "quantity": self.quantity,
            "unit_price": self.unit_price.amount,
            "discount_amount": self.discount_amount.amount if self.discount_amount is not None else None,
            "line_total": self.extended_amount.amount,
            "product_name": self.product_name,
            "sku": self.sku,
        }

    @classmethod
    def from_row(cls, row: Any, currency: str = "USD") -> "OrderLineDomain":
        discount_cents = row["discount_amount_cents"]
        return cls(
            order_id=row["order_id"],
            line_no=row["line_no"],
            product_id=row["product_id"],
            quantity=row["quantity"],
            unit_price=Money.from_cents(row["unit_price_cents"], currency),
            discount_amount=Money.from_cents(discount_cents, currency) if discount_cents is not None else None,
            product_name=row.get("product_name"),
            sku=row.get("sku"),
        )
