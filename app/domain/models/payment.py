"""
Payment domain model.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from app.domain.value_objects.money import Money


class PaymentMethod(str, Enum):
    CARD = "CARD"
    ACCOUNT = "ACCOUNT"
    CASH = "CASH"


@dataclass
class PaymentDomain:
    """
    Domain model representing a payment.

    A payment always decreases the balance of its account and is never
    subject to the credit ceiling.
    """

    payment_id: int
    payment_method: PaymentMethod
    amount: Money
    payment_date: datetime
    order_id: int | None = None
    account_id: int | None = None
    card_id: int | None = None

    def __post_init__(self) -> None:
        if not self.amount.is_positive:
            raise ValueError(f"Payment amount must be positive: {self.amount}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "payment_id": self.payment_id,
            "order_id": self.order_id,
            "account_id": self.account_id,
            "card_id": self.card_id,
            "payment_method": self.payment_method.value,
            "amount": self.amount.amount,
            "payment_date": self.payment_date,
        }

    @classmethod
    def from_row(cls, row: Any, currency: str = "USD") -> "PaymentDomain":
        return cls(
            payment_id=row["payment_id"],
            order_id=row["order_id"],
            account_id=row["account_id"],
            card_id=row["card_id"],
            payment_method=PaymentMethod(row["payment_method"]),
            amount=Money.from_cents(row["amount_cents"], currency),
            payment_date=row["payment_date"],
        )
