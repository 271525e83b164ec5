"""
Order domain model.

Represents an order header. The total is derived from its lines whenever
lines exist, and is reflected once in the balance of the order's account.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from app.domain.value_objects.money import Money


class OrderChannel(str, Enum):
    ONLINE = "ONLINE"
    INSTORE = "INSTORE"


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    SHIPPED = "SHIPPED"


@dataclass
class OrderDomain:
    """
    Domain model representing an order.

    Attributes:
        order_id: Order ID
        order_datetime: When the order was placed
        channel: Sales channel
        customer_id: Ordering customer
        account_id: Account charged for the order, if any
        location_id: Store location, if any
        total_amount: Stored total (None until set or derived)
        status: Order lifecycle status
    """

    order_id: int
    order_datetime: datetime
    channel: OrderChannel
    customer_id: int
    account_id: int | None = None
    location_id: int | None = None
    total_amount: Money | None = None
    status: OrderStatus = OrderStatus.PENDING

    @property
    def is_on_account(self) -> bool:
        return self.account_id is not None

    def ledger_contribution(self, currency: str = "USD") -> Money:
        """Amount this order currently contributes to its account balance."""
        if not self.is_on_account or self.total_amount is None:
            return Money.zero(currency)
        return self.total_amount

    def to_dict(self) -> dict[str, Any]:
        return {
            "order_id": self.order_id,
            "order_datetime": self.order_datetime,
            "channel": self.channel.value,
            "customer_id": self.customer_id,
            "account_id": self.account_id,
            "location_id": self.location_id,
            "total_amount": self.total_amount.amount if self.total_amount is not None else None,
            "status": self.status.value,
        }

    @classmethod
    def from_row(cls, row: Any, currency: str = "USD") -> "OrderDomain":
        """Build an order from a database row mapping."""
        total_cents = row["total_amount_cents"]
        return cls(
            order_id=row["order_id"],
            order_datetime=row["order_datetime"],
            channel=OrderChannel(row["channel"]),
            customer_id=row["customer_id"],
            account_id=row["account_id"],
            location_id=row["location_id"],
            total_amount=Money.from_cents(total_cents, currency) if total_cents is not None else None,
            status=OrderStatus(row["status"]),
        )
