"""
Account domain model.

An account carries the running balance a customer owes and an optional
credit ceiling. The balance is only ever changed through the ledger
adjustment protocol.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any

from app.domain.value_objects.money import Money


class AccountStatus(str, Enum):
    ACTIVE = "ACTIVE"
    CLOSED = "CLOSED"
    SUSPENDED = "SUSPENDED"


@dataclass
class AccountDomain:
    """
    Domain model representing a customer account.

    Attributes:
        account_id: Account ID
        customer_id: Owning customer
        account_number: Human-facing unique account number
        current_balance: Signed running balance (positive means the customer owes)
        credit_limit: Optional ceiling for charges; None means unlimited
        opened_date: Date the account was opened
        status: Account lifecycle status
    """

    account_id: int
    customer_id: int
    account_number: str
    current_balance: Money
    credit_limit: Money | None = None
    opened_date: date | None = None
    status: AccountStatus = AccountStatus.ACTIVE

    @property
    def has_credit_limit(self) -> bool:
        return self.credit_limit is not None

    @property
    def available_credit(self) -> Money | None:
        """Remaining room under the credit limit, or None when unlimited."""
        if not self.has_credit_limit:
            return None
        return self.credit_limit - self.current_balance

    def would_exceed_limit(self, proposed_balance: Money) -> bool:
        """Check a proposed balance against the ceiling (inclusive boundary)."""
        return self.has_credit_limit and proposed_balance > self.credit_limit

    def to_dict(self) -> dict[str, Any]:
        return {
            "account_id": self.account_id,
            "customer_id": self.customer_id,
            "account_number": self.account_number,
            "current_balance": self.current_balance.amount,
            "credit_limit": self.credit_limit.amount if self.credit_limit is not None else None,
            "opened_date": self.opened_date,
            "status": self.status.value,
        }

    @classmethod
    def from_row(cls, row: Any, currency: str = "USD") -> "AccountDomain":
        """Build an account from a database row mapping."""
        credit_limit_cents = row["credit_limit_cents"]
        return cls(
            account_id=row["account_id"],
            customer_id=row["customer_id"],
            account_number=row["account_number"],
            current_balance=Money.from_cents(row["current_balance_cents"], currency),
            credit_limit=Money.from_cents(credit_limit_cents, currency) if credit_limit_cents is not None else None,
            opened_date=row["opened_date"],
            status=AccountStatus(row["status"]),
        )
