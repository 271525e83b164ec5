"""
Ledger adjustment variants.

Every change to an account balance is expressed as one of three
adjustments:

- CHARGE: positive delta, checked against the credit limit.
- PAYMENT: negative delta, never checked.
- REVERSAL: any sign; undoes a prior contribution or records a decrease
  in an order total. Never checked.

The protocol that applies them lives in
``app.services.ledger.adjustment_protocol``.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from app.domain.value_objects.money import Money


class AdjustmentKind(str, Enum):
    CHARGE = "CHARGE"
    PAYMENT = "PAYMENT"
    REVERSAL = "REVERSAL"


@dataclass(frozen=True)
class LedgerAdjustment:
    """
    A signed change to an account balance.

    Attributes:
        kind: Adjustment variant
        delta: Signed amount added to the balance
        reason: Short description of the originating operation
    """

    kind: AdjustmentKind
    delta: Money
    reason: str = ""

    def __post_init__(self) -> None:
        if self.kind is AdjustmentKind.CHARGE and self.delta.is_negative:
            raise ValueError(f"A charge cannot be negative: {self.delta}")
        if self.kind is AdjustmentKind.PAYMENT and self.delta.is_positive:
            raise ValueError(f"A payment must decrease the balance: {self.delta}")

    @property
    def is_gated(self) -> bool:
        """Whether the credit limit applies to this adjustment."""
        return self.kind is AdjustmentKind.CHARGE

    @classmethod
    def charge(cls, amount: Money, reason: str = "") -> "LedgerAdjustment":
        return cls(AdjustmentKind.CHARGE, amount, reason)

    @classmethod
    def payment(cls, amount: Money, reason: str = "") -> "LedgerAdjustment":
        """Payment of a positive amount; stored as a negative delta."""
        return cls(AdjustmentKind.PAYMENT, -amount, reason)

    @classmethod
    def reversal(cls, delta: Money, reason: str = "") -> "LedgerAdjustment":
        return cls(AdjustmentKind.REVERSAL, delta, reason)

    @classmethod
    def for_total_change(
        cls, old_total: Optional[Money], new_total: Optional[Money], currency: str = "USD", reason: str = ""
    ) -> Optional["LedgerAdjustment"]:
        """
        Adjustment for an order total moving from old_total to new_total.

        Increases are charges, decreases are reversals. A missing total
        counts as zero. Returns None when nothing changes.
        """
        old = old_total if old_total is not None else Money.zero(currency)
        new = new_total if new_total is not None else Money.zero(currency)
        delta = new - old
        if delta.is_zero:
            return None
        if delta.is_positive:
            return cls.charge(delta, reason)
        return cls.reversal(delta, reason)

    def inverse(self, reason: Optional[str] = None) -> "LedgerAdjustment":
        """Reversal that exactly cancels this adjustment."""
        return LedgerAdjustment(
            AdjustmentKind.REVERSAL,
            -self.delta,
            reason if reason is not None else f"compensate {self.kind.value.lower()} ({self.reason})",
        )


@dataclass(frozen=True)
class AppliedAdjustment:
    """Record of an adjustment written to an account."""

    account_id: int
    adjustment: LedgerAdjustment
    previous_balance: Money
    new_balance: Money

    def compensation(self) -> LedgerAdjustment:
        return self.adjustment.inverse()
