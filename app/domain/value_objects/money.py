"""
Money value object for handling monetary amounts with currency.

This value object ensures exact decimal arithmetic for every balance,
price and total in the ledger. Amounts are signed: account balances and
ledger deltas can be negative.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

CENT = Decimal("0.01")


@dataclass(frozen=True)
class Money:
    """
    Immutable value object representing a monetary amount with currency.

    Attributes:
        amount: The monetary amount as Decimal, quantized to cents
        currency: ISO 4217 currency code (e.g., "USD")

    Example:
        >>> price = Money(amount=Decimal("19.99"))
        >>> total = price * 3 - Money(amount=Decimal("5"))
        >>> print(total.amount)
        54.97
    """

    amount: Decimal
    currency: str = "USD"

    def __post_init__(self) -> None:
        """Validate money object after initialization."""
        if not isinstance(self.amount, Decimal):
            if isinstance(self.amount, bool):
                raise TypeError("Money amount cannot be a boolean")
            try:
                object.__setattr__(self, "amount", Decimal(str(self.amount)))
            except InvalidOperation as e:
                raise ValueError(f"Invalid money amount: {self.amount!r}") from e

        if not self.amount.is_finite():
            raise ValueError(f"Money amount must be finite: {self.amount}")

        object.__setattr__(self, "amount", self.amount.quantize(CENT, rounding=ROUND_HALF_UP))

        if not self.currency or len(self.currency) != 3 or not self.currency.isalpha():
            raise ValueError(f"Invalid currency code: {self.currency}")

    def _check_currency(self, other: "Money", operation: str) -> None:
        if not isinstance(other, Money):
            raise TypeError(f"Cannot {operation} Money with {type(other)}")
        if self.currency != other.currency:
            raise ValueError(f"Cannot {operation} different currencies: {self.currency} and {other.currency}")

    def __add__(self, other: "Money") -> "Money":
        """Add two Money objects with the same currency."""
        self._check_currency(other, "add")
        return Money(amount=self.amount + other.amount, currency=self.currency)

    def __sub__(self, other: "Money") -> "Money":
        """Subtract two Money objects with the same currency."""
        self._check_currency(other, "subtract")
        return Money(amount=self.amount - other.amount, currency=self.currency)

    def __neg__(self) -> "Money":
        return Money(amount=-self.amount, currency=self.currency)

    def __mul__(self, multiplier: Union[int, Decimal]) -> "Money":
        """Multiply money by a quantity."""
        if isinstance(multiplier, bool) or not isinstance(multiplier, (int, Decimal)):
            raise TypeError(f"Cannot multiply Money by {type(multiplier)}")

        return Money(amount=self.amount * Decimal(multiplier), currency=self.currency)

    __rmul__ = __mul__

    def __lt__(self, other: "Money") -> bool:
        self._check_currency(other, "compare")
        return self.amount < other.amount

    def __le__(self, other: "Money") -> bool:
        self._check_currency(other, "compare")
        return self.amount <= other.amount

    def __gt__(self, other: "Money") -> bool:
        self._check_currency(other, "compare")
        return self.amount > other.amount

    def __ge__(self, other: "Money") -> bool:
        self._check_currency(other, "compare")
        return self.amount >= other.amount

    def __str__(self) -> str:
        """String representation of Money."""
        return f"{self.amount:.2f}"

    def __repr__(self) -> str:
        """Developer-friendly representation."""
        return f"Money(amount=Decimal('{self.amount}'), currency='{self.currency}')"

    @property
    def cents(self) -> int:
        """Amount in minor units, as stored in the database."""
        return int(self.amount.scaleb(2))

    @property
    def is_zero(self) -> bool:
        """Check if amount is zero."""
        return self.amount == 0

    @property
    def is_positive(self) -> bool:
        """Check if amount is positive."""
        return self.amount > 0

    @property
    def is_negative(self) -> bool:
        """Check if amount is negative."""
        return self.amount < 0

    @classmethod
    def zero(cls, currency: str = "USD") -> "Money":
        """Create a zero Money object."""
        return cls(amount=Decimal("0"), currency=currency)

    @classmethod
    def from_cents(cls, cents: int, currency: str = "USD") -> "Money":
        """Create Money from an integer amount of minor units."""
        return cls(amount=Decimal(int(cents)).scaleb(-2), currency=currency)

    @classmethod
    def from_string(cls, amount: str, currency: str = "USD") -> "Money":
        """Create Money from string representation."""
        return cls(amount=Decimal(amount), currency=currency)
