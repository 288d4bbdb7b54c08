"""Value Object Money - a monetary amount tagged with its currency."""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")


@dataclass(frozen=True)
class Money:
    """
    Immutable monetary amount.

    Attributes:
        amount: Decimal amount, never a binary float.
        currency_code: ISO 4217 code (USD, EUR, ...), stored upper-case.
    """

    amount: Decimal
    currency_code: str

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, "amount", Decimal(str(self.amount)))

        if len(self.currency_code) != 3:
            raise ValueError(f"currency_code must have 3 characters: {self.currency_code}")
        object.__setattr__(self, "currency_code", self.currency_code.upper())

        if self.amount < 0:
            raise ValueError(f"amount cannot be negative: {self.amount}")

    def __add__(self, other: "Money") -> "Money":
        if not isinstance(other, Money):
            raise TypeError(f"Cannot add Money and {type(other)}")
        if self.currency_code != other.currency_code:
            raise ValueError(
                f"Cannot add amounts in different currencies: "
                f"{self.currency_code} vs {other.currency_code}"
            )
        return Money(amount=self.amount + other.amount, currency_code=self.currency_code)

    def times(self, factor: int) -> "Money":
        """Multiply by an exact integer scalar (guests, nights)."""
        return Money(amount=self.amount * factor, currency_code=self.currency_code)

    def percent(self, rate: Decimal) -> "Money":
        """Share of this amount at ``rate``, rounded half-up to cents."""
        share = (self.amount * rate).quantize(CENT, rounding=ROUND_HALF_UP)
        return Money(amount=share, currency_code=self.currency_code)

    def rounded(self) -> "Money":
        return Money(amount=self.amount.quantize(CENT, rounding=ROUND_HALF_UP), currency_code=self.currency_code)

    def __str__(self) -> str:
        return f"{self.amount:.2f} {self.currency_code}"

    def to_cents(self) -> int:
        """Provider minor units, rounded half-up."""
        return int((self.amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
