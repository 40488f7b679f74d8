"""Fixed-point money with exactly two fraction digits.

Amounts are held as integer cents, so every sum is an integer addition and
the same set of transactions always totals to the same value regardless of
summation order. Values cross the API boundary as base-10 strings such as
``"12.50"``; binary floats never take part in arithmetic.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Iterable, Union

from fintrack.domain.models import Direction


class InvalidAmount(ValueError):
    """Raised when a user-supplied amount cannot be accepted."""


_CENT = Decimal("0.01")

# Largest accepted single amount; column sums stay well inside a signed 64-bit integer
MAX_AMOUNT = Decimal("999999999999.99")


@dataclass(frozen=True, order=True)
class Money:
    cents: int

    @classmethod
    def zero(cls) -> "Money":
        return cls(0)

    @classmethod
    def from_cents(cls, cents: int) -> "Money":
        return cls(int(cents))

    @classmethod
    def from_decimal(cls, value: Decimal) -> "Money":
        """Convert a decimal that already has at most two fraction digits."""
        try:
            quantized = value.quantize(_CENT)
        except InvalidOperation:
            raise InvalidAmount(f"{value} is out of range")
        if quantized != value:
            raise InvalidAmount(f"{value} has more than 2 decimal places")
        return cls(int(quantized * 100))

    @classmethod
    def parse(cls, raw: Union[str, int, float, Decimal, None]) -> "Money":
        """Parse a positive user-supplied amount.

        Strings and Decimals are taken as written, floats through their
        shortest repr (``12.5`` -> ``"12.5"``).

        Raises:
            InvalidAmount: If the value is missing, not a number, not finite,
                has more than two fraction digits, is zero or negative, or
                exceeds ``MAX_AMOUNT``.
        """
        if raw is None:
            raise InvalidAmount("amount is required")
        if isinstance(raw, bool):
            raise InvalidAmount("amount must be a number, not a boolean")
        if isinstance(raw, Decimal):
            value = raw
        elif isinstance(raw, (int, float)):
            value = Decimal(repr(raw)) if isinstance(raw, float) else Decimal(raw)
        elif isinstance(raw, str):
            try:
                value = Decimal(raw.strip())
            except InvalidOperation:
                raise InvalidAmount(f"amount is not a number: {raw!r}")
        else:
            raise InvalidAmount(f"amount is not a number: {raw!r}")

        if not value.is_finite():
            raise InvalidAmount("amount must be finite")
        if value <= 0:
            raise InvalidAmount("amount must be greater than 0")
        if value > MAX_AMOUNT:
            raise InvalidAmount(f"amount must not exceed {MAX_AMOUNT}")
        return cls.from_decimal(value)

    @classmethod
    def total(cls, amounts: Iterable["Money"]) -> "Money":
        return cls(sum(m.cents for m in amounts))

    def add(self, other: "Money") -> "Money":
        return Money(self.cents + other.cents)

    def subtract(self, other: "Money") -> "Money":
        return Money(self.cents - other.cents)

    __add__ = add
    __sub__ = subtract

    def __neg__(self) -> "Money":
        return Money(-self.cents)

    def signed(self, direction: Direction) -> "Money":
        """Negative for expenses, unchanged for income."""
        return -self if direction == Direction.EXPENSE else self

    def to_fixed(self) -> str:
        sign = "-" if self.cents < 0 else ""
        whole, frac = divmod(abs(self.cents), 100)
        return f"{sign}{whole}.{frac:02d}"

    def __str__(self) -> str:
        return self.to_fixed()
