# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Exact-decimal monetary values.

Amounts are held as :class:`decimal.Decimal` so that loan balances, tax
thresholds and rounding reproduce legal outcomes exactly. Every binary
operation between two ``Money`` values requires matching currencies.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Union

Numeric = Union[int, float, str, Decimal]

DEFAULT_CURRENCY = "EUR"
_CENTS = Decimal("0.01")


class CurrencyMismatchError(ValueError):
    """Raised when two Money values with different currencies are combined."""

    def __init__(self, left: str, right: str):
        super().__init__(f"Currency mismatch: {left} vs {right}")
        self.left = left
        self.right = right


def to_decimal(value: Numeric) -> Decimal:
    """Convert a number to Decimal without binary float artifacts."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(value)


def round_half_up(value: Decimal, places: int = 2) -> Decimal:
    """Commercial rounding (half away from zero)."""
    return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


class Money:
    """
    A monetary amount in a single currency.

    Arithmetic with another ``Money`` requires the same currency; scalars may
    multiply or divide. Results are not rounded implicitly, call :meth:`round`
    at the points where a ledger value is fixed.

    Example:
        >>> Money("100.005").round()
        Money('100.01', 'EUR')
        >>> Money(1, "EUR") + Money(1, "USD")
        Traceback (most recent call last):
        ...
        CurrencyMismatchError: Currency mismatch: EUR vs USD
    """

    __slots__ = ("amount", "currency")

    def __init__(self, amount: Numeric = 0, currency: str = DEFAULT_CURRENCY):
        object.__setattr__(self, "amount", to_decimal(amount))
        object.__setattr__(self, "currency", currency)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"Money is immutable, cannot set {name!r}")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"Money is immutable, cannot delete {name!r}")

    def __reduce__(self):
        return (type(self), (self.amount, self.currency))

    @classmethod
    def zero(cls, currency: str = DEFAULT_CURRENCY) -> Money:
        return cls(Decimal(0), currency)

    def round(self) -> Money:
        """Round to cents using half-away-from-zero."""
        return Money(round_half_up(self.amount), self.currency)

    def to_dict(self) -> Dict[str, Any]:
        return {"amount": self.amount, "currency": self.currency}

    def _check(self, other: Money) -> None:
        if self.currency != other.currency:
            raise CurrencyMismatchError(self.currency, other.currency)

    # Representation
    def __repr__(self) -> str:
        return f"Money('{self.amount}', '{self.currency}')"

    def __str__(self) -> str:
        return f"{round_half_up(self.amount):,} {self.currency}"

    def __float__(self) -> float:
        return float(self.amount)

    def __hash__(self) -> int:
        return hash((self.amount, self.currency))

    def __bool__(self) -> bool:
        return self.amount != 0

    # Unary
    def __neg__(self) -> Money:
        return Money(-self.amount, self.currency)

    def __abs__(self) -> Money:
        return Money(abs(self.amount), self.currency)

    # Arithmetic
    def __add__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        self._check(other)
        return Money(self.amount + other.amount, self.currency)

    def __radd__(self, other: Any) -> Money:
        # Allows sum() over Money values (sum starts from int 0)
        if isinstance(other, int) and other == 0:
            return self
        return NotImplemented

    def __sub__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        self._check(other)
        return Money(self.amount - other.amount, self.currency)

    def __mul__(self, other: Numeric) -> Money:
        if isinstance(other, Money):
            return NotImplemented
        return Money(self.amount * to_decimal(other), self.currency)

    def __rmul__(self, other: Numeric) -> Money:
        return self.__mul__(other)

    def __truediv__(self, other: Numeric) -> Money:
        if isinstance(other, Money):
            return NotImplemented
        divisor = to_decimal(other)
        if divisor == 0:
            raise ZeroDivisionError("division by zero")
        return Money(self.amount / divisor, self.currency)

    # Comparison
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        return self.currency == other.currency and self.amount == other.amount

    def __lt__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check(other)
        return self.amount < other.amount

    def __le__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check(other)
        return self.amount <= other.amount

    def __gt__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check(other)
        return self.amount > other.amount

    def __ge__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check(other)
        return self.amount >= other.amount
