# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Dense monthly time series.

A series covers every month of an inclusive horizon ``[start, end]``. Months
that were never written read as the series default (zero for money). Reads
and writes outside the horizon raise :class:`PeriodOutOfRangeError` instead
of clamping. Each calculation run creates its own series; once a series is
handed to a result it is frozen and rejects further writes.

``to_series()`` exposes the values as a pandas Series on a monthly
``PeriodIndex`` for reporting and yearly roll-ups.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Callable, Dict, Generic, Iterator, List, Optional, Tuple, TypeVar

import pandas as pd

from .money import DEFAULT_CURRENCY, CurrencyMismatchError, Money, Numeric
from .year_month import YearMonth

logger = logging.getLogger(__name__)

V = TypeVar("V")


class PeriodOutOfRangeError(IndexError):
    """Raised when a period outside the declared horizon is accessed."""


class TimeSeriesFrozenError(TypeError):
    """Raised when writing to a series that has been frozen into a result."""


class TimeSeries(Generic[V]):
    """
    A dense mapping from every month in ``[start, end]`` to a value.

    Args:
        start: First month of the horizon
        end: Last month of the horizon (inclusive)
        default: Value reported for months never written
    """

    __slots__ = ("start", "end", "_values", "_frozen")

    def __init__(self, start: YearMonth, end: YearMonth, default: V):
        if end < start:
            raise ValueError(f"Time series end {end} precedes start {start}")
        self.start = start
        self.end = end
        self._values: List[V] = [default] * (YearMonth.months_between(start, end) + 1)
        self._frozen = False

    def _offset(self, period: YearMonth) -> int:
        if not (self.start <= period <= self.end):
            raise PeriodOutOfRangeError(
                f"Period {period} outside series horizon {self.start}..{self.end}"
            )
        return YearMonth.months_between(self.start, period)

    # --- Mapping protocol ---------------------------------------------------

    def __getitem__(self, period: YearMonth) -> V:
        return self._values[self._offset(period)]

    def __setitem__(self, period: YearMonth, value: V) -> None:
        if self._frozen:
            raise TimeSeriesFrozenError("Cannot modify a frozen time series")
        self._values[self._offset(period)] = value

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[Tuple[YearMonth, V]]:
        return zip(self.periods, self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TimeSeries):
            return NotImplemented
        return (
            self.start == other.start
            and self.end == other.end
            and self._values == other._values
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.start}..{self.end}, {len(self)} months)"

    def has_value(self, period: YearMonth) -> bool:
        """True when ``period`` lies within the horizon."""
        return self.start <= period <= self.end

    @property
    def periods(self) -> List[YearMonth]:
        return list(YearMonth.range(self.start, self.end))

    def values(self) -> List[V]:
        return list(self._values)

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> TimeSeries[V]:
        """Make the series read-only and return it."""
        self._frozen = True
        return self

    def same_horizon(self, other: TimeSeries) -> bool:
        return self.start == other.start and self.end == other.end

    def map(self, func: Callable[[V], V]) -> TimeSeries[V]:
        result = TimeSeries(self.start, self.end, self._values[0])
        result._values = [func(v) for v in self._values]
        return result

    def to_series(self, name: Optional[str] = None) -> pd.Series:
        """Values on a monthly PeriodIndex (Decimal values become floats)."""
        index = pd.period_range(
            start=self.start.to_period(), end=self.end.to_period(), freq="M"
        )
        data = [float(v) if isinstance(v, Decimal) else v for v in self._values]
        return pd.Series(data, index=index, name=name)


class MoneyTimeSeries(TimeSeries[Money]):
    """A monthly series of Money in a single currency with aggregation helpers."""

    __slots__ = ("currency",)

    def __init__(self, start: YearMonth, end: YearMonth, currency: str = DEFAULT_CURRENCY):
        super().__init__(start, end, Money.zero(currency))
        self.currency = currency

    def __setitem__(self, period: YearMonth, value: Money) -> None:
        if value.currency != self.currency:
            raise CurrencyMismatchError(self.currency, value.currency)
        super().__setitem__(period, value)

    @classmethod
    def like(cls, other: TimeSeries, currency: Optional[str] = None) -> MoneyTimeSeries:
        """An empty money series over the same horizon as ``other``."""
        return cls(other.start, other.end, currency or getattr(other, "currency", DEFAULT_CURRENCY))

    def _require_compatible(self, other: MoneyTimeSeries) -> None:
        if not self.same_horizon(other):
            raise ValueError(
                f"Series horizons differ: {self.start}..{self.end} vs {other.start}..{other.end}"
            )
        if self.currency != other.currency:
            raise CurrencyMismatchError(self.currency, other.currency)

    def _build(self, values: List[Money]) -> MoneyTimeSeries:
        result = MoneyTimeSeries(self.start, self.end, self.currency)
        result._values = values
        return result

    # --- Aggregation --------------------------------------------------------

    def sum(self) -> Money:
        total = Money.zero(self.currency)
        for value in self._values:
            total = total + value
        return total

    def sum_for_year(self, year: int) -> Money:
        total = Money.zero(self.currency)
        for period, value in self:
            if period.year == year:
                total = total + value
        return total

    def sum_by_year(self) -> Dict[int, Money]:
        totals: Dict[int, Money] = {}
        for period, value in self:
            totals[period.year] = totals.get(period.year, Money.zero(self.currency)) + value
        return totals

    def cumulative(self) -> MoneyTimeSeries:
        """Running total over the horizon."""
        running = Money.zero(self.currency)
        values = []
        for value in self._values:
            running = running + value
            values.append(running)
        return self._build(values)

    # --- Pointwise arithmetic ----------------------------------------------

    def add(self, other: MoneyTimeSeries) -> MoneyTimeSeries:
        self._require_compatible(other)
        return self._build([a + b for a, b in zip(self._values, other._values)])

    def subtract(self, other: MoneyTimeSeries) -> MoneyTimeSeries:
        self._require_compatible(other)
        return self._build([a - b for a, b in zip(self._values, other._values)])

    def scale(self, factor: Numeric) -> MoneyTimeSeries:
        return self._build([v * factor for v in self._values])

    def round(self) -> MoneyTimeSeries:
        return self._build([v.round() for v in self._values])

    def first_value(self) -> Money:
        return self._values[0]

    def last_value(self) -> Money:
        return self._values[-1]

    def to_series(self, name: Optional[str] = None) -> pd.Series:
        index = pd.period_range(
            start=self.start.to_period(), end=self.end.to_period(), freq="M"
        )
        return pd.Series([float(v.amount) for v in self._values], index=index, name=name)
