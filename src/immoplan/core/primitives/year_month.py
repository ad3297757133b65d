# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Calendar month primitive.

``YearMonth`` is the unit of every projection: all time series are dense over
an inclusive ``[start, end]`` range of months. Arithmetic flattens a month to
an absolute index (``year * 12 + month - 1``) so that adding months, adding
years and measuring distances never needs calendar special cases.
"""

from __future__ import annotations

import calendar
from datetime import date
from typing import Iterator

import pandas as pd
from pydantic import Field

from .model import Model


class YearMonth(Model):
    """
    An immutable, totally ordered (year, month) pair.

    Serializes naturally as ``{"year": 2025, "month": 1}``.

    Example:
        >>> start = YearMonth(2025, 1)
        >>> start.add_months(13)
        YearMonth(year=2026, month=2)
        >>> YearMonth.months_between(start, YearMonth(2025, 12))
        11
    """

    year: int = Field(..., ge=1, le=9999)
    month: int = Field(..., ge=1, le=12)

    def __init__(self, year: int, month: int, **data) -> None:
        super().__init__(year=year, month=month, **data)

    # --- Construction -------------------------------------------------------

    @classmethod
    def from_index(cls, index: int) -> YearMonth:
        """Inverse of :attr:`index`."""
        year, month_zero = divmod(index, 12)
        return cls(year, month_zero + 1)

    @classmethod
    def from_date(cls, value: date) -> YearMonth:
        return cls(value.year, value.month)

    @classmethod
    def from_period(cls, period: pd.Period) -> YearMonth:
        return cls(period.year, period.month)

    # --- Arithmetic ---------------------------------------------------------

    @property
    def index(self) -> int:
        """Absolute month number used for ordering and arithmetic."""
        return self.year * 12 + self.month - 1

    def add_months(self, months: int) -> YearMonth:
        return YearMonth.from_index(self.index + months)

    def add_years(self, years: int) -> YearMonth:
        return YearMonth(self.year + years, self.month)

    @staticmethod
    def months_between(start: YearMonth, end: YearMonth) -> int:
        """Signed number of months from ``start`` to ``end``."""
        return end.index - start.index

    @staticmethod
    def range(start: YearMonth, end: YearMonth) -> Iterator[YearMonth]:
        """Iterate every month in the inclusive range ``[start, end]``."""
        for index in range(start.index, end.index + 1):
            yield YearMonth.from_index(index)

    # --- Calendar views -----------------------------------------------------

    def first_day(self) -> date:
        return date(self.year, self.month, 1)

    def last_day(self) -> date:
        return date(self.year, self.month, calendar.monthrange(self.year, self.month)[1])

    def to_period(self) -> pd.Period:
        return pd.Period(year=self.year, month=self.month, freq="M")

    # --- Ordering -----------------------------------------------------------

    def __lt__(self, other: YearMonth) -> bool:
        if not isinstance(other, YearMonth):
            return NotImplemented
        return self.index < other.index

    def __le__(self, other: YearMonth) -> bool:
        if not isinstance(other, YearMonth):
            return NotImplemented
        return self.index <= other.index

    def __gt__(self, other: YearMonth) -> bool:
        if not isinstance(other, YearMonth):
            return NotImplemented
        return self.index > other.index

    def __ge__(self, other: YearMonth) -> bool:
        if not isinstance(other, YearMonth):
            return NotImplemented
        return self.index >= other.index

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"
