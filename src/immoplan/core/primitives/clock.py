# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Date provider injected into calculations.

Calculators that depend on "today" (component ages in the renovation
forecast, the calculation date stamped on a result) receive a ``Clock``
instead of reading the system date, so results are reproducible.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date


class Clock(ABC):
    """Source of the current date."""

    @abstractmethod
    def today(self) -> date:
        pass

    @property
    def current_year(self) -> int:
        return self.today().year


class SystemClock(Clock):
    """Reads the local system date."""

    def today(self) -> date:
        return date.today()


class FixedClock(Clock):
    """Always reports the same date. Used by tests and reproducible reruns."""

    def __init__(self, fixed: date):
        self._fixed = fixed

    def today(self) -> date:
        return self._fixed

    def __repr__(self) -> str:
        return f"FixedClock({self._fixed.isoformat()})"
