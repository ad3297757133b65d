# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Statutory constants and lookup tables.

German tax rules (building depreciation rates, the 15% rule for
acquisition-related costs, distributed maintenance) and the default
life-cycle table for building and unit components.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Dict, NamedTuple

from ..core.primitives import CapExCategory


class DepreciationRates:
    """Building depreciation (AfA) rates keyed by year of completion."""

    @staticmethod
    def annual_rate(construction_year: int) -> Decimal:
        """
        Annual straight-line rate in percent.

        Completed after 2022: 3.0. Completed before 1925: 2.5. Otherwise 2.0.
        """
        if construction_year >= 2023:
            return Decimal("3.0")
        if construction_year < 1925:
            return Decimal("2.5")
        return Decimal("2.0")

    @staticmethod
    def useful_life_years(construction_year: int) -> int:
        return useful_life_for_rate(DepreciationRates.annual_rate(construction_year))


def useful_life_for_rate(rate_percent: Decimal) -> int:
    """Whole years until an asset is fully written off at ``rate_percent``."""
    return int(Decimal(100) / rate_percent)


# 15% rule (anschaffungsnahe Herstellungskosten)
ACQUISITION_RELATED_PERIOD_YEARS = 3
ACQUISITION_RELATED_THRESHOLD_PERCENT = Decimal("15")

# Distributed maintenance deduction
MIN_DISTRIBUTION_YEARS = 2
MAX_DISTRIBUTION_YEARS = 5

# Private sales (speculation period and exemption limit)
DEFAULT_HOLDING_PERIOD_YEARS = 10
DEFAULT_CAPITAL_GAINS_EXEMPTION = Decimal("1000")

# Corporate taxation
CORPORATE_TAX_PERCENT = Decimal("15")
CORPORATE_SOLIDARITY_PERCENT = Decimal("5.5")
TRADE_TAX_BASE_PERCENT = Decimal("3.5")
DEFAULT_TRADE_TAX_MULTIPLIER = Decimal("400")


class ComponentCycle(NamedTuple):
    """Typical renewal cycle and cost range (per m² or per window) of a component."""

    min_years: int
    max_years: int
    cost_min: Decimal
    cost_max: Decimal

    @property
    def midpoint_years(self) -> int:
        return (self.min_years + self.max_years) // 2


DEFAULT_COMPONENT_CYCLES: Dict[CapExCategory, ComponentCycle] = {
    CapExCategory.HEATING: ComponentCycle(15, 25, Decimal(50), Decimal(150)),
    CapExCategory.ROOF: ComponentCycle(30, 60, Decimal(100), Decimal(250)),
    CapExCategory.FACADE: ComponentCycle(25, 50, Decimal(80), Decimal(200)),
    CapExCategory.WINDOWS: ComponentCycle(20, 40, Decimal(300), Decimal(600)),
    CapExCategory.ELECTRICAL: ComponentCycle(30, 50, Decimal(30), Decimal(80)),
    CapExCategory.PLUMBING: ComponentCycle(30, 50, Decimal(40), Decimal(100)),
    CapExCategory.INTERIOR: ComponentCycle(15, 30, Decimal(20), Decimal(60)),
    CapExCategory.ENERGY: ComponentCycle(20, 40, Decimal(100), Decimal(300)),
    CapExCategory.KITCHEN: ComponentCycle(15, 25, Decimal(80), Decimal(250)),
    CapExCategory.BATHROOM: ComponentCycle(20, 30, Decimal(120), Decimal(350)),
    CapExCategory.UNIT_RENOVATION: ComponentCycle(10, 20, Decimal(40), Decimal(150)),
    CapExCategory.UNIT_OTHER: ComponentCycle(15, 30, Decimal(20), Decimal(80)),
}

_FALLBACK_CYCLE = ComponentCycle(20, 40, Decimal(50), Decimal(150))


def get_component_cycle(category: CapExCategory) -> ComponentCycle:
    """Default cycle for ``category`` (Exterior and Other use a generic range)."""
    return DEFAULT_COMPONENT_CYCLES.get(category, _FALLBACK_CYCLE)
