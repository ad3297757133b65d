# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import Field

from ..core.primitives import MeasurePriority, Model, NonNegativeDecimal, Percent, YearMonth
from .tax_profile import CapitalGainsTaxParameters

_PRIORITY_FACTORS = {
    MeasurePriority.CRITICAL: Decimal("2.0"),
    MeasurePriority.HIGH: Decimal("1.5"),
    MeasurePriority.MEDIUM: Decimal("1.0"),
    MeasurePriority.LOW: Decimal("0.5"),
}


class DeferredMaintenanceImpact(Model):
    """Value discount for necessary measures that were never executed."""

    discount_per_overdue_year_percent: Percent = Decimal(1)
    max_total_discount_percent: Percent = Decimal(20)

    def priority_factor(self, priority: MeasurePriority) -> Decimal:
        return _PRIORITY_FACTORS[priority]


class ValuationConfiguration(Model):
    market_growth_rate_percent: Decimal = Field(default=Decimal(0), ge=-50, le=50)
    planned_sale_date: Optional[YearMonth] = None
    sale_costs_percent: Percent = Decimal(5)
    discount_rate_percent: Optional[NonNegativeDecimal] = None
    deferred_maintenance_impact: DeferredMaintenanceImpact = Field(
        default_factory=DeferredMaintenanceImpact
    )
    capital_gains_tax: CapitalGainsTaxParameters = Field(
        default_factory=CapitalGainsTaxParameters
    )
