# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import Field

from ..core.primitives import Model, Money, MoneyTimeSeries


class AcquisitionRelatedCostsCheck(Model):
    """
    Outcome of the 15% rule.

    Attributes:
        is_triggered: Maintenance within three years exceeded 15% of the building value
        threshold: 15% of the building value
        actual_costs: Maintenance costs planned within the three-year window
        excess_amount: ``actual_costs - threshold`` when triggered, else zero
        affected_measure_ids: Measures counted towards ``actual_costs``
    """

    is_triggered: bool
    threshold: Money
    actual_costs: Money
    excess_amount: Money
    affected_measure_ids: List[str] = Field(default_factory=list)


class MaintenanceDistribution(Model):
    """A maintenance expense spread over several tax years."""

    measure_id: str
    total_amount: Money
    distribution_years: int
    start_year: int
    annual_deductions: Dict[int, Money]

    @property
    def annual_deduction(self) -> Money:
        return (self.total_amount / self.distribution_years).round()


class CapitalGainsTaxResult(Model):
    """
    Tax on a sale.

    ``reason`` explains an exemption (holding period elapsed, owner
    occupation, gain within the exemption limit) or the corporate treatment.
    """

    is_tax_exempt: bool
    holding_period_years: int
    sale_price: Money
    sale_costs: Money
    adjusted_basis: Money
    gain: Money
    tax_amount: Money
    reason: Optional[str] = None


class TaxYearSummary(Model):
    year: int
    gross_income: Money
    depreciation: Money
    interest_expense: Money
    maintenance_expense: Money
    other_deductions: Money
    taxable_income: Money
    tax_payment: Money


class TaxTimeSeries(Model):
    """Monthly tax series and the yearly assessments they were derived from."""

    depreciation: MoneyTimeSeries
    taxable_income: MoneyTimeSeries
    tax_payment: MoneyTimeSeries
    yearly: Dict[int, TaxYearSummary] = Field(default_factory=dict)


class TaxSummary(Model):
    """Tax view over the whole horizon."""

    total_depreciation: Money
    total_interest_deduction: Money
    total_maintenance_deduction: Money
    acquisition_related_costs_triggered: bool
    acquisition_related_costs_amount: Money
    effective_depreciation_base: Money
    depreciation_rate_percent: Decimal
    maintenance_distributions: List[MaintenanceDistribution] = Field(default_factory=list)
    capital_gains_tax: Optional[Money] = None
    sale_tax_exempt: bool = False
    total_tax_payment: Money
    yearly_tax: Dict[int, TaxYearSummary] = Field(default_factory=dict)
