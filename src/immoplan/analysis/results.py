# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Calculation result model.

Everything a calculation produces: the monthly series (frozen, read-only),
metrics, tax summary, warnings, investor results, the optional value
forecast and exit analysis, and yearly views for reporting.
"""

from __future__ import annotations

from datetime import date
from typing import Dict, List, Optional

import pandas as pd
from pydantic import Field

from ..core.primitives import Model, Money, MoneyTimeSeries, WarningType
from ..debt import LoanSchedule
from ..project import CapExMeasure
from ..tax import TaxSummary
from ..valuation import ExitAnalysisResult, PropertyValueForecastResult
from .aggregation import CapExTimelineItem, TaxBridgeRow, YearlyCashflowRow
from .investors import InvestorResult
from .metrics import InvestmentMetrics
from .warnings import CalculationWarning

MONTHLY_SERIES = (
    "gross_rent",
    "effective_rent",
    "service_charge_income",
    "transferable_costs",
    "non_transferable_costs",
    "operating_costs",
    "rent_adjustments",
    "cost_savings",
    "net_operating_income",
    "debt_service",
    "interest_expense",
    "principal_repayment",
    "disagio",
    "capex_payments",
    "cashflow_before_tax",
    "depreciation",
    "maintenance_deduction",
    "other_tax_deductions",
    "taxable_income",
    "tax_payment",
    "cashflow_after_tax",
    "cumulative_cashflow",
    "reserve_balance",
    "outstanding_debt",
    "property_value",
)


class CalculationResult(Model):
    """
    Immutable report of one calculation run.

    Attributes:
        project_id: Id of the calculated project
        scenario_id: Scenario applied ("base" when none)
        calculated_at: Date reported by the injected clock
        engine_version: Version of the calculation engine
        measures: CapEx measures the run used, after recurring expansion
        proposed_measures: Renewals suggested by the renovation forecast
    """

    project_id: str
    scenario_id: str
    calculated_at: date
    engine_version: str

    # Monthly series
    gross_rent: MoneyTimeSeries
    effective_rent: MoneyTimeSeries
    service_charge_income: MoneyTimeSeries
    transferable_costs: MoneyTimeSeries
    non_transferable_costs: MoneyTimeSeries
    operating_costs: MoneyTimeSeries
    rent_adjustments: MoneyTimeSeries
    cost_savings: MoneyTimeSeries
    net_operating_income: MoneyTimeSeries
    debt_service: MoneyTimeSeries
    interest_expense: MoneyTimeSeries
    principal_repayment: MoneyTimeSeries
    disagio: MoneyTimeSeries
    capex_payments: MoneyTimeSeries
    cashflow_before_tax: MoneyTimeSeries
    depreciation: MoneyTimeSeries
    maintenance_deduction: MoneyTimeSeries
    other_tax_deductions: MoneyTimeSeries
    taxable_income: MoneyTimeSeries
    tax_payment: MoneyTimeSeries
    cashflow_after_tax: MoneyTimeSeries
    cumulative_cashflow: MoneyTimeSeries
    reserve_balance: MoneyTimeSeries
    outstanding_debt: MoneyTimeSeries
    property_value: MoneyTimeSeries

    loan_schedules: List[LoanSchedule] = Field(default_factory=list)

    # Summaries
    metrics: InvestmentMetrics
    tax_summary: TaxSummary
    warnings: List[CalculationWarning] = Field(default_factory=list)
    investor_results: List[InvestorResult] = Field(default_factory=list)
    value_forecast: Optional[PropertyValueForecastResult] = None
    exit_analysis: Optional[ExitAnalysisResult] = None
    sale_net_proceeds: Optional[Money] = None

    # Totals
    total_cashflow_before_tax: Money
    total_cashflow_after_tax: Money
    total_equity_invested: Money

    # Reporting views
    yearly_cashflows: List[YearlyCashflowRow] = Field(default_factory=list)
    tax_bridge: List[TaxBridgeRow] = Field(default_factory=list)
    capex_timeline: List[CapExTimelineItem] = Field(default_factory=list)
    measures: List[CapExMeasure] = Field(default_factory=list)
    proposed_measures: List[CapExMeasure] = Field(default_factory=list)

    def series(self) -> Dict[str, MoneyTimeSeries]:
        return {name: getattr(self, name) for name in MONTHLY_SERIES}

    def to_dataframe(self) -> pd.DataFrame:
        """Monthly series as float columns on a ``PeriodIndex``."""
        return pd.DataFrame({name: s.to_series() for name, s in self.series().items()})

    def warnings_of(self, warning_type: WarningType) -> List[CalculationWarning]:
        return [w for w in self.warnings if w.type == warning_type]

    def has_warning(self, warning_type: WarningType) -> bool:
        return any(w.type == warning_type for w in self.warnings)
