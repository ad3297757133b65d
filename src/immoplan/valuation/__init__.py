# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Property Valuation

Multi-scenario value forecast, component deterioration, explanatory
forecast drivers and the exit (sale) analysis built on top of them.
"""

from .components import (
    ComponentDeteriorationRow,
    ComponentDeteriorationSummary,
    ComponentState,
    RecurringMaintenanceInfo,
    age_fraction,
    component_deterioration,
    condition_factor,
    degradation_rate,
    recurring_cost,
    recurring_interval_years,
    renewal_cost,
    round_to_hundreds,
    step_component,
)
from .drivers import (
    ComponentDeteriorationDriver,
    DegradationDriver,
    ForecastDriver,
    InitialConditionDriver,
    InvestmentsDriver,
    MarketAppreciationDriver,
    MeanReversionDriver,
    OverdueComponentsDriver,
    SummaryDriver,
)
from .exit import (
    ExitAnalysisCalculator,
    ExitAnalysisResult,
    ExitScenario,
    annualized_return_percent,
)
from .forecast import (
    SCENARIO_RATES,
    MarketComparison,
    PropertyValueForecastCalculator,
    PropertyValueForecastResult,
    PropertyValueRow,
    PropertyValueScenario,
    mean_reversion_adjustment,
)

__all__ = [
    # Forecast
    "PropertyValueForecastCalculator",
    "PropertyValueForecastResult",
    "PropertyValueScenario",
    "PropertyValueRow",
    "MarketComparison",
    "SCENARIO_RATES",
    "mean_reversion_adjustment",
    # Components
    "ComponentState",
    "ComponentDeteriorationRow",
    "ComponentDeteriorationSummary",
    "RecurringMaintenanceInfo",
    "age_fraction",
    "component_deterioration",
    "condition_factor",
    "degradation_rate",
    "recurring_cost",
    "recurring_interval_years",
    "renewal_cost",
    "round_to_hundreds",
    "step_component",
    # Drivers
    "ForecastDriver",
    "InitialConditionDriver",
    "OverdueComponentsDriver",
    "DegradationDriver",
    "ComponentDeteriorationDriver",
    "InvestmentsDriver",
    "MarketAppreciationDriver",
    "MeanReversionDriver",
    "SummaryDriver",
    # Exit
    "ExitAnalysisCalculator",
    "ExitAnalysisResult",
    "ExitScenario",
    "annualized_return_percent",
]
