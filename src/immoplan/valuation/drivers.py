# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Forecast drivers: typed, explanatory facts behind a value forecast.

Drivers are produced for presentation only; nothing downstream reads them.
Each driver kind carries its own strongly typed parameters.
"""

from __future__ import annotations

from decimal import Decimal
from typing import List, Literal, Union

from pydantic import Field
from typing_extensions import Annotated

from ..core.primitives import Condition, MarketAssessment, Model

##################################
######### FORECAST DRIVERS #######
##################################


class ForecastDriverBase(Model):
    """Base class for all forecast drivers."""

    kind: str


class InitialConditionDriver(ForecastDriverBase):
    kind: Literal["initialCondition"] = "initialCondition"
    construction_year: int
    condition: Condition
    factor_percent: int
    component_count: int


class OverdueComponentsDriver(ForecastDriverBase):
    """Components already past their renewal cycle at the start."""

    kind: Literal["overdueComponents"] = "overdueComponents"
    count: int
    names: List[str]
    avg_overdue_years: int


class DegradationDriver(ForecastDriverBase):
    kind: Literal["degradation"] = "degradation"
    start_factor_percent: int
    end_factor_percent: int
    total_decline: int
    years: int


class ComponentDeteriorationDriver(ForecastDriverBase):
    kind: Literal["componentDeterioration"] = "componentDeterioration"
    uncovered_count: int
    uncovered_amount: Decimal
    total_components: int
    covered_by_capex: Decimal


class InvestmentsDriver(ForecastDriverBase):
    """CapEx within the horizon and the value uplift credited for it."""

    kind: Literal["investments"] = "investments"
    measure_count: int
    total_amount: Decimal
    value_uplift: Decimal
    condition_boost_percent: int


class MarketAppreciationDriver(ForecastDriverBase):
    kind: Literal["marketAppreciation"] = "marketAppreciation"
    rate_percent: Decimal
    years: int
    appreciation_percent: Decimal
    appreciation_amount: Decimal


class MeanReversionDriver(ForecastDriverBase):
    """
    Convergence of the purchase price towards the regional fair value.

    ``direction`` is "catch-up" when the purchase was below market and
    "dampening" otherwise.
    """

    kind: Literal["meanReversion"] = "meanReversion"
    assessment: MarketAssessment
    gap_percent: int
    adjustment_amount: Decimal
    direction: Literal["catch-up", "dampening"]


class SummaryDriver(ForecastDriverBase):
    kind: Literal["summary"] = "summary"
    years: int
    purchase_price: Decimal
    final_value: Decimal
    change_percent: Decimal
    change_absolute: Decimal
    change_direction: Literal["+", "-"]


# Union type for all drivers, using discriminator for type differentiation
ForecastDriver = Annotated[
    Union[
        InitialConditionDriver,
        OverdueComponentsDriver,
        DegradationDriver,
        ComponentDeteriorationDriver,
        InvestmentsDriver,
        MarketAppreciationDriver,
        MeanReversionDriver,
        SummaryDriver,
    ],
    Field(discriminator="kind"),
]
