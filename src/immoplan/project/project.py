# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging
from typing import List, Optional

from pydantic import Field, model_validator

from ..core.primitives import DEFAULT_CURRENCY, Model, YearMonth
from .capex import CapExConfiguration, CapExMeasure
from .costs import CostConfiguration
from .financing import Financing
from .investors import InvestorConfiguration
from .property import Property
from .purchase import Purchase
from .rent import RentConfiguration
from .scenario import Scenario
from .tax_profile import TaxProfile
from .valuation import ValuationConfiguration

logger = logging.getLogger(__name__)


class Project(Model):
    """
    Root aggregate describing one real-estate investment.

    A project is immutable. Every time series computed from it spans exactly
    ``[start_period, end_period]`` and is denominated in ``currency``; all
    input amounts are read in that currency.

    Example:
        ```python
        project = Project(
            id="mfh-berlin",
            name="MFH Berlin",
            start_period=YearMonth(2025, 1),
            end_period=YearMonth(2034, 12),
            property=Property(...),
            purchase=Purchase(...),
            financing=Financing(...),
            rent=RentConfiguration(...),
            costs=CostConfiguration(...),
            tax_profile=TaxProfile(marginal_tax_rate_percent=42),
        )
        ```
    """

    id: str
    name: str
    description: Optional[str] = None
    currency: str = Field(default=DEFAULT_CURRENCY, min_length=3, max_length=3)

    start_period: YearMonth
    end_period: YearMonth

    property: Property
    purchase: Purchase
    financing: Financing
    rent: RentConfiguration
    costs: CostConfiguration
    tax_profile: TaxProfile

    capex: Optional[CapExConfiguration] = None
    investors: Optional[InvestorConfiguration] = None
    valuation: ValuationConfiguration = Field(default_factory=ValuationConfiguration)

    scenarios: List[Scenario] = Field(default_factory=list)

    @model_validator(mode="after")
    def _validate_project(self) -> "Project":
        if self.end_period < self.start_period:
            raise ValueError(
                f"end_period {self.end_period} precedes start_period {self.start_period}"
            )
        scenario_ids = [s.id for s in self.scenarios]
        if len(scenario_ids) != len(set(scenario_ids)):
            raise ValueError("Scenario ids must be unique")
        return self

    @property
    def horizon_years(self) -> int:
        extra = 1 if self.end_period.month >= self.start_period.month else 0
        return self.end_period.year - self.start_period.year + extra

    @property
    def horizon_months(self) -> int:
        return YearMonth.months_between(self.start_period, self.end_period) + 1

    def find_scenario(self, scenario_id: str) -> Optional[Scenario]:
        for scenario in self.scenarios:
            if scenario.id == scenario_id:
                return scenario
        return None

    def capex_measures(self) -> List[CapExMeasure]:
        return list(self.capex.measures) if self.capex is not None else []
