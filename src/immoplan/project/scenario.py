# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from pydantic import Field

from ..core.primitives import Model, Percent
from .capex import CapExMeasure
from .rent import VacancyEvent


class ScenarioParameters(Model):
    """
    Overrides applied on top of the base project.

    Every field is optional; only the fields that are set replace the base
    values. List fields are appended to the base lists.
    """

    market_growth_rate_percent: Optional[Decimal] = Field(default=None, ge=-50, le=50)
    rent_growth_rate_percent: Optional[Percent] = None
    vacancy_rate_percent: Optional[Percent] = None
    refinancing_interest_rate_percent: Optional[Percent] = None
    cost_inflation_percent: Optional[Decimal] = Field(default=None, ge=-100, le=100)
    additional_capex: List[CapExMeasure] = Field(default_factory=list)
    additional_vacancy_events: List[VacancyEvent] = Field(default_factory=list)


class Scenario(Model):
    id: str
    name: str
    description: Optional[str] = None
    is_base: bool = False
    parameters: ScenarioParameters = Field(default_factory=ScenarioParameters)
