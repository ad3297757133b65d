# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Scenario overrides.

A scenario names a handful of parameters (market growth, vacancy, a
refinancing rate, ...) that replace the base project's values. Applying it
builds a new project with copies of only the touched sub-records; the base
project is never modified.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from ..core.primitives import RentDevelopmentModel
from ..project import CapExConfiguration, Project, ScenarioParameters

logger = logging.getLogger(__name__)

BASE_SCENARIO_ID = "base"


class ScenarioNotFoundError(KeyError):
    """Raised when a calculation asks for a scenario the project does not define."""

    def __init__(self, project_id: str, scenario_id: str):
        self.project_id = project_id
        self.scenario_id = scenario_id
        super().__init__(f"Project {project_id!r} has no scenario {scenario_id!r}")


def is_base_scenario(scenario_id: Optional[str], base_id: str = BASE_SCENARIO_ID) -> bool:
    return not scenario_id or scenario_id == base_id


def apply_overrides(project: Project, parameters: ScenarioParameters) -> Project:
    """
    Project with ``parameters`` applied on top of ``project``.

    Scalar parameters replace the base values; additional vacancy events
    and CapEx measures are appended to the base lists.
    """
    update: Dict[str, Any] = {}

    if parameters.market_growth_rate_percent is not None:
        update["valuation"] = project.valuation.model_copy(
            update={"market_growth_rate_percent": parameters.market_growth_rate_percent}
        )

    rent = project.rent
    if parameters.vacancy_rate_percent is not None:
        rent = rent.model_copy(update={"vacancy_rate_percent": parameters.vacancy_rate_percent})
    if parameters.rent_growth_rate_percent is not None:
        tenancies = [
            t.model_copy(update={"annual_increase_percent": parameters.rent_growth_rate_percent})
            if t.development_model == RentDevelopmentModel.ANNUAL
            else t
            for t in rent.tenancies
        ]
        rent = rent.model_copy(update={"tenancies": tenancies})
    if parameters.additional_vacancy_events:
        rent = rent.model_copy(
            update={"vacancy_events": list(rent.vacancy_events) + list(parameters.additional_vacancy_events)}
        )
    if rent is not project.rent:
        update["rent"] = rent

    if parameters.refinancing_interest_rate_percent is not None:
        rate = parameters.refinancing_interest_rate_percent
        loans = [
            loan.model_copy(
                update={"refinancing": loan.refinancing.model_copy(update={"interest_rate_percent": rate})}
            )
            if loan.refinancing is not None
            else loan
            for loan in project.financing.loans
        ]
        update["financing"] = project.financing.model_copy(update={"loans": loans})

    if parameters.cost_inflation_percent is not None:
        items = [
            item.model_copy(update={"annual_inflation_percent": parameters.cost_inflation_percent})
            for item in project.costs.items
        ]
        update["costs"] = project.costs.model_copy(update={"items": items})

    if parameters.additional_capex:
        base_measures = project.capex.measures if project.capex is not None else []
        update["capex"] = CapExConfiguration(
            measures=list(base_measures) + list(parameters.additional_capex)
        )

    if not update:
        return project
    return project.model_copy(update=update)


def apply_scenario(
    project: Project, scenario_id: Optional[str], base_id: str = BASE_SCENARIO_ID
) -> Project:
    """
    Project as seen by scenario ``scenario_id``.

    ``None`` and the base id return ``project`` itself. An id the project
    does not define raises ``ScenarioNotFoundError``.

    Example:
        >>> stressed = apply_scenario(project, "stress")
        >>> stressed.rent.vacancy_rate_percent
        Decimal('10')
        >>> project.rent.vacancy_rate_percent
        Decimal('3')
    """
    if is_base_scenario(scenario_id, base_id):
        return project

    scenario = project.find_scenario(scenario_id)
    if scenario is None:
        raise ScenarioNotFoundError(project.id, scenario_id)

    logger.debug(f"Applying scenario {scenario.id!r} ({scenario.name}) to project {project.id}")
    return apply_overrides(project, scenario.parameters)
