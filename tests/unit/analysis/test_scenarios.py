# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for scenario overrides.
"""

from decimal import Decimal

import pytest

from immoplan.analysis import ScenarioNotFoundError, apply_overrides, apply_scenario
from immoplan.core.primitives import YearMonth
from immoplan.project import RefinancingTerms, Scenario, ScenarioParameters, VacancyEvent
from tests.conftest import create_financing, create_loan, create_measure, create_project


def project_with(parameters: ScenarioParameters, **overrides):
    return create_project(
        scenarios=[Scenario(id="stress", name="Stress test", parameters=parameters)], **overrides
    )


class TestApplyScenario:
    def test_base_returns_project_itself(self, project):
        assert apply_scenario(project, None) is project
        assert apply_scenario(project, "base") is project
        assert apply_scenario(project, "") is project

    def test_unknown_scenario(self, project):
        with pytest.raises(ScenarioNotFoundError) as excinfo:
            apply_scenario(project, "missing")
        assert excinfo.value.scenario_id == "missing"
        assert isinstance(excinfo.value, KeyError)

    def test_base_project_not_modified(self):
        project = project_with(ScenarioParameters(vacancy_rate_percent=Decimal(10)))
        stressed = apply_scenario(project, "stress")
        assert stressed.rent.vacancy_rate_percent == Decimal(10)
        assert project.rent.vacancy_rate_percent == Decimal(3)

    def test_untouched_records_shared(self):
        project = project_with(ScenarioParameters(vacancy_rate_percent=Decimal(10)))
        stressed = apply_scenario(project, "stress")
        assert stressed.purchase is project.purchase
        assert stressed.financing is project.financing


class TestOverrides:
    """Test each scenario parameter."""

    def test_no_overrides(self, project):
        assert apply_overrides(project, ScenarioParameters()) is project

    def test_market_growth(self, project):
        result = apply_overrides(project, ScenarioParameters(market_growth_rate_percent=Decimal(-2)))
        assert result.valuation.market_growth_rate_percent == Decimal(-2)
        assert result.valuation.sale_costs_percent == project.valuation.sale_costs_percent

    def test_rent_growth_only_for_annual_tenancies(self, project):
        result = apply_overrides(project, ScenarioParameters(rent_growth_rate_percent=Decimal(4)))
        assert result.rent.tenancies[0].annual_increase_percent == Decimal(4)

    def test_additional_vacancy_events_appended(self, project):
        event = VacancyEvent(start_period=YearMonth(2026, 1), duration_months=6)
        result = apply_overrides(project, ScenarioParameters(additional_vacancy_events=[event]))
        assert result.rent.vacancy_events == [event]

    def test_refinancing_rate(self):
        loans = [
            create_loan(
                refinancing=RefinancingTerms(
                    interest_rate_percent=Decimal(4), repayment_percent=Decimal(2)
                )
            ),
            create_loan(id="loan-2"),
        ]
        project = create_project(financing=create_financing(loans=loans))
        result = apply_overrides(
            project, ScenarioParameters(refinancing_interest_rate_percent=Decimal(6))
        )
        assert result.financing.loans[0].refinancing.interest_rate_percent == Decimal(6)
        assert result.financing.loans[0].refinancing.repayment_percent == Decimal(2)
        assert result.financing.loans[1].refinancing is None

    def test_cost_inflation(self, project):
        result = apply_overrides(project, ScenarioParameters(cost_inflation_percent=Decimal(5)))
        assert {item.annual_inflation_percent for item in result.costs.items} == {Decimal(5)}
        assert result.costs.reserve_account == project.costs.reserve_account

    def test_additional_capex_appended(self):
        project = create_project(measures=[create_measure()])
        extra = create_measure(id="extra")
        result = apply_overrides(project, ScenarioParameters(additional_capex=[extra]))
        assert [m.id for m in result.capex.measures] == ["measure-1", "extra"]

    def test_additional_capex_without_base_configuration(self, project):
        assert project.capex is None
        result = apply_overrides(project, ScenarioParameters(additional_capex=[create_measure()]))
        assert [m.id for m in result.capex.measures] == ["measure-1"]
