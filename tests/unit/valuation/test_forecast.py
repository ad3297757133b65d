# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for the multi-scenario property value forecast.
"""

from decimal import Decimal

import pytest

from immoplan.core.primitives import MarketAssessment, TaxClassification
from immoplan.valuation import (
    InvestmentsDriver,
    MarketAppreciationDriver,
    PropertyValueForecastCalculator,
    mean_reversion_adjustment,
)
from tests.conftest import create_measure, create_project, create_property


@pytest.fixture
def calc() -> PropertyValueForecastCalculator:
    return PropertyValueForecastCalculator()


class TestScenarios:
    def test_three_scenarios_in_order(self, calc, project):
        result = calc.calculate(project)
        assert [s.label for s in result.scenarios] == ["conservative", "base", "optimistic"]
        assert [s.annual_appreciation_percent for s in result.scenarios] == [
            Decimal("0.0"),
            Decimal("1.5"),
            Decimal("3.0"),
        ]
        assert len(result.scenario("base").yearly_values) == 11

    def test_values_ordered_by_appreciation(self, calc, project):
        result = calc.calculate(project)
        conservative, base, optimistic = (s.final_value for s in result.scenarios)
        assert conservative < base < optimistic

    def test_market_value_compounds_yearly(self, calc, project):
        rows = calc.calculate(project).scenario("base").yearly_values
        assert rows[0].market_value == Decimal(400000)
        assert rows[1].market_value == Decimal(406000)
        conservative = calc.calculate(project).scenario("conservative").yearly_values
        assert {row.market_value for row in conservative} == {Decimal(400000)}

    def test_first_year_without_deterioration_equals_price(self, calc, project):
        row = calc.calculate(project).scenario("conservative").yearly_values[0]
        assert row.component_deterioration_cumulative == Decimal(0)
        assert row.estimated_value == Decimal(400000)

    def test_unknown_scenario(self, calc, project):
        with pytest.raises(KeyError):
            calc.calculate(project).scenario("bubble")

    def test_deterministic(self, calc, project):
        assert calc.calculate(project) == calc.calculate(project)


class TestConditionModel:
    def test_without_components_uses_overall_condition(self, calc):
        project = create_project(property=create_property(components=[]))
        result = calc.calculate(project)
        assert result.initial_condition_factor == Decimal("0.95")
        assert result.component_deterioration is None
        rows = result.scenario("conservative").yearly_values
        assert rows[-1].condition_factor < rows[0].condition_factor

    def test_improvement_adds_seventy_percent(self, calc):
        measure = create_measure(
            estimated_cost=Decimal(100000),
            tax_classification=TaxClassification.MANUFACTURING_COSTS,
        )
        project = create_project(measures=[measure])
        rows = calc.calculate(project).scenario("base").yearly_values
        assert rows[1].improvement_uplift == Decimal(0)
        assert rows[2].improvement_uplift == Decimal(70000)

    def test_planned_measures_do_not_count(self, calc):
        baseline = calc.calculate(create_project())
        planned = calc.calculate(create_project(measures=[create_measure(is_executed=False)]))
        assert planned.scenario("base").final_value == baseline.scenario("base").final_value


class TestMarketComparison:
    def test_no_regional_price(self, calc, project):
        assert calc.calculate(project).market_comparison is None

    @pytest.mark.parametrize(
        "price_per_sqm, assessment",
        [
            (Decimal(1000), MarketAssessment.AT),
            (Decimal(1200), MarketAssessment.BELOW),
            (Decimal(800), MarketAssessment.ABOVE),
        ],
    )
    def test_assessment(self, calc, price_per_sqm, assessment):
        project = create_project(property=create_property(regional_price_per_sqm=price_per_sqm))
        comparison = calc.calculate(project).market_comparison
        assert comparison.fair_market_value == price_per_sqm * 400
        assert comparison.assessment == assessment

    def test_mean_reversion_half_life(self):
        assert mean_reversion_adjustment(Decimal(100000), Decimal(0), 7) == Decimal(50000)
        assert mean_reversion_adjustment(Decimal(100000), Decimal(0), 0) == Decimal(0)

    def test_below_market_purchase_catches_up(self, calc):
        baseline = calc.calculate(create_project())
        cheap = calc.calculate(
            create_project(property=create_property(regional_price_per_sqm=Decimal(1200)))
        )
        assert cheap.scenario("base").final_value > baseline.scenario("base").final_value


class TestDrivers:
    def test_driver_sequence(self, calc, project):
        drivers = calc.calculate(project).drivers
        assert drivers[0].kind == "initialCondition"
        assert drivers[-1].kind == "summary"
        appreciation = next(d for d in drivers if isinstance(d, MarketAppreciationDriver))
        assert appreciation.rate_percent == Decimal("1.5")
        assert appreciation.years == 10

    def test_investments_driver(self, calc):
        measure = create_measure(
            estimated_cost=Decimal(100000),
            tax_classification=TaxClassification.MANUFACTURING_COSTS,
        )
        drivers = calc.calculate(create_project(measures=[measure])).drivers
        investments = next(d for d in drivers if isinstance(d, InvestmentsDriver))
        assert investments.measure_count == 1
        assert investments.total_amount == Decimal(100000)
        assert investments.value_uplift == Decimal(70000)

    def test_drivers_serialize_with_kind(self, calc, project):
        dumped = calc.calculate(project).model_dump()
        assert dumped["drivers"][0]["kind"] == "initialCondition"
