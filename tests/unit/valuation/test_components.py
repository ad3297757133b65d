# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for building component aging and deterioration.
"""

from decimal import Decimal

import pytest

from immoplan.core.primitives import CapExCategory, ComponentStatus, Condition
from immoplan.project import RecurringMeasureConfig
from immoplan.valuation import (
    ComponentState,
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
from tests.conftest import create_measure, create_property, create_recurring_measure


class TestFactors:
    def test_condition_factor(self):
        assert condition_factor(Condition.NEW) == Decimal("1.0")
        assert condition_factor(Condition.GOOD) == Decimal("0.95")
        assert condition_factor(Condition.NEEDS_RENOVATION) == Decimal("0.55")

    @pytest.mark.parametrize(
        "age, expected",
        [(10, Decimal("0.003")), (18, Decimal("0.008")), (25, Decimal("0.015"))],
    )
    def test_degradation_rate(self, age, expected):
        assert degradation_rate(age, 20) == expected

    def test_age_fraction(self):
        assert age_fraction(10, Decimal(20)) == Decimal("0.0625")
        assert age_fraction(30, Decimal(20)) == Decimal(1)
        assert age_fraction(-5, Decimal(20)) == Decimal(0)
        assert age_fraction(5, Decimal(0)) == Decimal(1)


class TestStepComponent:
    """Test the yearly condition factor step."""

    def state(self, factor: str, age: int = 5) -> ComponentState:
        return ComponentState(category=CapExCategory.HEATING, age=age, cycle=20, factor=Decimal(factor))

    def test_improvement_resets_age(self):
        step = step_component(self.state("0.9"), "improvement")
        assert step.state.factor == Decimal(1)
        assert step.state.age == 0
        assert step.boost == Decimal("0.1")

    def test_maintenance_halves_age(self):
        step = step_component(self.state("0.8"), "maintenance")
        assert step.state.factor == Decimal("0.95")
        assert step.state.age == 3
        assert step.boost == Decimal("0.15")

    def test_degrades_without_capex(self):
        step = step_component(self.state("0.8"), None)
        assert step.state.factor == Decimal("0.797")
        assert step.state.age == 6
        assert step.boost == Decimal(0)

    def test_factor_floor(self):
        step = step_component(self.state("0.5", age=30), None)
        assert step.state.factor == Decimal("0.50")


class TestRenewalCost:
    def test_rounding(self):
        assert round_to_hundreds(Decimal(1250)) == Decimal(1300)
        assert round_to_hundreds(Decimal(1249)) == Decimal(1200)

    @pytest.mark.parametrize(
        "value, expected", [(Decimal(250), Decimal(300)), (Decimal(50), Decimal(100))]
    )
    def test_halves_round_up(self, value, expected):
        assert round_to_hundreds(value) == expected

    def test_by_reference_quantity(self):
        prop = create_property()
        # Heating on living area, roof on total area, windows per 8 m² of living area
        assert renewal_cost(CapExCategory.HEATING, prop) == Decimal(60000)
        assert renewal_cost(CapExCategory.ROOF, prop) == Decimal(125000)
        assert renewal_cost(CapExCategory.WINDOWS, prop) == Decimal(30000)

    def test_recurring_helpers(self):
        config = RecurringMeasureConfig(
            interval_percent=Decimal(40),
            cost_percent=Decimal(25),
            cycle_extension_percent=Decimal(30),
        )
        assert recurring_interval_years(45, config) == 18
        assert recurring_cost(Decimal(125000), config) == Decimal(31300)


class TestComponentDeterioration:
    def heating_row(self, summary):
        return next(row for row in summary.components if row.category == CapExCategory.HEATING)

    def test_no_component_data(self):
        prop = create_property(components=[])
        assert component_deterioration(prop, [], 2025, 2035) is None

    def test_uncovered_component_becomes_overdue(self):
        summary = component_deterioration(create_property(), [], 2025, 2035)
        row = self.heating_row(summary)
        assert row.age_at_start == 15
        assert row.age_at_end == 25
        assert row.due_year == 2030
        assert row.value_impact == Decimal("-41015.625")
        assert row.status_at_end == ComponentStatus.OVERDUE
        assert row.capex_addressed_year is None
        assert summary.covered_by_capex == Decimal(0)

    def test_executed_capex_renews_component(self):
        summary = component_deterioration(create_property(), [create_measure()], 2025, 2035)
        row = self.heating_row(summary)
        assert row.capex_addressed_year == 2027
        assert row.age_at_end == 8
        assert row.due_year == 2047
        assert row.value_impact == Decimal(-1536)
        assert row.status_at_end == ComponentStatus.RENEWED
        assert summary.covered_by_capex == Decimal(25000)

    def test_planned_capex_ignored(self):
        measure = create_measure(is_executed=False)
        summary = component_deterioration(create_property(), [measure], 2025, 2035)
        assert self.heating_row(summary).status_at_end == ComponentStatus.OVERDUE

    def test_recurring_maintenance_extends_cycle(self):
        summary = component_deterioration(
            create_property(), [create_recurring_measure()], 2025, 2035
        )
        roof = next(row for row in summary.components if row.category == CapExCategory.ROOF)
        info = roof.recurring_maintenance
        assert roof.cycle_years == 59
        assert info.interval_years == 18
        assert info.cost_per_occurrence == Decimal(31300)
        assert info.occurrences_in_period == 0
        assert info.effective_cycle_years == 59
        assert info.value_improvement > 0

    def test_cumulative_deterioration(self):
        summary = component_deterioration(create_property(), [], 2025, 2035)
        assert summary.cumulative_for_year(2025, 2025) == Decimal(0)
        assert summary.cumulative_for_year(2035, 2025) == summary.total_value_impact
        assert summary.total_value_impact < 0
