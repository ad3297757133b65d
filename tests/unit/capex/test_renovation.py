# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for the renovation forecast.
"""

from datetime import date
from decimal import Decimal

import pytest

from immoplan.capex import RenovationForecastGenerator, derive_priority
from immoplan.core.primitives import (
    CapExCategory,
    Condition,
    FixedClock,
    MeasurePriority,
    TaxClassification,
    UnitType,
    YearMonth,
)
from immoplan.project import ComponentCondition, Unit
from tests.conftest import create_property

START = YearMonth(2025, 1)
END = YearMonth(2035, 12)


@pytest.fixture
def generator(clock) -> RenovationForecastGenerator:
    return RenovationForecastGenerator(clock=clock)


@pytest.mark.parametrize(
    "age, priority",
    [
        (20, MeasurePriority.CRITICAL),
        (16, MeasurePriority.HIGH),
        (12, MeasurePriority.MEDIUM),
        (5, MeasurePriority.LOW),
    ],
)
def test_derive_priority(age, priority):
    assert derive_priority(age, 20) == priority


class TestBuildingProposals:
    """Proposals for the standard property, renovated 2000-2010."""

    def test_due_components_proposed_by_priority(self, generator):
        measures = generator.generate(create_property(), START, END)
        assert [m.id for m in measures] == [
            "renovation-interior",
            "renovation-energy",
            "renovation-heating",
            "renovation-windows",
        ]

    def test_overdue_component_planned_at_start(self, generator):
        # No interior record: 22-year midpoint cycle from 2000 is already past
        interior = generator.generate(create_property(), START, END)[0]
        assert interior.planned_period == YearMonth(2025, 1)
        assert interior.priority == MeasurePriority.CRITICAL
        assert interior.is_necessary
        assert interior.estimated_cost == Decimal(11200)

    def test_cost_inflated_to_planned_year(self, generator):
        measures = {m.category: m for m in generator.generate(create_property(), START, END)}
        heating = measures[CapExCategory.HEATING]
        assert heating.planned_period == YearMonth(2030, 1)
        assert heating.estimated_cost == Decimal(46400)
        assert heating.priority == MeasurePriority.MEDIUM
        assert not heating.is_necessary
        assert measures[CapExCategory.WINDOWS].estimated_cost == Decimal(30200)
        assert measures[CapExCategory.ENERGY].estimated_cost == Decimal(81100)

    def test_proposals_are_planned_maintenance(self, generator):
        for measure in generator.generate(create_property(), START, END):
            assert not measure.is_executed
            assert measure.tax_classification == TaxClassification.MAINTENANCE_EXPENSE
            assert measure.name

    def test_components_due_after_horizon_skipped(self, generator):
        categories = {m.category for m in generator.generate(create_property(), START, END)}
        assert CapExCategory.ROOF not in categories
        assert CapExCategory.FACADE not in categories

    def test_deterministic_for_fixed_clock(self):
        first = RenovationForecastGenerator(FixedClock(date(2025, 1, 1))).generate(
            create_property(), START, END
        )
        second = RenovationForecastGenerator(FixedClock(date(2025, 1, 1))).generate(
            create_property(), START, END
        )
        assert first == second


class TestUnitProposals:
    def test_only_recorded_unit_components(self, generator):
        bathroom = ComponentCondition(
            category=CapExCategory.BATHROOM,
            condition=Condition.POOR,
            last_renovation_year=2005,
            expected_cycle_years=25,
        )
        units = [
            Unit(
                id="unit-1",
                name="WE 1",
                unit_type=UnitType.RESIDENTIAL,
                area=Decimal(85),
                components=[bathroom],
            ),
            Unit(id="unit-2", name="WE 2", unit_type=UnitType.RESIDENTIAL, area=Decimal(65)),
        ]
        measures = generator.generate(create_property(units=units), START, END)
        unit_measures = [m for m in measures if m.unit_id is not None]

        assert len(unit_measures) == 1
        measure = unit_measures[0]
        assert measure.id == "renovation-unit-1-bathroom"
        assert measure.name == "WE 1: Bathroom renewal"
        assert measure.planned_period == YearMonth(2030, 1)
        assert measure.estimated_cost == Decimal(34500)
        assert measure.priority == MeasurePriority.HIGH
