# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for recurring CapEx expansion.
"""

from decimal import Decimal

from immoplan.capex import expand_occurrences, expand_recurring_measures
from immoplan.core.primitives import CapExCategory, YearMonth
from immoplan.project import CapExConfiguration, RecurringMeasureConfig
from tests.conftest import create_measure, create_property, create_recurring_measure


def heating_service(**overrides):
    """Heating maintenance every 40% of the cycle at 25% of the renewal cost."""
    return create_recurring_measure(
        id="heating-service", name="Heating service", category=CapExCategory.HEATING, **overrides
    )


class TestExpandOccurrences:
    def test_interval_from_last_renovation(self):
        # Heating: renovated 2010, 20-year cycle, so every 8 years from 2018
        occurrences = expand_occurrences([heating_service()], create_property(), 2025, 2035)
        assert [o.period for o in occurrences] == [YearMonth(2026, 6), YearMonth(2034, 6)]
        assert {o.amount for o in occurrences} == {Decimal(15000)}
        assert occurrences[0].source_measure_id == "heating-service"

    def test_no_occurrence_within_horizon(self):
        # Roof: renovated 2000, 45-year cycle, so every 18 years (2018, 2036)
        occurrences = expand_occurrences([create_recurring_measure()], create_property(), 2025, 2035)
        assert occurrences == []

    def test_midpoint_cycle_without_component(self):
        # No recorded heating: 20-year midpoint cycle from construction in 2000
        prop = create_property(components=[])
        occurrences = expand_occurrences([heating_service()], prop, 2025, 2035)
        assert [o.period for o in occurrences] == [YearMonth(2032, 6)]

    def test_unit_measure_uses_unit_area(self):
        measure = create_recurring_measure(
            id="bath-service", category=CapExCategory.BATHROOM, unit_id="unit-1"
        )
        occurrences = expand_occurrences([measure], create_property(with_units=True), 2025, 2035)
        assert len(occurrences) == 1
        occurrence = occurrences[0]
        assert occurrence.period == YearMonth(2030, 6)
        assert occurrence.amount == Decimal(7500)
        assert occurrence.unit_id == "unit-1"

    def test_interval_rounding_to_zero_skipped(self):
        measure = heating_service(
            recurring_config=RecurringMeasureConfig(interval_percent=Decimal(1), cost_percent=Decimal(25))
        )
        assert expand_occurrences([measure], create_property(), 2025, 2035) == []

    def test_non_recurring_ignored(self):
        assert expand_occurrences([create_measure()], create_property(), 2025, 2035) == []


class TestExpandRecurringMeasures:
    def test_no_configuration(self):
        assert expand_recurring_measures(None, create_property(), 2025, 2035) is None

    def test_unchanged_without_occurrences(self):
        capex = CapExConfiguration(measures=[create_measure()])
        assert expand_recurring_measures(capex, create_property(), 2025, 2035) is capex

    def test_occurrences_appended_as_executed_measures(self):
        capex = CapExConfiguration(measures=[create_measure(), heating_service()])
        expanded = expand_recurring_measures(capex, create_property(), 2025, 2035)

        ids = [m.id for m in expanded.measures]
        assert ids == [
            "measure-1",
            "heating-service",
            "heating-service_recurring_0",
            "heating-service_recurring_1",
        ]
        first, second = expanded.measures[2:]
        assert first.name == "Heating service (#1)"
        assert second.name == "Heating service (#2)"
        assert first.is_executed
        assert not first.is_recurring
        assert first.estimated_cost == Decimal(15000)
