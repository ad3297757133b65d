# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Renovation forecast: proposed CapEx measures from component ages.

For every building component category (and every component recorded on a
unit) the next renewal is projected from the last renovation and the
component cycle. Renewals due inside the horizon become proposed,
not-yet-executed maintenance measures with an interpolated cost and a
priority derived from how far the component has aged through its cycle.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Dict, List, Optional

from ..core.primitives import (
    CapExCategory,
    Clock,
    Condition,
    MeasurePriority,
    SystemClock,
    TaxClassification,
    YearMonth,
)
from ..project import CapExMeasure, ComponentCondition, Property, Unit, get_component_cycle
from ..valuation.components import reference_quantity, round_to_hundreds

logger = logging.getLogger(__name__)

CONSTRUCTION_INFLATION = Decimal("0.03")

BUILDING_CATEGORIES = (
    CapExCategory.HEATING,
    CapExCategory.ROOF,
    CapExCategory.FACADE,
    CapExCategory.WINDOWS,
    CapExCategory.ELECTRICAL,
    CapExCategory.PLUMBING,
    CapExCategory.INTERIOR,
    CapExCategory.ENERGY,
)

UNIT_CATEGORIES = (
    CapExCategory.KITCHEN,
    CapExCategory.BATHROOM,
    CapExCategory.UNIT_RENOVATION,
    CapExCategory.UNIT_OTHER,
)

# Position inside the cost range: 0 is the cheapest end, 1 the most expensive
COST_FACTORS: Dict[Condition, Decimal] = {
    Condition.GOOD: Decimal("0.2"),
    Condition.FAIR: Decimal("0.5"),
    Condition.POOR: Decimal("1.0"),
}
DEFAULT_COST_FACTOR = Decimal("0.5")

MEASURE_NAMES: Dict[CapExCategory, str] = {
    CapExCategory.HEATING: "Heating replacement",
    CapExCategory.ROOF: "Roof renovation",
    CapExCategory.FACADE: "Facade renovation",
    CapExCategory.WINDOWS: "Window replacement",
    CapExCategory.ELECTRICAL: "Electrical renewal",
    CapExCategory.PLUMBING: "Plumbing renewal",
    CapExCategory.INTERIOR: "Interior renewal",
    CapExCategory.ENERGY: "Energy retrofit",
    CapExCategory.KITCHEN: "Kitchen replacement",
    CapExCategory.BATHROOM: "Bathroom renewal",
    CapExCategory.UNIT_RENOVATION: "Unit refurbishment",
    CapExCategory.UNIT_OTHER: "Other unit renovation",
}


def derive_priority(age: int, cycle_years: int) -> MeasurePriority:
    """Priority from the share of the cycle already used up."""
    if cycle_years <= 0:
        return MeasurePriority.MEDIUM
    ratio = Decimal(age) / cycle_years
    if ratio >= 1:
        return MeasurePriority.CRITICAL
    if ratio >= Decimal("0.8"):
        return MeasurePriority.HIGH
    if ratio >= Decimal("0.6"):
        return MeasurePriority.MEDIUM
    return MeasurePriority.LOW


class RenovationForecastGenerator:
    """
    Proposes renewal measures for a property over ``[start, end]``.

    Component ages and the cost inflation horizon are measured from the
    clock's current year, so the same property yields the same proposals
    for a fixed clock.

    Example:
        >>> generator = RenovationForecastGenerator(clock=FixedClock(date(2025, 1, 1)))
        >>> measures = generator.generate(property, YearMonth(2025, 1), YearMonth(2034, 12))
        >>> [m.category for m in measures][:1]
        [<CapExCategory.HEATING: 'Heating'>]
    """

    def __init__(self, clock: Optional[Clock] = None):
        self.clock = clock or SystemClock()

    def generate(
        self, property: Property, start: YearMonth, end: YearMonth
    ) -> List[CapExMeasure]:
        current_year = self.clock.current_year
        measures: List[CapExMeasure] = []

        for category in BUILDING_CATEGORIES:
            component = next((c for c in property.components if c.category == category), None)
            measure = self._propose(category, component, property, None, start, end, current_year)
            if measure is not None:
                measures.append(measure)

        for unit in property.units:
            for category in UNIT_CATEGORIES:
                component = next((c for c in unit.components if c.category == category), None)
                # Units only get proposals for components that were recorded
                if component is None:
                    continue
                measure = self._propose(category, component, property, unit, start, end, current_year)
                if measure is not None:
                    measures.append(measure)

        measures.sort(key=lambda m: (m.priority.rank, m.planned_period))
        logger.debug(f"Renovation forecast for {property.id}: {len(measures)} proposed measures")
        return measures

    @staticmethod
    def _propose(
        category: CapExCategory,
        component: Optional[ComponentCondition],
        property: Property,
        unit: Optional[Unit],
        start: YearMonth,
        end: YearMonth,
        current_year: int,
    ) -> Optional[CapExMeasure]:
        cycle_data = get_component_cycle(category)
        if component is not None:
            last_renovation = component.renovation_year(property.construction_year)
            cycle_years = component.effective_cycle_years()
            condition = component.condition
        else:
            last_renovation = property.construction_year
            cycle_years = cycle_data.midpoint_years
            condition = property.overall_condition

        next_renewal = last_renovation + cycle_years
        if next_renewal > end.year:
            return None
        planned_year = max(next_renewal, start.year)

        factor = COST_FACTORS.get(condition, DEFAULT_COST_FACTOR)
        unit_cost = cycle_data.cost_min + (cycle_data.cost_max - cycle_data.cost_min) * factor
        cost = unit_cost * reference_quantity(category, property, unit)
        years_until = max(0, planned_year - current_year)
        cost *= (1 + CONSTRUCTION_INFLATION) ** years_until

        priority = derive_priority(current_year - last_renovation, cycle_years)
        name = MEASURE_NAMES.get(category, "Other renovation")
        if unit is not None:
            name = f"{unit.name}: {name}"
            measure_id = f"renovation-{unit.id}-{category.value.lower()}"
        else:
            measure_id = f"renovation-{category.value.lower()}"

        return CapExMeasure(
            id=measure_id,
            name=name,
            category=category,
            planned_period=YearMonth(planned_year, 1),
            estimated_cost=round_to_hundreds(cost),
            tax_classification=TaxClassification.MAINTENANCE_EXPENSE,
            is_necessary=priority in (MeasurePriority.CRITICAL, MeasurePriority.HIGH),
            priority=priority,
            is_value_enhancing=False,
            is_executed=False,
            unit_id=unit.id if unit is not None else None,
        )
