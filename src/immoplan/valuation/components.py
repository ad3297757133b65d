# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Building component aging.

Two views of the same components:

- a condition factor per component (1.0 = new, floor 0.5) that degrades a
  little every year and is restored by CapEx, stepped one year at a time
  through :func:`step_component`
- a cost-based deterioration estimate: the share of a component's renewal
  cost that has been "used up", following ``min(1, (age / cycle) ** 4)``
"""

from __future__ import annotations

import math
from decimal import Decimal
from typing import Dict, List, Literal, NamedTuple, Optional, Sequence, Tuple

from pydantic import Field

from ..core.primitives import CapExCategory, ComponentStatus, Condition, Model, round_half_up
from ..project import (
    CapExMeasure,
    ComponentCondition,
    Property,
    RecurringMeasureConfig,
    Unit,
    get_component_cycle,
)

CONDITION_FACTORS: Dict[Condition, Decimal] = {
    Condition.NEW: Decimal("1.0"),
    Condition.GOOD: Decimal("0.95"),
    Condition.FAIR: Decimal("0.85"),
    Condition.POOR: Decimal("0.70"),
    Condition.NEEDS_RENOVATION: Decimal("0.55"),
}

MIN_CONDITION_FACTOR = Decimal("0.50")
OVERDUE_PENALTY_PER_YEAR = Decimal("0.015")
DETERIORATION_EXPONENT = 4
IMPROVEMENT_BOOST = Decimal("0.30")
MAINTENANCE_BOOST = Decimal("0.15")

_NEGLIGIBLE_FRACTION = Decimal("0.001")
_FULLY_AGED_FRACTION = Decimal("0.999")

CapExKind = Literal["improvement", "maintenance"]


def condition_factor(condition: Condition) -> Decimal:
    return CONDITION_FACTORS.get(condition, Decimal("0.85"))


def initial_component_factor(component: ComponentCondition, age: int) -> Decimal:
    """Condition factor at the start, penalized for each year past the cycle."""
    overdue = max(0, age - component.effective_cycle_years())
    return max(
        MIN_CONDITION_FACTOR,
        condition_factor(component.condition) - overdue * OVERDUE_PENALTY_PER_YEAR,
    )


def degradation_rate(age: int, cycle: int) -> Decimal:
    """Yearly factor loss: slow until 70% of the cycle, faster up to 100%, fastest beyond."""
    if cycle <= 0:
        return Decimal("0.015")
    ratio = Decimal(age) / cycle
    if ratio <= Decimal("0.7"):
        return Decimal("0.003")
    if ratio <= 1:
        return Decimal("0.008")
    return Decimal("0.015")


def age_fraction(age: int, cycle: Decimal) -> Decimal:
    """Share of the renewal cost consumed at ``age``: ``min(1, (age/cycle)^4)``."""
    if cycle <= 0:
        return Decimal(1)
    ratio = Decimal(max(0, age)) / Decimal(cycle)
    return min(Decimal(1), ratio**DETERIORATION_EXPONENT)


def classify_capex_kind(measure: CapExMeasure) -> Optional[CapExKind]:
    if measure.tax_classification.is_capitalized:
        return "improvement"
    if measure.tax_classification.is_maintenance:
        return "maintenance"
    return None


# --- Condition factor state -------------------------------------------------


class ComponentState(Model):
    """Age and condition factor of one component at the end of a year."""

    category: CapExCategory
    age: int
    cycle: int
    factor: Decimal


class ComponentStep(NamedTuple):
    state: ComponentState
    boost: Decimal


def step_component(state: ComponentState, capex: Optional[CapExKind]) -> ComponentStep:
    """
    Advance one component by one year.

    An improvement restores up to 0.30 and resets the age; maintenance
    restores up to 0.15 and halves the age; without CapEx the factor degrades
    by :func:`degradation_rate`. Returns the new state and the factor gained
    from CapEx.
    """
    age = state.age + 1
    if capex == "improvement":
        boost = min(1 - state.factor, IMPROVEMENT_BOOST)
        factor = min(Decimal(1), state.factor + IMPROVEMENT_BOOST)
        age = 0
    elif capex == "maintenance":
        boost = min(1 - state.factor, MAINTENANCE_BOOST)
        factor = min(Decimal(1), state.factor + MAINTENANCE_BOOST)
        age //= 2
    else:
        boost = Decimal(0)
        factor = max(MIN_CONDITION_FACTOR, state.factor - degradation_rate(age, state.cycle))
    return ComponentStep(state.model_copy(update={"age": age, "factor": factor}), boost)


# --- Cost-based deterioration -----------------------------------------------


def reference_quantity(
    category: CapExCategory, property: Property, unit: Optional[Unit] = None
) -> Decimal:
    """Area (or window count) the per-unit cost of ``category`` applies to."""
    if category.is_unit_level and unit is not None:
        return unit.area
    if category in (CapExCategory.ROOF, CapExCategory.FACADE, CapExCategory.ENERGY):
        return property.total_area
    if category == CapExCategory.WINDOWS:
        # Roughly one window per 8 m² of living area
        return Decimal(math.ceil(property.living_area / 8))
    return property.living_area


def renewal_cost(
    category: CapExCategory, property: Property, unit: Optional[Unit] = None
) -> Decimal:
    """Upper-range renewal cost of a component, rounded to the nearest 100."""
    cost = get_component_cycle(category).cost_max * reference_quantity(category, property, unit)
    return round_to_hundreds(cost)


def round_to_hundreds(value: Decimal) -> Decimal:
    # Halves round up, the same as cent rounding of money
    return round_half_up(value / 100, 0) * 100


class RecurringMaintenanceInfo(Model):
    name: str
    interval_years: int
    cost_per_occurrence: Decimal
    occurrences_in_period: int
    total_cost_in_period: Decimal
    effective_cycle_years: int
    value_improvement: Decimal


class ComponentDeteriorationRow(Model):
    """
    Deterioration of one component over the horizon.

    ``value_impact`` is negative: the share of the renewal cost consumed
    during the horizon (or since a renewal within it).
    """

    category: CapExCategory
    unit_id: Optional[str] = None
    age_at_start: int
    age_at_end: int
    cycle_years: int
    due_year: int
    renewal_cost_estimate: Decimal
    capex_addressed_year: Optional[int] = None
    value_impact: Decimal
    status_at_end: ComponentStatus
    recurring_maintenance: Optional[RecurringMaintenanceInfo] = None


class ComponentDeteriorationSummary(Model):
    components: List[ComponentDeteriorationRow] = Field(default_factory=list)
    total_value_impact: Decimal = Decimal(0)
    total_renewal_cost_if_all_done: Decimal = Decimal(0)
    covered_by_capex: Decimal = Decimal(0)
    uncovered_deterioration: Decimal = Decimal(0)

    def cumulative_for_year(self, year: int, start_year: int) -> Decimal:
        """Cumulative (negative) deterioration of all components at the end of ``year``."""
        cumulative = Decimal(0)
        for row in self.components:
            cycle = Decimal(row.cycle_years)
            if row.capex_addressed_year is not None and year >= row.capex_addressed_year:
                fraction = age_fraction(year - row.capex_addressed_year, cycle)
                if fraction > _NEGLIGIBLE_FRACTION:
                    cumulative -= row.renewal_cost_estimate * fraction
                continue
            current = age_fraction(row.age_at_start + (year - start_year), cycle)
            delta = current - age_fraction(row.age_at_start, cycle)
            if delta > _NEGLIGIBLE_FRACTION:
                cumulative -= row.renewal_cost_estimate * delta
        return cumulative


def all_components(property: Property) -> List[Tuple[ComponentCondition, Optional[Unit]]]:
    """Building components followed by the components of each unit."""
    entries: List[Tuple[ComponentCondition, Optional[Unit]]] = [
        (component, None) for component in property.components
    ]
    for unit in property.units:
        entries.extend((component, unit) for component in unit.components)
    return entries


def component_deterioration(
    property: Property,
    measures: Sequence[CapExMeasure],
    start_year: int,
    end_year: int,
) -> Optional[ComponentDeteriorationSummary]:
    """
    Cost-based deterioration of every recorded component.

    Executed CapEx addresses a component when category and unit match; the first such
    measure at or after the year before the component is due is used (or the
    first one found). Recurring maintenance on a component extends its cycle.
    Returns None when the property has no component data.
    """
    entries = all_components(property)
    if not entries:
        return None

    holding_years = end_year - start_year
    capex_years: Dict[Tuple[CapExCategory, Optional[str]], List[Tuple[int, Decimal]]] = {}
    recurring: Dict[Tuple[CapExCategory, Optional[str]], Tuple[str, RecurringMeasureConfig]] = {}
    for measure in measures:
        key = (measure.category, measure.unit_id)
        if measure.is_recurring and measure.recurring_config is not None:
            recurring[key] = (measure.name, measure.recurring_config)
        year = measure.planned_period.year
        if measure.is_executed and measure.estimated_cost > 0 and start_year <= year <= end_year:
            capex_years.setdefault(key, []).append((year, measure.estimated_cost))

    rows: List[ComponentDeteriorationRow] = []
    total_impact = Decimal(0)
    total_renewal = Decimal(0)
    covered = Decimal(0)
    uncovered = Decimal(0)

    for component, unit in entries:
        unit_id = unit.id if unit is not None else None
        key = (component.category, unit_id)
        last_renovation = component.renovation_year(property.construction_year)
        age_at_start = start_year - last_renovation
        cycle = component.effective_cycle_years()
        due_year = last_renovation + cycle
        cost = renewal_cost(component.category, property, unit)
        total_renewal += cost

        matching: Optional[Tuple[int, Decimal]] = None
        candidates = capex_years.get(key, [])
        if candidates:
            matching = next((c for c in candidates if c[0] >= due_year - 1), candidates[0])

        recurring_entry = recurring.get(key)
        effective_cycle = Decimal(cycle)
        if recurring_entry is not None:
            effective_cycle = cycle * (1 + recurring_entry[1].cycle_extension_percent / 100)
        start_fraction = age_fraction(age_at_start, effective_cycle)

        if matching is not None:
            renewal_year, amount = matching
            age_at_end = end_year - renewal_year
            due_year = renewal_year + _whole_years(effective_cycle)
            fraction = age_fraction(age_at_end, effective_cycle)
            impact = -cost * fraction if fraction > _NEGLIGIBLE_FRACTION else Decimal(0)
            covered += amount
            status = ComponentStatus.RENEWED
        else:
            age_at_end = age_at_start + holding_years
            end_fraction = age_fraction(age_at_end, effective_cycle)
            delta = end_fraction - start_fraction
            impact = -cost * delta if delta > _NEGLIGIBLE_FRACTION else Decimal(0)
            uncovered += abs(impact)
            if start_fraction >= _FULLY_AGED_FRACTION:
                status = ComponentStatus.OVERDUE_AT_PURCHASE
            elif end_fraction >= _FULLY_AGED_FRACTION:
                status = ComponentStatus.OVERDUE
            else:
                status = ComponentStatus.OK

        info = None
        if recurring_entry is not None:
            info = _recurring_info(
                recurring_entry,
                cycle=cycle,
                effective_cycle=effective_cycle,
                cost=cost,
                reference_year=matching[0] if matching else last_renovation,
                age_at_start=age_at_start,
                age_at_end=age_at_end,
                renewed=matching is not None,
                start_year=start_year,
                end_year=end_year,
            )

        total_impact += impact
        rows.append(
            ComponentDeteriorationRow(
                category=component.category,
                unit_id=unit_id,
                age_at_start=age_at_start,
                age_at_end=age_at_end,
                cycle_years=_whole_years(effective_cycle),
                due_year=due_year,
                renewal_cost_estimate=cost,
                capex_addressed_year=matching[0] if matching else None,
                value_impact=impact,
                status_at_end=status,
                recurring_maintenance=info,
            )
        )

    return ComponentDeteriorationSummary(
        components=rows,
        total_value_impact=total_impact,
        total_renewal_cost_if_all_done=total_renewal,
        covered_by_capex=covered,
        uncovered_deterioration=uncovered,
    )


def _whole_years(value: Decimal) -> int:
    return int(round_half_up(Decimal(value), 0))


def recurring_interval_years(cycle: int, config: RecurringMeasureConfig) -> int:
    return _whole_years(cycle * config.interval_percent / 100)


def recurring_cost(renewal: Decimal, config: RecurringMeasureConfig) -> Decimal:
    return round_to_hundreds(renewal * config.cost_percent / 100)


def _recurring_info(
    entry: Tuple[str, RecurringMeasureConfig],
    *,
    cycle: int,
    effective_cycle: Decimal,
    cost: Decimal,
    reference_year: int,
    age_at_start: int,
    age_at_end: int,
    renewed: bool,
    start_year: int,
    end_year: int,
) -> RecurringMaintenanceInfo:
    name, config = entry
    interval = recurring_interval_years(cycle, config)
    per_occurrence = recurring_cost(cost, config)

    occurrences = 0
    if interval > 0:
        year = reference_year + interval
        while year <= end_year:
            if year >= start_year:
                occurrences += 1
            year += interval

    if renewed:
        original = age_fraction(age_at_end, Decimal(cycle))
        extended = age_fraction(age_at_end, effective_cycle)
    else:
        original = age_fraction(age_at_end, Decimal(cycle)) - age_fraction(age_at_start, Decimal(cycle))
        extended = age_fraction(age_at_end, effective_cycle) - age_fraction(age_at_start, effective_cycle)
    improvement = cost * max(Decimal(0), original - extended)

    return RecurringMaintenanceInfo(
        name=name,
        interval_years=interval,
        cost_per_occurrence=per_occurrence,
        occurrences_in_period=occurrences,
        total_cost_in_period=occurrences * per_occurrence,
        effective_cycle_years=_whole_years(effective_cycle),
        value_improvement=round_half_up(improvement, 0),
    )
