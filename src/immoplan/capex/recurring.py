# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Recurring CapEx expansion.

A recurring measure is a template ("service the heating every 25% of its
cycle at 10% of the renewal cost"). Before the cashflow pipeline runs, each
template is expanded into dated, executed occurrences inside the horizon.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from ..core.primitives import (
    CapExCategory,
    MeasurePriority,
    Model,
    TaxClassification,
    YearMonth,
)
from ..project import (
    CapExConfiguration,
    CapExMeasure,
    ComponentCondition,
    Property,
    Unit,
    get_component_cycle,
)
from ..valuation.components import recurring_cost, recurring_interval_years, renewal_cost

logger = logging.getLogger(__name__)


class RecurringOccurrence(Model):
    """One dated execution of a recurring measure."""

    source_measure_id: str
    name: str
    category: CapExCategory
    period: YearMonth
    amount: Decimal
    tax_classification: TaxClassification
    unit_id: Optional[str] = None


def _component_for(
    measure: CapExMeasure, property: Property
) -> Tuple[Optional[ComponentCondition], Optional[Unit]]:
    """Recorded component the measure maintains (unit components when ``unit_id`` is set)."""
    unit = property.find_unit(measure.unit_id)
    components = unit.components if unit is not None else property.components
    for component in components:
        if component.category == measure.category:
            return component, unit
    return None, unit


def expand_occurrences(
    measures: List[CapExMeasure],
    property: Property,
    start_year: int,
    end_year: int,
) -> List[RecurringOccurrence]:
    """
    Dated occurrences of every recurring measure within ``[start_year, end_year]``.

    Occurrences fall every ``interval`` years after the component's last
    renewal (the construction year when none is recorded), in the month the
    template is planned for. Templates whose interval or cost rounds to zero
    produce nothing.
    """
    occurrences: List[RecurringOccurrence] = []

    for measure in measures:
        config = measure.recurring_config
        if not measure.is_recurring or config is None:
            continue

        component, unit = _component_for(measure, property)
        if component is not None:
            cycle = component.effective_cycle_years()
            last_renovation = component.renovation_year(property.construction_year)
        else:
            cycle = get_component_cycle(measure.category).midpoint_years
            last_renovation = property.construction_year

        interval = recurring_interval_years(cycle, config)
        if interval <= 0:
            logger.debug(f"Recurring measure {measure.id}: interval rounds to 0 years, skipped")
            continue

        cost = recurring_cost(renewal_cost(measure.category, property, unit), config)
        if cost <= 0:
            logger.debug(f"Recurring measure {measure.id}: cost rounds to 0, skipped")
            continue

        year = last_renovation + interval
        while year <= end_year:
            if year >= start_year:
                occurrences.append(
                    RecurringOccurrence(
                        source_measure_id=measure.id,
                        name=measure.name,
                        category=measure.category,
                        period=YearMonth(year, measure.planned_period.month),
                        amount=cost,
                        tax_classification=measure.tax_classification,
                        unit_id=measure.unit_id,
                    )
                )
            year += interval

    return occurrences


def expand_recurring_measures(
    capex: Optional[CapExConfiguration],
    property: Property,
    start_year: int,
    end_year: int,
) -> Optional[CapExConfiguration]:
    """
    Configuration holding the original measures followed by the expanded occurrences.

    Occurrence ids are ``"{source_id}_recurring_{i}"`` with ``i`` counting
    all occurrences from 0; names carry a per-template running number.
    Returns ``capex`` unchanged when there is nothing to expand.
    """
    if capex is None:
        return None

    occurrences = expand_occurrences(capex.measures, property, start_year, end_year)
    if not occurrences:
        return capex

    counters: Dict[str, int] = {}
    expanded: List[CapExMeasure] = []
    for i, occurrence in enumerate(occurrences):
        n = counters.get(occurrence.source_measure_id, 0) + 1
        counters[occurrence.source_measure_id] = n
        expanded.append(
            CapExMeasure(
                id=f"{occurrence.source_measure_id}_recurring_{i}",
                name=f"{occurrence.name} (#{n})",
                category=occurrence.category,
                planned_period=occurrence.period,
                estimated_cost=occurrence.amount,
                tax_classification=occurrence.tax_classification,
                is_executed=True,
                is_necessary=False,
                priority=MeasurePriority.MEDIUM,
                unit_id=occurrence.unit_id,
            )
        )

    logger.debug(f"Expanded {len(expanded)} recurring occurrences from {len(counters)} measures")
    return capex.model_copy(update={"measures": list(capex.measures) + expanded})
