# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Property Value Forecast - Multi-Scenario Model

Projects the property value year by year under three market scenarios
(conservative 0%, base 1.5%, optimistic 3% appreciation) and combines:

- pure market appreciation of the purchase price
- a condition factor that degrades with component age and recovers with CapEx
- cost-based component deterioration (see :mod:`.components`)
- 70% of capitalized CapEx as value uplift
- mean reversion towards a regional fair value (7-year half-life)
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Dict, List, Literal, NamedTuple, Optional, Sequence, Tuple

from pydantic import Field

from ..core.primitives import (
    CapExCategory,
    ComponentStatus,
    MarketAssessment,
    Model,
    round_half_up,
)
from ..project import CapExMeasure, Project
from .components import (
    CapExKind,
    ComponentDeteriorationSummary,
    ComponentState,
    all_components,
    classify_capex_kind,
    component_deterioration,
    condition_factor,
    initial_component_factor,
    step_component,
)
from .drivers import (
    ComponentDeteriorationDriver,
    DegradationDriver,
    ForecastDriver,
    InitialConditionDriver,
    InvestmentsDriver,
    MarketAppreciationDriver,
    MeanReversionDriver,
    OverdueComponentsDriver,
    SummaryDriver,
)

logger = logging.getLogger(__name__)

IMPROVEMENT_VALUE_FACTOR = Decimal("0.70")
BASE_AGING_RATE = Decimal("0.005")
AGING_ACCELERATION = Decimal("0.005")
REFERENCE_LIFECYCLE_YEARS = 60
MEAN_REVERSION_HALF_LIFE_YEARS = 7
SIMPLE_IMPROVEMENT_BOOST = Decimal("0.08")
SIMPLE_MAINTENANCE_BOOST = Decimal("0.05")

ScenarioLabel = Literal["conservative", "base", "optimistic"]

SCENARIO_RATES: Tuple[Tuple[ScenarioLabel, Decimal], ...] = (
    ("conservative", Decimal("0.0")),
    ("base", Decimal("1.5")),
    ("optimistic", Decimal("3.0")),
)


class PropertyValueRow(Model):
    year: int
    market_value: Decimal
    condition_factor: Decimal
    condition_delta: Decimal
    improvement_uplift: Decimal
    mean_reversion_adjustment: Decimal
    component_deterioration_cumulative: Decimal
    estimated_value: Decimal


class PropertyValueScenario(Model):
    label: ScenarioLabel
    annual_appreciation_percent: Decimal
    yearly_values: List[PropertyValueRow] = Field(default_factory=list)
    final_value: Decimal


class MarketComparison(Model):
    """Purchase price against the regional fair value (price per m² x living area)."""

    regional_price_per_sqm: Decimal
    living_area: Decimal
    fair_market_value: Decimal
    purchase_price_to_market_ratio: Decimal
    assessment: MarketAssessment


class PropertyValueForecastResult(Model):
    """
    Value forecast of a project.

    Attributes:
        purchase_price: Starting point of every scenario
        improvement_value_factor: Share of capitalized CapEx credited as value
        initial_condition_factor: Average condition factor at the start
        market_comparison: Present when a regional price per m² is known
        component_deterioration: Present when components are recorded
        drivers: Explanatory facts, not used in any calculation
        scenarios: Conservative, base and optimistic scenario
    """

    purchase_price: Decimal
    improvement_value_factor: Decimal = IMPROVEMENT_VALUE_FACTOR
    initial_condition_factor: Decimal
    market_comparison: Optional[MarketComparison] = None
    component_deterioration: Optional[ComponentDeteriorationSummary] = None
    drivers: List[ForecastDriver] = Field(default_factory=list)
    scenarios: List[PropertyValueScenario] = Field(default_factory=list)

    def scenario(self, label: str) -> PropertyValueScenario:
        for scenario in self.scenarios:
            if scenario.label == label:
                return scenario
        raise KeyError(label)


class _YearCapEx(NamedTuple):
    improvement: Decimal
    maintenance: Decimal
    categories: Dict[CapExCategory, CapExKind]


def market_comparison(project: Project) -> Optional[MarketComparison]:
    price_per_sqm = project.property.regional_price_per_sqm
    if not price_per_sqm:
        return None
    living_area = project.property.living_area
    fair_value = price_per_sqm * living_area
    purchase_price = project.purchase.purchase_price
    ratio = purchase_price / fair_value if fair_value > 0 else Decimal(1)
    if ratio < Decimal("0.95"):
        assessment = MarketAssessment.BELOW
    elif ratio > Decimal("1.05"):
        assessment = MarketAssessment.ABOVE
    else:
        assessment = MarketAssessment.AT
    return MarketComparison(
        regional_price_per_sqm=price_per_sqm,
        living_area=living_area,
        fair_market_value=fair_value,
        purchase_price_to_market_ratio=ratio,
        assessment=assessment,
    )


def mean_reversion_adjustment(gap: Decimal, rate_percent: Decimal, years: int) -> Decimal:
    """Part of the (appreciating) gap to fair value closed after ``years``."""
    gap_at_year = gap * (1 + rate_percent / 100) ** years
    closed = 1 - Decimal("0.5") ** (Decimal(years) / MEAN_REVERSION_HALF_LIFE_YEARS)
    return gap_at_year * closed


class PropertyValueForecastCalculator:
    """
    Three-scenario property value forecast.

    Only executed measures count as CapEx; recurring measures also extend
    the cycle of the component they maintain. Results are deterministic
    for a given project and measure list.

    Example:
        >>> result = PropertyValueForecastCalculator().calculate(project)
        >>> [s.label for s in result.scenarios]
        ['conservative', 'base', 'optimistic']
    """

    def calculate(
        self,
        project: Project,
        measures: Optional[Sequence[CapExMeasure]] = None,
        start_year: Optional[int] = None,
        end_year: Optional[int] = None,
    ) -> PropertyValueForecastResult:
        measures = list(project.capex_measures() if measures is None else measures)
        start_year = start_year if start_year is not None else project.start_period.year
        end_year = end_year if end_year is not None else project.end_period.year
        prop = project.property
        purchase_price = project.purchase.purchase_price

        comparison = market_comparison(project)
        fair_value = comparison.fair_market_value if comparison else None

        components = all_components(prop)
        if components:
            factors = [
                initial_component_factor(c, start_year - c.renovation_year(prop.construction_year))
                for c, _unit in components
            ]
            initial_factor = sum(factors, Decimal(0)) / len(factors)
        else:
            initial_factor = condition_factor(prop.overall_condition)

        overdue = []
        for component, _unit in components:
            age = start_year - component.renovation_year(prop.construction_year)
            years_overdue = age - component.effective_cycle_years()
            if years_overdue > 0:
                overdue.append((component.category.value, years_overdue))

        capex_by_year, capex_count, total_improvement, total_maintenance = self._index_capex(
            measures, start_year, end_year
        )

        deterioration = component_deterioration(prop, measures, start_year, end_year)
        use_deterioration = deterioration is not None and bool(deterioration.components)

        scenarios: List[PropertyValueScenario] = []
        base_end_factor = initial_factor
        base_boost = Decimal(0)
        for label, rate in SCENARIO_RATES:
            rows, end_factor, boost = self._scenario_rows(
                project,
                rate,
                start_year,
                end_year,
                initial_factor,
                capex_by_year,
                deterioration if use_deterioration else None,
                fair_value,
            )
            if label == "base":
                base_end_factor, base_boost = end_factor, boost
            scenarios.append(
                PropertyValueScenario(
                    label=label,
                    annual_appreciation_percent=rate,
                    yearly_values=rows,
                    final_value=rows[-1].estimated_value if rows else purchase_price,
                )
            )

        drivers = self._build_drivers(
            project,
            scenarios,
            deterioration,
            initial_factor,
            base_end_factor,
            base_boost,
            overdue,
            capex_count,
            total_improvement,
            total_maintenance,
            end_year - start_year,
            comparison,
        )

        logger.debug(
            f"Value forecast {start_year}-{end_year}: "
            + ", ".join(f"{s.label}={s.final_value}" for s in scenarios)
        )

        return PropertyValueForecastResult(
            purchase_price=purchase_price,
            initial_condition_factor=initial_factor,
            market_comparison=comparison,
            component_deterioration=deterioration,
            drivers=drivers,
            scenarios=scenarios,
        )

    @staticmethod
    def _index_capex(
        measures: Sequence[CapExMeasure], start_year: int, end_year: int
    ) -> Tuple[Dict[int, _YearCapEx], int, Decimal, Decimal]:
        by_year: Dict[int, _YearCapEx] = {}
        count = 0
        total_improvement = Decimal(0)
        total_maintenance = Decimal(0)
        for measure in measures:
            year = measure.planned_period.year
            if not measure.is_executed or measure.estimated_cost == 0:
                continue
            if not start_year <= year <= end_year:
                continue
            count += 1
            entry = by_year.get(year) or _YearCapEx(Decimal(0), Decimal(0), {})
            kind = classify_capex_kind(measure)
            if kind == "improvement":
                entry = entry._replace(improvement=entry.improvement + measure.estimated_cost)
                total_improvement += measure.estimated_cost
                entry.categories[measure.category] = "improvement"
            elif kind == "maintenance":
                entry = entry._replace(maintenance=entry.maintenance + measure.estimated_cost)
                total_maintenance += measure.estimated_cost
                entry.categories.setdefault(measure.category, "maintenance")
            by_year[year] = entry
        return by_year, count, total_improvement, total_maintenance

    @staticmethod
    def _scenario_rows(
        project: Project,
        rate: Decimal,
        start_year: int,
        end_year: int,
        initial_factor: Decimal,
        capex_by_year: Dict[int, _YearCapEx],
        deterioration: Optional[ComponentDeteriorationSummary],
        fair_value: Optional[Decimal],
    ) -> Tuple[List[PropertyValueRow], Decimal, Decimal]:
        prop = project.property
        purchase_price = project.purchase.purchase_price

        states = [
            ComponentState(
                category=c.category,
                age=start_year - c.renovation_year(prop.construction_year),
                cycle=c.effective_cycle_years(),
                factor=initial_component_factor(
                    c, start_year - c.renovation_year(prop.construction_year)
                ),
            )
            for c, _unit in all_components(prop)
        ]
        simple_factor = initial_factor
        building_age = start_year - prop.construction_year
        factor = initial_factor
        total_boost = Decimal(0)
        cumulative_improvement = Decimal(0)
        empty = _YearCapEx(Decimal(0), Decimal(0), {})

        rows: List[PropertyValueRow] = []
        for year in range(start_year, end_year + 1):
            elapsed = year - start_year
            capex = capex_by_year.get(year, empty)
            previous_factor = factor

            if capex.improvement > 0:
                cumulative_improvement += capex.improvement * IMPROVEMENT_VALUE_FACTOR

            if states:
                stepped = [step_component(s, capex.categories.get(s.category)) for s in states]
                states = [step.state for step in stepped]
                total_boost += sum((step.boost for step in stepped), Decimal(0))
                factor = sum((s.factor for s in states), Decimal(0)) / len(states)
            else:
                building_age += 1
                simple_factor = max(
                    Decimal("0.50"),
                    simple_factor
                    - (BASE_AGING_RATE + AGING_ACCELERATION * Decimal(building_age) / REFERENCE_LIFECYCLE_YEARS),
                )
                if capex.maintenance > 0:
                    total_boost += min(1 - simple_factor, SIMPLE_MAINTENANCE_BOOST)
                    simple_factor = min(Decimal(1), simple_factor + SIMPLE_MAINTENANCE_BOOST)
                if capex.improvement > 0:
                    total_boost += min(1 - simple_factor, SIMPLE_IMPROVEMENT_BOOST)
                    simple_factor = min(Decimal(1), simple_factor + SIMPLE_IMPROVEMENT_BOOST)
                factor = simple_factor

            market_value = purchase_price * (1 + rate / 100) ** elapsed

            if deterioration is not None:
                deteriorated = deterioration.cumulative_for_year(year, start_year)
                estimated = market_value + deteriorated + cumulative_improvement
            else:
                deteriorated = Decimal(0)
                ratio = factor / initial_factor if initial_factor > 0 else Decimal(1)
                estimated = market_value * ratio + cumulative_improvement

            reversion = Decimal(0)
            if fair_value:
                reversion = mean_reversion_adjustment(fair_value - purchase_price, rate, elapsed)
                estimated += reversion

            rows.append(
                PropertyValueRow(
                    year=year,
                    market_value=round_half_up(market_value),
                    condition_factor=factor,
                    condition_delta=factor - previous_factor,
                    improvement_uplift=round_half_up(cumulative_improvement),
                    mean_reversion_adjustment=round_half_up(reversion),
                    component_deterioration_cumulative=round_half_up(deteriorated),
                    estimated_value=round_half_up(estimated),
                )
            )

        return rows, factor, total_boost

    @staticmethod
    def _build_drivers(
        project: Project,
        scenarios: List[PropertyValueScenario],
        deterioration: Optional[ComponentDeteriorationSummary],
        initial_factor: Decimal,
        base_end_factor: Decimal,
        base_boost: Decimal,
        overdue: List[Tuple[str, int]],
        capex_count: int,
        total_improvement: Decimal,
        total_maintenance: Decimal,
        years: int,
        comparison: Optional[MarketComparison],
    ) -> List[ForecastDriver]:
        def whole(value: Decimal) -> Decimal:
            return round_half_up(value, 0)

        def percent(value: Decimal) -> int:
            return int(whole(value * 100))

        prop = project.property
        purchase_price = project.purchase.purchase_price
        base = next(s for s in scenarios if s.label == "base")
        component_count = len(all_components(prop))

        drivers: List[ForecastDriver] = [
            InitialConditionDriver(
                construction_year=prop.construction_year,
                condition=prop.overall_condition,
                factor_percent=percent(initial_factor),
                component_count=component_count,
            )
        ]

        if overdue:
            avg = Decimal(sum(y for _, y in overdue)) / len(overdue)
            drivers.append(
                OverdueComponentsDriver(
                    count=len(overdue),
                    names=[name for name, _ in overdue],
                    avg_overdue_years=int(whole(avg)),
                )
            )

        decline = percent(initial_factor - base_end_factor)
        if decline > 0:
            drivers.append(
                DegradationDriver(
                    start_factor_percent=percent(initial_factor),
                    end_factor_percent=percent(base_end_factor),
                    total_decline=decline,
                    years=years,
                )
            )

        if deterioration is not None and deterioration.uncovered_deterioration > 0:
            drivers.append(
                ComponentDeteriorationDriver(
                    uncovered_count=sum(
                        1 for row in deterioration.components if row.status_at_end == ComponentStatus.OVERDUE
                    ),
                    uncovered_amount=whole(deterioration.uncovered_deterioration),
                    total_components=len(deterioration.components),
                    covered_by_capex=whole(deterioration.covered_by_capex),
                )
            )

        if capex_count > 0:
            drivers.append(
                InvestmentsDriver(
                    measure_count=capex_count,
                    total_amount=whole(total_improvement + total_maintenance),
                    value_uplift=whole(total_improvement * IMPROVEMENT_VALUE_FACTOR),
                    condition_boost_percent=int(whole(base_boost * 100 / max(component_count, 1))),
                )
            )

        base_rate = dict(SCENARIO_RATES)["base"]
        multiplier = (1 + base_rate / 100) ** years
        drivers.append(
            MarketAppreciationDriver(
                rate_percent=base_rate,
                years=years,
                appreciation_percent=round_half_up((multiplier - 1) * 100, 1),
                appreciation_amount=whole(purchase_price * (multiplier - 1)),
            )
        )

        if comparison is not None:
            last_adjustment = base.yearly_values[-1].mean_reversion_adjustment if base.yearly_values else Decimal(0)
            drivers.append(
                MeanReversionDriver(
                    assessment=comparison.assessment,
                    gap_percent=percent(abs(1 - comparison.purchase_price_to_market_ratio)),
                    adjustment_amount=whole(abs(last_adjustment)),
                    direction="catch-up" if comparison.assessment == MarketAssessment.BELOW else "dampening",
                )
            )

        change = base.final_value - purchase_price
        change_percent = round_half_up(change / purchase_price * 100, 1) if purchase_price > 0 else Decimal(0)
        drivers.append(
            SummaryDriver(
                years=years,
                purchase_price=whole(purchase_price),
                final_value=whole(base.final_value),
                change_percent=abs(change_percent),
                change_absolute=whole(abs(change)),
                change_direction="+" if change >= 0 else "-",
            )
        )
        return drivers
