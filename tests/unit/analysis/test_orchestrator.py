# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for the calculation pipeline.
"""

from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError

from immoplan.analysis import CalculationOrchestrator, ScenarioNotFoundError, calculate
from immoplan.analysis.orchestrator import PlannedSale
from immoplan.analysis.results import MONTHLY_SERIES
from immoplan.core.primitives import (
    CalculationSettings,
    Money,
    TimeSeriesFrozenError,
    WarningType,
    YearMonth,
)
from immoplan.project import Scenario, ScenarioParameters
from immoplan.tax import TaxCalculator
from tests.conftest import FIXED_TODAY, create_measure, create_project

JAN = YearMonth(2025, 1)
FEB = YearMonth(2025, 2)


@pytest.fixture
def result(project, clock):
    return calculate(project, clock=clock)


class TestResultIdentity:
    def test_metadata(self, result):
        assert result.project_id == "test-standard"
        assert result.scenario_id == "base"
        assert result.calculated_at == FIXED_TODAY
        assert result.engine_version == "1.0.0"

    def test_every_series_covers_horizon(self, result):
        for name, series in result.series().items():
            assert series.start == JAN, name
            assert series.end == YearMonth(2035, 12), name

    def test_series_frozen(self, result):
        for series in result.series().values():
            assert series.is_frozen
        with pytest.raises(TimeSeriesFrozenError):
            result.gross_rent[JAN] = Money(1)

    def test_dataframe(self, result):
        frame = result.to_dataframe()
        assert len(frame) == 132
        assert list(frame.columns) == list(MONTHLY_SERIES)


class TestPipeline:
    """Test that the steps feed into each other."""

    def test_operating_series(self, result):
        assert result.gross_rent[JAN] == Money(2000)
        assert result.effective_rent[JAN] == Money(1940)
        assert result.service_charge_income[JAN] == Money(291)
        assert result.operating_costs[JAN] == Money(180)
        assert result.net_operating_income[JAN] == Money(2051)

    def test_debt_service_starts_after_disbursement(self, result):
        assert result.debt_service[JAN] == Money.zero()
        assert result.outstanding_debt[JAN] == Money(340280)
        assert result.debt_service[FEB] == result.interest_expense[FEB] + result.principal_repayment[FEB]
        assert result.cashflow_before_tax[JAN] == Money(2051)
        assert result.cashflow_before_tax[FEB] == Money(2051) - result.debt_service[FEB]

    def test_after_tax_and_cumulative(self, result):
        for period in (JAN, FEB, YearMonth(2030, 6)):
            expected = result.cashflow_before_tax[period] - result.tax_payment[period]
            assert result.cashflow_after_tax[period] == expected
        assert result.cumulative_cashflow[YearMonth(2035, 12)] == result.total_cashflow_after_tax

    def test_totals(self, result):
        assert result.total_cashflow_before_tax == result.cashflow_before_tax.sum()
        assert result.total_equity_invested == Money(100000)
        assert len(result.loan_schedules) == 1

    def test_yearly_views(self, result):
        assert [row.year for row in result.yearly_cashflows] == list(range(2025, 2036))
        assert result.yearly_cashflows[0].reserve_balance_start == Decimal(10000)
        assert [row.year for row in result.tax_bridge] == list(range(2025, 2036))

    def test_renovation_proposals(self, result):
        assert "renovation-heating" in [m.id for m in result.proposed_measures]

    def test_value_forecast_included(self, result):
        assert result.value_forecast is not None
        assert result.exit_analysis is not None
        assert result.sale_net_proceeds is None


class TestSettings:
    def test_value_forecast_disabled(self, project, clock):
        settings = CalculationSettings(include_value_forecast=False)
        result = calculate(project, settings=settings, clock=clock)
        assert result.value_forecast is None
        assert result.exit_analysis is None

    def test_orchestrator_defaults(self):
        orchestrator = CalculationOrchestrator()
        assert orchestrator.settings == CalculationSettings()


class TestScenarios:
    def test_scenario_applied(self, clock):
        scenario = Scenario(
            id="stress",
            name="Stress test",
            parameters=ScenarioParameters(vacancy_rate_percent=Decimal(10)),
        )
        project = create_project(scenarios=[scenario])
        result = calculate(project, "stress", clock=clock)
        assert result.scenario_id == "stress"
        assert result.effective_rent[JAN] == Money(1800)
        # The base run is unaffected
        assert calculate(project, clock=clock).effective_rent[JAN] == Money(1940)

    def test_unknown_scenario(self, project, clock):
        with pytest.raises(ScenarioNotFoundError):
            calculate(project, "missing", clock=clock)


class TestWarningsAndTax:
    def test_acquisition_related_costs_warning(self, clock):
        measure = create_measure(planned_period=YearMonth(2026, 6), estimated_cost=Decimal(50000))
        result = calculate(create_project(measures=[measure]), clock=clock)
        assert result.tax_summary.acquisition_related_costs_triggered
        assert result.has_warning(WarningType.ACQUISITION_RELATED_COSTS_TRIGGERED)
        assert [m.id for m in result.capex_timeline] == ["measure-1"]

    def test_no_warning_without_measures(self, result):
        assert not result.has_warning(WarningType.ACQUISITION_RELATED_COSTS_TRIGGERED)
        assert result.tax_summary.total_depreciation == result.depreciation.sum()

    def test_planned_sale_inside_horizon(self, clock):
        project = create_project()
        valuation = project.valuation.model_copy(update={"planned_sale_date": YearMonth(2030, 12)})
        result = calculate(project.model_copy(update={"valuation": valuation}), clock=clock)
        assert result.sale_net_proceeds is not None
        # Sold within ten years of purchase
        assert not result.tax_summary.sale_tax_exempt
        assert result.tax_summary.capital_gains_tax is not None

    def test_planned_sale_is_immutable(self, project):
        capital_gains = TaxCalculator().capital_gains_tax(
            project.purchase,
            Money(500000),
            Money(25000),
            Money.zero(),
            date(2030, 12, 1),
            project.tax_profile,
        )
        sale = PlannedSale(
            period=YearMonth(2030, 12), capital_gains=capital_gains, net_proceeds=Money(150000)
        )
        assert sale.capital_gains.gain == Money(34720)
        with pytest.raises(ValidationError):
            sale.net_proceeds = Money(0)
