# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for the yearly views of monthly results.
"""

from decimal import Decimal
from typing import Dict

import pytest

from immoplan.analysis import capex_timeline, tax_bridge_rows, yearly_cashflow_rows
from immoplan.analysis.aggregation import BALANCE_COLUMNS, FLOW_COLUMNS, monthly_frame
from immoplan.core.primitives import Money, MoneyTimeSeries, YearMonth
from immoplan.tax import TaxCalculator
from tests.conftest import create_measure

START = YearMonth(2025, 1)
END = YearMonth(2026, 12)

MONTHLY = {
    "gross_rent": 1000,
    "effective_rent": 950,
    "service_charge_income": 150,
    "operating_costs": 300,
    "net_operating_income": 800,
    "debt_service": 400,
    "interest": 200,
    "principal": 200,
    "cashflow_before_tax": 100,
    "depreciation": 500,
    "maintenance_deduction": 0,
    "taxable_income": 100,
    "tax_payment": 0,
    "cashflow_after_tax": 100,
}


def constant(value) -> MoneyTimeSeries:
    result = MoneyTimeSeries(START, END)
    for period in YearMonth.range(START, END):
        result[period] = Money(value)
    return result


@pytest.fixture
def series() -> Dict[str, MoneyTimeSeries]:
    result = {name: constant(value) for name, value in MONTHLY.items()}

    capex = constant(0)
    capex[YearMonth(2025, 6)] = Money(3000)
    capex[YearMonth(2026, 3)] = Money(3000)
    result["capex"] = capex

    reserve = constant(9000)
    reserve[YearMonth(2025, 12)] = Money(8000)
    reserve[YearMonth(2026, 12)] = Money(-1000)
    result["reserve_balance"] = reserve

    debt = constant(300000)
    debt[YearMonth(2026, 12)] = Money(290000)
    result["outstanding_debt"] = debt
    result["property_value"] = constant(400000)
    return result


class TestYearlyCashflow:
    def test_flows_summed_per_year(self, series):
        rows = yearly_cashflow_rows(series, Decimal(10000))
        assert [row.year for row in rows] == [2025, 2026]
        first = rows[0]
        assert first.gross_rent == Decimal(12000)
        assert first.vacancy_loss == Decimal(600)
        assert first.net_operating_income == Decimal(9600)
        assert first.capex == Decimal(3000)

    def test_balances_at_year_end(self, series):
        rows = yearly_cashflow_rows(series, Decimal(10000))
        assert rows[0].outstanding_debt == Decimal(300000)
        assert rows[1].outstanding_debt == Decimal(290000)
        assert rows[0].ltv_percent == Decimal("75.0")
        assert rows[1].ltv_percent == Decimal("72.5")

    def test_reserve_roll_forward(self, series):
        first, second = yearly_cashflow_rows(series, Decimal(10000))
        assert first.reserve_balance_start == Decimal(10000)
        assert first.reserve_balance_end == Decimal(8000)
        assert first.reserve_contributions == Decimal(1000)
        assert first.capex_from_reserve == Decimal(3000)
        assert first.capex_from_cashflow == Decimal(0)

        # Reserve ends negative: only 2000 of the 3000 was covered
        assert second.reserve_balance_start == Decimal(8000)
        assert second.capex_from_reserve == Decimal(2000)
        assert second.capex_from_cashflow == Decimal(1000)

    def test_cumulative_and_ratios(self, series):
        first, second = yearly_cashflow_rows(series)
        assert first.cumulative_cashflow == Decimal(1200)
        assert second.cumulative_cashflow == Decimal(2400)
        assert first.dscr == Decimal("2.00")
        assert first.icr == Decimal("4.00")
        assert first.reserve_balance_start == Decimal(0)

    def test_no_debt_service_has_no_ratio(self, series):
        series["debt_service"] = constant(0)
        series["interest"] = constant(0)
        row = yearly_cashflow_rows(series)[0]
        assert row.dscr is None
        assert row.icr is None


def test_monthly_frame(series):
    frame = monthly_frame({name: series[name] for name in FLOW_COLUMNS + BALANCE_COLUMNS})
    assert len(frame) == 24
    assert frame.index[0].year == 2025
    assert frame["capex"].iloc[5] == Decimal(3000)


def test_tax_bridge_sorted_by_year(project):
    calc = TaxCalculator()
    zero = MoneyTimeSeries(project.start_period, project.end_period)
    yearly = calc.tax_time_series(project, zero, zero, zero, zero).yearly
    shuffled = dict(sorted(yearly.items(), reverse=True))

    rows = tax_bridge_rows(shuffled)
    assert [row.year for row in rows] == list(range(2025, 2036))
    assert rows[0].depreciation == Decimal("7205.64")
    assert rows[0].tax_payment == Decimal(0)


def test_capex_timeline_chronological():
    measures = [
        create_measure(id="late", planned_period=YearMonth(2030, 3)),
        create_measure(id="early", planned_period=YearMonth(2026, 9), is_executed=False),
        create_measure(id="same-year", planned_period=YearMonth(2030, 1)),
    ]
    items = capex_timeline(measures)
    assert [item.id for item in items] == ["early", "same-year", "late"]
    assert not items[0].is_executed
    assert items[2].amount == Decimal(25000)
