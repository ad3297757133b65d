# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Yearly views of the monthly results: cashflow rows, the tax bridge and the
CapEx timeline.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Dict, Iterable, List, Optional

import pandas as pd

from ..core.primitives import CapExCategory, Model, MoneyTimeSeries, TaxClassification, round_half_up
from ..project import CapExMeasure
from ..tax import TaxYearSummary

FLOW_COLUMNS = (
    "gross_rent",
    "effective_rent",
    "service_charge_income",
    "operating_costs",
    "net_operating_income",
    "debt_service",
    "interest",
    "principal",
    "capex",
    "cashflow_before_tax",
    "depreciation",
    "maintenance_deduction",
    "taxable_income",
    "tax_payment",
    "cashflow_after_tax",
)
BALANCE_COLUMNS = ("reserve_balance", "outstanding_debt", "property_value")


class YearlyCashflowRow(Model):
    year: int
    gross_rent: Decimal
    vacancy_loss: Decimal
    effective_rent: Decimal
    service_charge_income: Decimal
    operating_costs: Decimal
    net_operating_income: Decimal
    debt_service: Decimal
    interest: Decimal
    principal: Decimal
    capex: Decimal
    reserve_balance_start: Decimal
    reserve_contributions: Decimal
    capex_from_reserve: Decimal
    capex_from_cashflow: Decimal
    reserve_balance_end: Decimal
    cashflow_before_tax: Decimal
    depreciation: Decimal
    maintenance_deduction: Decimal
    taxable_income: Decimal
    tax_payment: Decimal
    cashflow_after_tax: Decimal
    cumulative_cashflow: Decimal
    outstanding_debt: Decimal
    property_value: Decimal
    ltv_percent: Decimal
    dscr: Optional[Decimal] = None
    icr: Optional[Decimal] = None


class TaxBridgeRow(Model):
    """From income to tax for one calendar year."""

    year: int
    gross_income: Decimal
    depreciation: Decimal
    interest_expense: Decimal
    maintenance_expense: Decimal
    other_deductions: Decimal
    taxable_income: Decimal
    tax_payment: Decimal


class CapExTimelineItem(Model):
    id: str
    name: str
    category: CapExCategory
    year: int
    month: int
    amount: Decimal
    tax_classification: TaxClassification
    distribution_years: Optional[int] = None
    is_executed: bool
    is_recurring: bool


def monthly_frame(columns: Dict[str, MoneyTimeSeries]) -> pd.DataFrame:
    """Decimal amounts of each series as columns of a monthly ``PeriodIndex`` frame."""
    first = next(iter(columns.values()))
    index = pd.period_range(start=first.start.to_period(), end=first.end.to_period(), freq="M")
    data = {name: [value.amount for _, value in series] for name, series in columns.items()}
    return pd.DataFrame(data, index=index)


def _ratio(numerator: Decimal, denominator: Decimal) -> Optional[Decimal]:
    if denominator <= 0:
        return None
    return round_half_up(numerator / denominator)


def yearly_cashflow_rows(
    series: Dict[str, MoneyTimeSeries], reserve_initial_balance: Decimal = Decimal(0)
) -> List[YearlyCashflowRow]:
    """
    One row per calendar year of the horizon.

    ``series`` maps every name in ``FLOW_COLUMNS`` and ``BALANCE_COLUMNS`` to
    its monthly series. Flows are summed per year, balances are taken at the
    last month of the year. CapEx is paid from the reserve as far as the
    reserve covers it; the remainder comes from cashflow.
    """
    frame = monthly_frame({name: series[name] for name in FLOW_COLUMNS + BALANCE_COLUMNS})
    by_year = frame.groupby(frame.index.year)
    flows = by_year[list(FLOW_COLUMNS)].sum()
    balances = by_year[list(BALANCE_COLUMNS)].last()

    rows: List[YearlyCashflowRow] = []
    cumulative = Decimal(0)
    reserve_start = reserve_initial_balance
    for year in flows.index:
        flow = flows.loc[year]
        balance = balances.loc[year]
        capex = flow["capex"]
        reserve_end = balance["reserve_balance"]
        cumulative += flow["cashflow_after_tax"]

        from_reserve = Decimal(0)
        if capex > 0:
            from_reserve = max(Decimal(0), min(capex, reserve_end + capex))

        rows.append(
            YearlyCashflowRow(
                year=int(year),
                gross_rent=flow["gross_rent"],
                vacancy_loss=flow["gross_rent"] - flow["effective_rent"],
                effective_rent=flow["effective_rent"],
                service_charge_income=flow["service_charge_income"],
                operating_costs=flow["operating_costs"],
                net_operating_income=flow["net_operating_income"],
                debt_service=flow["debt_service"],
                interest=flow["interest"],
                principal=flow["principal"],
                capex=capex,
                reserve_balance_start=reserve_start,
                reserve_contributions=reserve_end - reserve_start + capex,
                capex_from_reserve=from_reserve,
                capex_from_cashflow=capex - from_reserve,
                reserve_balance_end=reserve_end,
                cashflow_before_tax=flow["cashflow_before_tax"],
                depreciation=flow["depreciation"],
                maintenance_deduction=flow["maintenance_deduction"],
                taxable_income=flow["taxable_income"],
                tax_payment=flow["tax_payment"],
                cashflow_after_tax=flow["cashflow_after_tax"],
                cumulative_cashflow=cumulative,
                outstanding_debt=balance["outstanding_debt"],
                property_value=balance["property_value"],
                ltv_percent=(
                    round_half_up(balance["outstanding_debt"] / balance["property_value"] * 100, 1)
                    if balance["property_value"] > 0
                    else Decimal(0)
                ),
                dscr=_ratio(flow["net_operating_income"], flow["debt_service"]),
                icr=_ratio(flow["net_operating_income"], flow["interest"]),
            )
        )
        reserve_start = reserve_end
    return rows


def tax_bridge_rows(yearly_tax: Dict[int, TaxYearSummary]) -> List[TaxBridgeRow]:
    return [
        TaxBridgeRow(
            year=year,
            gross_income=summary.gross_income.amount,
            depreciation=summary.depreciation.amount,
            interest_expense=summary.interest_expense.amount,
            maintenance_expense=summary.maintenance_expense.amount,
            other_deductions=summary.other_deductions.amount,
            taxable_income=summary.taxable_income.amount,
            tax_payment=summary.tax_payment.amount,
        )
        for year, summary in sorted(yearly_tax.items())
    ]


def capex_timeline(measures: Iterable[CapExMeasure]) -> List[CapExTimelineItem]:
    """All measures, planned and executed, in chronological order."""
    items = [
        CapExTimelineItem(
            id=m.id,
            name=m.name,
            category=m.category,
            year=m.planned_period.year,
            month=m.planned_period.month,
            amount=m.estimated_cost,
            tax_classification=m.tax_classification,
            distribution_years=m.distribution_years,
            is_executed=m.is_executed,
            is_recurring=m.is_recurring,
        )
        for m in measures
    ]
    return sorted(items, key=lambda item: (item.year, item.month))
