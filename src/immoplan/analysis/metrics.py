# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Investment metrics.

Return metrics (IRR, NPV, ROI, cash-on-cash, equity multiple), lending
ratios (DSCR, ICR, LTV) and two heuristic 0-100 risk scores computed from
the monthly series of a calculation.
"""

from __future__ import annotations

import logging
import math
from decimal import Decimal
from typing import List, Optional

import numpy as np
from pydantic import Field
from pyxirr import InvalidPaymentsError, irr, npv

from ..core.primitives import (
    Condition,
    Model,
    Money,
    MoneyTimeSeries,
    YearMonth,
    round_half_up,
    to_decimal,
)
from ..project import CapExMeasure, Property

logger = logging.getLogger(__name__)

BANK_DSCR_STANDARD = 1.2


class InvestmentMetrics(Model):
    """
    Headline metrics of a calculation.

    Percentages are per annum where they describe a rate. Coverage ratios
    are ``None`` when the project carries no debt service.
    """

    irr_before_tax_percent: Decimal
    irr_after_tax_percent: Decimal
    npv_before_tax: Money
    npv_after_tax: Money
    roi_percent: Decimal
    cash_on_cash_percent: Decimal
    equity_multiple: Decimal
    dscr_min: Optional[Decimal] = None
    dscr_avg: Optional[Decimal] = None
    icr_min: Optional[Decimal] = None
    ltv_initial_percent: Decimal
    ltv_final_percent: Decimal
    break_even_rent: Money
    maintenance_risk_score: int = Field(..., ge=0, le=100)
    liquidity_risk_score: int = Field(..., ge=0, le=100)
    months_to_liquidity_shortfall: Optional[int] = None


def _flows(initial: Decimal, cashflows: MoneyTimeSeries, terminal: Optional[Decimal]) -> List[float]:
    """Initial outflow followed by the monthly flows; ``terminal`` is added to the last month."""
    flows = [-float(initial)] + [float(v.amount) for _, v in cashflows]
    if terminal is not None:
        flows[-1] += float(terminal)
    return flows


class MetricsCalculator:
    """
    Static metric functions plus ``calculate`` which assembles ``InvestmentMetrics``.

    Numerically degenerate inputs (no sign change for IRR, zero equity,
    no debt service) degrade to neutral values instead of raising.
    """

    @staticmethod
    def irr_percent(
        initial_investment: Decimal,
        cashflows: MoneyTimeSeries,
        terminal_value: Optional[Decimal] = None,
    ) -> Decimal:
        """Monthly IRR annualized (x12) in percent; 0 when it cannot be computed."""
        flows = _flows(initial_investment, cashflows, terminal_value)
        try:
            rate = irr(flows)
        except InvalidPaymentsError as e:
            logger.debug(f"IRR not computable: {e}")
            return Decimal(0)
        if rate is None or not math.isfinite(rate):
            logger.debug("IRR did not converge; reported as 0")
            return Decimal(0)
        return round_half_up(to_decimal(rate) * 12 * 100)

    @staticmethod
    def npv(
        initial_investment: Decimal,
        cashflows: MoneyTimeSeries,
        annual_discount_rate_percent: Decimal,
        terminal_value: Optional[Decimal] = None,
    ) -> Money:
        """Net present value at a monthly rate of ``annual / 12``; the initial outflow is undiscounted."""
        rate = float(annual_discount_rate_percent) / 100 / 12
        value = npv(rate, _flows(initial_investment, cashflows, terminal_value))
        if value is None or not math.isfinite(value):
            logger.debug("NPV not finite; reported as 0")
            return Money.zero(cashflows.currency)
        return Money(to_decimal(value), cashflows.currency).round()

    @staticmethod
    def coverage_ratios(numerator: MoneyTimeSeries, denominator: MoneyTimeSeries) -> List[Decimal]:
        """Monthly ``numerator / denominator`` rounded to 2 places, for months with a positive denominator."""
        return [
            round_half_up(n.amount / d.amount)
            for (_, n), (_, d) in zip(numerator, denominator)
            if d.amount > 0
        ]

    @staticmethod
    def ltv_percent(debt: Money, value: Money) -> Decimal:
        if value.amount <= 0:
            return Decimal(0)
        return round_half_up(debt.amount / value.amount * 100, 1)

    @staticmethod
    def cash_on_cash_percent(annual_cashflow: Money, equity: Decimal) -> Decimal:
        if equity <= 0:
            return Decimal(0)
        return round_half_up(annual_cashflow.amount / equity * 100)

    @staticmethod
    def equity_multiple(total_cashflow: Money, terminal_value: Decimal, equity: Decimal) -> Decimal:
        if equity <= 0:
            return Decimal(0)
        return round_half_up((total_cashflow.amount + terminal_value) / equity)

    @staticmethod
    def maintenance_risk_score(
        property: Property,
        measures: List[CapExMeasure],
        reserve_balance: MoneyTimeSeries,
        reserve_threshold: Decimal,
        at: YearMonth,
    ) -> int:
        """
        0-100 score from overdue building components, a weak reserve and
        necessary measures that were planned but not executed by ``at``.
        """
        score = 0
        for component in property.components:
            age = at.year - component.renovation_year(property.construction_year)
            overdue = age - component.effective_cycle_years()
            if overdue <= 0:
                continue
            if component.condition == Condition.POOR:
                score += min(30, overdue * 5)
            elif component.condition == Condition.FAIR:
                score += min(20, overdue * 3)
            else:
                score += min(10, overdue * 2)

        if reserve_balance.has_value(at):
            balance = reserve_balance[at].amount
            if balance < 0:
                score += 20
            elif balance < reserve_threshold:
                score += 10

        deferred = sum(
            1 for m in measures if m.is_necessary and not m.is_executed and m.planned_period <= at
        )
        score += deferred * 10
        return min(100, score)

    @staticmethod
    def liquidity_risk_score(cashflow_after_tax: MoneyTimeSeries, dscr: List[Decimal]) -> int:
        """0-100 score from negative months and months below bank-standard coverage."""
        cashflows = np.array([float(v.amount) for _, v in cashflow_after_tax])
        ratios = np.array([float(r) for r in dscr])
        negative = int(np.count_nonzero(cashflows < 0))
        below_one = int(np.count_nonzero(ratios < 1.0))
        marginal = int(np.count_nonzero((ratios >= 1.0) & (ratios < BANK_DSCR_STANDARD)))
        score = min(40, negative * 2) + min(40, below_one * 3) + min(20, marginal)
        return min(100, score)

    @staticmethod
    def months_to_shortfall(cumulative_cashflow: MoneyTimeSeries) -> Optional[int]:
        """1-based month index of the first negative cumulative cashflow."""
        for month, (_, value) in enumerate(cumulative_cashflow, start=1):
            if value.amount < 0:
                return month
        return None

    @classmethod
    def calculate(
        cls,
        *,
        equity: Decimal,
        noi: MoneyTimeSeries,
        cashflow_before_tax: MoneyTimeSeries,
        cashflow_after_tax: MoneyTimeSeries,
        debt_service: MoneyTimeSeries,
        interest: MoneyTimeSeries,
        outstanding_debt: MoneyTimeSeries,
        operating_costs: MoneyTimeSeries,
        property_value: MoneyTimeSeries,
        reserve_balance: MoneyTimeSeries,
        property: Property,
        measures: List[CapExMeasure],
        discount_rate_percent: Decimal,
        reserve_threshold: Decimal,
        sale_net_proceeds: Optional[Decimal] = None,
    ) -> InvestmentMetrics:
        start, end = noi.start, noi.end
        currency = noi.currency
        months = YearMonth.months_between(start, end) + 1

        dscr = cls.coverage_ratios(noi, debt_service)
        icr = cls.coverage_ratios(noi, interest)
        total_cashflow = cashflow_after_tax.sum()
        terminal = sale_net_proceeds or Decimal(0)

        roi = Decimal(0)
        if equity > 0:
            roi = round_half_up(total_cashflow.amount / equity * 100 / months * 12)

        initial = start.add_months(1) if start < end else start
        first_year_costs = operating_costs.sum_for_year(start.year) + debt_service.sum_for_year(start.year)
        first_year_months = sum(1 for p, _ in noi if p.year == start.year)

        return InvestmentMetrics(
            irr_before_tax_percent=cls.irr_percent(equity, cashflow_before_tax, sale_net_proceeds),
            irr_after_tax_percent=cls.irr_percent(equity, cashflow_after_tax, sale_net_proceeds),
            npv_before_tax=cls.npv(equity, cashflow_before_tax, discount_rate_percent, sale_net_proceeds),
            npv_after_tax=cls.npv(equity, cashflow_after_tax, discount_rate_percent, sale_net_proceeds),
            roi_percent=roi,
            cash_on_cash_percent=cls.cash_on_cash_percent(
                cashflow_after_tax.sum_for_year(start.year + 1), equity
            ),
            equity_multiple=cls.equity_multiple(total_cashflow, terminal, equity),
            dscr_min=min(dscr) if dscr else None,
            dscr_avg=round_half_up(sum(dscr, Decimal(0)) / len(dscr)) if dscr else None,
            icr_min=min(icr) if icr else None,
            ltv_initial_percent=cls.ltv_percent(outstanding_debt[initial], property_value[initial]),
            ltv_final_percent=cls.ltv_percent(outstanding_debt[end], property_value[end]),
            break_even_rent=(first_year_costs / first_year_months).round(),
            maintenance_risk_score=cls.maintenance_risk_score(
                property, measures, reserve_balance, reserve_threshold, end
            ),
            liquidity_risk_score=cls.liquidity_risk_score(cashflow_after_tax, dscr),
            months_to_liquidity_shortfall=cls.months_to_shortfall(cashflow_after_tax.cumulative()),
        )
