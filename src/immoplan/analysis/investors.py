# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Investor-level results: pro-rata cashflows, distributions and returns.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Dict, List, Optional

from ..core.primitives import (
    DistributionFrequency,
    Model,
    Money,
    MoneyTimeSeries,
    YearMonth,
    round_half_up,
)
from ..project import DistributionPolicy, Financing, InvestorConfiguration
from .metrics import MetricsCalculator


class InvestorResult(Model):
    investor_id: str
    investor_name: str
    share_percent: Decimal
    equity_contribution: Money
    pro_rata_cashflow: MoneyTimeSeries
    distributions: MoneyTimeSeries
    total_distributions: Money
    irr_before_tax_percent: Decimal
    npv_before_tax: Money
    equity_multiple: Decimal
    cash_on_cash_percent: Decimal


def is_distribution_month(frequency: DistributionFrequency, period: YearMonth) -> bool:
    if frequency == DistributionFrequency.MONTHLY:
        return True
    if frequency == DistributionFrequency.QUARTERLY:
        return period.month % 3 == 0
    if frequency == DistributionFrequency.ANNUAL:
        return period.month == 12
    # On-demand payouts are decided outside the model
    return False


def distribute(cashflow: MoneyTimeSeries, policy: DistributionPolicy) -> MoneyTimeSeries:
    """
    Payouts under ``policy``.

    Cashflow accumulates every month. In a distribution month the amount
    above the minimum reserve, times the distribution rate, is paid out
    when positive.
    """
    result = MoneyTimeSeries.like(cashflow)
    accumulated = Decimal(0)
    rate = policy.distribution_rate_percent / 100
    for period, value in cashflow:
        accumulated += value.amount
        if not is_distribution_month(policy.frequency, period):
            continue
        available = accumulated - policy.minimum_reserve
        if available > 0:
            payout = round_half_up(available * rate)
            result[period] = Money(payout, cashflow.currency)
            accumulated -= payout
    return result


class InvestorCalculator:
    """
    Splits the project's cashflow before tax among investors by share.

    Individual tax is not modelled per investor, so returns are pre-tax.
    """

    def __init__(self, discount_rate_percent: Decimal):
        self.discount_rate_percent = discount_rate_percent

    def calculate(
        self,
        config: Optional[InvestorConfiguration],
        financing: Financing,
        cashflow_before_tax: MoneyTimeSeries,
        sale_net_proceeds: Optional[Decimal] = None,
    ) -> List[InvestorResult]:
        if config is None or not config.investors:
            return []

        currency = cashflow_before_tax.currency
        contributions: Dict[str, Decimal] = {}
        for contribution in financing.equity_contributions:
            contributions[contribution.investor_id] = (
                contributions.get(contribution.investor_id, Decimal(0)) + contribution.amount
            )
        months = YearMonth.months_between(cashflow_before_tax.start, cashflow_before_tax.end) + 1
        years = Decimal(months) / 12

        results: List[InvestorResult] = []
        for investor in config.investors:
            share = investor.share_percent / 100
            equity = contributions.get(investor.id, Decimal(0))
            pro_rata = cashflow_before_tax.scale(share).round()
            distributions = distribute(pro_rata, config.distribution_policy)
            sale_share = sale_net_proceeds * share if sale_net_proceeds is not None else None

            total = distributions.sum()
            if sale_share is not None:
                total = total + Money(sale_share, currency)

            multiple = round_half_up(total.amount / equity) if equity > 0 else Decimal(0)
            cash_on_cash = (
                round_half_up(total.amount / years / equity * 100) if equity > 0 else Decimal(0)
            )

            results.append(
                InvestorResult(
                    investor_id=investor.id,
                    investor_name=investor.name,
                    share_percent=investor.share_percent,
                    equity_contribution=Money(equity, currency),
                    pro_rata_cashflow=pro_rata.freeze(),
                    distributions=distributions.freeze(),
                    total_distributions=total.round(),
                    irr_before_tax_percent=MetricsCalculator.irr_percent(equity, pro_rata, sale_share),
                    npv_before_tax=MetricsCalculator.npv(
                        equity, pro_rata, self.discount_rate_percent, sale_share
                    ),
                    equity_multiple=multiple,
                    cash_on_cash_percent=cash_on_cash,
                )
            )
        return results
