# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Exit Analysis - Sale at the End of the Horizon

For each value forecast scenario, sells the property at the end of the
horizon: sale costs, tax on a sale within the speculation period, debt
repayment and the resulting total and annualized return on equity.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional

from dateutil.relativedelta import relativedelta
from pydantic import Field

from ..core.primitives import Model, Money, MoneyTimeSeries, OwnershipType, round_half_up
from ..project import Project
from ..tax import TaxCalculator
from .forecast import PropertyValueForecastResult, ScenarioLabel

logger = logging.getLogger(__name__)

DEFAULT_SALE_COSTS_PERCENT = Decimal("5")


class ExitScenario(Model):
    label: ScenarioLabel
    annual_appreciation_percent: Decimal
    property_value_at_exit: Money
    sale_costs: Money
    capital_gain: Money
    capital_gains_tax: Money
    net_sale_proceeds: Money
    total_return: Money
    total_return_percent: Decimal
    annualized_return_percent: Decimal


class ExitAnalysisResult(Model):
    """
    Sale at the end of the horizon under each forecast scenario.

    Totals summarize the holding period; ``is_within_speculation_period``
    is decided once for all scenarios.
    """

    exit_date: date
    holding_period_years: int
    is_within_speculation_period: bool
    purchase_price: Money
    total_purchase_costs: Money
    equity_invested: Money
    tax_basis_at_sale: Money
    sale_costs_percent: Decimal
    total_cashflow_after_tax: Money
    outstanding_debt_at_exit: Money
    total_gross_income: Money
    total_operating_costs: Money
    total_debt_service: Money
    total_capex: Money
    total_tax_paid: Money
    total_maintenance_reserve: Money
    scenarios: List[ExitScenario] = Field(default_factory=list)

    def scenario(self, label: str) -> ExitScenario:
        for scenario in self.scenarios:
            if scenario.label == label:
                return scenario
        raise KeyError(label)


def annualized_return_percent(total_return: Decimal, equity: Decimal, years: int) -> Decimal:
    """
    Compound annual growth of equity over ``years``.

    A non-positive return multiple has no real root and yields 0.
    """
    if equity <= 0 or years <= 0:
        return Decimal(0)
    multiple = (equity + total_return) / equity
    if multiple <= 0:
        logger.debug(f"Return multiple {multiple} is not positive; annualized return set to 0")
        return Decimal(0)
    return round_half_up((multiple ** (Decimal(1) / years) - 1) * 100, 4)


class ExitAnalysisCalculator:
    """
    Example:
        >>> result = ExitAnalysisCalculator().calculate(
        ...     project, forecast, cashflow_after_tax=cf, gross_rent=rent, ...
        ... )
        >>> result.is_within_speculation_period
        False
    """

    def __init__(self, tax_calculator: Optional[TaxCalculator] = None):
        self.tax_calculator = tax_calculator

    def calculate(
        self,
        project: Project,
        forecast: PropertyValueForecastResult,
        *,
        cashflow_after_tax: MoneyTimeSeries,
        gross_rent: MoneyTimeSeries,
        operating_costs: MoneyTimeSeries,
        debt_service: MoneyTimeSeries,
        capex_payments: MoneyTimeSeries,
        tax_payment: MoneyTimeSeries,
        outstanding_debt: MoneyTimeSeries,
        reserve_balance: MoneyTimeSeries,
        depreciation: MoneyTimeSeries,
        capitalized_capex: Decimal = Decimal(0),
    ) -> ExitAnalysisResult:
        currency = project.currency
        tax_calc = self.tax_calculator or TaxCalculator(currency)
        purchase = project.purchase
        valuation = project.valuation
        cgt = valuation.capital_gains_tax
        end = project.end_period

        holding_years = end.year - project.start_period.year
        # The property changes hands on the first day after the horizon
        exit_date = end.add_months(1).first_day()
        deadline = purchase.purchase_date + relativedelta(years=cgt.holding_period_years)
        within_speculation = exit_date < deadline

        equity = project.financing.total_equity
        total_cf_after_tax = cashflow_after_tax.sum()
        debt_at_exit = outstanding_debt[end]
        accumulated_depreciation = depreciation.sum()

        tax_basis = (
            purchase.purchase_price
            + purchase.total_acquisition_costs
            + capitalized_capex
            - accumulated_depreciation.amount
        )
        sale_costs_percent = (
            valuation.sale_costs_percent
            if valuation.sale_costs_percent > 0
            else DEFAULT_SALE_COSTS_PERCENT
        )
        is_corporation = project.tax_profile.ownership_type == OwnershipType.CORPORATION

        scenarios: List[ExitScenario] = []
        for scenario in forecast.scenarios:
            value = scenario.final_value
            sale_costs = round_half_up(value * sale_costs_percent / 100)
            gain = value - sale_costs - tax_basis

            tax = Decimal(0)
            if is_corporation:
                tax = tax_calc.annual_tax(Money(gain, currency), project.tax_profile).amount
            elif (
                within_speculation
                and not cgt.owner_occupied_exemption
                and gain > cgt.exemption_threshold
            ):
                # Above the exemption limit the entire gain is taxable
                tax = round_half_up(gain * project.tax_profile.effective_tax_rate_percent / 100)

            net_proceeds = value - sale_costs - tax - debt_at_exit.amount
            total_return = net_proceeds + total_cf_after_tax.amount - equity
            total_return_percent = (
                round_half_up(total_return / equity * 100, 4) if equity > 0 else Decimal(0)
            )

            scenarios.append(
                ExitScenario(
                    label=scenario.label,
                    annual_appreciation_percent=scenario.annual_appreciation_percent,
                    property_value_at_exit=Money(value, currency),
                    sale_costs=Money(sale_costs, currency),
                    capital_gain=Money(gain, currency),
                    capital_gains_tax=Money(tax, currency),
                    net_sale_proceeds=Money(net_proceeds, currency),
                    total_return=Money(total_return, currency),
                    total_return_percent=total_return_percent,
                    annualized_return_percent=annualized_return_percent(
                        total_return, equity, holding_years
                    ),
                )
            )

        return ExitAnalysisResult(
            exit_date=exit_date,
            holding_period_years=holding_years,
            is_within_speculation_period=within_speculation,
            purchase_price=Money(purchase.purchase_price, currency),
            total_purchase_costs=Money(purchase.total_acquisition_costs, currency),
            equity_invested=Money(equity, currency),
            tax_basis_at_sale=Money(tax_basis, currency),
            sale_costs_percent=sale_costs_percent,
            total_cashflow_after_tax=total_cf_after_tax,
            outstanding_debt_at_exit=debt_at_exit,
            total_gross_income=gross_rent.sum(),
            total_operating_costs=operating_costs.sum(),
            total_debt_service=debt_service.sum(),
            total_capex=capex_payments.sum(),
            total_tax_paid=tax_payment.sum(),
            total_maintenance_reserve=reserve_balance[end],
            scenarios=scenarios,
        )
