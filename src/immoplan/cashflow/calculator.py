# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Monthly Cashflow Calculator

Turns the rent, vacancy, running-cost and CapEx configuration of a project
into monthly money series: rent, service charges, operating costs, NOI,
CapEx payments, measure impacts, the reserve account and the market value
path of the property. Every series spans the project horizon and is
denominated in the project currency.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Callable, List, NamedTuple, Optional

from ..core.primitives import Money, MoneyTimeSeries, YearMonth
from ..project import CapExMeasure, CostItem, Project, Tenancy
from .rent import is_vacant, rent_for_period, vacancy_factor

logger = logging.getLogger(__name__)


def inflation_factor(annual_percent: Decimal, years: int) -> Decimal:
    """Compound factor ``(1 + p/100) ** years`` for whole years."""
    if not annual_percent or years <= 0:
        return Decimal(1)
    return (1 + annual_percent / 100) ** years


class MeasureImpactSeries(NamedTuple):
    rent_adjustments: MoneyTimeSeries
    cost_savings: MoneyTimeSeries


class CashflowCalculator:
    """
    Cashflow line items for one project.

    Args:
        project: The (scenario-adjusted) project
        measures: CapEx measures to use instead of the project's own list,
            e.g. after recurring measures were expanded

    Example:
        >>> calc = CashflowCalculator(project)
        >>> noi = calc.noi(
        ...     calc.effective_rent(), rent_adj, calc.service_charge_income(),
        ...     calc.operating_costs(), savings,
        ... )
    """

    def __init__(self, project: Project, measures: Optional[List[CapExMeasure]] = None):
        self.project = project
        self.start = project.start_period
        self.end = project.end_period
        self.currency = project.currency
        self.measures = list(measures) if measures is not None else project.capex_measures()

    def _series(self) -> MoneyTimeSeries:
        return MoneyTimeSeries(self.start, self.end, self.currency)

    def _money(self, amount: Decimal) -> Money:
        return Money(amount, self.currency)

    # --- Rent ---------------------------------------------------------------

    def gross_rent(self) -> MoneyTimeSeries:
        """Contractual net rent of all active tenancies, ignoring vacancy."""
        result = self._series()
        for period in YearMonth.range(self.start, self.end):
            day = period.first_day()
            total = sum(
                (rent_for_period(t, period) for t in self.project.rent.tenancies if t.is_active(day)),
                Decimal(0),
            )
            result[period] = self._money(total).round()
        return result

    def _occupied_total(
        self, period: YearMonth, amount: Callable[[Tenancy, YearMonth], Decimal]
    ) -> Decimal:
        rent_config = self.project.rent
        day = period.first_day()
        total = Decimal(0)
        for tenancy in rent_config.tenancies:
            if not tenancy.is_active(day):
                continue
            if is_vacant(tenancy, period, rent_config.vacancy_events):
                continue
            total += amount(tenancy, period)
        return total * vacancy_factor(rent_config.vacancy_rate_percent)

    def effective_rent(self) -> MoneyTimeSeries:
        """Rent actually collected after vacancy events and the general vacancy rate."""
        result = self._series()
        for period in YearMonth.range(self.start, self.end):
            result[period] = self._money(self._occupied_total(period, rent_for_period)).round()
        return result

    def service_charge_income(self) -> MoneyTimeSeries:
        """Service charge advances paid by tenants, reduced like the rent."""
        result = self._series()
        for period in YearMonth.range(self.start, self.end):
            total = self._occupied_total(
                period, lambda tenancy, _period: tenancy.service_charge_advance
            )
            result[period] = self._money(total).round()
        return result

    # --- Running costs ------------------------------------------------------

    def _item_amount(self, item: CostItem, period: YearMonth) -> Decimal:
        if item.amount_per_sqm_per_year is not None:
            base = item.amount_per_sqm_per_year * self.project.property.living_area / 12
        else:
            base = item.monthly_amount
        return base * inflation_factor(item.annual_inflation_percent, period.year - self.start.year)

    def _costs(self, include: Callable[[CostItem], bool]) -> MoneyTimeSeries:
        result = self._series()
        items = [item for item in self.project.costs.items if include(item)]
        for period in YearMonth.range(self.start, self.end):
            day = period.first_day()
            total = sum(
                (self._item_amount(item, period) for item in items if item.is_active(day)),
                Decimal(0),
            )
            result[period] = self._money(total).round()
        return result

    def operating_costs(self) -> MoneyTimeSeries:
        return self._costs(lambda item: True)

    def transferable_costs(self) -> MoneyTimeSeries:
        """Costs recharged to tenants through the service charges."""
        return self._costs(lambda item: item.is_transferable)

    def non_transferable_costs(self) -> MoneyTimeSeries:
        return self._costs(lambda item: not item.is_transferable)

    def other_tax_deductions(self) -> MoneyTimeSeries:
        """Tax-deductible running costs borne by the owner."""
        return self._costs(lambda item: item.is_tax_deductible and not item.is_transferable)

    # --- CapEx --------------------------------------------------------------

    def capex_payments(self) -> MoneyTimeSeries:
        """
        Cash outflows of executed measures.

        A payment schedule is used when present (entries outside the horizon
        are dropped), otherwise the cost including risk buffer is paid in the
        planned month.
        """
        result = self._series()
        for measure in self.measures:
            if not measure.is_executed:
                continue
            if measure.payment_schedule:
                for item in measure.payment_schedule:
                    if result.has_value(item.period):
                        result[item.period] = result[item.period] + self._money(item.amount)
            elif result.has_value(measure.planned_period):
                period = measure.planned_period
                result[period] = result[period] + self._money(measure.cost_with_buffer).round()
        return result

    def measure_impacts(self, gross_rent: MoneyTimeSeries) -> MeasureImpactSeries:
        """Rent increases and cost savings of executed measures, from ``planned + delay``."""
        rent_adjustments = self._series()
        cost_savings = self._series()
        for measure in self.measures:
            impact = measure.impact
            if not measure.is_executed or impact is None:
                continue
            effective_start = measure.planned_period.add_months(impact.delay_months)
            for period in YearMonth.range(max(effective_start, self.start), self.end):
                if impact.cost_savings_monthly:
                    cost_savings[period] = cost_savings[period] + self._money(
                        impact.cost_savings_monthly
                    )
                adjustment = Decimal(0)
                if impact.rent_increase_monthly:
                    adjustment += impact.rent_increase_monthly
                if impact.rent_increase_percent:
                    adjustment += gross_rent[period].amount * impact.rent_increase_percent / 100
                if adjustment:
                    rent_adjustments[period] = (
                        rent_adjustments[period] + self._money(adjustment)
                    ).round()
        return MeasureImpactSeries(rent_adjustments, cost_savings)

    # --- Cashflow -----------------------------------------------------------

    @staticmethod
    def noi(
        effective_rent: MoneyTimeSeries,
        rent_adjustments: MoneyTimeSeries,
        service_charge_income: MoneyTimeSeries,
        operating_costs: MoneyTimeSeries,
        cost_savings: MoneyTimeSeries,
    ) -> MoneyTimeSeries:
        """Net operating income = rent + adjustments + service charges - costs + savings."""
        return (
            effective_rent.add(rent_adjustments)
            .add(service_charge_income)
            .subtract(operating_costs)
            .add(cost_savings)
        )

    @staticmethod
    def cashflow_before_tax(
        noi: MoneyTimeSeries, debt_service: MoneyTimeSeries, capex: MoneyTimeSeries
    ) -> MoneyTimeSeries:
        return noi.subtract(debt_service).subtract(capex)

    @staticmethod
    def cashflow_after_tax(
        cashflow_before_tax: MoneyTimeSeries, tax_payment: MoneyTimeSeries
    ) -> MoneyTimeSeries:
        return cashflow_before_tax.subtract(tax_payment)

    # --- Reserve account ----------------------------------------------------

    def reserve_balance(
        self, gross_rent: MoneyTimeSeries, capex: MoneyTimeSeries
    ) -> MoneyTimeSeries:
        """
        Balance of the maintenance reserve after each month.

        Contributions are inflated yearly from the horizon start year and
        CapEx payments are withdrawn in full. The balance may turn negative;
        that is reported as a warning, not prevented. Without a reserve
        configuration the series is zero.
        """
        result = self._series()
        config = self.project.costs.reserve_account
        if config is None:
            return result

        living_area = self.project.property.living_area
        balance = config.initial_balance
        for period in YearMonth.range(self.start, self.end):
            if config.monthly_contribution is not None:
                contribution = config.monthly_contribution
            elif config.contribution_per_sqm_per_year is not None:
                contribution = config.contribution_per_sqm_per_year * living_area / 12
            elif config.contribution_percent_of_rent is not None:
                contribution = gross_rent[period].amount * config.contribution_percent_of_rent / 100
            else:
                contribution = Decimal(0)
            contribution *= inflation_factor(
                config.annual_inflation_percent, period.year - self.start.year
            )
            balance = balance + contribution - capex[period].amount
            result[period] = self._money(balance).round()
        return result

    # --- Property value -----------------------------------------------------

    def property_value(self) -> MoneyTimeSeries:
        """
        Market value path from the purchase price.

        The market growth rate compounds monthly. Executed value-enhancing
        measures add their absolute value impact, or else their percentage
        impact, in the planned month. Necessary measures that were never
        executed discount the final month's value.
        """
        valuation = self.project.valuation
        result = self._series()
        monthly_growth = valuation.market_growth_rate_percent / 100 / 12
        value = self.project.purchase.purchase_price

        for period in YearMonth.range(self.start, self.end):
            value *= 1 + monthly_growth
            for measure in self.measures:
                if measure.planned_period != period:
                    continue
                if not (measure.is_executed and measure.is_value_enhancing):
                    continue
                if measure.value_impact is not None:
                    value += measure.value_impact
                elif measure.value_impact_percent is not None:
                    value *= 1 + measure.value_impact_percent / 100
            result[period] = self._money(value).round()

        deferred = [
            m
            for m in self.measures
            if m.is_necessary and not m.is_executed and m.planned_period <= self.end
        ]
        if deferred:
            impact = valuation.deferred_maintenance_impact
            discount = Decimal(0)
            for measure in deferred:
                overdue_years = max(0, self.end.year - measure.planned_period.year)
                discount += (
                    overdue_years
                    * impact.discount_per_overdue_year_percent
                    * impact.priority_factor(measure.priority)
                )
            discount = min(discount, impact.max_total_discount_percent)
            logger.debug(f"Deferred maintenance discount of {discount}% on final value")
            result[self.end] = (result[self.end] * (1 - discount / 100)).round()

        return result
