# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Calculation Orchestrator.

PIPELINE
========

A calculation is a linear pipeline over one immutable project:

1. Scenario overrides         -> an independent copy of the project
2. Recurring CapEx expansion  -> dated occurrences of recurring measures
3. Financing                  -> loan schedules and their totals
4. Rent, costs, NOI           -> monthly operating series
5. CapEx payments
6. Cashflow before tax
7. Tax                        -> 15% rule, maintenance deductions, AfA, tax
8. Cashflow after tax and cumulative cashflow
9. Reserve account and property value
10. Planned sale within the horizon (capital gains)
11. Value forecast and exit analysis
12. Metrics, warnings, investor results, yearly views
13. Result assembly            -> all series frozen

Every step is a pure function of its inputs. A failing step aborts the
calculation; there is no partial result. Running the same project twice
with the same settings and clock gives equal results.
"""

from __future__ import annotations

import logging
import time
from decimal import Decimal
from typing import List, Optional

from ..capex import RenovationForecastGenerator, expand_recurring_measures
from ..cashflow import CashflowCalculator
from ..core.primitives import (
    CalculationSettings,
    Clock,
    Model,
    Money,
    MoneyTimeSeries,
    SystemClock,
    YearMonth,
    round_half_up,
)
from ..debt import FinancingCalculator
from ..project import CapExMeasure, Project
from ..tax import AcquisitionRelatedCostsCheck, CapitalGainsTaxResult, TaxCalculator
from ..valuation import ExitAnalysisCalculator, PropertyValueForecastCalculator
from .aggregation import capex_timeline, tax_bridge_rows, yearly_cashflow_rows
from .investors import InvestorCalculator
from .metrics import MetricsCalculator
from .results import CalculationResult
from .scenarios import apply_scenario, is_base_scenario
from .warnings import (
    acquisition_related_costs_warnings,
    deferred_maintenance_warnings,
    dscr_warnings,
    finalize_warnings,
    high_ltv_warnings,
    liquidity_shortfall_warnings,
    negative_cashflow_warnings,
    reserve_warnings,
    tax_loss_warnings,
)

logger = logging.getLogger(__name__)


class PlannedSale(Model):
    """Sale at ``valuation.planned_sale_date`` when that month lies in the horizon."""

    period: YearMonth
    capital_gains: CapitalGainsTaxResult
    net_proceeds: Money


class CalculationOrchestrator:
    """
    Runs the full calculation pipeline.

    Args:
        settings: Engine settings; defaults to ``CalculationSettings()``
        clock: Date provider for the calculation date and component ages;
            defaults to the system clock

    Example:
        >>> orchestrator = CalculationOrchestrator(clock=FixedClock(date(2025, 1, 1)))
        >>> result = orchestrator.calculate(project, "stress")
        >>> result.scenario_id
        'stress'
    """

    def __init__(self, settings: Optional[CalculationSettings] = None, clock: Optional[Clock] = None):
        self.settings = settings or CalculationSettings()
        self.clock = clock or SystemClock()

    def calculate(self, project: Project, scenario_id: Optional[str] = None) -> CalculationResult:
        settings = self.settings
        started = time.perf_counter()
        resolved_scenario = (
            settings.base_scenario_id
            if is_base_scenario(scenario_id, settings.base_scenario_id)
            else scenario_id
        )

        # Step 1: Scenario overrides
        effective = apply_scenario(project, scenario_id, settings.base_scenario_id)
        start, end, currency = effective.start_period, effective.end_period, effective.currency
        logger.debug(
            f"Calculating project {effective.id} scenario {resolved_scenario} "
            f"from {start} to {end} ({effective.horizon_months} months)"
        )

        # Step 2: Recurring CapEx expansion
        capex = effective.capex
        if settings.expand_recurring_capex:
            capex = expand_recurring_measures(capex, effective.property, start.year, end.year)
        measures: List[CapExMeasure] = list(capex.measures) if capex is not None else []

        # Step 3: Financing
        financing = FinancingCalculator(start, end, currency).aggregate(effective.financing.loans)
        logger.debug(f"Amortized {len(financing.schedules)} loans")

        # Step 4: Rent, costs and NOI
        cashflow = CashflowCalculator(effective, measures)
        gross_rent = cashflow.gross_rent()
        effective_rent = cashflow.effective_rent()
        service_charge_income = cashflow.service_charge_income()
        transferable_costs = cashflow.transferable_costs()
        non_transferable_costs = cashflow.non_transferable_costs()
        operating_costs = cashflow.operating_costs()
        impacts = cashflow.measure_impacts(gross_rent)
        noi = CashflowCalculator.noi(
            effective_rent,
            impacts.rent_adjustments,
            service_charge_income,
            operating_costs,
            impacts.cost_savings,
        )

        # Step 5: CapEx payments
        capex_payments = cashflow.capex_payments()

        # Step 6: Cashflow before tax
        cashflow_before_tax = CashflowCalculator.cashflow_before_tax(
            noi, financing.total_debt_service, capex_payments
        )

        # Step 7: Tax
        tax_calc = TaxCalculator(currency, settings.default_distribution_years)
        check = tax_calc.check_acquisition_related_costs(effective.purchase, measures)
        maintenance, distributions = tax_calc.maintenance_for_tax(
            measures, effective.purchase, start, end, check
        )
        depreciation = tax_calc.depreciation_series(effective, measures)
        other_deductions = cashflow.other_tax_deductions()
        # Service charges are passed through to tenants and are not rental income
        tax_income = effective_rent.add(impacts.rent_adjustments)
        interest_deduction = financing.total_interest.add(financing.total_disagio)
        tax_series = tax_calc.tax_time_series(
            effective, tax_income, interest_deduction, maintenance, other_deductions, depreciation
        )
        logger.debug(
            f"Tax: depreciation {tax_series.depreciation.sum()}, "
            f"15% rule {'triggered' if check.is_triggered else 'not triggered'}"
        )

        # Step 8: Cashflow after tax
        cashflow_after_tax = CashflowCalculator.cashflow_after_tax(
            cashflow_before_tax, tax_series.tax_payment
        )
        cumulative_cashflow = cashflow_after_tax.cumulative()

        # Step 9: Reserve account and property value
        reserve_balance = cashflow.reserve_balance(gross_rent, capex_payments)
        property_value = cashflow.property_value()

        # Step 10: Planned sale
        sale = self._planned_sale(
            effective, tax_calc, property_value, depreciation, financing.total_outstanding_debt
        )
        tax_summary = tax_calc.summarize(
            effective,
            tax_series,
            interest_deduction,
            maintenance,
            check,
            distributions,
            measures,
            sale.capital_gains if sale is not None else None,
        )
        sale_net_proceeds = sale.net_proceeds.amount if sale is not None else None

        # Step 11: Value forecast and exit analysis
        value_forecast = None
        exit_analysis = None
        if settings.include_value_forecast:
            value_forecast = PropertyValueForecastCalculator().calculate(effective, measures)
            exit_analysis = ExitAnalysisCalculator(tax_calc).calculate(
                effective,
                value_forecast,
                cashflow_after_tax=cashflow_after_tax,
                gross_rent=gross_rent,
                operating_costs=operating_costs,
                debt_service=financing.total_debt_service,
                capex_payments=capex_payments,
                tax_payment=tax_series.tax_payment,
                outstanding_debt=financing.total_outstanding_debt,
                reserve_balance=reserve_balance,
                depreciation=depreciation,
                capitalized_capex=self._capitalized_capex(tax_calc, effective, measures, check),
            )
            logger.debug(f"Value forecast and exit analysis for {len(value_forecast.scenarios)} scenarios")

        # Step 12: Metrics, warnings, investors and yearly views
        valuation = effective.valuation
        discount_rate = (
            valuation.discount_rate_percent
            if valuation.discount_rate_percent is not None
            else settings.default_discount_rate_percent
        )
        reserve_config = effective.costs.reserve_account
        reserve_threshold = (
            reserve_config.minimum_threshold
            if reserve_config is not None and reserve_config.minimum_threshold is not None
            else settings.reserve_warning_threshold
        )
        equity = effective.financing.total_equity

        metrics = MetricsCalculator.calculate(
            equity=equity,
            noi=noi,
            cashflow_before_tax=cashflow_before_tax,
            cashflow_after_tax=cashflow_after_tax,
            debt_service=financing.total_debt_service,
            interest=financing.total_interest,
            outstanding_debt=financing.total_outstanding_debt,
            operating_costs=operating_costs,
            property_value=property_value,
            reserve_balance=reserve_balance,
            property=effective.property,
            measures=measures,
            discount_rate_percent=discount_rate,
            reserve_threshold=reserve_threshold,
            sale_net_proceeds=sale_net_proceeds,
        )

        warnings = finalize_warnings(
            negative_cashflow_warnings(cashflow_after_tax)
            + reserve_warnings(reserve_balance, reserve_threshold)
            + dscr_warnings(noi, financing.total_debt_service)
            + acquisition_related_costs_warnings(tax_summary)
            + deferred_maintenance_warnings(measures, end)
            + high_ltv_warnings(
                financing.total_outstanding_debt, property_value, settings.high_ltv_warning_percent
            )
            + liquidity_shortfall_warnings(cumulative_cashflow)
            + tax_loss_warnings(tax_summary)
        )

        investor_results = InvestorCalculator(discount_rate).calculate(
            effective.investors, effective.financing, cashflow_before_tax, sale_net_proceeds
        )

        yearly = yearly_cashflow_rows(
            {
                "gross_rent": gross_rent,
                "effective_rent": effective_rent,
                "service_charge_income": service_charge_income,
                "operating_costs": operating_costs,
                "net_operating_income": noi,
                "debt_service": financing.total_debt_service,
                "interest": financing.total_interest,
                "principal": financing.total_principal,
                "capex": capex_payments,
                "cashflow_before_tax": cashflow_before_tax,
                "depreciation": depreciation,
                "maintenance_deduction": maintenance,
                "taxable_income": tax_series.taxable_income,
                "tax_payment": tax_series.tax_payment,
                "cashflow_after_tax": cashflow_after_tax,
                "reserve_balance": reserve_balance,
                "outstanding_debt": financing.total_outstanding_debt,
                "property_value": property_value,
            },
            reserve_config.initial_balance if reserve_config is not None else Decimal(0),
        )
        proposed = RenovationForecastGenerator(self.clock).generate(effective.property, start, end)

        # Step 13: Assemble the result
        financing.freeze()
        result = CalculationResult(
            project_id=effective.id,
            scenario_id=resolved_scenario,
            calculated_at=self.clock.today(),
            engine_version=settings.engine_version,
            gross_rent=gross_rent.freeze(),
            effective_rent=effective_rent.freeze(),
            service_charge_income=service_charge_income.freeze(),
            transferable_costs=transferable_costs.freeze(),
            non_transferable_costs=non_transferable_costs.freeze(),
            operating_costs=operating_costs.freeze(),
            rent_adjustments=impacts.rent_adjustments.freeze(),
            cost_savings=impacts.cost_savings.freeze(),
            net_operating_income=noi.freeze(),
            debt_service=financing.total_debt_service,
            interest_expense=financing.total_interest,
            principal_repayment=financing.total_principal,
            disagio=financing.total_disagio,
            capex_payments=capex_payments.freeze(),
            cashflow_before_tax=cashflow_before_tax.freeze(),
            depreciation=depreciation.freeze(),
            maintenance_deduction=maintenance.freeze(),
            other_tax_deductions=other_deductions.freeze(),
            taxable_income=tax_series.taxable_income.freeze(),
            tax_payment=tax_series.tax_payment.freeze(),
            cashflow_after_tax=cashflow_after_tax.freeze(),
            cumulative_cashflow=cumulative_cashflow.freeze(),
            reserve_balance=reserve_balance.freeze(),
            outstanding_debt=financing.total_outstanding_debt,
            property_value=property_value.freeze(),
            loan_schedules=financing.schedules,
            metrics=metrics,
            tax_summary=tax_summary,
            warnings=warnings,
            investor_results=investor_results,
            value_forecast=value_forecast,
            exit_analysis=exit_analysis,
            sale_net_proceeds=sale.net_proceeds if sale is not None else None,
            total_cashflow_before_tax=cashflow_before_tax.sum(),
            total_cashflow_after_tax=cashflow_after_tax.sum(),
            total_equity_invested=Money(equity, currency),
            yearly_cashflows=yearly,
            tax_bridge=tax_bridge_rows(tax_series.yearly),
            capex_timeline=capex_timeline(measures),
            measures=measures,
            proposed_measures=proposed,
        )

        elapsed = time.perf_counter() - started
        logger.info(
            f"Calculated project {effective.id} scenario {resolved_scenario}: "
            f"{len(warnings)} warnings in {elapsed:.3f}s"
        )
        return result

    @staticmethod
    def _planned_sale(
        project: Project,
        tax_calc: TaxCalculator,
        property_value: MoneyTimeSeries,
        depreciation: MoneyTimeSeries,
        outstanding_debt: MoneyTimeSeries,
    ) -> Optional[PlannedSale]:
        """Capital gains and net proceeds of a sale planned inside the horizon."""
        valuation = project.valuation
        period = valuation.planned_sale_date
        if period is None or not property_value.has_value(period):
            return None

        price = property_value[period]
        costs = (price * valuation.sale_costs_percent / 100).round()
        accumulated = sum(
            (value for p, value in depreciation if p <= period), Money.zero(project.currency)
        )
        capital_gains = tax_calc.capital_gains_tax(
            project.purchase,
            price,
            costs,
            accumulated,
            period.first_day(),
            project.tax_profile,
            valuation.capital_gains_tax,
        )
        # The buyer's payment first repays the remaining debt
        net = price - costs - capital_gains.tax_amount - outstanding_debt[period]
        logger.debug(f"Planned sale in {period}: price {price}, tax {capital_gains.tax_amount}")
        return PlannedSale(period=period, capital_gains=capital_gains, net_proceeds=net)

    @staticmethod
    def _capitalized_capex(
        tax_calc: TaxCalculator,
        project: Project,
        measures: List[CapExMeasure],
        check: AcquisitionRelatedCostsCheck,
    ) -> Decimal:
        """Executed CapEx that ends up in the tax basis (manufacturing or acquisition-related costs)."""
        total = Decimal(0)
        for measure in measures:
            if not measure.is_executed:
                continue
            classification = tax_calc.classify_measure(measure, check, project.purchase.purchase_date)
            if classification.is_capitalized:
                total += measure.estimated_cost
        return round_half_up(total)
