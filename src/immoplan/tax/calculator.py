# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
German rental income taxation.

Building depreciation (AfA), the 15% rule for acquisition-related
maintenance, distributed maintenance deductions, yearly income tax by
ownership type and the tax on a private sale within the speculation period.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from dateutil.relativedelta import relativedelta

from ..core.primitives import (
    DEFAULT_CURRENCY,
    Money,
    MoneyTimeSeries,
    OwnershipType,
    TaxClassification,
    YearMonth,
    round_half_up,
)
from ..project import (
    ACQUISITION_RELATED_PERIOD_YEARS,
    ACQUISITION_RELATED_THRESHOLD_PERCENT,
    MAX_DISTRIBUTION_YEARS,
    MIN_DISTRIBUTION_YEARS,
    CapExMeasure,
    CapitalGainsTaxParameters,
    DepreciationRates,
    Project,
    Property,
    Purchase,
    TaxProfile,
)
from ..project.constants import (
    CORPORATE_SOLIDARITY_PERCENT,
    CORPORATE_TAX_PERCENT,
    DEFAULT_TRADE_TAX_MULTIPLIER,
    TRADE_TAX_BASE_PERCENT,
    useful_life_for_rate,
)
from .results import (
    AcquisitionRelatedCostsCheck,
    CapitalGainsTaxResult,
    MaintenanceDistribution,
    TaxSummary,
    TaxTimeSeries,
    TaxYearSummary,
)

logger = logging.getLogger(__name__)


def spread_evenly(amount: Decimal, parts: int) -> List[Decimal]:
    """
    Split ``amount`` into ``parts`` cent amounts that add up exactly.

    All parts but the last are the rounded quotient; the last takes the
    remainder.
    """
    if parts <= 0:
        raise ValueError("parts must be positive")
    share = round_half_up(amount / parts)
    return [share] * (parts - 1) + [amount - share * (parts - 1)]


def months_in_year(year: int, start: YearMonth, end: YearMonth) -> List[YearMonth]:
    """Months of ``year`` that lie within ``[start, end]``."""
    return [
        YearMonth(year, month)
        for month in range(1, 13)
        if start <= YearMonth(year, month) <= end
    ]


class TaxCalculator:
    """
    Tax rules applied to a project.

    Args:
        currency: Currency of all produced amounts
        default_distribution_years: Years used for distributed maintenance
            when a measure does not specify them
    """

    def __init__(self, currency: str = DEFAULT_CURRENCY, default_distribution_years: int = 5):
        self.currency = currency
        self.default_distribution_years = default_distribution_years

    def _money(self, amount: Decimal) -> Money:
        return Money(amount, self.currency)

    # --- Depreciation -------------------------------------------------------

    @staticmethod
    def depreciation_rate(property: Property, tax_profile: TaxProfile) -> Decimal:
        """Custom rate from the profile, else the statutory rate for the construction year."""
        if tax_profile.custom_depreciation_rate_percent is not None:
            return tax_profile.custom_depreciation_rate_percent
        return DepreciationRates.annual_rate(property.construction_year)

    def effective_depreciation_base(
        self,
        purchase: Purchase,
        measures: Iterable[CapExMeasure] = (),
        check: Optional[AcquisitionRelatedCostsCheck] = None,
    ) -> Money:
        """
        Building value and capitalizable acquisition costs, plus maintenance
        reclassified by the 15% rule and executed manufacturing costs.
        """
        measures = list(measures)
        if check is None:
            check = self.check_acquisition_related_costs(purchase, measures)

        base = purchase.depreciation_base
        if check.is_triggered:
            base += check.actual_costs.amount
        for measure in measures:
            if measure.is_executed and measure.tax_classification == TaxClassification.MANUFACTURING_COSTS:
                base += measure.estimated_cost
        return self._money(base)

    def annual_depreciation(
        self,
        purchase: Purchase,
        property: Property,
        tax_profile: TaxProfile,
        measures: Iterable[CapExMeasure] = (),
    ) -> Money:
        base = self.effective_depreciation_base(purchase, measures)
        rate = self.depreciation_rate(property, tax_profile)
        return (base * rate / 100).round()

    def depreciation_series(
        self,
        project: Project,
        measures: Optional[Iterable[CapExMeasure]] = None,
    ) -> MoneyTimeSeries:
        """
        Monthly depreciation from the purchase month for the useful life.

        The useful life is ``100 / rate`` whole years; months before the
        purchase or after the end of the useful life carry zero.
        """
        measures = project.capex_measures() if measures is None else list(measures)
        purchase = project.purchase
        rate = self.depreciation_rate(project.property, project.tax_profile)
        annual = self.annual_depreciation(purchase, project.property, project.tax_profile, measures)
        monthly = (annual / 12).round()

        purchase_period = YearMonth.from_date(purchase.purchase_date)
        end_of_life = purchase_period.add_years(useful_life_for_rate(rate))

        result = MoneyTimeSeries(project.start_period, project.end_period, self.currency)
        for period in YearMonth.range(project.start_period, project.end_period):
            if purchase_period <= period < end_of_life:
                result[period] = monthly
        return result

    # --- 15% rule -----------------------------------------------------------

    @staticmethod
    def _in_acquisition_window(measure: CapExMeasure, purchase_date: date) -> bool:
        day = measure.planned_period.first_day()
        window_end = purchase_date + relativedelta(years=ACQUISITION_RELATED_PERIOD_YEARS)
        return purchase_date <= day < window_end

    def check_acquisition_related_costs(
        self, purchase: Purchase, measures: Iterable[CapExMeasure]
    ) -> AcquisitionRelatedCostsCheck:
        """
        Apply the 15% rule (anschaffungsnahe Herstellungskosten).

        Maintenance measures planned within three years of the purchase are
        summed. If the sum exceeds 15% of the building value the rule is
        triggered and those costs must be capitalized.

        Example:
            >>> check = TaxCalculator().check_acquisition_related_costs(purchase, measures)
            >>> check.is_triggered, check.threshold
            (True, Money('45000.00', 'EUR'))
        """
        affected = [
            m
            for m in measures
            if m.tax_classification.is_maintenance
            and self._in_acquisition_window(m, purchase.purchase_date)
        ]
        actual = sum((m.estimated_cost for m in affected), Decimal(0))
        threshold = round_half_up(
            purchase.building_value * ACQUISITION_RELATED_THRESHOLD_PERCENT / 100
        )
        triggered = actual > threshold

        if triggered:
            logger.debug(
                f"15% rule triggered: {actual} of maintenance within "
                f"{ACQUISITION_RELATED_PERIOD_YEARS} years exceeds {threshold}"
            )

        return AcquisitionRelatedCostsCheck(
            is_triggered=triggered,
            threshold=self._money(threshold),
            actual_costs=self._money(actual),
            excess_amount=self._money(actual - threshold if triggered else Decimal(0)),
            affected_measure_ids=[m.id for m in affected],
        )

    def classify_measure(
        self,
        measure: CapExMeasure,
        check: AcquisitionRelatedCostsCheck,
        purchase_date: date,
    ) -> TaxClassification:
        """Tax classification of ``measure`` after applying the 15% rule."""
        stored = measure.tax_classification
        if stored == TaxClassification.MANUFACTURING_COSTS:
            return stored
        if (
            check.is_triggered
            and stored.is_maintenance
            and self._in_acquisition_window(measure, purchase_date)
        ):
            return TaxClassification.ACQUISITION_RELATED_COSTS
        return stored

    # --- Maintenance --------------------------------------------------------

    def distribute_maintenance(
        self, measure: CapExMeasure, years: Optional[int] = None
    ) -> MaintenanceDistribution:
        """
        Spread the estimated cost of ``measure`` evenly over 2 to 5 tax years
        starting in its planned year. Each year gets the cost divided by
        ``years`` rounded to cents, and the last year takes the rounding
        remainder so the parts sum to the total.

        Raises:
            ValueError: If ``years`` lies outside 2-5
        """
        if years is None:
            years = measure.distribution_years or self.default_distribution_years
        if not MIN_DISTRIBUTION_YEARS <= years <= MAX_DISTRIBUTION_YEARS:
            raise ValueError(
                f"Distribution must be {MIN_DISTRIBUTION_YEARS}-{MAX_DISTRIBUTION_YEARS} "
                f"years, got {years}"
            )

        start_year = measure.planned_period.year
        amounts = spread_evenly(measure.estimated_cost, years)
        return MaintenanceDistribution(
            measure_id=measure.id,
            total_amount=self._money(measure.estimated_cost),
            distribution_years=years,
            start_year=start_year,
            annual_deductions={
                start_year + i: self._money(amount) for i, amount in enumerate(amounts)
            },
        )

    def maintenance_for_tax(
        self,
        measures: Iterable[CapExMeasure],
        purchase: Purchase,
        start: YearMonth,
        end: YearMonth,
        check: Optional[AcquisitionRelatedCostsCheck] = None,
    ) -> Tuple[MoneyTimeSeries, List[MaintenanceDistribution]]:
        """
        Monthly maintenance deductions of executed measures.

        Immediately deductible maintenance is spread over the months of its
        year within the horizon; distributed maintenance over the months of
        each deduction year. Capitalized and non-deductible measures produce
        no deduction.
        """
        measures = list(measures)
        if check is None:
            check = self.check_acquisition_related_costs(purchase, measures)

        result = MoneyTimeSeries(start, end, self.currency)
        distributions: List[MaintenanceDistribution] = []

        def book(year: int, amount: Decimal) -> None:
            periods = months_in_year(year, start, end)
            if not periods:
                return
            for period, share in zip(periods, spread_evenly(amount, len(periods))):
                result[period] = result[period] + self._money(share)

        for measure in measures:
            if not measure.is_executed:
                continue
            classification = self.classify_measure(measure, check, purchase.purchase_date)
            if classification == TaxClassification.MAINTENANCE_EXPENSE:
                book(measure.planned_period.year, measure.estimated_cost)
            elif classification == TaxClassification.MAINTENANCE_EXPENSE_DISTRIBUTED:
                distribution = self.distribute_maintenance(measure)
                distributions.append(distribution)
                for year, deduction in distribution.annual_deductions.items():
                    book(year, deduction.amount)
            elif classification != measure.tax_classification:
                logger.debug(f"Measure {measure.id} reclassified as {classification.value}")

        return result, distributions

    # --- Income tax ---------------------------------------------------------

    def annual_tax(self, taxable_income: Money, tax_profile: TaxProfile) -> Money:
        """
        Tax on one year's taxable income.

        Losses pay no tax. Corporations pay corporate tax, its solidarity
        surcharge and trade tax; individuals and partnerships pay at the
        profile's effective rate.
        """
        if taxable_income.amount <= 0:
            return Money.zero(taxable_income.currency)
        if tax_profile.ownership_type == OwnershipType.CORPORATION:
            return self._corporate_tax(taxable_income, tax_profile)
        return (taxable_income * tax_profile.effective_tax_rate_percent / 100).round()

    @staticmethod
    def _corporate_tax(taxable_income: Money, tax_profile: TaxProfile) -> Money:
        corporate = taxable_income * CORPORATE_TAX_PERCENT / 100
        solidarity = corporate * CORPORATE_SOLIDARITY_PERCENT / 100
        multiplier = tax_profile.trade_tax_multiplier or DEFAULT_TRADE_TAX_MULTIPLIER
        trade = taxable_income * TRADE_TAX_BASE_PERCENT / 100 * multiplier / 100
        return (corporate + solidarity + trade).round()

    def tax_time_series(
        self,
        project: Project,
        gross_income: MoneyTimeSeries,
        interest: MoneyTimeSeries,
        maintenance: MoneyTimeSeries,
        other_deductions: MoneyTimeSeries,
        depreciation: Optional[MoneyTimeSeries] = None,
    ) -> TaxTimeSeries:
        """
        Yearly assessment spread back onto months.

        For each calendar year, taxable income is income minus depreciation,
        interest, maintenance and other deductions. The yearly tax and taxable
        income are split evenly over the months of that year in the horizon.
        """
        if depreciation is None:
            depreciation = self.depreciation_series(project)

        start, end = project.start_period, project.end_period
        taxable_ts = MoneyTimeSeries(start, end, self.currency)
        tax_ts = MoneyTimeSeries(start, end, self.currency)
        yearly: Dict[int, TaxYearSummary] = {}

        for year in range(start.year, end.year + 1):
            income = gross_income.sum_for_year(year)
            afa = depreciation.sum_for_year(year)
            interest_year = interest.sum_for_year(year)
            maintenance_year = maintenance.sum_for_year(year)
            other_year = other_deductions.sum_for_year(year)

            taxable = income - afa - interest_year - maintenance_year - other_year
            tax = self.annual_tax(taxable, project.tax_profile)

            periods = months_in_year(year, start, end)
            for period, taxable_share, tax_share in zip(
                periods,
                spread_evenly(taxable.amount, len(periods)),
                spread_evenly(tax.amount, len(periods)),
            ):
                taxable_ts[period] = self._money(taxable_share)
                tax_ts[period] = self._money(tax_share)

            yearly[year] = TaxYearSummary(
                year=year,
                gross_income=income,
                depreciation=afa,
                interest_expense=interest_year,
                maintenance_expense=maintenance_year,
                other_deductions=other_year,
                taxable_income=taxable,
                tax_payment=tax,
            )

        return TaxTimeSeries(
            depreciation=depreciation,
            taxable_income=taxable_ts,
            tax_payment=tax_ts,
            yearly=yearly,
        )

    # --- Sale ---------------------------------------------------------------

    def capital_gains_tax(
        self,
        purchase: Purchase,
        sale_price: Money,
        sale_costs: Money,
        accumulated_depreciation: Money,
        sale_date: date,
        tax_profile: TaxProfile,
        parameters: Optional[CapitalGainsTaxParameters] = None,
    ) -> CapitalGainsTaxResult:
        """
        Tax on a sale (private sale rules for individuals and partnerships).

        The exemption limit is a cliff, not an allowance: a gain at or below
        it is tax free, a gain above it is taxed in full.

        Example:
            >>> result = calc.capital_gains_tax(
            ...     purchase, Money(500000), Money(0), Money(20000),
            ...     date(2030, 1, 1), profile,
            ... )
            >>> result.is_tax_exempt
            False
        """
        parameters = parameters or CapitalGainsTaxParameters()
        currency = sale_price.currency
        adjusted_basis = Money(purchase.total_investment, currency) - accumulated_depreciation
        gain = sale_price - sale_costs - adjusted_basis
        holding_years = relativedelta(sale_date, purchase.purchase_date).years
        zero = Money.zero(currency)

        def result(exempt: bool, tax: Money, reason: Optional[str] = None) -> CapitalGainsTaxResult:
            return CapitalGainsTaxResult(
                is_tax_exempt=exempt,
                holding_period_years=holding_years,
                sale_price=sale_price,
                sale_costs=sale_costs,
                adjusted_basis=adjusted_basis,
                gain=gain,
                tax_amount=tax,
                reason=reason,
            )

        if tax_profile.ownership_type == OwnershipType.CORPORATION:
            tax = self._corporate_tax(gain, tax_profile) if gain.amount > 0 else zero
            return result(False, tax, "Business income of a corporation")

        if holding_years >= parameters.holding_period_years:
            return result(True, zero, "Holding period elapsed")
        if parameters.owner_occupied_exemption:
            return result(True, zero, "Owner occupied")
        if gain.amount <= parameters.exemption_threshold:
            return result(True, zero, "Gain within exemption limit")

        tax = (gain * tax_profile.effective_tax_rate_percent / 100).round()
        return result(False, tax)

    # --- Summary ------------------------------------------------------------

    def summarize(
        self,
        project: Project,
        tax_series: TaxTimeSeries,
        interest_deduction: MoneyTimeSeries,
        maintenance: MoneyTimeSeries,
        check: AcquisitionRelatedCostsCheck,
        distributions: List[MaintenanceDistribution],
        measures: Iterable[CapExMeasure] = (),
        capital_gains: Optional[CapitalGainsTaxResult] = None,
    ) -> TaxSummary:
        """Horizon totals; tax on a sale within the horizon counts towards the total paid."""
        total_tax = tax_series.tax_payment.sum()
        if capital_gains is not None:
            total_tax = total_tax + capital_gains.tax_amount

        return TaxSummary(
            total_depreciation=tax_series.depreciation.sum(),
            total_interest_deduction=interest_deduction.sum(),
            total_maintenance_deduction=maintenance.sum(),
            acquisition_related_costs_triggered=check.is_triggered,
            acquisition_related_costs_amount=check.actual_costs,
            effective_depreciation_base=self.effective_depreciation_base(
                project.purchase, measures, check
            ),
            depreciation_rate_percent=self.depreciation_rate(project.property, project.tax_profile),
            maintenance_distributions=distributions,
            capital_gains_tax=capital_gains.tax_amount if capital_gains is not None else None,
            sale_tax_exempt=capital_gains.is_tax_exempt if capital_gains is not None else True,
            total_tax_payment=total_tax,
            yearly_tax=tax_series.yearly,
        )
