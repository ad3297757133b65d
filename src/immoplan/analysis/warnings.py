# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Calculation warnings.

Risky outcomes (negative cashflow, a drained reserve, DSCR below 1, the
15% rule, deferred maintenance, high leverage, liquidity shortfalls and tax
losses) are reported on the result instead of failing the calculation.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from ..core.primitives import (
    MeasurePriority,
    Model,
    MoneyTimeSeries,
    WarningSeverity,
    WarningType,
    YearMonth,
    round_half_up,
)
from ..project import CapExMeasure
from ..tax import TaxSummary

logger = logging.getLogger(__name__)


class CalculationWarning(Model):
    type: WarningType
    message: str
    severity: WarningSeverity
    period: Optional[YearMonth] = None
    related_field: Optional[str] = None


def negative_cashflow_warnings(cashflow_after_tax: MoneyTimeSeries) -> List[CalculationWarning]:
    return [
        CalculationWarning(
            type=WarningType.NEGATIVE_CASHFLOW,
            message=f"Negative cashflow of {value} in {period}",
            severity=WarningSeverity.WARNING,
            period=period,
            related_field="cashflow_after_tax",
        )
        for period, value in cashflow_after_tax
        if value.amount < 0
    ]


def reserve_warnings(reserve_balance: MoneyTimeSeries, threshold: Decimal) -> List[CalculationWarning]:
    """
    A month below ``threshold`` is a warning; the first negative month is
    critical and ends the scan.
    """
    warnings: List[CalculationWarning] = []
    for period, balance in reserve_balance:
        if balance.amount < 0:
            warnings.append(
                CalculationWarning(
                    type=WarningType.RESERVE_BELOW_THRESHOLD,
                    message=f"Reserve account negative ({balance}) in {period}",
                    severity=WarningSeverity.CRITICAL,
                    period=period,
                    related_field="reserve_balance",
                )
            )
            break
        if balance.amount < threshold:
            warnings.append(
                CalculationWarning(
                    type=WarningType.RESERVE_BELOW_THRESHOLD,
                    message=f"Reserve account below {threshold} ({balance}) in {period}",
                    severity=WarningSeverity.WARNING,
                    period=period,
                    related_field="reserve_balance",
                )
            )
    return warnings


def dscr_warnings(noi: MoneyTimeSeries, debt_service: MoneyTimeSeries) -> List[CalculationWarning]:
    warnings: List[CalculationWarning] = []
    for (period, income), (_, service) in zip(noi, debt_service):
        if service.amount <= 0:
            continue
        dscr = income.amount / service.amount
        if dscr < 1:
            warnings.append(
                CalculationWarning(
                    type=WarningType.DSCR_BELOW_ONE,
                    message=f"DSCR below 1.0 ({round_half_up(dscr)}) in {period}",
                    severity=WarningSeverity.CRITICAL,
                    period=period,
                    related_field="dscr",
                )
            )
    return warnings


def acquisition_related_costs_warnings(tax_summary: TaxSummary) -> List[CalculationWarning]:
    if not tax_summary.acquisition_related_costs_triggered:
        return []
    return [
        CalculationWarning(
            type=WarningType.ACQUISITION_RELATED_COSTS_TRIGGERED,
            message=(
                f"15% rule triggered: maintenance of {tax_summary.acquisition_related_costs_amount} "
                f"is capitalized as acquisition-related costs"
            ),
            severity=WarningSeverity.INFO,
            related_field="tax_classification",
        )
    ]


def deferred_maintenance_warnings(
    measures: Iterable[CapExMeasure], end: YearMonth
) -> List[CalculationWarning]:
    return [
        CalculationWarning(
            type=WarningType.DEFERRED_MAINTENANCE,
            message=f"Necessary measure '{m.name}' not executed (planned {m.planned_period})",
            severity=(
                WarningSeverity.CRITICAL
                if m.priority == MeasurePriority.CRITICAL
                else WarningSeverity.WARNING
            ),
            period=m.planned_period,
            related_field="capex",
        )
        for m in measures
        if m.is_necessary and not m.is_executed and m.planned_period <= end
    ]


def high_ltv_warnings(
    outstanding_debt: MoneyTimeSeries, property_value: MoneyTimeSeries, threshold_percent: Decimal
) -> List[CalculationWarning]:
    """First month in which the loan-to-value ratio exceeds ``threshold_percent``."""
    for (period, debt), (_, value) in zip(outstanding_debt, property_value):
        if value.amount <= 0:
            continue
        ltv = debt.amount / value.amount * 100
        if ltv > threshold_percent:
            return [
                CalculationWarning(
                    type=WarningType.HIGH_LTV,
                    message=f"LTV of {round_half_up(ltv, 1)}% exceeds {threshold_percent}% in {period}",
                    severity=WarningSeverity.WARNING,
                    period=period,
                    related_field="ltv",
                )
            ]
    return []


def liquidity_shortfall_warnings(cumulative_cashflow: MoneyTimeSeries) -> List[CalculationWarning]:
    for period, value in cumulative_cashflow:
        if value.amount < 0:
            return [
                CalculationWarning(
                    type=WarningType.LIQUIDITY_SHORTFALL,
                    message=f"Cumulative cashflow turns negative ({value}) in {period}",
                    severity=WarningSeverity.WARNING,
                    period=period,
                    related_field="cumulative_cashflow",
                )
            ]
    return []


def tax_loss_warnings(tax_summary: TaxSummary) -> List[CalculationWarning]:
    warnings: List[CalculationWarning] = []
    for year in sorted(tax_summary.yearly_tax):
        summary = tax_summary.yearly_tax[year]
        if summary.taxable_income.amount < 0:
            warnings.append(
                CalculationWarning(
                    type=WarningType.TAX_LOSS_CARRYFORWARD,
                    message=f"Tax loss of {summary.taxable_income} in {year} available for offsetting",
                    severity=WarningSeverity.INFO,
                    period=YearMonth(year, 12),
                    related_field="taxable_income",
                )
            )
    return warnings


def finalize_warnings(warnings: Iterable[CalculationWarning]) -> List[CalculationWarning]:
    """
    Keep the first warning per (type, period) and order them: warnings
    without a period first, then by period, then by severity.
    """
    unique: Dict[Tuple[WarningType, Optional[YearMonth]], CalculationWarning] = {}
    for warning in warnings:
        unique.setdefault((warning.type, warning.period), warning)

    def sort_key(warning: CalculationWarning):
        if warning.period is None:
            return (0, 0, warning.severity.rank)
        return (1, warning.period.index, warning.severity.rank)

    result = sorted(unique.values(), key=sort_key)
    if result:
        logger.debug(f"{len(result)} warnings after de-duplication")
    return result
