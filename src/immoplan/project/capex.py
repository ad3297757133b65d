# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from pydantic import Field, model_validator

from ..core.primitives import (
    CapExCategory,
    MeasurePriority,
    Model,
    NonNegativeDecimal,
    NonNegativeInt,
    Percent,
    TaxClassification,
    YearMonth,
)
from .constants import MAX_DISTRIBUTION_YEARS, MIN_DISTRIBUTION_YEARS


class PaymentScheduleItem(Model):
    period: YearMonth
    amount: NonNegativeDecimal


class MeasureImpact(Model):
    """Economic effect of an executed measure, starting ``delay_months`` after it is planned."""

    cost_savings_monthly: Optional[NonNegativeDecimal] = None
    rent_increase_monthly: Optional[NonNegativeDecimal] = None
    rent_increase_percent: Optional[Percent] = None
    delay_months: NonNegativeInt = 0


class RecurringMeasureConfig(Model):
    """
    Recurring maintenance on a component.

    Attributes:
        interval_percent: Interval as a share of the component cycle
        cost_percent: Cost per occurrence as a share of the renewal cost
        cycle_extension_percent: How much the maintenance extends the component cycle
    """

    interval_percent: Decimal = Field(..., gt=0, le=100)
    cost_percent: Percent
    cycle_extension_percent: Percent = Decimal(0)


class CapExMeasure(Model):
    """A planned capital expenditure on the building or a unit."""

    id: str
    name: str
    category: CapExCategory
    planned_period: YearMonth
    estimated_cost: NonNegativeDecimal
    risk_buffer_percent: Percent = Decimal(0)
    tax_classification: TaxClassification = TaxClassification.MAINTENANCE_EXPENSE
    distribution_years: Optional[int] = Field(
        default=None, ge=MIN_DISTRIBUTION_YEARS, le=MAX_DISTRIBUTION_YEARS
    )
    payment_schedule: List[PaymentScheduleItem] = Field(default_factory=list)
    is_value_enhancing: bool = False
    value_impact: Optional[Decimal] = None
    value_impact_percent: Optional[Decimal] = None
    impact: Optional[MeasureImpact] = None
    is_necessary: bool = False
    is_executed: bool = False
    priority: MeasurePriority = MeasurePriority.MEDIUM
    unit_id: Optional[str] = None
    is_recurring: bool = False
    recurring_config: Optional[RecurringMeasureConfig] = None

    @model_validator(mode="after")
    def _validate_recurring(self) -> "CapExMeasure":
        if self.is_recurring and self.recurring_config is None:
            raise ValueError(f"Measure {self.id}: recurring measures need a recurring_config")
        return self

    @property
    def cost_with_buffer(self) -> Decimal:
        return self.estimated_cost * (1 + self.risk_buffer_percent / 100)


class CapExConfiguration(Model):
    measures: List[CapExMeasure] = Field(default_factory=list)

    @model_validator(mode="after")
    def _validate_ids(self) -> "CapExConfiguration":
        ids = [m.id for m in self.measures]
        if len(ids) != len(set(ids)):
            raise ValueError("CapEx measure ids must be unique")
        return self

    def executed(self) -> List[CapExMeasure]:
        return [m for m in self.measures if m.is_executed]
