# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import List, Optional

from pydantic import Field, model_validator

from ..core.primitives import (
    Model,
    NonNegativeDecimal,
    Percent,
    PositiveDecimal,
    PositiveInt,
    RentDevelopmentModel,
    YearMonth,
)


class RentStep(Model):
    """A contractual rent step of a graduated lease."""

    effective_date: date
    new_net_rent: NonNegativeDecimal


class Tenancy(Model):
    """
    A lease on the whole property or on a single unit.

    The tenancy is active in a month when the month's first day lies within
    ``[start_date, end_date]``.
    """

    id: str
    unit_id: Optional[str] = None
    tenant_label: str = "Tenant"
    start_date: date
    end_date: Optional[date] = None
    net_rent: NonNegativeDecimal = Field(..., description="Monthly net cold rent")
    service_charge_advance: NonNegativeDecimal = Decimal(0)
    development_model: RentDevelopmentModel = RentDevelopmentModel.FIXED
    annual_increase_percent: Optional[Percent] = None
    rent_steps: List[RentStep] = Field(default_factory=list)
    index_threshold_percent: Optional[PositiveDecimal] = None
    deposit: Optional[NonNegativeDecimal] = None

    @model_validator(mode="after")
    def _validate_dates(self) -> "Tenancy":
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError(f"Tenancy {self.id}: end_date precedes start_date")
        return self

    def is_active(self, day: date) -> bool:
        if day < self.start_date:
            return False
        return self.end_date is None or day <= self.end_date


class VacancyEvent(Model):
    """A stretch of months in which a unit (or, without unit_id, every unit) earns nothing."""

    start_period: YearMonth
    duration_months: PositiveInt
    unit_id: Optional[str] = None
    description: Optional[str] = None
    additional_damage: Optional[NonNegativeDecimal] = None
    insurance_coverage: Optional[NonNegativeDecimal] = None

    def periods(self) -> List[YearMonth]:
        return [self.start_period.add_months(i) for i in range(self.duration_months)]


class RentConfiguration(Model):
    tenancies: List[Tenancy] = Field(default_factory=list)
    vacancy_rate_percent: Percent = Decimal(0)
    vacancy_events: List[VacancyEvent] = Field(default_factory=list)
