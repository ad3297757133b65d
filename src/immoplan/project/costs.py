# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import List, Optional

from pydantic import Field, model_validator

from ..core.primitives import CostClassification, Model, NonNegativeDecimal, Percent


class CostItem(Model):
    """
    A running cost, given as a monthly amount or as an amount per m² and year.

    ``amount_per_sqm_per_year`` takes precedence over ``monthly_amount``.
    Amounts are inflated yearly from the horizon start year.
    """

    id: str
    name: str
    classification: CostClassification
    monthly_amount: NonNegativeDecimal = Decimal(0)
    amount_per_sqm_per_year: Optional[NonNegativeDecimal] = None
    is_tax_deductible: bool = True
    annual_inflation_percent: Decimal = Field(default=Decimal(0), ge=-100, le=100)
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @model_validator(mode="after")
    def _validate_dates(self) -> "CostItem":
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError(f"Cost item {self.id}: end_date precedes start_date")
        return self

    @property
    def is_transferable(self) -> bool:
        return self.classification == CostClassification.TRANSFERABLE

    def is_active(self, day: date) -> bool:
        if self.start_date is not None and day < self.start_date:
            return False
        return self.end_date is None or day <= self.end_date


class ReserveAccountConfig(Model):
    """
    Maintenance reserve account.

    The monthly contribution is the first configured of: a fixed amount, an
    amount per m² and year, or a share of the month's gross rent.
    """

    initial_balance: NonNegativeDecimal = Decimal(0)
    monthly_contribution: Optional[NonNegativeDecimal] = None
    contribution_per_sqm_per_year: Optional[NonNegativeDecimal] = None
    contribution_percent_of_rent: Optional[Percent] = None
    minimum_threshold: Optional[NonNegativeDecimal] = None
    annual_inflation_percent: Decimal = Field(default=Decimal(0), ge=-100, le=100)


class CostConfiguration(Model):
    items: List[CostItem] = Field(default_factory=list)
    reserve_account: Optional[ReserveAccountConfig] = None
