# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import List, Optional

from pydantic import Field, computed_field, model_validator

from ..core.primitives import AcquisitionCostType, Model, NonNegativeDecimal, PositiveDecimal


class AcquisitionCost(Model):
    """One incidental purchase cost (transfer tax, notary, broker, ...)."""

    cost_type: AcquisitionCostType
    amount: NonNegativeDecimal
    description: Optional[str] = None
    payment_date: Optional[date] = None
    is_capitalizable: bool = Field(
        default=True,
        description="Capitalized into the depreciation base.",
    )


class Purchase(Model):
    """
    Purchase price, land share and incidental costs.

    Derived amounts follow the tax split: the building value is the price
    minus the land value, and the depreciation base is the building value
    plus all capitalizable acquisition costs.
    """

    purchase_price: PositiveDecimal
    land_value: NonNegativeDecimal
    purchase_date: date
    acquisition_costs: List[AcquisitionCost] = Field(default_factory=list)

    @model_validator(mode="after")
    def _validate_land_value(self) -> "Purchase":
        if self.land_value > self.purchase_price:
            raise ValueError("land_value cannot exceed purchase_price")
        return self

    @computed_field
    @property
    def building_value(self) -> Decimal:
        return self.purchase_price - self.land_value

    @computed_field
    @property
    def total_acquisition_costs(self) -> Decimal:
        return sum((cost.amount for cost in self.acquisition_costs), Decimal(0))

    @computed_field
    @property
    def total_investment(self) -> Decimal:
        return self.purchase_price + self.total_acquisition_costs

    @property
    def capitalizable_acquisition_costs(self) -> Decimal:
        return sum(
            (cost.amount for cost in self.acquisition_costs if cost.is_capitalizable),
            Decimal(0),
        )

    @property
    def depreciation_base(self) -> Decimal:
        return self.building_value + self.capitalizable_acquisition_costs
