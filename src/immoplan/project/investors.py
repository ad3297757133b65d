# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from pydantic import Field, model_validator

from ..core.primitives import DistributionFrequency, Model, NonNegativeDecimal, Percent
from .tax_profile import TaxProfile


class Investor(Model):
    id: str
    name: str
    share_percent: Percent
    tax_profile: Optional[TaxProfile] = None


class DistributionPolicy(Model):
    """When and how much of the accumulated cashflow is paid out."""

    minimum_reserve: NonNegativeDecimal = Decimal(0)
    frequency: DistributionFrequency = DistributionFrequency.ANNUAL
    distribution_rate_percent: Percent = Decimal(100)


class InvestorConfiguration(Model):
    investors: List[Investor]
    distribution_policy: DistributionPolicy = Field(default_factory=DistributionPolicy)

    @model_validator(mode="after")
    def _validate_shares(self) -> "InvestorConfiguration":
        total = sum((inv.share_percent for inv in self.investors), Decimal(0))
        if total > 100:
            raise ValueError(f"Investor shares add up to {total}%, more than 100%")
        return self
