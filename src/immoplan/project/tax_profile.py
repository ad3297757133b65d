# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import Field

from ..core.primitives import Model, NonNegativeDecimal, OwnershipType, Percent, PositiveDecimal
from .constants import DEFAULT_CAPITAL_GAINS_EXEMPTION, DEFAULT_HOLDING_PERIOD_YEARS


class TaxProfile(Model):
    """
    Tax situation of the owner.

    The effective rate adds the solidarity surcharge and the optional church
    tax, both levied on the marginal income tax rate.
    """

    ownership_type: OwnershipType = OwnershipType.PRIVATE_INDIVIDUAL
    marginal_tax_rate_percent: Percent
    solidarity_surcharge_percent: Percent = Decimal("5.5")
    church_tax_percent: Optional[Percent] = None
    custom_depreciation_rate_percent: Optional[PositiveDecimal] = Field(
        default=None,
        le=100,
        description="Overrides the statutory rate (e.g. shorter remaining life by appraisal).",
    )
    loss_offset_enabled: bool = True
    loss_carryforward: NonNegativeDecimal = Decimal(0)
    trade_tax_multiplier: Optional[PositiveDecimal] = None
    joint_assessment: bool = False

    @property
    def effective_tax_rate_percent(self) -> Decimal:
        soli = self.marginal_tax_rate_percent * self.solidarity_surcharge_percent / 100
        church = Decimal(0)
        if self.church_tax_percent is not None:
            church = self.marginal_tax_rate_percent * self.church_tax_percent / 100
        return self.marginal_tax_rate_percent + soli + church


class CapitalGainsTaxParameters(Model):
    """Rules for taxing a private sale."""

    holding_period_years: int = Field(default=DEFAULT_HOLDING_PERIOD_YEARS, ge=0)
    exemption_threshold: NonNegativeDecimal = Field(
        default=DEFAULT_CAPITAL_GAINS_EXEMPTION,
        description="Exemption limit (Freigrenze): gains above it are taxed in full.",
    )
    owner_occupied_exemption: bool = False
