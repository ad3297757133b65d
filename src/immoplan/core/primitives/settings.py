# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from decimal import Decimal

from pydantic import Field

from .model import Model


class CalculationSettings(Model):
    """
    Configuration for the calculation engine.

    Settings are passed by the caller; the engine reads no environment
    variables or files. All fields have defaults, so ``CalculationSettings()``
    reproduces the standard behavior.
    """

    include_value_forecast: bool = Field(
        default=True,
        description="Run the property value forecast and exit analysis.",
    )
    expand_recurring_capex: bool = Field(
        default=True,
        description="Expand recurring maintenance measures into dated occurrences "
        "before the cashflow pipeline runs.",
    )
    reserve_warning_threshold: Decimal = Field(
        default=Decimal("5000"),
        ge=0,
        description="Reserve balance below which a warning is raised.",
    )
    high_ltv_warning_percent: Decimal = Field(default=Decimal("80"), gt=0)
    default_distribution_years: int = Field(
        default=5,
        ge=2,
        le=5,
        description="Years used for distributed maintenance without explicit years.",
    )
    default_discount_rate_percent: Decimal = Field(default=Decimal("5"), ge=0)
    engine_version: str = "1.0.0"
    base_scenario_id: str = "base"
