# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from .calculator import CashflowCalculator, MeasureImpactSeries, inflation_factor
from .rent import is_vacant, rent_for_period, years_elapsed

__all__ = [
    "CashflowCalculator",
    "MeasureImpactSeries",
    "inflation_factor",
    # Rent development
    "rent_for_period",
    "years_elapsed",
    "is_vacant",
]
