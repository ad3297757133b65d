# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from .calculator import TaxCalculator, months_in_year, spread_evenly
from .results import (
    AcquisitionRelatedCostsCheck,
    CapitalGainsTaxResult,
    MaintenanceDistribution,
    TaxSummary,
    TaxTimeSeries,
    TaxYearSummary,
)

__all__ = [
    "TaxCalculator",
    "spread_evenly",
    "months_in_year",
    # Results
    "AcquisitionRelatedCostsCheck",
    "CapitalGainsTaxResult",
    "MaintenanceDistribution",
    "TaxTimeSeries",
    "TaxYearSummary",
    "TaxSummary",
]
