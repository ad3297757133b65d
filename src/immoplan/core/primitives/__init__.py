# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
immoplan Core Primitives

Value types shared by every calculator: calendar months, exact-decimal
money, dense monthly time series, domain enums, the injected clock and the
engine settings.
"""

from .clock import Clock, FixedClock, SystemClock
from .enums import (
    AcquisitionCostType,
    CapExCategory,
    ComponentStatus,
    Condition,
    CostClassification,
    DistributionFrequency,
    LoanType,
    MarketAssessment,
    MeasurePriority,
    OwnershipType,
    PropertyType,
    RentDevelopmentModel,
    TaxClassification,
    UnitType,
    WarningSeverity,
    WarningType,
)
from .model import Model
from .money import (
    DEFAULT_CURRENCY,
    CurrencyMismatchError,
    Money,
    round_half_up,
    to_decimal,
)
from .settings import CalculationSettings
from .time_series import (
    MoneyTimeSeries,
    PeriodOutOfRangeError,
    TimeSeries,
    TimeSeriesFrozenError,
)
from .types import (
    NonNegativeDecimal,
    NonNegativeInt,
    Percent,
    PositiveDecimal,
    PositiveInt,
)
from .year_month import YearMonth

__all__ = [
    # Temporal and money values
    "YearMonth",
    "Money",
    "DEFAULT_CURRENCY",
    "CurrencyMismatchError",
    "round_half_up",
    "to_decimal",
    # Time series
    "TimeSeries",
    "MoneyTimeSeries",
    "PeriodOutOfRangeError",
    "TimeSeriesFrozenError",
    # Base model and types
    "Model",
    "Percent",
    "NonNegativeDecimal",
    "NonNegativeInt",
    "PositiveDecimal",
    "PositiveInt",
    # Enums
    "AcquisitionCostType",
    "CapExCategory",
    "ComponentStatus",
    "Condition",
    "CostClassification",
    "DistributionFrequency",
    "LoanType",
    "MarketAssessment",
    "MeasurePriority",
    "OwnershipType",
    "PropertyType",
    "RentDevelopmentModel",
    "TaxClassification",
    "UnitType",
    "WarningSeverity",
    "WarningType",
    # Environment
    "Clock",
    "FixedClock",
    "SystemClock",
    "CalculationSettings",
]
