# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
CapEx planning helpers: recurring measure expansion and renovation forecasts.
"""

from .recurring import RecurringOccurrence, expand_occurrences, expand_recurring_measures
from .renovation import (
    BUILDING_CATEGORIES,
    UNIT_CATEGORIES,
    RenovationForecastGenerator,
    derive_priority,
)

__all__ = [
    "RecurringOccurrence",
    "expand_occurrences",
    "expand_recurring_measures",
    "RenovationForecastGenerator",
    "derive_priority",
    "BUILDING_CATEGORIES",
    "UNIT_CATEGORIES",
]
