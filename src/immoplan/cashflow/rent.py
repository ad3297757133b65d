# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Rent development of a single tenancy.

Each development model turns the contractual base rent into the net rent due
in a given month. Anniversaries are counted from the tenancy start month.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from ..core.primitives import RentDevelopmentModel, YearMonth
from ..project import Tenancy, VacancyEvent

# Assumed consumer price index growth for indexed leases
ASSUMED_INDEX_GROWTH_PERCENT = Decimal("2")
DEFAULT_INDEX_THRESHOLD_PERCENT = Decimal("5")


def years_elapsed(start: date, period: YearMonth) -> int:
    """Completed tenancy years at ``period`` (anniversary in the start month)."""
    years = period.year - start.year
    if period.month < start.month:
        years -= 1
    return max(years, 0)


def rent_for_period(tenancy: Tenancy, period: YearMonth) -> Decimal:
    """
    Contractual net rent of ``tenancy`` in ``period`` (unrounded).

    Does not check whether the tenancy is active.
    """
    base = tenancy.net_rent
    model = tenancy.development_model

    if model == RentDevelopmentModel.ANNUAL:
        increase = tenancy.annual_increase_percent or Decimal(0)
        return base * (1 + increase / 100) ** years_elapsed(tenancy.start_date, period)

    if model == RentDevelopmentModel.GRADUATED:
        day = period.first_day()
        rent = base
        for step in sorted(tenancy.rent_steps, key=lambda s: s.effective_date):
            if step.effective_date <= day:
                rent = step.new_net_rent
        return rent

    if model == RentDevelopmentModel.INDEXED:
        threshold = tenancy.index_threshold_percent or DEFAULT_INDEX_THRESHOLD_PERCENT
        years = years_elapsed(tenancy.start_date, period)
        index_change = ((1 + ASSUMED_INDEX_GROWTH_PERCENT / 100) ** years - 1) * 100
        # Rent only moves in whole threshold steps
        steps = int(index_change / threshold)
        return base * (1 + steps * threshold / 100)

    return base


def is_vacant(
    tenancy: Tenancy, period: YearMonth, events: Iterable[VacancyEvent]
) -> bool:
    """True when a vacancy event covers the tenancy's unit (or all units) in ``period``."""
    for event in events:
        if event.unit_id is not None and event.unit_id != tenancy.unit_id:
            continue
        if event.start_period <= period < event.start_period.add_months(event.duration_months):
            return True
    return False


def vacancy_factor(vacancy_rate_percent: Optional[Decimal]) -> Decimal:
    return 1 - (vacancy_rate_percent or Decimal(0)) / 100
