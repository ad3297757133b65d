# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from .amortization import (
    AggregatedFinancing,
    FinancingCalculator,
    LoanSchedule,
    annuity_payment,
    full_repayment_annuity,
    interest_only_payment,
    monthly_payment,
)

__all__ = [
    "FinancingCalculator",
    "LoanSchedule",
    "AggregatedFinancing",
    # Payment calculations
    "annuity_payment",
    "interest_only_payment",
    "full_repayment_annuity",
    "monthly_payment",
]
