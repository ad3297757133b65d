# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import List, Optional

from pydantic import Field, model_validator

from ..core.primitives import (
    LoanType,
    Model,
    NonNegativeDecimal,
    NonNegativeInt,
    Percent,
    PositiveDecimal,
    YearMonth,
)


class EquityContribution(Model):
    investor_id: str
    amount: NonNegativeDecimal
    contribution_date: date
    description: Optional[str] = None


class SpecialRepayment(Model):
    """An unscheduled principal repayment in a given month."""

    period: YearMonth
    amount: PositiveDecimal


class RefinancingTerms(Model):
    """
    Follow-up terms once the fixed-interest period has elapsed.

    Either a fixed monthly payment, or an annuity recomputed on the remaining
    balance from ``interest_rate_percent + repayment_percent``.
    """

    interest_rate_percent: Percent
    repayment_percent: Percent = Decimal(0)
    term_months: Optional[int] = Field(default=None, gt=0)
    fixed_monthly_payment: Optional[PositiveDecimal] = None


class Loan(Model):
    """
    A single loan.

    Attributes:
        loan_type: Amortization style (annuity, bullet, KfW, subordinated)
        principal: Loan amount disbursed in full at ``disbursement_date``
        interest_rate_percent: Nominal annual interest rate
        initial_repayment_percent: Initial annual repayment for annuity loans
        fixed_monthly_payment: Overrides the computed payment when set
        fixed_interest_period_months: Length of the fixed-rate period
        commitment_fee_percent: Annual fee on the undisbursed principal
        commitment_date: Loan commitment date (defaults to the horizon start)
        commitment_free_months: Months after commitment without fee
        disagio_percent: Up-front discount, amortized over the fixed-rate period
        grace_period_years: Interest-only years after disbursement (KfW loans)
        special_repayments: Extra principal repayments by month
        refinancing: Terms after the fixed-rate period
    """

    id: str
    name: str
    loan_type: LoanType = LoanType.ANNUITY
    principal: PositiveDecimal
    disbursement_date: date
    interest_rate_percent: Percent
    initial_repayment_percent: Percent = Decimal(0)
    fixed_monthly_payment: Optional[PositiveDecimal] = None
    fixed_interest_period_months: NonNegativeInt = 0
    commitment_fee_percent: Optional[Percent] = None
    commitment_date: Optional[date] = None
    commitment_free_months: NonNegativeInt = 0
    disagio_percent: Optional[Percent] = None
    grace_period_years: NonNegativeInt = 0
    special_repayments: List[SpecialRepayment] = Field(default_factory=list)
    refinancing: Optional[RefinancingTerms] = None

    @model_validator(mode="after")
    def _validate_special_repayments(self) -> "Loan":
        periods = [sr.period for sr in self.special_repayments]
        if len(periods) != len(set(periods)):
            raise ValueError(f"Loan {self.id}: duplicate special repayment periods")
        return self

    @property
    def disbursement_period(self) -> YearMonth:
        return YearMonth.from_date(self.disbursement_date)


class Financing(Model):
    """Equity contributions and loans funding the purchase."""

    equity_contributions: List[EquityContribution] = Field(default_factory=list)
    loans: List[Loan] = Field(default_factory=list)

    @property
    def total_equity(self) -> Decimal:
        return sum((eq.amount for eq in self.equity_contributions), Decimal(0))

    @property
    def total_debt(self) -> Decimal:
        return sum((loan.principal for loan in self.loans), Decimal(0))

    @property
    def equity_ratio(self) -> Decimal:
        total = self.total_equity + self.total_debt
        if total <= 0:
            return Decimal(0)
        return self.total_equity / total
