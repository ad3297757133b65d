# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""Loan amortization calculations"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Dict, List, Optional

import pandas as pd
from pydantic import Field
from pyxirr import pmt

from ..core.primitives import (
    DEFAULT_CURRENCY,
    LoanType,
    Model,
    Money,
    MoneyTimeSeries,
    YearMonth,
    round_half_up,
    to_decimal,
)
from ..project import Loan

logger = logging.getLogger(__name__)

_BALANCE_EPSILON = Decimal("0.01")


def annuity_payment(principal: Decimal, rate_percent: Decimal, repayment_percent: Decimal) -> Decimal:
    """
    German-style annuity: constant monthly payment from the initial interest
    and repayment rates.

    Example:
        >>> annuity_payment(Decimal(120000), Decimal(10), Decimal("2.5"))
        Decimal('1250.00')
    """
    return round_half_up(principal * (rate_percent + repayment_percent) / 100 / 12)


def interest_only_payment(principal: Decimal, rate_percent: Decimal) -> Decimal:
    return round_half_up(principal * rate_percent / 100 / 12)


def full_repayment_annuity(principal: Decimal, rate_percent: Decimal, months: int) -> Decimal:
    """
    Payment that repays ``principal`` completely in ``months`` instalments.

    A zero rate degenerates to straight-line repayment.
    """
    if months <= 0:
        raise ValueError("months must be positive")
    if rate_percent == 0:
        return round_half_up(principal / months)
    payment = pmt(float(rate_percent) / 100 / 12, months, -float(principal))
    return round_half_up(to_decimal(payment))


def monthly_payment(loan: Loan) -> Decimal:
    """Scheduled payment of ``loan`` during its fixed-rate period."""
    if loan.fixed_monthly_payment is not None:
        return loan.fixed_monthly_payment
    if loan.loan_type == LoanType.BULLET:
        return interest_only_payment(loan.principal, loan.interest_rate_percent)
    return annuity_payment(
        loan.principal, loan.interest_rate_percent, loan.initial_repayment_percent
    )


class LoanSchedule(Model):
    """
    Month-by-month schedule of a single loan over the projection horizon.

    Every series covers the full horizon. Months before disbursement carry no
    balance and, at most, commitment fees (which are also part of
    ``interest`` and ``total_payment``).

    Attributes:
        loan_id: Identifier of the scheduled loan
        interest: Interest (including commitment fees) per month
        principal: Scheduled plus special principal repayment per month
        total_payment: ``interest + principal`` per month
        outstanding_balance: Balance after the month's payment
        commitment_fees: Fees on the undisbursed principal
        disagio: Disagio amortized over the fixed-rate period
    """

    loan_id: str
    interest: MoneyTimeSeries
    principal: MoneyTimeSeries
    total_payment: MoneyTimeSeries
    outstanding_balance: MoneyTimeSeries
    commitment_fees: MoneyTimeSeries
    disagio: MoneyTimeSeries

    def freeze(self) -> LoanSchedule:
        for series in (
            self.interest,
            self.principal,
            self.total_payment,
            self.outstanding_balance,
            self.commitment_fees,
            self.disagio,
        ):
            series.freeze()
        return self

    def to_dataframe(self) -> pd.DataFrame:
        """Schedule as a DataFrame indexed by monthly Period."""
        return pd.DataFrame(
            {
                "Interest": self.interest.to_series(),
                "Principal": self.principal.to_series(),
                "Payment": self.total_payment.to_series(),
                "End Balance": self.outstanding_balance.to_series(),
                "Commitment Fee": self.commitment_fees.to_series(),
                "Disagio": self.disagio.to_series(),
            }
        )


class AggregatedFinancing(Model):
    """Sum over all loan schedules."""

    schedules: List[LoanSchedule] = Field(default_factory=list)
    total_interest: MoneyTimeSeries
    total_principal: MoneyTimeSeries
    total_debt_service: MoneyTimeSeries
    total_outstanding_debt: MoneyTimeSeries
    total_disagio: MoneyTimeSeries

    def freeze(self) -> AggregatedFinancing:
        for schedule in self.schedules:
            schedule.freeze()
        for series in (
            self.total_interest,
            self.total_principal,
            self.total_debt_service,
            self.total_outstanding_debt,
            self.total_disagio,
        ):
            series.freeze()
        return self


class FinancingCalculator:
    """
    Amortizes loans month by month over a projection horizon.

    Rounding order per month: interest is rounded to cents first, the
    principal portion is the rounded remainder of the payment plus any special
    repayment (capped at the balance), so ``interest + principal`` equals the
    recorded payment exactly.

    Example:
        >>> calc = FinancingCalculator(YearMonth(2025, 1), YearMonth(2034, 12))
        >>> schedule = calc.amortize(loan)
        >>> schedule.outstanding_balance[YearMonth(2025, 2)]
        Money('119800.00', 'EUR')
    """

    def __init__(self, start: YearMonth, end: YearMonth, currency: str = DEFAULT_CURRENCY):
        if end < start:
            raise ValueError(f"Horizon end {end} precedes start {start}")
        self.start = start
        self.end = end
        self.currency = currency

    def _series(self) -> MoneyTimeSeries:
        return MoneyTimeSeries(self.start, self.end, self.currency)

    def _money(self, amount: Decimal) -> Money:
        return Money(amount, self.currency)

    def amortize(self, loan: Loan) -> LoanSchedule:
        interest_ts = self._series()
        principal_ts = self._series()
        total_ts = self._series()
        balance_ts = self._series()
        fee_ts = self._series()
        disagio_ts = self._series()

        disbursement = loan.disbursement_period
        fixed_end = disbursement.add_months(loan.fixed_interest_period_months)
        grace_end = disbursement.add_years(loan.grace_period_years)

        commitment_start = (
            YearMonth.from_date(loan.commitment_date) if loan.commitment_date else self.start
        )
        fee_start = commitment_start.add_months(loan.commitment_free_months)
        fee_percent = loan.commitment_fee_percent or Decimal(0)

        disagio_monthly = Decimal(0)
        if loan.disagio_percent and loan.fixed_interest_period_months > 0:
            disagio_monthly = round_half_up(
                loan.principal * loan.disagio_percent / 100 / loan.fixed_interest_period_months
            )

        special: Dict[YearMonth, Decimal] = {
            sr.period: sr.amount for sr in loan.special_repayments
        }

        rate_percent = loan.interest_rate_percent
        payment = monthly_payment(loan)
        refinanced = False
        balance = loan.principal

        # Loans disbursed before the horizon are rolled forward from disbursement
        # so the opening balance reflects repayments already made.
        for period in YearMonth.range(min(self.start, disbursement), self.end):
            in_horizon = balance_ts.has_value(period)

            if period < disbursement:
                if fee_percent and period >= fee_start and in_horizon:
                    fee = self._money(round_half_up(loan.principal * fee_percent / 100 / 12))
                    fee_ts[period] = fee
                    interest_ts[period] = fee
                    total_ts[period] = fee
                continue

            if period == disbursement:
                if in_horizon:
                    balance_ts[period] = self._money(balance)
                continue

            if period > fixed_end and loan.refinancing is not None and not refinanced:
                payment, rate_percent = self._refinance(loan, balance)
                refinanced = True
                logger.debug(
                    f"Loan {loan.id} refinanced in {period} at {rate_percent}% "
                    f"with payment {payment}"
                )

            interest = round_half_up(balance * rate_percent / 100 / 12)

            if loan.loan_type == LoanType.KFW and period <= grace_end:
                principal = Decimal(0)
            else:
                principal = round_half_up(payment - interest)
                principal = max(principal, Decimal(0)) + special.get(period, Decimal(0))
                principal = min(principal, balance)

            balance -= principal
            if balance < _BALANCE_EPSILON:
                balance = Decimal(0)

            if not in_horizon:
                continue

            interest_ts[period] = self._money(interest)
            principal_ts[period] = self._money(principal)
            total_ts[period] = self._money(interest + principal)
            balance_ts[period] = self._money(balance)
            if disagio_monthly and period <= fixed_end:
                disagio_ts[period] = self._money(disagio_monthly)

        return LoanSchedule(
            loan_id=loan.id,
            interest=interest_ts,
            principal=principal_ts,
            total_payment=total_ts,
            outstanding_balance=balance_ts,
            commitment_fees=fee_ts,
            disagio=disagio_ts,
        )

    @staticmethod
    def _refinance(loan: Loan, balance: Decimal):
        terms = loan.refinancing
        rate = terms.interest_rate_percent
        if terms.fixed_monthly_payment is not None:
            return terms.fixed_monthly_payment, rate
        if terms.repayment_percent == 0 and terms.term_months:
            return full_repayment_annuity(balance, rate, terms.term_months), rate
        return annuity_payment(balance, rate, terms.repayment_percent), rate

    def aggregate(self, loans: List[Loan], schedules: Optional[List[LoanSchedule]] = None) -> AggregatedFinancing:
        """Amortize every loan (unless schedules are given) and sum them."""
        if schedules is None:
            schedules = [self.amortize(loan) for loan in loans]

        total_interest = self._series()
        total_principal = self._series()
        total_balance = self._series()
        total_disagio = self._series()
        for schedule in schedules:
            total_interest = total_interest.add(schedule.interest)
            total_principal = total_principal.add(schedule.principal)
            total_balance = total_balance.add(schedule.outstanding_balance)
            total_disagio = total_disagio.add(schedule.disagio)

        logger.debug(
            f"Aggregated {len(schedules)} loans: interest {total_interest.sum()}, "
            f"principal {total_principal.sum()}"
        )

        return AggregatedFinancing(
            schedules=schedules,
            total_interest=total_interest,
            total_principal=total_principal,
            total_debt_service=total_interest.add(total_principal),
            total_outstanding_debt=total_balance,
            total_disagio=total_disagio,
        )
