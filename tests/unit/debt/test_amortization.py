# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for loan amortization.

Covers German annuity loans, bullet loans, KfW grace years, special
repayments, refinancing after the fixed-rate period, commitment fees,
disagio and the aggregation over several loans.
"""

from datetime import date
from decimal import Decimal

import pandas as pd
import pytest

from immoplan.core.primitives import LoanType, Money, YearMonth
from immoplan.debt import (
    FinancingCalculator,
    annuity_payment,
    full_repayment_annuity,
    interest_only_payment,
    monthly_payment,
)
from immoplan.project import RefinancingTerms, SpecialRepayment
from tests.conftest import create_loan

START = YearMonth(2025, 1)
END = YearMonth(2035, 12)


@pytest.fixture
def calculator() -> FinancingCalculator:
    return FinancingCalculator(START, END)


class TestPaymentFunctions:
    """Test the payment formulas."""

    def test_annuity_payment(self):
        assert annuity_payment(Decimal(120000), Decimal(10), Decimal("2.5")) == Decimal("1250.00")

    def test_interest_only_payment(self):
        assert interest_only_payment(Decimal(100000), Decimal(4)) == Decimal("333.33")

    def test_full_repayment_annuity(self):
        assert full_repayment_annuity(Decimal(200000), Decimal(6), 360) == Decimal("1199.10")

    def test_full_repayment_annuity_without_interest(self):
        assert full_repayment_annuity(Decimal(120000), Decimal(0), 120) == Decimal("1000.00")

    def test_full_repayment_annuity_needs_months(self):
        with pytest.raises(ValueError):
            full_repayment_annuity(Decimal(1000), Decimal(3), 0)

    def test_monthly_payment_prefers_fixed_payment(self):
        loan = create_loan(fixed_monthly_payment=Decimal(900))
        assert monthly_payment(loan) == Decimal(900)

    def test_monthly_payment_for_bullet_loan(self):
        loan = create_loan(principal=Decimal(100000), rate=Decimal(4), loan_type=LoanType.BULLET)
        assert monthly_payment(loan) == Decimal("333.33")


class TestAnnuityLoan:
    """Test a plain annuity loan disbursed at the horizon start."""

    def test_first_payment_month(self, calculator):
        loan = create_loan(principal=Decimal(120000), rate=Decimal(3), repayment=Decimal(2))
        schedule = calculator.amortize(loan)

        # Disbursement month carries the balance but no payment
        assert schedule.outstanding_balance[START] == Money(120000)
        assert schedule.total_payment[START] == Money.zero()

        feb = YearMonth(2025, 2)
        assert schedule.interest[feb] == Money(300)
        assert schedule.principal[feb] == Money(200)
        assert schedule.outstanding_balance[feb] == Money(119800)

    def test_payment_splits_exactly(self, calculator):
        schedule = calculator.amortize(create_loan())
        for period, payment in schedule.total_payment:
            assert payment == schedule.interest[period] + schedule.principal[period]

    def test_balance_decreases_monotonically(self, calculator):
        schedule = calculator.amortize(create_loan())
        balances = [value.amount for _, value in schedule.outstanding_balance]
        assert all(b2 <= b1 for b1, b2 in zip(balances, balances[1:]))

    def test_short_loan_is_repaid_and_stops(self, calculator):
        loan = create_loan(principal=Decimal(10000), rate=Decimal(3), repayment=Decimal(50))
        schedule = calculator.amortize(loan)
        assert schedule.outstanding_balance[END] == Money.zero()
        assert schedule.total_payment[END] == Money.zero()
        assert schedule.principal.sum() == Money(10000)

    def test_to_dataframe(self, calculator):
        frame = calculator.amortize(create_loan()).to_dataframe()
        assert isinstance(frame.index, pd.PeriodIndex)
        assert list(frame.columns) == [
            "Interest",
            "Principal",
            "Payment",
            "End Balance",
            "Commitment Fee",
            "Disagio",
        ]
        assert len(frame) == 132


class TestLoanVariants:
    def test_bullet_loan_pays_interest_only(self, calculator):
        loan = create_loan(principal=Decimal(100000), rate=Decimal(4), loan_type=LoanType.BULLET)
        schedule = calculator.amortize(loan)
        assert schedule.interest[YearMonth(2025, 2)] == Money("333.33")
        assert schedule.principal.sum() == Money.zero()
        assert schedule.outstanding_balance[END] == Money(100000)

    def test_kfw_grace_period(self, calculator):
        loan = create_loan(
            principal=Decimal(120000),
            rate=Decimal(3),
            repayment=Decimal(2),
            loan_type=LoanType.KFW,
            grace_period_years=1,
        )
        schedule = calculator.amortize(loan)
        assert schedule.principal[YearMonth(2026, 1)] == Money.zero()
        assert schedule.interest[YearMonth(2026, 1)] == Money(300)
        assert schedule.principal[YearMonth(2026, 2)] == Money(200)

    def test_special_repayment(self, calculator):
        loan = create_loan(
            principal=Decimal(120000),
            rate=Decimal(3),
            repayment=Decimal(2),
            special_repayments=[SpecialRepayment(period=YearMonth(2025, 2), amount=Decimal(10000))],
        )
        schedule = calculator.amortize(loan)
        assert schedule.principal[YearMonth(2025, 2)] == Money(10200)
        assert schedule.outstanding_balance[YearMonth(2025, 2)] == Money(109800)

    def test_refinancing_after_fixed_period(self):
        calc = FinancingCalculator(START, YearMonth(2028, 12))
        loan = create_loan(
            principal=Decimal(120000),
            rate=Decimal(3),
            repayment=Decimal(2),
            fixed_interest_period_months=24,
            refinancing=RefinancingTerms(interest_rate_percent=Decimal(6), repayment_percent=Decimal(2)),
        )
        schedule = calc.amortize(loan)
        fixed_end = YearMonth(2027, 1)
        first_refinanced = fixed_end.add_months(1)

        balance = schedule.outstanding_balance[fixed_end].amount
        expected_interest = (Money(balance) * Decimal(6) / 100 / 12).round()
        assert schedule.interest[first_refinanced] == expected_interest
        assert schedule.total_payment[first_refinanced] == Money(annuity_payment(balance, Decimal(6), Decimal(2)))

    def test_commitment_fees_before_disbursement(self, calculator):
        loan = create_loan(
            principal=Decimal(120000),
            disbursement=date(2025, 4, 1),
            commitment_fee_percent=Decimal(3),
        )
        schedule = calculator.amortize(loan)
        assert schedule.commitment_fees[YearMonth(2025, 1)] == Money(300)
        assert schedule.commitment_fees.sum() == Money(900)
        assert schedule.outstanding_balance[YearMonth(2025, 3)] == Money.zero()
        # Fees count as interest
        assert schedule.interest[YearMonth(2025, 1)] == Money(300)

    def test_commitment_free_months(self, calculator):
        loan = create_loan(
            principal=Decimal(120000),
            disbursement=date(2025, 4, 1),
            commitment_fee_percent=Decimal(3),
            commitment_free_months=2,
        )
        schedule = calculator.amortize(loan)
        assert schedule.commitment_fees.sum() == Money(300)

    def test_disagio_amortized_over_fixed_period(self, calculator):
        loan = create_loan(principal=Decimal(120000), disagio_percent=Decimal(5))
        schedule = calculator.amortize(loan)
        assert schedule.disagio[YearMonth(2025, 2)] == Money(50)
        assert schedule.disagio.sum() == Money(6000)

    def test_loan_disbursed_before_horizon(self, calculator):
        loan = create_loan(
            principal=Decimal(120000),
            rate=Decimal(3),
            repayment=Decimal(2),
            disbursement=date(2024, 1, 1),
        )
        schedule = calculator.amortize(loan)
        opening = schedule.outstanding_balance[START]
        assert Money(110000) < opening < Money(120000)


class TestAggregation:
    def test_totals_add_up(self, calculator):
        loans = [
            create_loan(id="a", principal=Decimal(120000), rate=Decimal(3), repayment=Decimal(2)),
            create_loan(
                id="b", principal=Decimal(100000), rate=Decimal(4), loan_type=LoanType.BULLET
            ),
        ]
        aggregated = calculator.aggregate(loans)
        feb = YearMonth(2025, 2)
        assert len(aggregated.schedules) == 2
        assert aggregated.total_interest[feb] == Money("633.33")
        assert aggregated.total_principal[feb] == Money(200)
        assert aggregated.total_debt_service[feb] == Money("833.33")
        assert aggregated.total_outstanding_debt[feb] == Money(219800)

    def test_no_loans(self, calculator):
        aggregated = calculator.aggregate([])
        assert aggregated.total_debt_service.sum() == Money.zero()

    def test_freeze(self, calculator):
        aggregated = calculator.aggregate([create_loan()]).freeze()
        assert aggregated.total_interest.is_frozen
        assert aggregated.schedules[0].principal.is_frozen
