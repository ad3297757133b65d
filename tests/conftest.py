# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Test utilities and fixtures for immoplan testing.

This module builds a standard multi-family project and a few helper
measures so tests only spell out what they actually vary.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import List, Optional, Union

import pytest

from immoplan.core.primitives import (
    AcquisitionCostType,
    CapExCategory,
    Condition,
    CostClassification,
    FixedClock,
    LoanType,
    Money,
    MoneyTimeSeries,
    PropertyType,
    RentDevelopmentModel,
    TaxClassification,
    UnitType,
    YearMonth,
)
from immoplan.project import (
    AcquisitionCost,
    CapExConfiguration,
    CapExMeasure,
    ComponentCondition,
    CostConfiguration,
    CostItem,
    EquityContribution,
    Financing,
    Loan,
    Project,
    Property,
    Purchase,
    RecurringMeasureConfig,
    RentConfiguration,
    ReserveAccountConfig,
    TaxProfile,
    Tenancy,
    Unit,
    ValuationConfiguration,
)

FIXED_TODAY = date(2025, 1, 1)


# Property Utilities
def create_components() -> List[ComponentCondition]:
    return [
        ComponentCondition(
            category=CapExCategory.HEATING,
            condition=Condition.FAIR,
            expected_cycle_years=20,
            last_renovation_year=2010,
        ),
        ComponentCondition(
            category=CapExCategory.ROOF,
            condition=Condition.GOOD,
            expected_cycle_years=45,
            last_renovation_year=2000,
        ),
        ComponentCondition(
            category=CapExCategory.WINDOWS,
            condition=Condition.FAIR,
            expected_cycle_years=30,
            last_renovation_year=2005,
        ),
        ComponentCondition(
            category=CapExCategory.FACADE,
            condition=Condition.GOOD,
            expected_cycle_years=40,
            last_renovation_year=2000,
        ),
        ComponentCondition(
            category=CapExCategory.ELECTRICAL,
            condition=Condition.FAIR,
            expected_cycle_years=40,
            last_renovation_year=2000,
        ),
        ComponentCondition(
            category=CapExCategory.PLUMBING,
            condition=Condition.FAIR,
            expected_cycle_years=40,
            last_renovation_year=2000,
        ),
    ]


def create_property(with_units: bool = False, **overrides) -> Property:
    """
    Multi-family home built in 2000 with 400 m² of living area.

    Args:
        with_units: Add two residential units ("unit-1", "unit-2")
        **overrides: Field values replacing the defaults
    """
    fields = dict(
        id="property-1",
        property_type=PropertyType.MULTI_FAMILY_HOME,
        construction_year=2000,
        overall_condition=Condition.GOOD,
        total_area=Decimal(500),
        living_area=Decimal(400),
        land_area=Decimal(600),
        unit_count=4,
        components=create_components(),
    )
    if with_units:
        fields["units"] = [
            Unit(id="unit-1", name="WE 1", unit_type=UnitType.RESIDENTIAL, area=Decimal(85)),
            Unit(id="unit-2", name="WE 2", unit_type=UnitType.RESIDENTIAL, area=Decimal(65)),
        ]
    fields.update(overrides)
    return Property(**fields)


# Financing Utilities
def create_loan(
    principal: Decimal = Decimal("340280"),
    rate: Decimal = Decimal("3.5"),
    repayment: Decimal = Decimal("2"),
    disbursement: date = date(2025, 1, 1),
    **overrides,
) -> Loan:
    """Annuity loan with a 10-year fixed-rate period."""
    fields = dict(
        id="loan-1",
        name="Bank loan",
        loan_type=LoanType.ANNUITY,
        principal=principal,
        disbursement_date=disbursement,
        interest_rate_percent=rate,
        initial_repayment_percent=repayment,
        fixed_interest_period_months=120,
    )
    fields.update(overrides)
    return Loan(**fields)


def create_financing(loans: Optional[List[Loan]] = None, equity: Decimal = Decimal(100000)) -> Financing:
    return Financing(
        equity_contributions=[
            EquityContribution(investor_id="investor-1", amount=equity, contribution_date=date(2025, 1, 1))
        ],
        loans=[create_loan()] if loans is None else loans,
    )


# CapEx Utilities
def create_measure(**overrides) -> CapExMeasure:
    """Executed heating maintenance of 25,000 in June 2027."""
    fields = dict(
        id="measure-1",
        name="Heating replacement",
        category=CapExCategory.HEATING,
        planned_period=YearMonth(2027, 6),
        estimated_cost=Decimal(25000),
        tax_classification=TaxClassification.MAINTENANCE_EXPENSE,
        is_executed=True,
    )
    fields.update(overrides)
    return CapExMeasure(**fields)


def create_recurring_measure(**overrides) -> CapExMeasure:
    """Recurring roof maintenance template at 40% of the cycle, 25% of the renewal cost."""
    fields = dict(
        id="recurring-1",
        name="Roof maintenance",
        category=CapExCategory.ROOF,
        planned_period=YearMonth(2025, 6),
        estimated_cost=Decimal(0),
        is_recurring=True,
        recurring_config=RecurringMeasureConfig(
            interval_percent=Decimal(40),
            cost_percent=Decimal(25),
            cycle_extension_percent=Decimal(30),
        ),
    )
    fields.update(overrides)
    return CapExMeasure(**fields)


# Series Utilities
def create_series(values: List[Union[int, str]], start: YearMonth = YearMonth(2025, 1)) -> MoneyTimeSeries:
    """Monthly series starting at ``start`` with one value per month."""
    result = MoneyTimeSeries(start, start.add_months(len(values) - 1))
    for i, value in enumerate(values):
        result[start.add_months(i)] = Money(value)
    return result


# Project Utilities
def create_project(
    measures: Optional[List[CapExMeasure]] = None,
    with_units: bool = False,
    **overrides,
) -> Project:
    """
    Standard test project: 400k purchase, 100k equity, one annuity loan,
    2,000 monthly rent and an eleven-year horizon (2025-01 to 2035-12).

    Example:
        >>> project = create_project(measures=[create_measure()])
        >>> project.horizon_months
        132
    """
    fields = dict(
        id="test-standard",
        name="Standard test project",
        start_period=YearMonth(2025, 1),
        end_period=YearMonth(2035, 12),
        property=create_property(with_units=with_units),
        purchase=Purchase(
            purchase_price=Decimal(400000),
            land_value=Decimal(80000),
            purchase_date=date(2025, 1, 1),
            acquisition_costs=[
                AcquisitionCost(cost_type=AcquisitionCostType.TRANSFER_TAX, amount=Decimal(20000)),
                AcquisitionCost(cost_type=AcquisitionCostType.NOTARY, amount=Decimal(6000)),
                AcquisitionCost(cost_type=AcquisitionCostType.BROKER_FEE, amount=Decimal(14280)),
            ],
        ),
        financing=create_financing(),
        rent=RentConfiguration(
            tenancies=[
                Tenancy(
                    id="tenancy-1",
                    start_date=date(2025, 1, 1),
                    net_rent=Decimal(2000),
                    service_charge_advance=Decimal(300),
                    development_model=RentDevelopmentModel.ANNUAL,
                    annual_increase_percent=Decimal(2),
                )
            ],
            vacancy_rate_percent=Decimal(3),
        ),
        costs=CostConfiguration(
            items=[
                CostItem(
                    id="admin",
                    name="Administration",
                    classification=CostClassification.ADMINISTRATION,
                    monthly_amount=Decimal(100),
                    annual_inflation_percent=Decimal(2),
                ),
                CostItem(
                    id="insurance",
                    name="Building insurance",
                    classification=CostClassification.INSURANCE,
                    monthly_amount=Decimal(80),
                ),
            ],
            reserve_account=ReserveAccountConfig(
                initial_balance=Decimal(10000),
                contribution_per_sqm_per_year=Decimal(10),
                annual_inflation_percent=Decimal(2),
            ),
        ),
        tax_profile=TaxProfile(
            marginal_tax_rate_percent=Decimal(42),
            solidarity_surcharge_percent=Decimal("5.5"),
        ),
        capex=CapExConfiguration(measures=measures) if measures is not None else None,
        valuation=ValuationConfiguration(
            market_growth_rate_percent=Decimal("1.5"),
            sale_costs_percent=Decimal(5),
            discount_rate_percent=Decimal(5),
        ),
    )
    fields.update(overrides)
    return Project(**fields)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(FIXED_TODAY)


@pytest.fixture
def project() -> Project:
    return create_project()


@pytest.fixture
def project_with_units() -> Project:
    return create_project(with_units=True)
