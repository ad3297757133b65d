# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Project Input Model

The immutable description of a real-estate investment (property, purchase,
financing, rents, costs, CapEx, tax profile, valuation, investors and
scenarios) together with the statutory constants tables.
"""

from .capex import (
    CapExConfiguration,
    CapExMeasure,
    MeasureImpact,
    PaymentScheduleItem,
    RecurringMeasureConfig,
)
from .constants import (
    ACQUISITION_RELATED_PERIOD_YEARS,
    ACQUISITION_RELATED_THRESHOLD_PERCENT,
    DEFAULT_COMPONENT_CYCLES,
    MAX_DISTRIBUTION_YEARS,
    MIN_DISTRIBUTION_YEARS,
    ComponentCycle,
    DepreciationRates,
    get_component_cycle,
)
from .costs import CostConfiguration, CostItem, ReserveAccountConfig
from .financing import (
    EquityContribution,
    Financing,
    Loan,
    RefinancingTerms,
    SpecialRepayment,
)
from .investors import DistributionPolicy, Investor, InvestorConfiguration
from .project import Project
from .property import ComponentCondition, Property, Unit
from .purchase import AcquisitionCost, Purchase
from .rent import RentConfiguration, RentStep, Tenancy, VacancyEvent
from .scenario import Scenario, ScenarioParameters
from .tax_profile import CapitalGainsTaxParameters, TaxProfile
from .valuation import DeferredMaintenanceImpact, ValuationConfiguration

__all__ = [
    "Project",
    # Property
    "Property",
    "Unit",
    "ComponentCondition",
    # Purchase
    "Purchase",
    "AcquisitionCost",
    # Financing
    "Financing",
    "Loan",
    "EquityContribution",
    "RefinancingTerms",
    "SpecialRepayment",
    # Rent and costs
    "RentConfiguration",
    "Tenancy",
    "RentStep",
    "VacancyEvent",
    "CostConfiguration",
    "CostItem",
    "ReserveAccountConfig",
    # CapEx
    "CapExConfiguration",
    "CapExMeasure",
    "MeasureImpact",
    "PaymentScheduleItem",
    "RecurringMeasureConfig",
    # Tax and valuation
    "TaxProfile",
    "CapitalGainsTaxParameters",
    "ValuationConfiguration",
    "DeferredMaintenanceImpact",
    # Investors and scenarios
    "InvestorConfiguration",
    "Investor",
    "DistributionPolicy",
    "Scenario",
    "ScenarioParameters",
    # Constants
    "DepreciationRates",
    "ComponentCycle",
    "DEFAULT_COMPONENT_CYCLES",
    "get_component_cycle",
    "ACQUISITION_RELATED_PERIOD_YEARS",
    "ACQUISITION_RELATED_THRESHOLD_PERCENT",
    "MIN_DISTRIBUTION_YEARS",
    "MAX_DISTRIBUTION_YEARS",
]
