# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from enum import Enum


class Condition(str, Enum):
    """Condition grade of the building or one of its components."""

    NEW = "New"
    GOOD = "Good"
    FAIR = "Fair"
    POOR = "Poor"
    NEEDS_RENOVATION = "NeedsRenovation"


class PropertyType(str, Enum):
    SINGLE_FAMILY_HOME = "SingleFamilyHome"
    MULTI_FAMILY_HOME = "MultiFamilyHome"
    CONDOMINIUM = "Condominium"
    COMMERCIAL = "Commercial"
    MIXED = "Mixed"


class UnitType(str, Enum):
    RESIDENTIAL = "Residential"
    COMMERCIAL = "Commercial"
    PARKING = "Parking"
    STORAGE = "Storage"


class LoanType(str, Enum):
    """
    Amortization style of a loan.

    KFW loans are annuity loans with interest-only grace years after
    disbursement. SUBORDINATED loans amortize like annuities.
    """

    ANNUITY = "Annuity"
    BULLET = "BulletLoan"
    KFW = "KfW"
    SUBORDINATED = "Subordinated"


class RentDevelopmentModel(str, Enum):
    FIXED = "Fixed"
    ANNUAL = "Annual"  # Compound increase on each tenancy anniversary
    INDEXED = "Indexed"  # Steps once the assumed index moved by the threshold
    GRADUATED = "Graduated"  # Contractual rent steps


class TaxClassification(str, Enum):
    """
    Tax treatment of a CapEx measure.

    Attributes:
        MAINTENANCE_EXPENSE: Deducted in full in the year it is incurred
        MAINTENANCE_EXPENSE_DISTRIBUTED: Deducted evenly over 2-5 years
        MANUFACTURING_COSTS: Capitalized into the depreciation base
        ACQUISITION_RELATED_COSTS: Maintenance capitalized by the 15% rule
        NOT_DEDUCTIBLE: No tax effect (e.g. own labour)
    """

    MAINTENANCE_EXPENSE = "MaintenanceExpense"
    MAINTENANCE_EXPENSE_DISTRIBUTED = "MaintenanceExpenseDistributed"
    MANUFACTURING_COSTS = "ManufacturingCosts"
    ACQUISITION_RELATED_COSTS = "AcquisitionRelatedCosts"
    NOT_DEDUCTIBLE = "NotDeductible"

    @property
    def is_maintenance(self) -> bool:
        return self in (
            TaxClassification.MAINTENANCE_EXPENSE,
            TaxClassification.MAINTENANCE_EXPENSE_DISTRIBUTED,
        )

    @property
    def is_capitalized(self) -> bool:
        return self in (
            TaxClassification.MANUFACTURING_COSTS,
            TaxClassification.ACQUISITION_RELATED_COSTS,
        )


class CapExCategory(str, Enum):
    """Building and unit component categories a CapEx measure can address."""

    # Building level
    HEATING = "Heating"
    ROOF = "Roof"
    FACADE = "Facade"
    WINDOWS = "Windows"
    ELECTRICAL = "Electrical"
    PLUMBING = "Plumbing"
    INTERIOR = "Interior"
    ENERGY = "Energy"
    EXTERIOR = "Exterior"
    OTHER = "Other"
    # Unit level
    KITCHEN = "Kitchen"
    BATHROOM = "Bathroom"
    UNIT_RENOVATION = "UnitRenovation"
    UNIT_OTHER = "UnitOther"

    @property
    def is_unit_level(self) -> bool:
        return self in _UNIT_LEVEL_CATEGORIES

    @property
    def is_building_level(self) -> bool:
        return not self.is_unit_level


_UNIT_LEVEL_CATEGORIES = frozenset(
    {
        CapExCategory.KITCHEN,
        CapExCategory.BATHROOM,
        CapExCategory.UNIT_RENOVATION,
        CapExCategory.UNIT_OTHER,
    }
)


class AcquisitionCostType(str, Enum):
    NOTARY = "Notary"
    LAND_REGISTRY = "LandRegistry"
    TRANSFER_TAX = "TransferTax"
    BROKER_FEE = "BrokerFee"
    APPRAISAL = "Appraisal"
    FINANCING_COSTS = "FinancingCosts"
    DUE_DILIGENCE = "DueDiligence"
    OTHER = "Other"


class OwnershipType(str, Enum):
    PRIVATE_INDIVIDUAL = "PrivateIndividual"
    PARTNERSHIP = "Partnership"
    CORPORATION = "Corporation"


class CostClassification(str, Enum):
    """Classification of running costs; only TRANSFERABLE is recharged to tenants."""

    TRANSFERABLE = "Transferable"
    NON_TRANSFERABLE = "NonTransferable"
    ADMINISTRATION = "Administration"
    INSURANCE = "Insurance"
    MAINTENANCE = "Maintenance"
    OTHER = "Other"


class MeasurePriority(str, Enum):
    CRITICAL = "Critical"
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"

    @property
    def rank(self) -> int:
        """0 for CRITICAL through 3 for LOW, used for ordering proposals."""
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {
    MeasurePriority.CRITICAL: 0,
    MeasurePriority.HIGH: 1,
    MeasurePriority.MEDIUM: 2,
    MeasurePriority.LOW: 3,
}


class DistributionFrequency(str, Enum):
    MONTHLY = "Monthly"
    QUARTERLY = "Quarterly"
    ANNUAL = "Annual"
    ON_DEMAND = "OnDemand"


class WarningType(str, Enum):
    LIQUIDITY_SHORTFALL = "LiquidityShortfall"
    RESERVE_BELOW_THRESHOLD = "ReserveBelowThreshold"
    DSCR_BELOW_ONE = "DscrBelowOne"
    ACQUISITION_RELATED_COSTS_TRIGGERED = "AcquisitionRelatedCostsTriggered"
    DEFERRED_MAINTENANCE = "DeferredMaintenance"
    HIGH_LTV = "HighLtv"
    NEGATIVE_CASHFLOW = "NegativeCashflow"
    TAX_LOSS_CARRYFORWARD = "TaxLossCarryforward"


class WarningSeverity(str, Enum):
    INFO = "Info"
    WARNING = "Warning"
    CRITICAL = "Critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    WarningSeverity.INFO: 0,
    WarningSeverity.WARNING: 1,
    WarningSeverity.CRITICAL: 2,
}


class ComponentStatus(str, Enum):
    """Status of a building component at the end of the forecast horizon."""

    OK = "OK"
    OVERDUE = "Overdue"
    OVERDUE_AT_PURCHASE = "OverdueAtPurchase"
    RENEWED = "Renewed"


class MarketAssessment(str, Enum):
    BELOW = "below"
    AT = "at"
    ABOVE = "above"
