# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from pydantic import Field, model_validator

from ..core.primitives import (
    CapExCategory,
    Condition,
    Model,
    PositiveDecimal,
    PropertyType,
    UnitType,
)
from .constants import get_component_cycle


class ComponentCondition(Model):
    """
    Recorded state of one building or unit component.

    Attributes:
        category: Component category
        condition: Condition grade at purchase
        last_renovation_year: Year of the last renewal (None means construction year)
        expected_cycle_years: Renewal cycle; 0 falls back to the default midpoint
    """

    category: CapExCategory
    condition: Condition
    last_renovation_year: Optional[int] = None
    expected_cycle_years: int = Field(default=0, ge=0)

    def effective_cycle_years(self) -> int:
        if self.expected_cycle_years > 0:
            return self.expected_cycle_years
        return get_component_cycle(self.category).midpoint_years

    def renovation_year(self, construction_year: int) -> int:
        if self.last_renovation_year is not None:
            return self.last_renovation_year
        return construction_year


class Unit(Model):
    """A rentable unit (flat, shop, parking space) with its own components."""

    id: str
    name: str
    unit_type: UnitType = UnitType.RESIDENTIAL
    area: PositiveDecimal
    rooms: Optional[int] = None
    components: List[ComponentCondition] = Field(default_factory=list)


class Property(Model):
    """The building being analysed."""

    id: str
    property_type: PropertyType = PropertyType.MULTI_FAMILY_HOME
    construction_year: int = Field(..., ge=1000, le=2200)
    overall_condition: Condition
    total_area: PositiveDecimal = Field(..., description="Gross area in m²")
    living_area: PositiveDecimal = Field(..., description="Lettable living area in m²")
    land_area: Optional[Decimal] = None
    unit_count: int = Field(default=1, ge=1)
    units: List[Unit] = Field(default_factory=list)
    components: List[ComponentCondition] = Field(default_factory=list)
    regional_price_per_sqm: Optional[PositiveDecimal] = Field(
        default=None,
        description="Regional market price per m² used for mean reversion.",
    )

    @model_validator(mode="after")
    def _validate_units(self) -> "Property":
        unit_ids = [unit.id for unit in self.units]
        if len(unit_ids) != len(set(unit_ids)):
            raise ValueError("Unit ids must be unique")
        return self

    def find_unit(self, unit_id: Optional[str]) -> Optional[Unit]:
        if unit_id is None:
            return None
        for unit in self.units:
            if unit.id == unit_id:
                return unit
        return None

    @property
    def has_component_data(self) -> bool:
        return bool(self.components) or any(unit.components for unit in self.units)
