# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""Constrained numeric aliases shared by the input models."""

from __future__ import annotations

from decimal import Decimal

from pydantic import Field
from typing_extensions import Annotated

Percent = Annotated[Decimal, Field(ge=0, le=100)]
"""A percentage expressed in points (3.5 means 3.5%)."""

NonNegativeDecimal = Annotated[Decimal, Field(ge=0)]
PositiveDecimal = Annotated[Decimal, Field(gt=0)]
NonNegativeInt = Annotated[int, Field(ge=0)]
PositiveInt = Annotated[int, Field(gt=0)]
