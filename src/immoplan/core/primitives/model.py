# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class Model(BaseModel):
    """Base Pydantic model for all project inputs and calculation results.

    Models are immutable: a calculation never changes its input, and scenario
    overrides produce new instances via ``model_copy(update=...)``. Running
    state (loan balances, component ages) lives in local accumulators inside
    the calculators, never on a model.
    """

    model_config = ConfigDict(
        arbitrary_types_allowed=True,  # Money and TimeSeries are plain value classes
        frozen=True,
        extra="forbid",  # Catches typos in project descriptions immediately
    )
