# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Calculation pipeline, scenario overrides, metrics, warnings and result models.
"""

from __future__ import annotations

from typing import Optional

from ..core.primitives import CalculationSettings, Clock
from ..project import Project
from .aggregation import (
    CapExTimelineItem,
    TaxBridgeRow,
    YearlyCashflowRow,
    capex_timeline,
    tax_bridge_rows,
    yearly_cashflow_rows,
)
from .investors import InvestorCalculator, InvestorResult, distribute
from .metrics import InvestmentMetrics, MetricsCalculator
from .orchestrator import CalculationOrchestrator
from .results import CalculationResult
from .scenarios import ScenarioNotFoundError, apply_overrides, apply_scenario
from .warnings import CalculationWarning, finalize_warnings


def calculate(
    project: Project,
    scenario_id: Optional[str] = None,
    *,
    settings: Optional[CalculationSettings] = None,
    clock: Optional[Clock] = None,
) -> CalculationResult:
    """
    Run the full projection for ``project``.

    Args:
        project: The project to calculate
        scenario_id: Scenario to apply; ``None`` or "base" uses the project as is
        settings: Engine settings
        clock: Date provider; inject a ``FixedClock`` for reproducible results

    Raises:
        ScenarioNotFoundError: ``scenario_id`` is not defined on the project
    """
    return CalculationOrchestrator(settings=settings, clock=clock).calculate(project, scenario_id)


__all__ = [
    "calculate",
    "CalculationOrchestrator",
    "CalculationResult",
    # Scenarios
    "ScenarioNotFoundError",
    "apply_scenario",
    "apply_overrides",
    # Metrics and warnings
    "InvestmentMetrics",
    "MetricsCalculator",
    "CalculationWarning",
    "finalize_warnings",
    # Investors
    "InvestorCalculator",
    "InvestorResult",
    "distribute",
    # Yearly views
    "YearlyCashflowRow",
    "TaxBridgeRow",
    "CapExTimelineItem",
    "yearly_cashflow_rows",
    "tax_bridge_rows",
    "capex_timeline",
]
