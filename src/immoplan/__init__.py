# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
immoplan - Real Estate Investment Projection Engine

Monthly cashflow, debt, tax and property-value projections for a single
buy-and-hold residential investment, computed from one immutable project
description.

Key Entry Points:
- immoplan.calculate() - Full projection with warnings, metrics and exit analysis
- immoplan.project.* - Input model (property, purchase, financing, rents, costs, CapEx)
- immoplan.debt.* - Loan amortization
- immoplan.tax.* - Depreciation, 15% rule, capital gains
- immoplan.valuation.* - Property value forecast and exit analysis

Example Usage:
    ```python
    from immoplan import calculate
    from immoplan.core.primitives import FixedClock

    result = calculate(project, clock=FixedClock(date(2025, 1, 1)))
    print(result.metrics.irr_after_tax_percent)
    for scenario in result.exit_analysis.scenarios:
        print(scenario.label, scenario.net_sale_proceeds)
    ```
"""

import importlib
import logging

# Libraries leave handler configuration to the application.
logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "1.0.0"

# Public API surface (lazy-loaded on first attribute access)
__all__ = [  # noqa: F822 - lazy loading
    "analysis",
    "calculate",
    "capex",
    "cashflow",
    "core",
    "debt",
    "project",
    "tax",
    "valuation",
]


_LAZY_MODULES = {
    "analysis": "immoplan.analysis",
    "capex": "immoplan.capex",
    "cashflow": "immoplan.cashflow",
    "core": "immoplan.core",
    "debt": "immoplan.debt",
    "project": "immoplan.project",
    "tax": "immoplan.tax",
    "valuation": "immoplan.valuation",
}


def __getattr__(name: str):
    if name == "calculate":
        from .analysis import calculate

        globals()[name] = calculate
        return calculate
    module_path = _LAZY_MODULES.get(name)
    if module_path is None:
        raise AttributeError(f"module 'immoplan' has no attribute '{name}'")
    module = importlib.import_module(module_path)
    globals()[name] = module
    return module
