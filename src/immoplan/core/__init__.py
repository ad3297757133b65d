# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
immoplan Core Framework

Foundational building blocks shared by the input model and all calculators.
"""

from . import primitives

__all__ = ["primitives"]
