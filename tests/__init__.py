# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""immoplan test suite, organized into unit tests per package and end-to-end calculations."""
