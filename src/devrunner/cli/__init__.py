# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Command line interface for devrunner.

The Typer application lives in :mod:`devrunner.cli.app`; only the console
entry point is exported here so ``devrunner.cli.app`` keeps naming the module.
"""

from __future__ import annotations

from .app import run

__all__ = ["run"]
