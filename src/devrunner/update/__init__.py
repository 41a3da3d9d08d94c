# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Self-update: release checks, verified binary swaps and update notices."""

from __future__ import annotations

from .background import (
    build_orchestrator,
    is_update_disabled,
    perform_update_check,
    resolve_install_target,
    spawn_background_update,
    update_command,
)
from .feed import ReleaseFeed, parse_release, platform_asset_name
from .models import ReleaseAsset, ReleaseInfo, UpdateAbortedError, UpdateOutcome, UpdateStage, UpdateState
from .orchestrator import UpdateOrchestrator, is_newer
from .state import FRESHNESS_WINDOW, UpdateStateStore, consume_update_notification

__all__ = [
    "FRESHNESS_WINDOW",
    "ReleaseAsset",
    "ReleaseFeed",
    "ReleaseInfo",
    "UpdateAbortedError",
    "UpdateOrchestrator",
    "UpdateOutcome",
    "UpdateStage",
    "UpdateState",
    "UpdateStateStore",
    "build_orchestrator",
    "consume_update_notification",
    "is_newer",
    "is_update_disabled",
    "parse_release",
    "perform_update_check",
    "platform_asset_name",
    "resolve_install_target",
    "spawn_background_update",
    "update_command",
]
