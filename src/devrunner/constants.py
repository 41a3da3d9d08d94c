# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Shared constants used across devrunner modules."""

from __future__ import annotations

from typing import Final

PROG_NAME: Final[str] = "devrunner"

# Exit codes reserved for failures that happen before a child process runs.
EXIT_SUCCESS: Final[int] = 0
EXIT_GENERIC_ERROR: Final[int] = 1
EXIT_RUNNER_NOT_FOUND: Final[int] = 2
EXIT_LOCKFILE_CONFLICT: Final[int] = 3
EXIT_TOOL_NOT_INSTALLED: Final[int] = 127

MIN_LEVELS: Final[int] = 0
MAX_LEVELS: Final[int] = 10
DEFAULT_LEVELS: Final[int] = 3

LOCAL_CONFIG_NAME: Final[str] = ".devrunner.toml"
GLOBAL_CONFIG_NAME: Final[str] = "config.toml"
UPDATE_STATE_NAME: Final[str] = "update_state.json"

CONFIG_PATH_ENV: Final[str] = "DEVRUNNER_CONFIG"
STATE_DIR_ENV: Final[str] = "DEVRUNNER_STATE_DIR"
NO_UPDATE_ENV: Final[str] = "DEVRUNNER_NO_UPDATE"
RELEASE_URL_ENV: Final[str] = "DEVRUNNER_RELEASE_URL"
INSTALL_PATH_ENV: Final[str] = "DEVRUNNER_INSTALL_PATH"
NO_COLOR_ENV: Final[str] = "NO_COLOR"

INTERNAL_UPDATE_FLAG: Final[str] = "--internal-update-check"

DEFAULT_RELEASE_URL: Final[str] = "https://api.github.com/repos/devrunner/devrunner/releases/latest"

# Meta commands handled by devrunner itself rather than a project tool.
META_COMMANDS: Final[frozenset[str]] = frozenset({"list", "why", "doctor"})
