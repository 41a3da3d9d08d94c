# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration model for devrunner."""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Final

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import (
    CONFIG_PATH_ENV,
    DEFAULT_LEVELS,
    GLOBAL_CONFIG_NAME,
    LOCAL_CONFIG_NAME,
    MAX_LEVELS,
    MIN_LEVELS,
    PROG_NAME,
)
from .errors import ConfigError

CONFIG_KEYS: Final[frozenset[str]] = frozenset(
    {"max_levels", "auto_update", "ignore_tools", "verbose", "quiet", "aliases", "show_timing"},
)


def clamp_levels(value: int) -> int:
    """Clamp a search depth into ``[MIN_LEVELS, MAX_LEVELS]``."""

    return max(MIN_LEVELS, min(MAX_LEVELS, value))


def split_tool_list(values: object) -> list[str]:
    """Flatten repeated or comma-joined tool names into a clean list."""

    if values is None:
        return []
    if isinstance(values, str):
        values = [values]
    if not isinstance(values, (list, tuple, set, frozenset)):
        raise ValueError("ignore_tools must be a string or a list of strings")
    names: list[str] = []
    for entry in values:
        for part in str(entry).split(","):
            if (name := part.strip().lower()) and name not in names:
                names.append(name)
    return names


class Config(BaseModel):
    """Merged devrunner settings."""

    model_config = ConfigDict(validate_assignment=True, extra="ignore")

    max_levels: int = DEFAULT_LEVELS
    auto_update: bool = True
    ignore_tools: list[str] = Field(default_factory=list)
    verbose: bool = False
    quiet: bool = False
    aliases: dict[str, str] = Field(default_factory=dict)
    show_timing: bool = False

    @field_validator("max_levels", mode="after")
    @classmethod
    def _clamp_levels(cls, value: int) -> int:
        return clamp_levels(value)

    @field_validator("ignore_tools", mode="before")
    @classmethod
    def _coerce_ignore(cls, value: object) -> list[str]:
        return split_tool_list(value)

    @field_validator("aliases", mode="before")
    @classmethod
    def _coerce_aliases(cls, value: object) -> dict[str, str]:
        if value is None:
            return {}
        if not isinstance(value, Mapping):
            raise ValueError("aliases must be a table of alias = command")
        return {str(key): str(command) for key, command in value.items()}

    def resolve_alias(self, command: str) -> str:
        """Return the command an alias points at, or *command* unchanged."""

        return self.aliases.get(command, command)


def global_config_path(env: Mapping[str, str] | None = None) -> Path:
    """Return the user-level configuration file location."""

    environ = os.environ if env is None else env
    if override := environ.get(CONFIG_PATH_ENV):
        return Path(override).expanduser()
    base = environ.get("XDG_CONFIG_HOME")
    if not base and os.name == "nt":
        base = environ.get("APPDATA")
    root = Path(base).expanduser() if base else Path.home() / ".config"
    return root / PROG_NAME / GLOBAL_CONFIG_NAME


def local_config_path(directory: Path) -> Path:
    """Return the per-project configuration file for *directory*."""

    return directory / LOCAL_CONFIG_NAME


__all__ = [
    "CONFIG_KEYS",
    "Config",
    "ConfigError",
    "clamp_levels",
    "global_config_path",
    "local_config_path",
    "split_tool_list",
]
