# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Error taxonomy for failures that end an invocation before a child runs."""

from __future__ import annotations

from collections.abc import Sequence

from .constants import (
    EXIT_GENERIC_ERROR,
    EXIT_LOCKFILE_CONFLICT,
    EXIT_RUNNER_NOT_FOUND,
    EXIT_TOOL_NOT_INSTALLED,
)


class DevrunnerError(Exception):
    """Base class for errors that map onto a fixed process exit code."""

    exit_code: int = EXIT_GENERIC_ERROR

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint


class RunnerNotFoundError(DevrunnerError):
    """Raised when no runner matched within the search budget."""

    exit_code = EXIT_RUNNER_NOT_FOUND

    def __init__(self, levels: int) -> None:
        if levels == 0:
            message = "No runner found in the current directory"
        else:
            noun = "level" if levels == 1 else "levels"
            message = f"No runner found in the current directory or {levels} parent {noun}"
        super().__init__(
            message,
            hint="Use --levels=N to increase search depth or check if you're in the right directory.",
        )
        self.levels = levels


class LockfileConflictError(DevrunnerError):
    """Raised when several same-ecosystem tools match and more than one is installed."""

    exit_code = EXIT_LOCKFILE_CONFLICT

    def __init__(self, ecosystem: str, tools: Sequence[str], lockfiles: Sequence[str]) -> None:
        super().__init__(
            f"Conflicting {ecosystem} lockfiles found: {', '.join(lockfiles)} "
            f"(installed tools: {', '.join(tools)})",
            hint=f"Remove the stale lockfile or pass --ignore={tools[-1]} to pick a tool.",
        )
        self.ecosystem = ecosystem
        self.tools = tuple(tools)
        self.lockfiles = tuple(lockfiles)


class ToolMissingError(DevrunnerError):
    """Raised when the tool that owns the project is not installed."""

    exit_code = EXIT_TOOL_NOT_INSTALLED

    def __init__(self, tool: str, *, ecosystem: str | None = None, candidates: Sequence[str] = ()) -> None:
        if candidates:
            message = (
                f"None of the {ecosystem or 'project'} tools are installed "
                f"({', '.join(candidates)}); install {tool} to continue"
            )
        else:
            message = f"{tool} is not installed or not on PATH"
        super().__init__(message, hint=f"Install {tool} and make sure it is on your PATH.")
        self.tool = tool
        self.ecosystem = ecosystem
        self.candidates = tuple(candidates)


class SpawnError(DevrunnerError):
    """Raised when the child process could not be started."""

    def __init__(self, program: str, reason: str) -> None:
        super().__init__(f"Failed to start {program}: {reason}")
        self.program = program


class ConfigError(DevrunnerError):
    """Raised when a configuration file cannot be parsed."""


__all__ = [
    "ConfigError",
    "DevrunnerError",
    "LockfileConflictError",
    "RunnerNotFoundError",
    "SpawnError",
    "ToolMissingError",
]
