# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Build the native command line for a resolved runner and run it."""

from __future__ import annotations

import shlex
import time
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Final, Protocol

from .catalog import RunnerDefinition
from .constants import EXIT_GENERIC_ERROR, EXIT_SUCCESS
from .errors import SpawnError, ToolMissingError
from .logging import LOGGER, colorize, info, ok, warn
from .process_utils import run_command
from .resolution import Resolution

PASSTHROUGH_SEPARATOR: Final[str] = "--"
INTERRUPTED_RETURNCODE: Final[int] = 130


def build_argv(
    definition: RunnerDefinition,
    command: str,
    args: Sequence[str] = (),
    *,
    directory: Path | None = None,
) -> list[str]:
    """Return the argv that runs *command* through *definition*.

    *args* are appended unchanged: no splitting, quoting or shell expansion.
    """

    template = definition.template
    program = template.program
    if template.wrapper and directory is not None and (directory / template.wrapper).is_file():
        program = f"./{template.wrapper}"

    if command in template.native_commands or not template.run_prefix:
        return [program, command, *args]

    argv = [program, *template.run_prefix, command]
    if args and template.passthrough_separator:
        argv.append(PASSTHROUGH_SEPARATOR)
    argv.extend(args)
    return argv


class ExecutionBackend(Protocol):
    """Spawn a command with inherited stdio and return its exit code."""

    def run(self, argv: Sequence[str], cwd: Path) -> int: ...


class SubprocessBackend:
    """Run commands through :func:`devrunner.process_utils.run_command`."""

    def run(self, argv: Sequence[str], cwd: Path) -> int:
        try:
            completed = run_command(argv, cwd=cwd, check=False)
        except KeyboardInterrupt:
            return INTERRUPTED_RETURNCODE
        if completed.returncode < 0:
            # Terminated by a signal.
            return EXIT_GENERIC_ERROR
        return completed.returncode


@dataclass(slots=True)
class ExecutionRequest:
    """Everything needed to run one resolved command."""

    resolution: Resolution
    command: str
    args: tuple[str, ...] = ()
    dry_run: bool = False
    verbose: bool = False
    quiet: bool = False
    show_timing: bool = False


class ExecutionOrchestrator:
    """Render or execute the resolved command."""

    def __init__(self, backend: ExecutionBackend | None = None) -> None:
        self._backend = backend or SubprocessBackend()

    def execute(self, request: ExecutionRequest) -> int:
        """Return the exit code of the child, or ``0`` for a dry run.

        Raises:
            ToolMissingError: When the program cannot be found.
            SpawnError: When the program exists but cannot be started.
        """

        resolution = request.resolution
        argv = build_argv(
            resolution.definition,
            request.command,
            request.args,
            directory=resolution.directory,
        )
        rendered = shlex.join(argv)

        if request.dry_run:
            print(rendered)
            if request.verbose:
                info(f"Would run in {resolution.directory}", use_emoji=False)
            return EXIT_SUCCESS

        if request.verbose and not request.quiet:
            info(f"Running: {colorize(rendered, 'cyan')} (in {resolution.directory})", use_emoji=False)

        started = time.perf_counter()
        try:
            code = self._backend.run(argv, resolution.directory)
        except FileNotFoundError as exc:
            LOGGER.debug("spawn failed: %s", exc)
            raise ToolMissingError(argv[0]) from exc
        except OSError as exc:
            raise SpawnError(argv[0], exc.strerror or str(exc)) from exc
        elapsed = time.perf_counter() - started

        if request.show_timing and not request.quiet:
            report = ok if code == EXIT_SUCCESS else warn
            report(f"Completed in {format_elapsed(elapsed)}", use_emoji=False)
        return code


def format_elapsed(seconds: float) -> str:
    """Format *seconds* as ``1.23s`` or ``2m 5.0s``."""

    if seconds < 60:
        return f"{seconds:.2f}s"
    minutes = int(seconds // 60)
    return f"{minutes}m {seconds % 60:.1f}s"


__all__ = [
    "ExecutionBackend",
    "ExecutionOrchestrator",
    "ExecutionRequest",
    "SubprocessBackend",
    "build_argv",
    "format_elapsed",
]
