# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI entry point: resolve the project's runner and hand the command to it."""

from __future__ import annotations

import sys
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Annotated, Any, NoReturn

import typer
from rich.console import Console

from .. import __version__
from ..catalog import Ecosystem
from ..config import Config
from ..config_loader import load_config
from ..constants import EXIT_GENERIC_ERROR, EXIT_SUCCESS, META_COMMANDS, PROG_NAME
from ..discovery import DetectionContext
from ..errors import DevrunnerError
from ..execution import ExecutionBackend, ExecutionOrchestrator, ExecutionRequest, SubprocessBackend
from ..fuzzy import is_exact_match, suggest
from ..logging import colorize, configure_logging, fail, hint, info, ok, warn
from ..resolution import Resolution, ResolutionEngine
from ..scripts import parse_package_json_scripts
from ..update import (
    UpdateOutcome,
    UpdateStage,
    UpdateStateStore,
    consume_update_notification,
    is_update_disabled,
    perform_update_check,
    spawn_background_update,
)
from .reporting import render_list, render_why, run_doctor

app = typer.Typer(
    name=PROG_NAME,
    help="Run project commands with whichever tool the project uses.",
    add_completion=True,
)


@dataclass(slots=True)
class Runtime:
    """Collaborators for one invocation, replaceable in tests."""

    context: DetectionContext = field(default_factory=DetectionContext.create)
    backend: ExecutionBackend = field(default_factory=SubprocessBackend)
    store: UpdateStateStore = field(default_factory=UpdateStateStore)
    check_update: Callable[[UpdateStateStore], UpdateOutcome] = perform_update_check
    spawn_update: Callable[[], bool] = spawn_background_update


def build_runtime() -> Runtime:
    return Runtime()


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"{PROG_NAME} {__version__}")
        raise typer.Exit()


@app.command(
    context_settings={"ignore_unknown_options": True, "help_option_names": ["-h", "--help"]},
    epilog=(
        "Meta commands: list, why, doctor. Arguments after the command are passed "
        "through unchanged; use -- to pass flags that devrunner also accepts."
    ),
)
def main(
    ctx: typer.Context,
    command: Annotated[str | None, typer.Argument(help="Command or script to run.", show_default=False)] = None,
    args: Annotated[
        list[str] | None,
        typer.Argument(help="Arguments passed through to the command.", show_default=False),
    ] = None,
    levels: Annotated[
        int | None,
        typer.Option("--levels", help="Parent directories to search (0-10).", show_default=False),
    ] = None,
    ignore: Annotated[
        list[str] | None,
        typer.Option("--ignore", help="Skip a tool during detection; repeat or comma-separate."),
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show detection and execution details.")] = False,
    quiet: Annotated[bool, typer.Option("--quiet", "-q", help="Suppress devrunner's own output.")] = False,
    dry_run: Annotated[bool, typer.Option("--dry-run", help="Print the command instead of running it.")] = False,
    update: Annotated[bool, typer.Option("--update", help="Check for and install a newer release now.")] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            help="Show the version and exit.",
            callback=_version_callback,
            is_eager=True,
        ),
    ] = False,
    internal_update_check: Annotated[bool, typer.Option("--internal-update-check", hidden=True)] = False,
) -> None:
    """Detect the project's tool and run COMMAND with it."""

    runtime = build_runtime()
    if internal_update_check:
        runtime.check_update(runtime.store)
        raise typer.Exit(code=EXIT_SUCCESS)

    cwd = Path.cwd()
    config = _load_config(
        cwd,
        {
            "max_levels": levels,
            "ignore_tools": ignore or None,
            "verbose": True if verbose else None,
            "quiet": True if quiet else None,
        },
    )
    configure_logging(verbose=config.verbose and not config.quiet)
    consume_update_notification(runtime.store, quiet=config.quiet)

    if update:
        outcome = runtime.check_update(runtime.store)
        _report_update(outcome, config)
        if command is None:
            raise typer.Exit(code=EXIT_SUCCESS)

    if command is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(code=EXIT_SUCCESS)

    command = config.resolve_alias(command)
    engine = ResolutionEngine(runtime.context)

    if command in META_COMMANDS:
        raise typer.Exit(code=_run_meta(command, engine, runtime.context, cwd, config))

    try:
        resolution = engine.resolve(cwd, config.max_levels, config.ignore_tools)
    except DevrunnerError as exc:
        _exit_with_error(exc, quiet=config.quiet)

    if resolution.advisory is not None and not config.quiet:
        warn(resolution.advisory.message())

    _check_node_script(resolution, command, quiet=config.quiet)

    request = ExecutionRequest(
        resolution=resolution,
        command=command,
        args=tuple(args or ()),
        dry_run=dry_run,
        verbose=config.verbose,
        quiet=config.quiet,
        show_timing=config.show_timing,
    )
    try:
        code = ExecutionOrchestrator(runtime.backend).execute(request)
    except DevrunnerError as exc:
        _exit_with_error(exc, quiet=config.quiet)

    if not dry_run and not update and config.auto_update and not is_update_disabled():
        runtime.spawn_update()
    raise typer.Exit(code=code)


def _load_config(cwd: Path, overrides: dict[str, Any]) -> Config:
    try:
        return load_config(cwd, overrides)
    except DevrunnerError as exc:
        _exit_with_error(exc, quiet=False)


def _exit_with_error(exc: DevrunnerError, *, quiet: bool) -> NoReturn:
    if not quiet:
        fail(str(exc))
        if exc.hint:
            hint(exc.hint)
    raise typer.Exit(code=exc.exit_code) from exc


def _report_update(outcome: UpdateOutcome, config: Config) -> None:
    """Report a forced update; an aborted one is only visible with ``--verbose``."""

    if config.quiet:
        return
    if outcome.stage is UpdateStage.ABORTED:
        if config.verbose:
            warn(f"Update aborted: {outcome.reason or 'unknown error'}")
    elif outcome.updated:
        ok(f"Updated {PROG_NAME} from {outcome.current_version} to {outcome.latest_version}")
    else:
        info(f"{PROG_NAME} {outcome.current_version} is up to date")


def _run_meta(command: str, engine: ResolutionEngine, context: DetectionContext, cwd: Path, config: Config) -> int:
    console = Console()
    if command == "why":
        return render_why(engine, cwd, levels=config.max_levels, ignore=config.ignore_tools, console=console)
    if command == "doctor":
        return run_doctor(context, cwd, levels=config.max_levels, ignore=config.ignore_tools, console=console)
    try:
        resolution = engine.resolve(cwd, config.max_levels, config.ignore_tools)
    except DevrunnerError as exc:
        _exit_with_error(exc, quiet=config.quiet)
    return render_list(resolution, console)


def _check_node_script(resolution: Resolution, command: str, *, quiet: bool) -> None:
    """Stop early when a Node.js project has no script named *command*."""

    if resolution.ecosystem is not Ecosystem.NODEJS:
        return
    if command in resolution.definition.template.native_commands:
        return
    script_list = parse_package_json_scripts(resolution.directory)
    if script_list is None or is_exact_match(command, script_list.names):
        return
    if not quiet:
        fail(f'Script "{command}" not found')
        names: Sequence[str] = script_list.names
        print(colorize(f"Available scripts: {', '.join(names) or '(none)'}", "dim"), file=sys.stderr)
        if (suggestion := suggest(command, names)) is not None:
            print(f"💡 Did you mean: {PROG_NAME} {colorize(suggestion, 'green')}", file=sys.stderr)
    raise typer.Exit(code=EXIT_GENERIC_ERROR)


def run() -> None:
    """Console-script entry point."""

    app(prog_name=PROG_NAME)


__all__ = ["Runtime", "app", "build_runtime", "main", "run"]
