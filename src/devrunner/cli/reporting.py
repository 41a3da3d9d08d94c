# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Rich renderers for the ``list``, ``why`` and ``doctor`` meta commands."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence
from pathlib import Path

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table

from ..availability import VersionResolver
from ..catalog import Ecosystem
from ..constants import EXIT_RUNNER_NOT_FOUND, EXIT_SUCCESS, PROG_NAME
from ..discovery import DetectionContext, RunnerMatch
from ..errors import DevrunnerError
from ..resolution import Resolution, ResolutionEngine
from ..scripts import ScriptList, scripts_for, scripts_for_resolution


def render_list(resolution: Resolution, console: Console) -> int:
    """Show the detected runner and the scripts it can run."""

    primary = resolution.detected_files[0] if resolution.detected_files else ""
    console.print(f"📦 Detected: [green]{escape(resolution.name)}[/green] [dim]({escape(primary)})[/dim]")
    console.print()
    script_list = scripts_for_resolution(resolution)
    if script_list is None or not script_list.scripts:
        console.print("[dim]No scripts found for this project type.[/dim]")
        return EXIT_SUCCESS

    table = Table(title=f"Available scripts ({escape(script_list.source_file)})", box=box.SIMPLE, show_header=False)
    table.add_column("Script", style="cyan", no_wrap=True)
    table.add_column("Command", style="dim", overflow="fold")
    for script in script_list.scripts:
        table.add_row(escape(script.name), escape(script.command))
    console.print(table)
    return EXIT_SUCCESS


def render_why(
    engine: ResolutionEngine,
    start: Path,
    *,
    levels: int,
    ignore: Sequence[str],
    console: Console,
) -> int:
    """Explain which runner wins and why the others lost."""

    survey = engine.survey(start, levels)
    if survey is None:
        console.print("[red]No runner detected in this project[/red]")
        return EXIT_RUNNER_NOT_FOUND

    ignored = {name.lower() for name in ignore}
    snapshot = survey.snapshot
    remaining = snapshot.filtered(ignored)

    console.print(Rule("[bold]Runner Selection Analysis[/bold]"))
    if not remaining:
        console.print("[red]All detected runners were ignored![/red]")
        for match in snapshot.matches:
            console.print(f"  • {escape(match.name)} - {escape(match.primary_file)}")
        return EXIT_SUCCESS

    selected = remaining[0]
    console.print(f"📦 [bold]Using:[/bold] [bold green]{escape(selected.name)}[/bold green]")
    console.print(
        f"   [dim]→[/dim] Found [cyan]{escape(selected.primary_file)}[/cyan] "
        f"in {escape(str(snapshot.path))} (level {survey.level})",
    )
    console.print(f"   [dim]→[/dim] Priority: {selected.definition.priority} (lower = higher priority)")

    others = [match for match in snapshot.matches if match.name != selected.name]
    if others:
        console.print()
        console.print("[bold]Other detected runners:[/bold]")
        for match in others:
            if match.name.lower() in ignored:
                status = "[red](ignored via --ignore)[/red]"
            elif match.ecosystem is selected.ecosystem:
                status = "[yellow](same ecosystem, resolved by installed tools)[/yellow]"
            else:
                status = f"[dim](priority {match.definition.priority})[/dim]"
            console.print(f"  • {escape(match.name)} - {escape(match.primary_file)} {status}")
    return EXIT_SUCCESS


def run_doctor(
    context: DetectionContext,
    start: Path,
    *,
    levels: int,
    ignore: Sequence[str],
    console: Console | None = None,
    versions: VersionResolver | None = None,
) -> int:
    """Diagnose the project: detected runners, installed tools, conflicts."""

    console = console or Console()
    versions = versions or VersionResolver()
    engine = ResolutionEngine(context)
    console.print(Rule(f"[bold cyan]🩺 {PROG_NAME} Project Diagnosis[/bold cyan]"))

    survey = engine.survey(start, levels)
    if survey is None:
        console.print(Panel("[red]No project detected[/red]", border_style="red"))
        return EXIT_RUNNER_NOT_FOUND

    snapshot = survey.snapshot
    console.print(f"[bold]Project root:[/bold] {escape(str(snapshot.path))} (level {survey.level})")

    runner_table = Table(title="Detected Runners", box=box.SIMPLE, expand=True)
    runner_table.add_column("Tool", style="bold")
    runner_table.add_column("Marker")
    runner_table.add_column("Status")
    runner_table.add_column("Version")
    for match in snapshot.matches:
        installed = context.checker.is_installed(match.definition.binary)
        version = versions.capture(match.definition.binary) if installed else None
        status = "[green]installed[/green]" if installed else "[red]not installed[/red]"
        runner_table.add_row(escape(match.name), escape(match.primary_file), status, escape(version or "-"))
    console.print(runner_table)

    conflicts = _conflicts_by_ecosystem(snapshot.matches)
    if conflicts:
        for ecosystem, matches in conflicts.items():
            console.print(
                f"[yellow]⚠ {ecosystem.label} ecosystem has multiple lockfiles: "
                f"{escape(', '.join(match.primary_file for match in matches))}[/yellow]",
            )
    else:
        console.print("[green]✓ No lockfile conflicts detected[/green]")

    try:
        resolution = engine.resolve(start, levels, ignore)
    except DevrunnerError as exc:
        console.print(Panel(f"[red]{escape(str(exc))}[/red]", title="Resolution", border_style="red"))
        return exc.exit_code

    console.print(f"[green]✓[/green] Commands will run with [bold]{escape(resolution.name)}[/bold]")
    script_list: ScriptList | None = scripts_for(resolution.ecosystem, resolution.directory)
    if script_list is not None:
        console.print(
            f"[green]✓[/green] {len(script_list.scripts)} scripts available in {escape(script_list.source_file)}",
        )
    return EXIT_SUCCESS


def _conflicts_by_ecosystem(matches: Sequence[RunnerMatch]) -> dict[Ecosystem, list[RunnerMatch]]:
    grouped: dict[Ecosystem, list[RunnerMatch]] = defaultdict(list)
    for match in matches:
        grouped[match.ecosystem].append(match)
    return {ecosystem: items for ecosystem, items in grouped.items() if len(items) > 1}


__all__ = ["render_list", "render_why", "run_doctor"]
