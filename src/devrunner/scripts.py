# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Discover the scripts and targets a project exposes.

Manifests are only read to list names; nothing here executes them.
"""

from __future__ import annotations

import json
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final

from .catalog import Ecosystem
from .resolution import Resolution

PACKAGE_JSON: Final[str] = "package.json"
PYPROJECT: Final[str] = "pyproject.toml"
CARGO_MANIFEST: Final[str] = "Cargo.toml"
MAKEFILES: Final[tuple[str, ...]] = ("Makefile", "makefile")

CARGO_BUILTINS: Final[tuple[str, ...]] = ("build", "test", "run", "check", "clippy", "fmt", "doc", "bench")


@dataclass(slots=True, frozen=True)
class ProjectScript:
    name: str
    command: str


@dataclass(slots=True, frozen=True)
class ScriptList:
    scripts: tuple[ProjectScript, ...]
    source_file: str

    @property
    def names(self) -> list[str]:
        return [script.name for script in self.scripts]


def parse_package_json_scripts(project_dir: Path) -> ScriptList | None:
    """Return the ``scripts`` table of ``package.json``."""

    path = project_dir / PACKAGE_JSON
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError, UnicodeDecodeError):
        return None
    scripts = payload.get("scripts") if isinstance(payload, dict) else None
    if not isinstance(scripts, dict):
        return None
    entries = tuple(
        ProjectScript(name=str(name), command=command if isinstance(command, str) else "")
        for name, command in scripts.items()
    )
    return ScriptList(scripts=entries, source_file=PACKAGE_JSON)


def parse_makefile_targets(project_dir: Path) -> ScriptList | None:
    """Return the explicit targets of a Makefile, skipping special and variable lines."""

    makefile = next((project_dir / name for name in MAKEFILES if (project_dir / name).is_file()), None)
    if makefile is None:
        return None
    try:
        content = makefile.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return None

    targets: list[ProjectScript] = []
    seen: set[str] = set()
    for line in content.splitlines():
        if not line or line[0] in "\t #":
            continue
        head, colon, rest = line.partition(":")
        target = head.strip()
        if not colon or not target or rest.startswith(("=", ":=")):
            continue
        if target.startswith(".") or "=" in target or "$" in target:
            continue
        # ``a b: deps`` declares several targets at once.
        for name in target.split():
            if name not in seen:
                seen.add(name)
                targets.append(ProjectScript(name=name, command=f"make {name}"))
    if not targets:
        return None
    return ScriptList(scripts=tuple(targets), source_file=makefile.name)


def parse_cargo_targets(project_dir: Path) -> ScriptList | None:
    if not (project_dir / CARGO_MANIFEST).is_file():
        return None
    scripts = tuple(ProjectScript(name=name, command=f"cargo {name}") for name in CARGO_BUILTINS)
    return ScriptList(scripts=scripts, source_file=CARGO_MANIFEST)


def parse_pyproject_scripts(project_dir: Path) -> ScriptList | None:
    """Return ``[project.scripts]`` and ``[tool.poetry.scripts]`` entries."""

    path = project_dir / PYPROJECT
    try:
        with path.open("rb") as handle:
            payload = tomllib.load(handle)
    except (OSError, tomllib.TOMLDecodeError):
        return None

    scripts: list[ProjectScript] = []
    for table in (_nested(payload, "tool", "poetry", "scripts"), _nested(payload, "project", "scripts")):
        if isinstance(table, dict):
            scripts.extend(
                ProjectScript(name=str(name), command=command if isinstance(command, str) else "")
                for name, command in table.items()
            )
    if not scripts:
        return None
    return ScriptList(scripts=tuple(scripts), source_file=PYPROJECT)


def _nested(payload: dict[str, Any], *keys: str) -> Any:
    current: Any = payload
    for key in keys:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


def scripts_for(ecosystem: Ecosystem, project_dir: Path) -> ScriptList | None:
    """Return the scripts relevant to *ecosystem* in *project_dir*."""

    match ecosystem:
        case Ecosystem.NODEJS:
            return parse_package_json_scripts(project_dir)
        case Ecosystem.RUST:
            return parse_cargo_targets(project_dir)
        case Ecosystem.PYTHON:
            return parse_pyproject_scripts(project_dir)
        case Ecosystem.GENERIC:
            return parse_makefile_targets(project_dir)
        case _:
            return None


def scripts_for_resolution(resolution: Resolution) -> ScriptList | None:
    return scripts_for(resolution.ecosystem, resolution.directory)


__all__ = [
    "ProjectScript",
    "ScriptList",
    "parse_cargo_targets",
    "parse_makefile_targets",
    "parse_package_json_scripts",
    "parse_pyproject_scripts",
    "scripts_for",
    "scripts_for_resolution",
]
