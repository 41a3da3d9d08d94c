# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Static catalogue of the project runners devrunner knows how to detect.

The order of :data:`RUNNER_CATALOG` is significant. Ecosystems are listed from
highest to lowest priority and, inside an ecosystem, modern tools precede the
legacy ones they replace. Resolution relies on that order to break ties
deterministically.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from fnmatch import fnmatchcase
from typing import Final


class Ecosystem(str, Enum):
    """Language/toolchain families, declared in priority order."""

    NODEJS = "nodejs"
    PYTHON = "python"
    RUST = "rust"
    PHP = "php"
    GO = "go"
    RUBY = "ruby"
    JAVA = "java"
    DOTNET = "dotnet"
    ELIXIR = "elixir"
    SWIFT = "swift"
    ZIG = "zig"
    GENERIC = "generic"

    @classmethod
    def from_str(cls, value: str) -> Ecosystem:
        for member in cls:
            if member.value == value:
                return member
        raise ValueError(value)

    @property
    def label(self) -> str:
        return _ECOSYSTEM_LABELS[self]


_ECOSYSTEM_LABELS: Final[dict[Ecosystem, str]] = {
    Ecosystem.NODEJS: "Node.js",
    Ecosystem.PYTHON: "Python",
    Ecosystem.RUST: "Rust",
    Ecosystem.PHP: "PHP",
    Ecosystem.GO: "Go",
    Ecosystem.RUBY: "Ruby",
    Ecosystem.JAVA: "Java",
    Ecosystem.DOTNET: ".NET",
    Ecosystem.ELIXIR: "Elixir",
    Ecosystem.SWIFT: "Swift",
    Ecosystem.ZIG: "Zig",
    Ecosystem.GENERIC: "Generic",
}


class MarkerRole(str, Enum):
    """How a marker file contributes to a match."""

    REQUIRED = "required"
    LOCKFILE = "lockfile"
    FALLBACK = "fallback"
    OPTIONAL = "optional"


@dataclass(slots=True, frozen=True)
class MarkerPredicate:
    """Any-of predicate over file names; entries may be glob patterns."""

    names: tuple[str, ...]
    role: MarkerRole = MarkerRole.REQUIRED

    def find(self, filenames: Iterable[str]) -> str | None:
        """Return the first file in *filenames* satisfying the predicate.

        Literal names are checked in declaration order so that, for example,
        ``Makefile`` wins over ``makefile`` when both exist.
        """

        present = filenames if isinstance(filenames, (set, frozenset)) else set(filenames)
        for name in self.names:
            if _is_pattern(name):
                hits = sorted(entry for entry in present if fnmatchcase(entry, name))
                if hits:
                    return hits[0]
            elif name in present:
                return name
        return None


@dataclass(slots=True, frozen=True)
class InvocationTemplate:
    """Rule for turning a user command into the tool's native argv.

    Attributes:
        program: Executable invoked for the runner.
        run_prefix: Arguments inserted between the program and the command
            when the command is a project script rather than a native command.
        native_commands: Commands the program understands directly; these
            skip ``run_prefix``.
        passthrough_separator: Insert ``--`` before passthrough arguments of
            scripts (npm requires it to forward flags to the script).
        wrapper: Project-local wrapper script preferred over ``program`` when
            it exists in the project directory (``gradlew``, ``mvnw``).
    """

    program: str
    run_prefix: tuple[str, ...] = ()
    native_commands: frozenset[str] = field(default_factory=frozenset)
    passthrough_separator: bool = False
    wrapper: str | None = None


@dataclass(slots=True, frozen=True)
class RunnerDefinition:
    """Immutable description of one detectable tool."""

    name: str
    ecosystem: Ecosystem
    priority: int
    markers: tuple[MarkerPredicate, ...]
    template: InvocationTemplate
    executable: str = ""

    @property
    def binary(self) -> str:
        """Return the executable name used for availability checks."""

        return self.executable or self.template.program

    def markers_for(self, role: MarkerRole) -> tuple[MarkerPredicate, ...]:
        return tuple(marker for marker in self.markers if marker.role is role)


def _is_pattern(name: str) -> bool:
    return any(char in name for char in "*?[")


def _required(*names: str) -> MarkerPredicate:
    return MarkerPredicate(names=names, role=MarkerRole.REQUIRED)


def _lockfile(*names: str) -> MarkerPredicate:
    return MarkerPredicate(names=names, role=MarkerRole.LOCKFILE)


def _fallback(*names: str) -> MarkerPredicate:
    return MarkerPredicate(names=names, role=MarkerRole.FALLBACK)


def _optional(*names: str) -> MarkerPredicate:
    return MarkerPredicate(names=names, role=MarkerRole.OPTIONAL)


_NODE_NATIVE: Final[frozenset[str]] = frozenset(
    {"install", "ci", "add", "remove", "uninstall", "update", "upgrade", "outdated", "link", "publish", "audit"},
)
_UV_NATIVE: Final[frozenset[str]] = frozenset(
    {"sync", "lock", "add", "remove", "tree", "build", "publish", "venv", "pip", "python", "export"},
)
_POETRY_NATIVE: Final[frozenset[str]] = frozenset(
    {"install", "add", "remove", "lock", "update", "build", "publish", "show", "check", "shell", "env"},
)
_PIPENV_NATIVE: Final[frozenset[str]] = frozenset(
    {"install", "uninstall", "lock", "sync", "update", "graph", "shell", "check", "clean"},
)
_COMPOSER_NATIVE: Final[frozenset[str]] = frozenset(
    {"install", "update", "require", "remove", "dump-autoload", "outdated", "validate"},
)
_BUNDLER_NATIVE: Final[frozenset[str]] = frozenset({"install", "update", "add", "outdated", "lock"})


RUNNER_CATALOG: Final[tuple[RunnerDefinition, ...]] = (
    RunnerDefinition(
        name="bun",
        ecosystem=Ecosystem.NODEJS,
        priority=1,
        markers=(_lockfile("bun.lockb", "bun.lock"), _optional("package.json")),
        template=InvocationTemplate(program="bun", run_prefix=("run",), native_commands=_NODE_NATIVE),
    ),
    RunnerDefinition(
        name="pnpm",
        ecosystem=Ecosystem.NODEJS,
        priority=2,
        markers=(_lockfile("pnpm-lock.yaml"), _optional("package.json")),
        template=InvocationTemplate(program="pnpm", run_prefix=("run",), native_commands=_NODE_NATIVE),
    ),
    RunnerDefinition(
        name="yarn",
        ecosystem=Ecosystem.NODEJS,
        priority=3,
        markers=(_lockfile("yarn.lock"), _optional("package.json")),
        template=InvocationTemplate(program="yarn", run_prefix=("run",), native_commands=_NODE_NATIVE),
    ),
    RunnerDefinition(
        name="npm",
        ecosystem=Ecosystem.NODEJS,
        priority=4,
        markers=(_lockfile("package-lock.json"), _fallback("package.json")),
        template=InvocationTemplate(
            program="npm",
            run_prefix=("run",),
            native_commands=_NODE_NATIVE,
            passthrough_separator=True,
        ),
    ),
    RunnerDefinition(
        name="uv",
        ecosystem=Ecosystem.PYTHON,
        priority=5,
        markers=(_lockfile("uv.lock"), _fallback("pyproject.toml")),
        template=InvocationTemplate(program="uv", run_prefix=("run",), native_commands=_UV_NATIVE),
    ),
    RunnerDefinition(
        name="poetry",
        ecosystem=Ecosystem.PYTHON,
        priority=6,
        markers=(_lockfile("poetry.lock"), _optional("pyproject.toml")),
        template=InvocationTemplate(program="poetry", run_prefix=("run",), native_commands=_POETRY_NATIVE),
    ),
    RunnerDefinition(
        name="pipenv",
        ecosystem=Ecosystem.PYTHON,
        priority=7,
        markers=(_lockfile("Pipfile.lock"), _fallback("Pipfile")),
        template=InvocationTemplate(program="pipenv", run_prefix=("run",), native_commands=_PIPENV_NATIVE),
    ),
    RunnerDefinition(
        name="cargo",
        ecosystem=Ecosystem.RUST,
        priority=8,
        markers=(_required("Cargo.toml"), _optional("Cargo.lock")),
        template=InvocationTemplate(program="cargo"),
    ),
    RunnerDefinition(
        name="composer",
        ecosystem=Ecosystem.PHP,
        priority=9,
        markers=(_required("composer.json"), _optional("composer.lock")),
        template=InvocationTemplate(
            program="composer",
            run_prefix=("run-script",),
            native_commands=_COMPOSER_NATIVE,
        ),
    ),
    RunnerDefinition(
        name="go",
        ecosystem=Ecosystem.GO,
        priority=10,
        markers=(_required("go.mod"), _optional("go.sum")),
        template=InvocationTemplate(program="go"),
    ),
    RunnerDefinition(
        name="bundler",
        ecosystem=Ecosystem.RUBY,
        priority=11,
        markers=(_required("Gemfile"), _optional("Gemfile.lock")),
        template=InvocationTemplate(
            program="bundle",
            run_prefix=("exec", "rake"),
            native_commands=_BUNDLER_NATIVE,
        ),
    ),
    RunnerDefinition(
        name="gradle",
        ecosystem=Ecosystem.JAVA,
        priority=12,
        markers=(_required("build.gradle", "build.gradle.kts"), _optional("gradlew")),
        template=InvocationTemplate(program="gradle", wrapper="gradlew"),
    ),
    RunnerDefinition(
        name="maven",
        ecosystem=Ecosystem.JAVA,
        priority=13,
        markers=(_required("pom.xml"), _optional("mvnw")),
        template=InvocationTemplate(program="mvn", wrapper="mvnw"),
    ),
    RunnerDefinition(
        name="dotnet",
        ecosystem=Ecosystem.DOTNET,
        priority=14,
        markers=(_required("*.sln", "*.csproj", "*.fsproj"),),
        template=InvocationTemplate(program="dotnet"),
    ),
    RunnerDefinition(
        name="mix",
        ecosystem=Ecosystem.ELIXIR,
        priority=15,
        markers=(_required("mix.exs"), _optional("mix.lock")),
        template=InvocationTemplate(program="mix"),
    ),
    RunnerDefinition(
        name="swift",
        ecosystem=Ecosystem.SWIFT,
        priority=19,
        markers=(_required("Package.swift"),),
        template=InvocationTemplate(program="swift"),
    ),
    RunnerDefinition(
        name="zig",
        ecosystem=Ecosystem.ZIG,
        priority=20,
        markers=(_required("build.zig"),),
        template=InvocationTemplate(program="zig", run_prefix=("build",)),
    ),
    RunnerDefinition(
        name="make",
        ecosystem=Ecosystem.GENERIC,
        priority=21,
        markers=(_required("Makefile", "makefile"),),
        template=InvocationTemplate(program="make"),
    ),
)


def runner_catalog() -> tuple[RunnerDefinition, ...]:
    """Return the ordered runner catalogue (the same tuple on every call)."""

    return RUNNER_CATALOG


def find_definition(name: str) -> RunnerDefinition | None:
    """Return the catalogue entry called *name* (case-insensitive)."""

    lowered = name.lower()
    return next((definition for definition in RUNNER_CATALOG if definition.name == lowered), None)


__all__ = [
    "RUNNER_CATALOG",
    "Ecosystem",
    "InvocationTemplate",
    "MarkerPredicate",
    "MarkerRole",
    "RunnerDefinition",
    "find_definition",
    "runner_catalog",
]
