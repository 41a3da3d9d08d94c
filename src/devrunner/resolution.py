# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Upward runner search and same-ecosystem conflict resolution."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path

from .catalog import Ecosystem, RunnerDefinition
from .discovery import DetectionContext, DirectorySnapshot, RunnerMatch
from .errors import LockfileConflictError, RunnerNotFoundError, ToolMissingError
from .logging import LOGGER


@dataclass(slots=True, frozen=True)
class Advisory:
    """Non-fatal notice that a tool was picked despite competing lockfiles."""

    chosen: str
    superseded: tuple[str, ...]

    def message(self) -> str:
        return (
            f"Multiple lockfiles found; using {self.chosen} (the only installed tool). "
            f"Superseded: {', '.join(self.superseded)}"
        )


@dataclass(slots=True, frozen=True)
class Resolution:
    """Successful resolution: the runner to use and where to run it."""

    definition: RunnerDefinition
    directory: Path
    level: int
    detected_files: tuple[str, ...]
    advisory: Advisory | None = None

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def ecosystem(self) -> Ecosystem:
        return self.definition.ecosystem


@dataclass(slots=True, frozen=True)
class Survey:
    """Unfiltered view of the first directory containing any runner."""

    snapshot: DirectorySnapshot
    level: int


def conflict_set(matches: Sequence[RunnerMatch]) -> tuple[RunnerMatch, ...]:
    """Return the matches sharing the ecosystem of the highest-priority match."""

    if not matches:
        return ()
    ecosystem = matches[0].ecosystem
    return tuple(match for match in matches if match.ecosystem is ecosystem)


class ResolutionEngine:
    """Turn a start directory into a single runner or a typed failure."""

    def __init__(self, context: DetectionContext) -> None:
        self._context = context

    def walk(self, start: Path, levels: int) -> Iterable[tuple[int, DirectorySnapshot]]:
        """Yield ``(level, snapshot)`` from *start* upwards, at most ``levels + 1`` directories."""

        directory = self._context.cache.canonical(start)
        level = 0
        while True:
            yield level, self._context.cache.get_or_probe(directory)
            if level >= levels:
                return
            parent = directory.parent
            if parent == directory:
                return
            directory = parent
            level += 1

    def resolve(self, start: Path, levels: int, ignore: Iterable[str] = ()) -> Resolution:
        """Resolve the runner for *start*.

        Raises:
            RunnerNotFoundError: When no runner matched within *levels*.
            LockfileConflictError: When several same-ecosystem tools are installed.
            ToolMissingError: When none of the conflicting tools is installed.
        """

        ignored = tuple(ignore)
        for level, snapshot in self.walk(start, levels):
            matches = snapshot.filtered(ignored)
            if not matches:
                continue
            if len(matches) != len(snapshot.matches):
                LOGGER.debug(
                    "ignored in %s: %s",
                    snapshot.path,
                    ", ".join(match.name for match in snapshot.matches if match not in matches),
                )
            return self._select(snapshot.path, level, matches)
        raise RunnerNotFoundError(levels)

    def survey(self, start: Path, levels: int) -> Survey | None:
        """Return the first snapshot with any match, ignoring nothing."""

        for level, snapshot in self.walk(start, levels):
            if snapshot.matches:
                return Survey(snapshot=snapshot, level=level)
        return None

    def _select(self, directory: Path, level: int, matches: Sequence[RunnerMatch]) -> Resolution:
        candidates = conflict_set(matches)
        if len(candidates) == 1:
            winner = candidates[0]
            LOGGER.debug("selected %s (%s) in %s", winner.name, winner.primary_file, directory)
            return Resolution(
                definition=winner.definition,
                directory=directory,
                level=level,
                detected_files=winner.detected_files,
            )

        ecosystem = candidates[0].ecosystem
        installed = [match for match in candidates if self._context.checker.is_installed(match.definition.binary)]
        LOGGER.debug(
            "%s conflict between %s; installed: %s",
            ecosystem.label,
            ", ".join(match.name for match in candidates),
            ", ".join(match.name for match in installed) or "none",
        )
        if not installed:
            raise ToolMissingError(
                candidates[0].definition.binary,
                ecosystem=ecosystem.label,
                candidates=[match.name for match in candidates],
            )
        if len(installed) > 1:
            raise LockfileConflictError(
                ecosystem.label,
                tools=[match.name for match in installed],
                lockfiles=[match.primary_file for match in candidates],
            )
        winner = installed[0]
        superseded = tuple(match.primary_file for match in candidates if match is not winner)
        return Resolution(
            definition=winner.definition,
            directory=directory,
            level=level,
            detected_files=winner.detected_files,
            advisory=Advisory(chosen=winner.name, superseded=superseded),
        )


__all__ = ["Advisory", "Resolution", "ResolutionEngine", "Survey", "conflict_set"]
