# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Directory probing and the per-run snapshot cache."""

from __future__ import annotations

import os
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from .availability import PathToolChecker, ToolAvailabilityChecker
from .catalog import Ecosystem, MarkerRole, RunnerDefinition, runner_catalog
from .logging import LOGGER


@dataclass(slots=True, frozen=True)
class RunnerMatch:
    """A catalogue entry that matched a directory, with its evidence."""

    definition: RunnerDefinition
    detected_files: tuple[str, ...]
    strong: bool = True

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def ecosystem(self) -> Ecosystem:
        return self.definition.ecosystem

    @property
    def primary_file(self) -> str:
        return self.detected_files[0] if self.detected_files else ""


@dataclass(slots=True, frozen=True)
class DirectorySnapshot:
    """Result of probing one directory; never mutated after creation."""

    path: Path
    filenames: frozenset[str]
    matches: tuple[RunnerMatch, ...]

    def filtered(self, ignore: Iterable[str]) -> tuple[RunnerMatch, ...]:
        """Return the matches whose tool name is not in *ignore*."""

        ignored = {name.lower() for name in ignore}
        return tuple(match for match in self.matches if match.name.lower() not in ignored)


def _match_definition(definition: RunnerDefinition, filenames: frozenset[str]) -> RunnerMatch | None:
    required_hits: list[str] = []
    for marker in definition.markers_for(MarkerRole.REQUIRED):
        if (hit := marker.find(filenames)) is None:
            return None
        required_hits.append(hit)

    lockfile_markers = definition.markers_for(MarkerRole.LOCKFILE)
    lock_hits = [hit for marker in lockfile_markers if (hit := marker.find(filenames)) is not None]
    fallback_hits = [
        hit for marker in definition.markers_for(MarkerRole.FALLBACK) if (hit := marker.find(filenames)) is not None
    ]
    optional_hits = [
        hit for marker in definition.markers_for(MarkerRole.OPTIONAL) if (hit := marker.find(filenames)) is not None
    ]

    if lock_hits:
        strong = True
    elif lockfile_markers or not required_hits:
        if not fallback_hits:
            return None
        strong = False
    else:
        strong = True

    evidence = tuple(dict.fromkeys([*lock_hits, *required_hits, *fallback_hits, *optional_hits]))
    return RunnerMatch(definition=definition, detected_files=evidence, strong=strong)


class DirectoryProbe:
    """Evaluate the runner catalogue against a single directory listing."""

    def __init__(self, catalog: Sequence[RunnerDefinition] | None = None) -> None:
        self._catalog = tuple(catalog) if catalog is not None else runner_catalog()

    @property
    def catalog(self) -> tuple[RunnerDefinition, ...]:
        return self._catalog

    def probe(self, directory: Path) -> DirectorySnapshot:
        """Return the ordered matches for *directory*.

        The directory is listed exactly once. Entries are taken by name only,
        so symlinks are never followed and nothing below *directory* is read.
        """

        filenames = _list_names(directory)
        candidates = [
            match for definition in self._catalog if (match := _match_definition(definition, filenames)) is not None
        ]
        strong_ecosystems = {match.ecosystem for match in candidates if match.strong}
        matches = tuple(match for match in candidates if match.strong or match.ecosystem not in strong_ecosystems)
        return DirectorySnapshot(path=directory, filenames=filenames, matches=matches)


def _list_names(directory: Path) -> frozenset[str]:
    try:
        with os.scandir(directory) as entries:
            return frozenset(entry.name for entry in entries)
    except OSError as exc:
        LOGGER.debug("cannot list %s: %s", directory, exc)
        return frozenset()


class SearchCache:
    """Memoise :class:`DirectorySnapshot` objects for one process run."""

    def __init__(self, probe: DirectoryProbe | None = None) -> None:
        self._probe = probe or DirectoryProbe()
        self._snapshots: dict[Path, DirectorySnapshot] = {}
        self.probe_count = 0

    @staticmethod
    def canonical(directory: Path) -> Path:
        return directory.resolve()

    def __contains__(self, directory: object) -> bool:
        if not isinstance(directory, Path):
            return False
        return self.canonical(directory) in self._snapshots

    def __len__(self) -> int:
        return len(self._snapshots)

    def get_or_probe(self, directory: Path) -> DirectorySnapshot:
        """Return the cached snapshot for *directory*, probing on first use."""

        key = self.canonical(directory)
        if (snapshot := self._snapshots.get(key)) is not None:
            return snapshot
        snapshot = self._probe.probe(key)
        self.probe_count += 1
        self._snapshots[key] = snapshot
        LOGGER.debug(
            "probed %s: %s",
            key,
            ", ".join(match.name for match in snapshot.matches) or "no runners",
        )
        return snapshot


@dataclass(slots=True)
class DetectionContext:
    """Process-wide collaborators handed explicitly to resolution."""

    cache: SearchCache = field(default_factory=SearchCache)
    checker: ToolAvailabilityChecker = field(default_factory=PathToolChecker)

    @classmethod
    def create(
        cls,
        *,
        catalog: Sequence[RunnerDefinition] | None = None,
        checker: ToolAvailabilityChecker | None = None,
    ) -> DetectionContext:
        cache = SearchCache(DirectoryProbe(catalog))
        return cls(cache=cache, checker=checker or PathToolChecker())


__all__ = [
    "DetectionContext",
    "DirectoryProbe",
    "DirectorySnapshot",
    "RunnerMatch",
    "SearchCache",
]
