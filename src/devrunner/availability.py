# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Executable availability and version probing."""

from __future__ import annotations

import re
import shutil
from collections.abc import Mapping
from typing import Final, Protocol

from packaging.version import InvalidVersion, Version

from .process_utils import run_command

VERSION_PROBE_TIMEOUT: Final[float] = 5.0

# Tools whose version flag is not ``--version``.
_VERSION_ARGS: Final[Mapping[str, tuple[str, ...]]] = {
    "npm": ("-v",),
    "pnpm": ("-v",),
    "yarn": ("-v",),
    "bun": ("-v",),
    "go": ("version",),
    "dotnet": ("--version",),
    "mvn": ("-v",),
    "zig": ("version",),
}


class ToolAvailabilityChecker(Protocol):
    """Answer whether an executable can be launched from this environment."""

    def is_installed(self, name: str) -> bool: ...


class PathToolChecker:
    """Look executables up on ``PATH`` (``PATHEXT`` aware on Windows)."""

    def __init__(self, path: str | None = None) -> None:
        self._path = path
        self._seen: dict[str, bool] = {}

    def is_installed(self, name: str) -> bool:
        if name not in self._seen:
            self._seen[name] = shutil.which(name, path=self._path) is not None
        return self._seen[name]


class VersionResolver:
    """Capture tool versions with ``packaging`` semantics."""

    VERSION_PATTERN = re.compile(r"v?(\d+(?:\.\d+)+)")

    def capture(self, program: str) -> str | None:
        """Return the normalised version reported by *program*, if any."""

        args = _VERSION_ARGS.get(program, ("--version",))
        try:
            completed = run_command(
                [program, *args],
                capture_output=True,
                check=False,
                timeout=VERSION_PROBE_TIMEOUT,
                discard_stdin=True,
            )
        except (OSError, ValueError):
            return None
        if completed.returncode != 0:
            return None
        output = (completed.stdout or "").strip() or (completed.stderr or "").strip()
        if not output:
            return None
        return self.normalize(output.splitlines()[0])

    def normalize(self, raw: str | None) -> str | None:
        if not raw:
            return None
        match = self.VERSION_PATTERN.search(raw)
        candidate = match.group(1) if match else raw.strip().lstrip("v")
        try:
            Version(candidate)
        except InvalidVersion:
            return None
        return candidate


__all__ = ["PathToolChecker", "ToolAvailabilityChecker", "VersionResolver"]
