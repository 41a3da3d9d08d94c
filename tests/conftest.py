# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence
from pathlib import Path

import pytest

from devrunner.discovery import DetectionContext
from devrunner.logging import LOGGER


class FakeChecker:
    """Availability checker answering from a fixed set of installed tools."""

    def __init__(self, installed: Iterable[str] = ()) -> None:
        self.installed = set(installed)
        self.queries: list[str] = []

    def is_installed(self, name: str) -> bool:
        self.queries.append(name)
        return name in self.installed


class RecordingBackend:
    """Execution backend that records argv instead of spawning."""

    def __init__(self, returncode: int = 0) -> None:
        self.returncode = returncode
        self.calls: list[tuple[tuple[str, ...], Path]] = []

    def run(self, argv: Sequence[str], cwd: Path) -> int:
        self.calls.append((tuple(argv), cwd))
        return self.returncode


def touch(directory: Path, *names: str, content: str = "") -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    for name in names:
        (directory / name).write_text(content, encoding="utf-8")
    return directory


@pytest.fixture
def checker() -> FakeChecker:
    return FakeChecker()


@pytest.fixture
def context(checker: FakeChecker) -> DetectionContext:
    return DetectionContext.create(checker=checker)


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep tests away from the user's config, state and release feed."""

    monkeypatch.setenv("DEVRUNNER_CONFIG", str(tmp_path / "global" / "config.toml"))
    monkeypatch.setenv("DEVRUNNER_STATE_DIR", str(tmp_path / "state"))
    monkeypatch.setenv("DEVRUNNER_NO_UPDATE", "1")
    monkeypatch.setenv("NO_COLOR", "1")


@pytest.fixture(autouse=True)
def reset_logger() -> Iterator[None]:
    """Drop handlers attached by ``--verbose`` runs so streams do not leak."""

    yield
    for handler in list(LOGGER.handlers):
        LOGGER.removeHandler(handler)
    LOGGER.setLevel(logging.NOTSET)
    LOGGER.propagate = True
    if hasattr(LOGGER, "_devrunner_verbose_configured"):
        delattr(LOGGER, "_devrunner_verbose_configured")
