# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for directory probing and the snapshot cache."""

from __future__ import annotations

import os
from pathlib import Path

import pytest
from conftest import touch

from devrunner.catalog import Ecosystem
from devrunner.discovery import DirectoryProbe, SearchCache


def _names(directory: Path) -> list[str]:
    return [match.name for match in DirectoryProbe().probe(directory).matches]


def test_package_json_alone_detects_npm(tmp_path: Path) -> None:
    touch(tmp_path, "package.json")
    snapshot = DirectoryProbe().probe(tmp_path)
    assert [match.name for match in snapshot.matches] == ["npm"]
    assert snapshot.matches[0].strong is False
    assert snapshot.matches[0].primary_file == "package.json"


def test_lockfile_shadows_weak_npm_match(tmp_path: Path) -> None:
    touch(tmp_path, "package.json", "pnpm-lock.yaml")
    snapshot = DirectoryProbe().probe(tmp_path)
    assert [match.name for match in snapshot.matches] == ["pnpm"]
    assert snapshot.matches[0].detected_files == ("pnpm-lock.yaml", "package.json")


def test_yarn_and_npm_lockfiles_both_match(tmp_path: Path) -> None:
    touch(tmp_path, "package.json", "yarn.lock", "package-lock.json")
    assert _names(tmp_path) == ["yarn", "npm"]


def test_pyproject_without_lock_falls_back_to_uv(tmp_path: Path) -> None:
    touch(tmp_path, "pyproject.toml")
    assert _names(tmp_path) == ["uv"]


def test_poetry_lock_beats_uv_fallback(tmp_path: Path) -> None:
    touch(tmp_path, "pyproject.toml", "poetry.lock")
    assert _names(tmp_path) == ["poetry"]


def test_cross_ecosystem_matches_keep_priority_order(tmp_path: Path) -> None:
    touch(tmp_path, "Makefile", "package.json", "Cargo.toml")
    assert _names(tmp_path) == ["npm", "cargo", "make"]


def test_dotnet_matches_solution_glob(tmp_path: Path) -> None:
    touch(tmp_path, "App.sln")
    snapshot = DirectoryProbe().probe(tmp_path)
    assert snapshot.matches[0].ecosystem is Ecosystem.DOTNET
    assert snapshot.matches[0].primary_file == "App.sln"


def test_probe_does_not_read_subdirectories(tmp_path: Path) -> None:
    touch(tmp_path / "nested", "Cargo.toml")
    assert _names(tmp_path) == []


def test_missing_directory_yields_empty_snapshot(tmp_path: Path) -> None:
    snapshot = DirectoryProbe().probe(tmp_path / "missing")
    assert snapshot.matches == ()
    assert snapshot.filenames == frozenset()


def test_filtered_is_case_insensitive(tmp_path: Path) -> None:
    touch(tmp_path, "yarn.lock", "package-lock.json")
    snapshot = DirectoryProbe().probe(tmp_path)
    assert [match.name for match in snapshot.filtered(["YARN"])] == ["npm"]


def test_search_cache_probes_each_directory_once(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    touch(tmp_path, "go.mod")
    calls: list[str] = []
    real_scandir = os.scandir

    def counting_scandir(path):
        calls.append(str(path))
        return real_scandir(path)

    monkeypatch.setattr("devrunner.discovery.os.scandir", counting_scandir)
    cache = SearchCache()
    first = cache.get_or_probe(tmp_path)
    second = cache.get_or_probe(tmp_path / "sub" / "..")
    assert first is second
    assert cache.probe_count == 1
    assert len(calls) == 1
    assert tmp_path in cache
    assert len(cache) == 1
