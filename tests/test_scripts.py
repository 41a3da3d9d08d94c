# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for project script discovery."""

from __future__ import annotations

import json
from pathlib import Path

from devrunner.catalog import Ecosystem
from devrunner.scripts import (
    CARGO_BUILTINS,
    parse_makefile_targets,
    parse_package_json_scripts,
    parse_pyproject_scripts,
    scripts_for,
)


def test_package_json_scripts(tmp_path: Path) -> None:
    (tmp_path / "package.json").write_text(
        json.dumps({"name": "demo", "scripts": {"test": "vitest", "build": "tsc -p ."}}),
        encoding="utf-8",
    )
    script_list = parse_package_json_scripts(tmp_path)
    assert script_list is not None
    assert script_list.names == ["test", "build"]
    assert script_list.scripts[1].command == "tsc -p ."
    assert script_list.source_file == "package.json"


def test_package_json_without_scripts(tmp_path: Path) -> None:
    (tmp_path / "package.json").write_text('{"name": "demo"}', encoding="utf-8")
    assert parse_package_json_scripts(tmp_path) is None
    (tmp_path / "package.json").write_text("{broken", encoding="utf-8")
    assert parse_package_json_scripts(tmp_path) is None


def test_makefile_targets_skip_special_lines(tmp_path: Path) -> None:
    (tmp_path / "Makefile").write_text(
        "\n".join(
            [
                "CC := gcc",
                ".PHONY: all test",
                "# comment: not a target",
                "all: build",
                "\tgcc -o app main.c",
                "build test: deps",
                "$(OUT): main.c",
                "clean:",
                "\trm -f app",
            ],
        ),
        encoding="utf-8",
    )
    script_list = parse_makefile_targets(tmp_path)
    assert script_list is not None
    assert script_list.names == ["all", "build", "test", "clean"]
    assert script_list.scripts[0].command == "make all"


def test_pyproject_scripts_merge_poetry_and_project_tables(tmp_path: Path) -> None:
    (tmp_path / "pyproject.toml").write_text(
        '[project.scripts]\nserve = "demo.app:main"\n\n[tool.poetry.scripts]\nmigrate = "demo.db:migrate"\n',
        encoding="utf-8",
    )
    script_list = parse_pyproject_scripts(tmp_path)
    assert script_list is not None
    assert sorted(script_list.names) == ["migrate", "serve"]


def test_scripts_for_dispatches_by_ecosystem(tmp_path: Path) -> None:
    (tmp_path / "Cargo.toml").write_text("[package]\nname = 'demo'\n", encoding="utf-8")
    script_list = scripts_for(Ecosystem.RUST, tmp_path)
    assert script_list is not None
    assert tuple(script_list.names) == CARGO_BUILTINS
    assert scripts_for(Ecosystem.GO, tmp_path) is None
