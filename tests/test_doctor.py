# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for the doctor, why and list reports."""

from __future__ import annotations

import json
from io import StringIO
from pathlib import Path

from conftest import FakeChecker, touch
from rich.console import Console
from typer.testing import CliRunner

from devrunner.cli.app import app
from devrunner.cli.reporting import render_list, render_why, run_doctor
from devrunner.discovery import DetectionContext
from devrunner.resolution import ResolutionEngine


class FakeVersions:
    def __init__(self, versions: dict[str, str]) -> None:
        self.versions = versions
        self.requested: list[str] = []

    def capture(self, program: str) -> str | None:
        self.requested.append(program)
        return self.versions.get(program)


def _console() -> tuple[Console, StringIO]:
    buffer = StringIO()
    return Console(file=buffer, width=120, color_system=None), buffer


def test_doctor_option(monkeypatch, tmp_path: Path) -> None:
    runner = CliRunner()

    def fake_run_doctor(context, start, **kwargs):
        print(f"doctor invoked for {start}")
        return 0

    monkeypatch.setattr("devrunner.cli.app.run_doctor", fake_run_doctor)
    monkeypatch.chdir(tmp_path)

    result = runner.invoke(app, ["doctor"])

    assert result.exit_code == 0
    assert "doctor invoked" in result.output


def test_run_doctor_reports_tools_and_conflicts(tmp_path: Path) -> None:
    touch(tmp_path, "package.json", "yarn.lock", "package-lock.json")
    context = DetectionContext.create(checker=FakeChecker(["npm"]))
    versions = FakeVersions({"npm": "10.2.0"})
    console, buffer = _console()

    code = run_doctor(context, tmp_path, levels=0, ignore=(), console=console, versions=versions)

    output = buffer.getvalue()
    assert code == 0
    assert "yarn" in output and "not installed" in output
    assert "10.2.0" in output
    assert "multiple lockfiles" in output
    assert "Commands will run with npm" in output
    assert versions.requested == ["npm"]


def test_run_doctor_without_project(tmp_path: Path) -> None:
    context = DetectionContext.create(checker=FakeChecker())
    console, buffer = _console()
    code = run_doctor(context, tmp_path, levels=0, ignore=(), console=console, versions=FakeVersions({}))
    assert code == 2
    assert "No project detected" in buffer.getvalue()


def test_run_doctor_returns_conflict_code(tmp_path: Path) -> None:
    touch(tmp_path, "yarn.lock", "package-lock.json")
    context = DetectionContext.create(checker=FakeChecker(["npm", "yarn"]))
    console, buffer = _console()
    code = run_doctor(context, tmp_path, levels=0, ignore=(), console=console, versions=FakeVersions({}))
    assert code == 3
    assert "Conflicting" in buffer.getvalue()


def test_render_why_lists_other_candidates(tmp_path: Path) -> None:
    touch(tmp_path, "package.json", "Makefile")
    engine = ResolutionEngine(DetectionContext.create(checker=FakeChecker()))
    console, buffer = _console()

    assert render_why(engine, tmp_path, levels=0, ignore=(), console=console) == 0

    output = buffer.getvalue()
    assert "Using: npm" in output
    assert "make - Makefile (priority 21)" in output


def test_render_why_when_everything_is_ignored(tmp_path: Path) -> None:
    touch(tmp_path, "Cargo.toml")
    engine = ResolutionEngine(DetectionContext.create(checker=FakeChecker()))
    console, buffer = _console()
    assert render_why(engine, tmp_path, levels=0, ignore=("cargo",), console=console) == 0
    assert "All detected runners were ignored" in buffer.getvalue()


def test_render_list_shows_scripts(tmp_path: Path) -> None:
    (tmp_path / "package.json").write_text(json.dumps({"scripts": {"lint": "eslint ."}}), encoding="utf-8")
    engine = ResolutionEngine(DetectionContext.create(checker=FakeChecker()))
    resolution = engine.resolve(tmp_path, 0)
    console, buffer = _console()

    assert render_list(resolution, console) == 0

    output = buffer.getvalue()
    assert "Detected: npm (package.json)" in output
    assert "lint" in output and "eslint ." in output


def test_render_list_without_scripts(tmp_path: Path) -> None:
    touch(tmp_path, "go.mod")
    engine = ResolutionEngine(DetectionContext.create(checker=FakeChecker()))
    console, buffer = _console()
    assert render_list(engine.resolve(tmp_path, 0), console) == 0
    assert "No scripts found" in buffer.getvalue()


def test_reports_show_bracketed_names_literally(tmp_path: Path) -> None:
    project = tmp_path / "[red]app"
    project.mkdir()
    (project / "package.json").write_text(json.dumps({"scripts": {"unit": "jest [unit]"}}), encoding="utf-8")
    engine = ResolutionEngine(DetectionContext.create(checker=FakeChecker()))
    console, buffer = _console()

    render_why(engine, project, levels=0, ignore=(), console=console)
    render_list(engine.resolve(project, 0), console)

    output = buffer.getvalue()
    assert "[red]app" in output
    assert "jest [unit]" in output
