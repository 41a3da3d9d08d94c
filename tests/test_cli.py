# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""End-to-end tests for the devrunner command line."""

from __future__ import annotations

import importlib
import json
from dataclasses import dataclass, field
from pathlib import Path

import pytest
from conftest import FakeChecker, RecordingBackend, touch
from typer.testing import CliRunner

from devrunner import __version__
from devrunner.cli.app import Runtime, app
from devrunner.discovery import DetectionContext
from devrunner.update import UpdateOutcome, UpdateStage, UpdateState, UpdateStateStore

runner = CliRunner()


@dataclass
class Harness:
    project: Path
    checker: FakeChecker
    backend: RecordingBackend
    store: UpdateStateStore
    spawned: list[bool] = field(default_factory=list)
    update_checks: list[UpdateStateStore] = field(default_factory=list)
    outcome: UpdateOutcome = field(
        default_factory=lambda: UpdateOutcome(stage=UpdateStage.DONE, current_version="0.4.0", latest_version="0.4.0"),
    )

    def invoke(self, *args: str):
        return runner.invoke(app, list(args))


@pytest.fixture
def harness(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Harness:
    project = tmp_path / "project"
    project.mkdir()
    state = Harness(
        project=project,
        checker=FakeChecker(),
        backend=RecordingBackend(),
        store=UpdateStateStore(tmp_path / "state" / "update_state.json"),
    )

    def check_update(store: UpdateStateStore) -> UpdateOutcome:
        state.update_checks.append(store)
        return state.outcome

    def spawn_update() -> bool:
        state.spawned.append(True)
        return True

    def build_runtime() -> Runtime:
        return Runtime(
            context=DetectionContext.create(checker=state.checker),
            backend=state.backend,
            store=state.store,
            check_update=check_update,
            spawn_update=spawn_update,
        )

    monkeypatch.setattr("devrunner.cli.app.build_runtime", build_runtime)
    monkeypatch.chdir(project)
    return state


def _node_project(directory: Path, *lockfiles: str) -> None:
    touch(directory, *lockfiles)
    (directory / "package.json").write_text(
        json.dumps({"scripts": {"test": "vitest", "build": "tsc"}}),
        encoding="utf-8",
    )


def test_dry_run_prints_command_and_never_spawns(harness: Harness) -> None:
    _node_project(harness.project)
    result = harness.invoke("--dry-run", "test", "--coverage")
    assert result.exit_code == 0
    assert "npm run test -- --coverage" in result.output
    assert harness.backend.calls == []
    assert harness.spawned == []


def test_runs_command_and_propagates_exit_code(harness: Harness) -> None:
    touch(harness.project, "Cargo.toml")
    harness.backend.returncode = 101
    result = harness.invoke("test", "--release")
    assert result.exit_code == 101
    assert harness.backend.calls == [(("cargo", "test", "--release"), harness.project.resolve())]


def test_arguments_after_separator_are_passed_verbatim(harness: Harness) -> None:
    touch(harness.project, "Cargo.toml")
    result = harness.invoke("run", "--", "--verbose", "a b")
    assert result.exit_code == 0
    assert harness.backend.calls[0][0] == ("cargo", "run", "--verbose", "a b")


def test_background_update_starts_after_child_exits(harness: Harness, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("DEVRUNNER_NO_UPDATE")
    touch(harness.project, "go.mod")
    result = harness.invoke("build")
    assert result.exit_code == 0
    assert harness.spawned == [True]


def test_auto_update_disabled_in_config(harness: Harness, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("DEVRUNNER_NO_UPDATE")
    touch(harness.project, "go.mod")
    (harness.project / ".devrunner.toml").write_text("auto_update = false\n", encoding="utf-8")
    assert harness.invoke("build").exit_code == 0
    assert harness.spawned == []


def test_no_runner_exits_with_not_found(harness: Harness) -> None:
    result = harness.invoke("--levels", "0", "test")
    assert result.exit_code == 2
    assert "No runner found" in result.output
    assert "--levels" in result.output


def test_quiet_suppresses_error_output(harness: Harness) -> None:
    result = harness.invoke("--quiet", "--levels", "0", "test")
    assert result.exit_code == 2
    assert "No runner found" not in result.output


def test_lockfile_conflict_exits_three(harness: Harness) -> None:
    _node_project(harness.project, "yarn.lock", "package-lock.json")
    harness.checker.installed.update({"yarn", "npm"})
    result = harness.invoke("test")
    assert result.exit_code == 3
    assert harness.backend.calls == []


def test_lockfile_conflict_without_tools_exits_127(harness: Harness) -> None:
    _node_project(harness.project, "yarn.lock", "package-lock.json")
    assert harness.invoke("test").exit_code == 127


def test_single_installed_tool_warns_and_runs(harness: Harness) -> None:
    _node_project(harness.project, "yarn.lock", "package-lock.json")
    harness.checker.installed.add("npm")
    result = harness.invoke("test")
    assert result.exit_code == 0
    assert "yarn.lock" in result.output
    assert harness.backend.calls[0][0] == ("npm", "run", "test")


def test_ignore_flag_accepts_comma_list(harness: Harness) -> None:
    _node_project(harness.project)
    touch(harness.project, "Makefile")
    result = harness.invoke("--ignore", "npm,yarn", "build")
    assert result.exit_code == 0
    assert harness.backend.calls[0][0] == ("make", "build")


def test_unknown_node_script_suggests_closest(harness: Harness) -> None:
    _node_project(harness.project)
    result = harness.invoke("tets")
    assert result.exit_code == 1
    assert 'Script "tets" not found' in result.output
    assert "Did you mean" in result.output
    assert "test" in result.output
    assert harness.backend.calls == []


def test_native_node_command_skips_script_check(harness: Harness) -> None:
    _node_project(harness.project, "pnpm-lock.yaml")
    result = harness.invoke("install")
    assert result.exit_code == 0
    assert harness.backend.calls[0][0] == ("pnpm", "install")


def test_alias_from_local_config(harness: Harness) -> None:
    touch(harness.project, "Cargo.toml")
    (harness.project / ".devrunner.toml").write_text('[aliases]\nt = "test"\n', encoding="utf-8")
    assert harness.invoke("t").exit_code == 0
    assert harness.backend.calls[0][0] == ("cargo", "test")


def test_cli_levels_override_config(harness: Harness, monkeypatch: pytest.MonkeyPatch) -> None:
    touch(harness.project, "go.mod")
    nested = harness.project / "cmd" / "tool"
    nested.mkdir(parents=True)
    (nested / ".devrunner.toml").write_text("max_levels = 0\n", encoding="utf-8")
    monkeypatch.chdir(nested)
    assert harness.invoke("test").exit_code == 2
    assert harness.invoke("--levels", "2", "test").exit_code == 0


def test_invalid_config_exits_one(harness: Harness) -> None:
    touch(harness.project, "go.mod")
    (harness.project / ".devrunner.toml").write_text("max_levels = = 1\n", encoding="utf-8")
    result = harness.invoke("test")
    assert result.exit_code == 1
    assert "Invalid configuration" in result.output


def test_version_flag(harness: Harness) -> None:
    result = harness.invoke("--version")
    assert result.exit_code == 0
    assert __version__ in result.output


def test_no_command_prints_help(harness: Harness) -> None:
    result = harness.invoke()
    assert result.exit_code == 0
    assert "--dry-run" in result.output


def test_update_notice_shown_once(harness: Harness) -> None:
    touch(harness.project, "go.mod")
    harness.store.save(UpdateState(from_version="0.3.0", to_version="0.4.0"))

    first = harness.invoke("build")
    second = harness.invoke("build")

    assert "0.3.0" in first.output and "0.4.0" in first.output
    assert "0.3.0" not in second.output
    assert not harness.store.exists()


def test_forced_update_without_command(harness: Harness) -> None:
    harness.outcome = UpdateOutcome(
        stage=UpdateStage.DONE,
        current_version="0.4.0",
        updated=True,
        latest_version="0.5.0",
    )
    result = harness.invoke("--update")
    assert result.exit_code == 0
    assert "0.5.0" in result.output
    assert len(harness.update_checks) == 1


def test_forced_update_failure_is_silent_without_verbose(harness: Harness) -> None:
    harness.outcome = UpdateOutcome(stage=UpdateStage.ABORTED, current_version="0.4.0", reason="offline")
    result = harness.invoke("--update")
    assert result.exit_code == 0
    assert result.output.strip() == ""
    assert "offline" in harness.invoke("--update", "--verbose").output


def test_forced_update_then_runs_command(harness: Harness) -> None:
    touch(harness.project, "Cargo.toml")
    result = harness.invoke("--update", "build")
    assert result.exit_code == 0
    assert len(harness.update_checks) == 1
    assert harness.backend.calls[0][0] == ("cargo", "build")
    assert harness.spawned == []


def test_internal_update_check_runs_inline(harness: Harness) -> None:
    result = harness.invoke("--internal-update-check")
    assert result.exit_code == 0
    assert len(harness.update_checks) == 1
    assert harness.backend.calls == []


def test_list_shows_scripts(harness: Harness) -> None:
    _node_project(harness.project)
    result = harness.invoke("list")
    assert result.exit_code == 0
    assert "npm" in result.output
    assert "vitest" in result.output
    assert harness.backend.calls == []


def test_why_explains_ignored_runner(harness: Harness) -> None:
    _node_project(harness.project)
    touch(harness.project, "Makefile")
    result = harness.invoke("--ignore", "npm", "why")
    assert result.exit_code == 0
    assert "make" in result.output
    assert "ignored via --ignore" in result.output


def test_cli_package_attribute_names_the_app_module() -> None:
    package = importlib.import_module("devrunner.cli")
    assert package.app is importlib.import_module("devrunner.cli.app")


def test_bad_config_value_warns_instead_of_crashing(harness: Harness) -> None:
    touch(harness.project, "Cargo.toml")
    (harness.project / ".devrunner.toml").write_text("ignore_tools = 5\naliases = 'oops'\n", encoding="utf-8")
    result = harness.invoke("--dry-run", "build")
    assert result.exit_code == 0
    assert "cargo build" in result.output
