# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Safe wrappers around ``subprocess`` execution."""

from __future__ import annotations

import os
import shutil

# Bandit: subprocess usage is intentional. Commands are argument lists built
# from the runner catalogue; ``shell=True`` is never used.
import subprocess  # nosec B404
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from subprocess import CompletedProcess as _CompletedProcess  # nosec B404

TIMEOUT_RETURNCODE = 124


def resolve_executable(program: str, *, cwd: Path | None = None) -> str:
    """Return an absolute path for *program*.

    Relative paths containing a separator (``./gradlew``) are anchored at
    *cwd*; bare names are looked up on ``PATH``.

    Raises:
        FileNotFoundError: If the executable cannot be located.
    """

    candidate = Path(program)
    if candidate.is_absolute():
        if not candidate.exists():
            raise FileNotFoundError(f"Executable '{program}' does not exist")
        return str(candidate)
    if os.sep in program or (os.altsep and os.altsep in program):
        anchored = (cwd or Path.cwd()) / candidate
        if not anchored.exists():
            raise FileNotFoundError(f"Executable '{program}' does not exist")
        return str(anchored)
    resolved = shutil.which(program)
    if resolved is None:
        raise FileNotFoundError(f"Executable '{program}' was not found on PATH")
    return resolved


def _normalize_args(args: Sequence[str], cwd: Path | None) -> list[str]:
    if not args:
        msg = "subprocess command requires at least one argument"
        raise ValueError(msg)

    head, *rest = args
    return [resolve_executable(head, cwd=cwd), *rest]


def run_command(
    args: Sequence[str],
    *,
    cwd: Path | None = None,
    env: Mapping[str, str] | None = None,
    check: bool = True,
    capture_output: bool = False,
    text: bool = True,
    timeout: float | None = None,
    discard_stdin: bool = False,
) -> _CompletedProcess[str]:
    """Execute *args* after normalising the executable path.

    Standard streams are inherited unless *capture_output* or *discard_stdin*
    say otherwise, so interactive programs behave as if run directly.
    """
    normalized = _normalize_args(args, cwd)

    def _ensure_text(value: str | bytes | None) -> str | None:
        if value is None or isinstance(value, str):
            return value
        return value.decode(errors="ignore")

    try:
        completed: _CompletedProcess[str] = subprocess.run(  # nosec B603
            normalized,
            cwd=str(cwd) if cwd is not None else None,
            env=dict(env) if env is not None else None,
            check=False,
            capture_output=capture_output,
            text=text,
            timeout=timeout,
            stdin=subprocess.DEVNULL if discard_stdin else None,
        )
    except subprocess.TimeoutExpired as exc:
        stdout = _ensure_text(exc.stdout) or ""
        stderr = _ensure_text(exc.stderr)
        timeout_msg = (
            f"Command timed out after {timeout:.1f}s"
            if timeout is not None
            else "Command timed out"
        )
        combined_stderr = f"{stderr}\n{timeout_msg}" if stderr else timeout_msg
        completed = subprocess.CompletedProcess(
            args=list(normalized),
            returncode=TIMEOUT_RETURNCODE,
            stdout=stdout,
            stderr=combined_stderr,
        )

    if check and completed.returncode != 0:
        raise subprocess.CalledProcessError(
            completed.returncode,
            normalized,
            output=completed.stdout,
            stderr=completed.stderr,
        )

    return completed


__all__ = ["TIMEOUT_RETURNCODE", "resolve_executable", "run_command"]
