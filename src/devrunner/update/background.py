# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Launch update checks and locate the executable they replace."""

from __future__ import annotations

import os
import shutil

# Bandit: the detached child is this same program with a fixed internal flag.
import subprocess  # nosec B404
import sys
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from .. import __version__
from ..constants import INSTALL_PATH_ENV, INTERNAL_UPDATE_FLAG, NO_UPDATE_ENV, PROG_NAME
from ..logging import LOGGER
from .models import UpdateOutcome
from .orchestrator import UpdateOrchestrator
from .state import UpdateStateStore

_FALSEY = frozenset({"", "0", "false", "no", "off"})


def is_update_disabled(env: Mapping[str, str] | None = None) -> bool:
    """Return ``True`` when ``DEVRUNNER_NO_UPDATE`` is set to a truthy value."""

    environ = os.environ if env is None else env
    return environ.get(NO_UPDATE_ENV, "").strip().lower() not in _FALSEY


def is_frozen() -> bool:
    return bool(getattr(sys, "frozen", False))


def resolve_install_target(env: Mapping[str, str] | None = None) -> Path | None:
    """Return the executable file a successful update replaces."""

    environ = os.environ if env is None else env
    if is_frozen():
        return Path(sys.executable).resolve()
    if override := environ.get(INSTALL_PATH_ENV):
        return Path(override).expanduser().resolve()
    found = shutil.which(PROG_NAME)
    return Path(found).resolve() if found else None


def update_command() -> list[str]:
    """Return the argv that re-enters this program in background-update mode."""

    if is_frozen():
        return [sys.executable, INTERNAL_UPDATE_FLAG]
    return [sys.executable, "-m", PROG_NAME, INTERNAL_UPDATE_FLAG]


def build_orchestrator(store: UpdateStateStore | None = None) -> UpdateOrchestrator:
    return UpdateOrchestrator(
        current_version=__version__,
        target=resolve_install_target(),
        store=store or UpdateStateStore(),
    )


def perform_update_check(store: UpdateStateStore | None = None) -> UpdateOutcome:
    """Run the update state machine inline."""

    return build_orchestrator(store).run()


def _detach_kwargs() -> dict[str, Any]:
    if os.name == "nt":
        flags = getattr(subprocess, "DETACHED_PROCESS", 0) | getattr(subprocess, "CREATE_NEW_PROCESS_GROUP", 0)
        return {"creationflags": flags}
    return {"start_new_session": True}


def spawn_background_update(command: Sequence[str] | None = None) -> bool:
    """Start a detached update check; return ``False`` if it could not start.

    The child gets no terminal: all three standard streams are ``DEVNULL``
    and it runs in its own session, so the parent can exit immediately.
    """

    argv = list(command) if command is not None else update_command()
    try:
        subprocess.Popen(  # nosec B603
            argv,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            close_fds=True,
            **_detach_kwargs(),
        )
    except OSError as exc:
        LOGGER.debug("background update not started: %s", exc)
        return False
    return True


__all__ = [
    "build_orchestrator",
    "is_update_disabled",
    "perform_update_check",
    "resolve_install_target",
    "spawn_background_update",
    "update_command",
]
