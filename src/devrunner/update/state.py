# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Persistence and one-time display of the "you were updated" notice."""

from __future__ import annotations

import os
import sys
from collections.abc import Mapping
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Final

from pydantic import ValidationError

from ..constants import PROG_NAME, STATE_DIR_ENV, UPDATE_STATE_NAME
from ..logging import LOGGER, colorize, ok
from .models import UpdateState

FRESHNESS_WINDOW: Final[timedelta] = timedelta(hours=24)
CHANGELOG_PREVIEW_LINES: Final[int] = 8


def default_state_path(env: Mapping[str, str] | None = None) -> Path:
    """Return where the update record lives (``$XDG_STATE_HOME/devrunner``)."""

    environ = os.environ if env is None else env
    if override := environ.get(STATE_DIR_ENV):
        return Path(override).expanduser() / UPDATE_STATE_NAME
    base = environ.get("XDG_STATE_HOME")
    if not base and os.name == "nt":
        base = environ.get("LOCALAPPDATA")
    root = Path(base).expanduser() if base else Path.home() / ".local" / "state"
    return root / PROG_NAME / UPDATE_STATE_NAME


class UpdateStateStore:
    """Read, write and delete the single pending :class:`UpdateState` record."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or default_state_path()

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> UpdateState | None:
        """Return the pending record; missing or malformed files yield ``None``."""

        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            LOGGER.debug("cannot read update state %s: %s", self.path, exc)
            return None
        try:
            return UpdateState.model_validate_json(raw)
        except ValidationError as exc:
            LOGGER.debug("ignoring malformed update state %s: %s", self.path, exc)
            return None

    def save(self, state: UpdateState) -> None:
        """Write *state*, replacing any earlier record atomically."""

        self.path.parent.mkdir(parents=True, exist_ok=True)
        staging = self.path.with_name(f".{self.path.name}.tmp")
        staging.write_text(state.model_dump_json(indent=2), encoding="utf-8")
        os.replace(staging, self.path)

    def delete(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as exc:
            LOGGER.debug("cannot remove update state %s: %s", self.path, exc)


def render_notification(state: UpdateState) -> None:
    """Print the one-time update summary to stderr."""

    ok(f"{PROG_NAME} was updated from {state.from_version} to {state.to_version}")
    preview = [line for line in state.changelog.strip().splitlines() if line.strip()][:CHANGELOG_PREVIEW_LINES]
    for line in preview:
        print(f"   {colorize(line, 'dim')}", file=sys.stderr)
    if state.changelog_url:
        print(f"   Changelog: {colorize(state.changelog_url, 'cyan')}", file=sys.stderr)


def consume_update_notification(
    store: UpdateStateStore,
    *,
    quiet: bool = False,
    now: datetime | None = None,
) -> UpdateState | None:
    """Show a pending update notice once and delete the record.

    Records older than :data:`FRESHNESS_WINDOW` are dropped without display.
    The record is removed even when rendering fails part-way. Under
    *quiet* nothing is shown and the record is kept for a later run.

    Returns:
        UpdateState | None: The record that was shown, if any.
    """

    if not store.exists():
        return None
    state = store.load()
    if state is None:
        store.delete()
        return None
    current = now or datetime.now(UTC)
    updated_at = state.updated_at if state.updated_at.tzinfo else state.updated_at.replace(tzinfo=UTC)
    if current - updated_at > FRESHNESS_WINDOW:
        LOGGER.debug("discarding stale update record from %s", updated_at.isoformat())
        store.delete()
        return None
    if quiet:
        return None
    try:
        render_notification(state)
    finally:
        store.delete()
    return state


__all__ = [
    "FRESHNESS_WINDOW",
    "UpdateStateStore",
    "consume_update_notification",
    "default_state_path",
    "render_notification",
]
