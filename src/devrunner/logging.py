# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""User-facing logging helpers with optional colour and emoji support.

Status lines go to stderr: stdout belongs to the child process devrunner runs.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Final, TextIO

from .constants import NO_COLOR_ENV, PROG_NAME

ANSI = {
    "reset": "\033[0m",
    "bold": "\033[1m",
    "dim": "\033[2m",
    "blue": "\033[34;1m",
    "cyan": "\033[36;1m",
    "red": "\033[31;1m",
    "green": "\033[32;1m",
    "yellow": "\033[33;1m",
}

LOGGER: Final[logging.Logger] = logging.getLogger(PROG_NAME)


def is_tty(stream: TextIO | None = None) -> bool:
    """Return ``True`` when *stream* (stderr by default) appears to be a TTY."""

    target = stream if stream is not None else sys.stderr
    try:
        return target.isatty()
    except (AttributeError, ValueError):  # pragma: no cover - defensive
        return False


def colorize(text: str, code: str, enable: bool = True) -> str:
    """Wrap ``text`` in ANSI colour codes when *enable* is truthy."""

    if not enable or os.environ.get(NO_COLOR_ENV) or not is_tty():
        return text
    return f"{ANSI.get(code, '')}{text}{ANSI['reset']}"


def emoji(symbol: str, enable: bool) -> str:
    """Return *symbol* when emoji output is enabled, otherwise blank."""

    return symbol if enable else ""


def _emit(text: str) -> None:
    print(text, file=sys.stderr)


def info(msg: str, *, use_emoji: bool = True) -> None:
    """Emit an informational message."""

    _emit(f"{emoji('ℹ️ ', use_emoji)}{msg}")


def ok(msg: str, *, use_emoji: bool = True) -> None:
    """Emit a success message."""

    _emit(f"{emoji('✅ ', use_emoji)}{colorize(msg, 'green')}")


def warn(msg: str, *, use_emoji: bool = True) -> None:
    """Emit a warning message."""

    _emit(f"{emoji('⚠️ ', use_emoji)}{colorize(msg, 'yellow')}")


def fail(msg: str, *, use_emoji: bool = True) -> None:
    """Emit an error message."""

    _emit(f"{emoji('❌ ', use_emoji)}{colorize(msg, 'red')}")


def hint(msg: str) -> None:
    """Emit a dimmed follow-up hint under an error."""

    _emit(colorize(f"Hint: {msg}", "dim"))


def configure_logging(*, verbose: bool) -> None:
    """Stream devrunner debug records to stderr when *verbose* is set."""

    if not verbose or getattr(LOGGER, "_devrunner_verbose_configured", False):
        return
    handler = logging.StreamHandler(stream=sys.stderr)
    handler.setFormatter(logging.Formatter(f"{PROG_NAME}: %(message)s"))
    LOGGER.addHandler(handler)
    LOGGER.setLevel(logging.DEBUG)
    LOGGER.propagate = False
    setattr(LOGGER, "_devrunner_verbose_configured", True)


__all__ = [
    "LOGGER",
    "colorize",
    "configure_logging",
    "emoji",
    "fail",
    "hint",
    "info",
    "is_tty",
    "ok",
    "warn",
]
