# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Data models used by the self-update subsystem."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class UpdateStage(str, Enum):
    """States of the update state machine."""

    IDLE = "idle"
    CHECKING = "checking"
    UP_TO_DATE = "up_to_date"
    DOWNLOADING = "downloading"
    VERIFYING = "verifying"
    SWAPPING = "swapping"
    DONE = "done"
    ABORTED = "aborted"


class UpdateAbortedError(RuntimeError):
    """Raised inside the state machine for any failure; never leaves it."""


class ReleaseAsset(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    url: str
    sha256: str | None = None


class ReleaseInfo(BaseModel):
    """Latest-release metadata published by the release feed."""

    model_config = ConfigDict(frozen=True)

    version: str
    assets: tuple[ReleaseAsset, ...] = ()
    changelog: str = ""
    changelog_url: str | None = None

    def asset_named(self, name: str) -> ReleaseAsset | None:
        return next((asset for asset in self.assets if asset.name == name), None)


class UpdateState(BaseModel):
    """Record left behind by a successful update for the next invocation."""

    model_config = ConfigDict(frozen=True)

    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    from_version: str
    to_version: str
    changelog_url: str | None = None
    changelog: str = ""


class UpdateOutcome(BaseModel):
    """Terminal state reached by one run of the state machine."""

    model_config = ConfigDict(frozen=True)

    stage: UpdateStage
    current_version: str
    updated: bool = False
    latest_version: str | None = None
    reason: str | None = None


__all__ = [
    "ReleaseAsset",
    "ReleaseInfo",
    "UpdateAbortedError",
    "UpdateOutcome",
    "UpdateStage",
    "UpdateState",
]
