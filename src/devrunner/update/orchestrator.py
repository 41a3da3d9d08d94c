# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Self-update state machine.

``idle -> checking -> (up_to_date | downloading -> verifying -> swapping) -> done``, or ``aborted``

The installed binary is only ever touched by a single ``os.replace`` of a
fully downloaded and verified file that lives in the same directory, so an
interrupted update leaves the previous binary intact.
"""

from __future__ import annotations

import hashlib
import os
import stat
import tempfile
import time
from collections.abc import Callable
from pathlib import Path
from typing import Final

import requests
from packaging.version import InvalidVersion, Version

from ..logging import LOGGER
from .feed import HttpGet, ReleaseFeed, platform_asset_name
from .models import (
    ReleaseAsset,
    ReleaseInfo,
    UpdateAbortedError,
    UpdateOutcome,
    UpdateStage,
    UpdateState,
)
from .state import UpdateStateStore

DOWNLOAD_TIMEOUT_SECONDS: Final[float] = 5.0
CHUNK_SIZE: Final[int] = 64 * 1024
TEMP_PREFIX: Final[str] = ".devrunner-update-"

Clock = Callable[[], float]


def is_newer(remote: str, local: str) -> bool:
    """Return ``True`` when *remote* is a strictly greater version than *local*.

    Raises:
        UpdateAbortedError: If either version cannot be parsed.
    """

    try:
        return Version(remote) > Version(local)
    except InvalidVersion as exc:
        raise UpdateAbortedError(f"cannot compare versions {remote!r} and {local!r}") from exc


def sha256_file(path: Path) -> str:
    digest = hashlib.sha256()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()


class UpdateOrchestrator:
    """Drive one update attempt to a terminal :class:`UpdateStage`."""

    def __init__(
        self,
        *,
        current_version: str,
        target: Path | None,
        store: UpdateStateStore,
        feed: ReleaseFeed | None = None,
        http_get: HttpGet | None = None,
        asset_name: str | None = None,
        download_timeout: float = DOWNLOAD_TIMEOUT_SECONDS,
        clock: Clock = time.monotonic,
    ) -> None:
        self.current_version = current_version
        self.target = target
        self.store = store
        self.feed = feed or ReleaseFeed(http_get=http_get)
        self._get: HttpGet = http_get or requests.get
        self._asset_name = asset_name
        self._download_timeout = download_timeout
        self._clock = clock
        self.stage = UpdateStage.IDLE
        self.history: list[UpdateStage] = [UpdateStage.IDLE]

    def _enter(self, stage: UpdateStage) -> None:
        self.stage = stage
        self.history.append(stage)
        LOGGER.debug("update: %s", stage.value)

    def run(self) -> UpdateOutcome:
        """Run the state machine; failures end in ``aborted`` and never raise."""

        release: ReleaseInfo | None = None
        staging: Path | None = None
        try:
            self._enter(UpdateStage.CHECKING)
            release = self.feed.fetch_latest()
            if not is_newer(release.version, self.current_version):
                self._enter(UpdateStage.UP_TO_DATE)
                self._enter(UpdateStage.DONE)
                return self._outcome(release)

            target = self._writable_target()
            asset = self._select_asset(release)

            self._enter(UpdateStage.DOWNLOADING)
            staging = self._download(asset, target.parent)

            self._enter(UpdateStage.VERIFYING)
            self._verify(staging, asset)

            self._enter(UpdateStage.SWAPPING)
            self._swap(staging, target)
            staging = None

            self.store.save(
                UpdateState(
                    from_version=self.current_version,
                    to_version=release.version,
                    changelog_url=release.changelog_url,
                    changelog=release.changelog,
                ),
            )
            self._enter(UpdateStage.DONE)
            return self._outcome(release, updated=True)
        except (UpdateAbortedError, requests.RequestException, OSError, ValueError) as exc:
            LOGGER.debug("update aborted: %s", exc)
            self._enter(UpdateStage.ABORTED)
            return self._outcome(release, reason=str(exc))
        finally:
            if staging is not None:
                _discard(staging)

    def _outcome(
        self,
        release: ReleaseInfo | None,
        *,
        updated: bool = False,
        reason: str | None = None,
    ) -> UpdateOutcome:
        return UpdateOutcome(
            stage=self.stage,
            updated=updated,
            current_version=self.current_version,
            latest_version=release.version if release else None,
            reason=reason,
        )

    def _writable_target(self) -> Path:
        if self.target is None:
            raise UpdateAbortedError("no installed executable to update")
        if not self.target.is_file():
            raise UpdateAbortedError(f"install target {self.target} does not exist")
        if not os.access(self.target.parent, os.W_OK):
            raise UpdateAbortedError(f"install directory {self.target.parent} is not writable")
        return self.target

    def _select_asset(self, release: ReleaseInfo) -> ReleaseAsset:
        name = self._asset_name or platform_asset_name()
        asset = release.asset_named(name)
        if asset is None:
            raise UpdateAbortedError(f"release {release.version} has no asset {name}")
        if not asset.sha256:
            raise UpdateAbortedError(f"asset {name} has no published checksum")
        return asset

    def _download(self, asset: ReleaseAsset, directory: Path) -> Path:
        """Stream *asset* into a temporary file inside *directory*."""

        deadline = self._clock() + self._download_timeout
        handle = tempfile.NamedTemporaryFile(dir=directory, prefix=TEMP_PREFIX, delete=False)
        staging = Path(handle.name)
        try:
            with handle:
                response = self._get(asset.url, timeout=self._download_timeout, stream=True)
                try:
                    response.raise_for_status()
                    for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                        if self._clock() > deadline:
                            raise UpdateAbortedError("download exceeded its time budget")
                        if chunk:
                            handle.write(chunk)
                finally:
                    response.close()
        except BaseException:
            _discard(staging)
            raise
        return staging

    def _verify(self, staging: Path, asset: ReleaseAsset) -> None:
        actual = sha256_file(staging)
        if actual != asset.sha256:
            raise UpdateAbortedError(f"checksum mismatch for {asset.name}: expected {asset.sha256}, got {actual}")

    def _swap(self, staging: Path, target: Path) -> None:
        mode = stat.S_IMODE(target.stat().st_mode) | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH
        staging.chmod(mode)
        os.replace(staging, target)


def _discard(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as exc:  # pragma: no cover - best effort cleanup
        LOGGER.debug("cannot remove %s: %s", path, exc)


__all__ = ["DOWNLOAD_TIMEOUT_SECONDS", "UpdateOrchestrator", "is_newer", "sha256_file"]
