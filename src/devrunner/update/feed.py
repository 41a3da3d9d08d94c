# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Client for the "latest release" endpoint."""

from __future__ import annotations

import os
import platform
from collections.abc import Iterable, Mapping
from typing import Any, Final, Protocol

import requests

from .. import __version__
from ..constants import DEFAULT_RELEASE_URL, PROG_NAME, RELEASE_URL_ENV
from .models import ReleaseAsset, ReleaseInfo, UpdateAbortedError

CHECK_TIMEOUT_SECONDS: Final[float] = 3.0
DIGEST_PREFIX: Final[str] = "sha256:"

ARCH_ALIASES: Final[dict[str, str]] = {
    "amd64": "x86_64",
    "x86_64": "x86_64",
    "arm64": "aarch64",
    "aarch64": "aarch64",
}


class HttpResponse(Protocol):
    """Minimal subset of ``requests.Response`` used by the updater."""

    status_code: int

    def raise_for_status(self) -> None: ...

    def json(self) -> Any: ...

    def iter_content(self, chunk_size: int = ...) -> Iterable[bytes]: ...

    def close(self) -> None: ...


class HttpGet(Protocol):
    """Callable compatible with ``requests.get`` for the parameters we use."""

    def __call__(
        self,
        url: str,
        *,
        timeout: float,
        stream: bool = ...,
        headers: Mapping[str, str] | None = ...,
    ) -> HttpResponse: ...


def release_url() -> str:
    return os.environ.get(RELEASE_URL_ENV) or DEFAULT_RELEASE_URL


def platform_asset_name(system: str | None = None, machine: str | None = None) -> str:
    """Return the release asset name for this platform, e.g. ``devrunner-linux-x86_64``.

    Raises:
        UpdateAbortedError: On architectures no release is built for.
    """

    system_name = (system or platform.system()).lower()
    arch = ARCH_ALIASES.get((machine or platform.machine()).lower())
    if arch is None:
        raise UpdateAbortedError(f"unsupported architecture: {machine or platform.machine()}")
    suffix = ".exe" if system_name == "windows" else ""
    return f"{PROG_NAME}-{system_name}-{arch}{suffix}"


def parse_release(payload: Any) -> ReleaseInfo:
    """Parse a GitHub-style release document.

    Raises:
        UpdateAbortedError: When required fields are missing or malformed.
    """

    if not isinstance(payload, Mapping):
        raise UpdateAbortedError("release payload is not an object")
    tag = payload.get("tag_name")
    if not isinstance(tag, str) or not tag.strip():
        raise UpdateAbortedError("release payload has no tag_name")

    assets: list[ReleaseAsset] = []
    for raw in payload.get("assets") or ():
        if not isinstance(raw, Mapping):
            continue
        name = raw.get("name")
        url = raw.get("browser_download_url")
        if not isinstance(name, str) or not isinstance(url, str):
            continue
        digest = raw.get("digest")
        sha256 = None
        if isinstance(digest, str) and digest.lower().startswith(DIGEST_PREFIX):
            sha256 = digest[len(DIGEST_PREFIX) :].lower()
        assets.append(ReleaseAsset(name=name, url=url, sha256=sha256))

    body = payload.get("body")
    html_url = payload.get("html_url")
    return ReleaseInfo(
        version=tag.strip().lstrip("v"),
        assets=tuple(assets),
        changelog=body if isinstance(body, str) else "",
        changelog_url=html_url if isinstance(html_url, str) else None,
    )


class ReleaseFeed:
    """Fetch the latest release with a hard timeout."""

    def __init__(
        self,
        url: str | None = None,
        *,
        http_get: HttpGet | None = None,
        timeout: float = CHECK_TIMEOUT_SECONDS,
    ) -> None:
        self.url = url or release_url()
        self._get: HttpGet = http_get or requests.get
        self._timeout = timeout

    def fetch_latest(self) -> ReleaseInfo:
        """Return the latest published release.

        Raises:
            UpdateAbortedError: On timeouts, HTTP errors or unparsable payloads.
        """

        try:
            response = self._get(
                self.url,
                timeout=self._timeout,
                headers={
                    "Accept": "application/vnd.github+json",
                    "User-Agent": f"{PROG_NAME}/{__version__}",
                },
            )
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as exc:
            raise UpdateAbortedError(f"release check failed: {exc}") from exc
        return parse_release(payload)


__all__ = [
    "CHECK_TIMEOUT_SECONDS",
    "HttpGet",
    "HttpResponse",
    "ReleaseFeed",
    "parse_release",
    "platform_asset_name",
    "release_url",
]
