# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Config loading utilities with layered precedence and traceability.

Layers are applied in order: built-in defaults, the global file, the
per-project file, then CLI flags. A layer only overrides the keys it sets.
"""

from __future__ import annotations

import tomllib
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .config import CONFIG_KEYS, Config, global_config_path, local_config_path
from .errors import ConfigError
from .logging import LOGGER


class ConfigSource(Protocol):
    """A named provider of a flat configuration fragment."""

    name: str

    def load(self) -> Mapping[str, Any]: ...


class TomlConfigSource:
    """Load a flat key/value TOML document; a missing file is an empty layer."""

    def __init__(self, path: Path, *, name: str | None = None) -> None:
        self.path = path
        self.name = name or str(path)

    def load(self) -> Mapping[str, Any]:
        if not self.path.is_file():
            return {}
        try:
            with self.path.open("rb") as handle:
                return tomllib.load(handle)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"Invalid configuration in {self.path}: {exc}") from exc
        except OSError as exc:
            raise ConfigError(f"Cannot read configuration {self.path}: {exc}") from exc


class MappingConfigSource:
    """Wrap an in-memory mapping, dropping ``None`` values (unset CLI flags)."""

    def __init__(self, values: Mapping[str, Any], *, name: str = "cli") -> None:
        self._values = {key: value for key, value in values.items() if value is not None}
        self.name = name

    def load(self) -> Mapping[str, Any]:
        return dict(self._values)


class FieldUpdate(BaseModel):
    """Description of a single configuration field mutation."""

    model_config = ConfigDict(validate_assignment=True)

    field: str
    source: str
    value: Any


class ConfigLoadResult(BaseModel):
    """Container bundling a resolved config with provenance metadata."""

    model_config = ConfigDict(validate_assignment=True)

    config: Config
    updates: list[FieldUpdate] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    sources: list[str] = Field(default_factory=list)


class ConfigLoader:
    """Apply layered configuration sources with predictable precedence."""

    def __init__(self, sources: Sequence[ConfigSource]) -> None:
        self._sources = list(sources)

    @classmethod
    def for_root(
        cls,
        project_root: Path,
        *,
        global_config: Path | None = None,
        local_config: Path | None = None,
    ) -> ConfigLoader:
        """Build a loader reading the global file then the project's file."""

        global_file = global_config if global_config is not None else global_config_path()
        local_file = local_config if local_config is not None else local_config_path(project_root)
        return cls([TomlConfigSource(global_file), TomlConfigSource(local_file)])

    def with_overrides(self, overrides: Mapping[str, Any]) -> ConfigLoader:
        """Return a loader with CLI overrides appended as the last layer."""

        return ConfigLoader([*self._sources, MappingConfigSource(overrides)])

    def load(self) -> Config:
        return self.load_with_trace().config

    def load_with_trace(self) -> ConfigLoadResult:
        """Return the merged configuration together with its provenance.

        Raises:
            ConfigError: If a configuration file exists but cannot be parsed.
        """

        config = Config()
        updates: list[FieldUpdate] = []
        warnings: list[str] = []
        sources: list[str] = []
        for source in self._sources:
            fragment = source.load()
            if not fragment:
                continue
            sources.append(source.name)
            config = _apply_fragment(config, fragment, source.name, updates, warnings)
        for warning in warnings:
            LOGGER.debug("config: %s", warning)
        return ConfigLoadResult(config=config, updates=updates, warnings=warnings, sources=sources)


def _apply_fragment(
    config: Config,
    fragment: Mapping[str, Any],
    source: str,
    updates: list[FieldUpdate],
    warnings: list[str],
) -> Config:
    for key, raw in fragment.items():
        if key not in CONFIG_KEYS:
            continue
        candidate = config.model_copy(deep=True)
        try:
            setattr(candidate, key, raw)
        except ValidationError as exc:
            errors = exc.errors()
            reason = errors[0].get("msg", "invalid value") if errors else "invalid value"
            warnings.append(f"{source}: ignoring {key}={raw!r} ({reason})")
            continue
        config = candidate
        updates.append(FieldUpdate(field=key, source=source, value=getattr(config, key)))
    return config


def load_config(
    project_root: Path,
    overrides: Mapping[str, Any] | None = None,
    *,
    global_config: Path | None = None,
) -> Config:
    """Return the merged configuration for *project_root*."""

    loader = ConfigLoader.for_root(project_root, global_config=global_config)
    if overrides:
        loader = loader.with_overrides(overrides)
    return loader.load()


__all__ = [
    "ConfigLoadResult",
    "ConfigLoader",
    "ConfigSource",
    "FieldUpdate",
    "MappingConfigSource",
    "TomlConfigSource",
    "load_config",
]
