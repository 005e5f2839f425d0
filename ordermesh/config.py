"""YAML configuration with environment overrides."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Iterable, Mapping

import yaml

DEFAULT_SEARCH_PATHS = ("../common/config",)
DEFAULT_NAME = "global"


class ConfigNotFoundError(FileNotFoundError):
    """No configuration file was found in any search path."""


def _lower_keys(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {str(k).lower(): _lower_keys(v) for k, v in value.items()}
    return value


def _to_string(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    return ""


class Config:
    """Case-insensitive nested settings; environment variables win."""

    def __init__(self, data: Mapping[str, Any] | None = None, environ: Mapping[str, str] | None = None):
        self._data = _lower_keys(data or {})
        self._environ = environ

    def _lookup(self, key: str) -> Any:
        node: Any = self._data
        for part in key.lower().split("."):
            if not isinstance(node, Mapping) or part not in node:
                return None
            node = node[part]
        return node

    def _from_env(self, key: str) -> str | None:
        if self._environ is None:
            return None
        value = self._environ.get(key.upper().replace("-", "_"))
        return value or None

    def get_string(self, key: str) -> str:
        """Return the value at a dotted key as text, or "" when unset."""
        env_value = self._from_env(key)
        if env_value is not None:
            return env_value
        return _to_string(self._lookup(key))

    def sub(self, key: str) -> "Config":
        """Return the section at ``key`` as its own configuration."""
        node = self._lookup(key)
        if not isinstance(node, Mapping):
            raise KeyError(key)
        return Config(node)


def _find_file(search_paths: Iterable[str | os.PathLike], name: str) -> Path:
    for directory in search_paths:
        base = Path(directory)
        for candidate in (base / f"{name}.yaml", base / f"{name}.yml", base / name):
            if candidate.is_file():
                return candidate
    raise ConfigNotFoundError(f"config file {name!r} not found")


def load_config(
    search_paths: Iterable[str | os.PathLike] = DEFAULT_SEARCH_PATHS,
    name: str = DEFAULT_NAME,
) -> Config:
    """Read the named YAML file from the first search path that holds it.

    Values from the process environment override those in the file.
    """
    path = _find_file(search_paths, name)
    with path.open(encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    return Config(data, os.environ)