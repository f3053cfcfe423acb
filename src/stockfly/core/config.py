# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Layered configuration: packaged defaults, project files, profiles, environment.

Values are addressed with dotted keys (``stockfly.odata.cache_ttl``). A
matching ``STOCKFLY_*`` environment variable always wins
(``STOCKFLY_ODATA_CACHE_TTL``), and string values may embed ``${NAME}`` or
``${NAME:default}`` placeholders, where ``NAME`` is an environment variable
or another dotted key.

Sections are bound to ``@config_properties`` dataclasses::

    odata = config.bind(ODataProperties)
"""

from __future__ import annotations

import dataclasses
import importlib.resources
import os
import re
import tomllib
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any, TypeVar, get_type_hints

import yaml  # type: ignore[import-untyped]

T = TypeVar("T")

_PREFIX_ATTR = "__stockfly_config_prefix__"
_PLACEHOLDER = re.compile(r"\$\{([^}]+)\}")
_MAX_PLACEHOLDER_DEPTH = 10
_MISSING = object()


def config_properties(prefix: str) -> Callable[[type[T]], type[T]]:
    """Declare the dotted *prefix* a properties dataclass binds to."""

    def mark(cls: type[T]) -> type[T]:
        setattr(cls, _PREFIX_ATTR, prefix)
        return cls

    return mark


def env_key(key: str) -> str:
    """Environment variable that overrides *key*: ``stockfly.web.port`` -> ``STOCKFLY_WEB_PORT``."""
    return "STOCKFLY_" + key.removeprefix("stockfly.").upper().replace(".", "_").replace("-", "_")


class Config:
    """Immutable view over merged configuration data.

    Lookup order for :meth:`get` (first hit wins): environment variable,
    merged file data, the caller's default.
    """

    def __init__(self, data: dict[str, Any] | None = None, sources: list[str] | None = None) -> None:
        self._data: dict[str, Any] = data or {}
        self._sources: list[str] = sources or []

    @property
    def loaded_sources(self) -> list[str]:
        """Where the data came from, in merge order."""
        return list(self._sources)

    @classmethod
    def from_sources(
        cls,
        base_dir: str | Path,
        active_profiles: list[str] | None = None,
        load_defaults: bool = True,
    ) -> Config:
        """Merge packaged defaults with the files found under *base_dir*.

        Later files override earlier ones:

        1. ``stockfly-defaults.yaml`` shipped in :mod:`stockfly.resources`
        2. ``config/stockfly.{yaml,toml}`` then ``stockfly.{yaml,toml}``
        3. the same two locations with ``stockfly-{profile}``, per active profile
        """
        data: dict[str, Any] = cls._packaged_defaults() if load_defaults else {}
        sources = ["stockfly-defaults.yaml (defaults)"] if load_defaults else []

        for path, label in _candidate_files(Path(base_dir), active_profiles or []):
            data = _deep_merge(data, _read_file(path))
            sources.append(label)
        return cls(data, sources)

    @classmethod
    def defaults(cls) -> Config:
        """Only the packaged defaults; the usual starting point for tests."""
        return cls(cls._packaged_defaults(), ["stockfly-defaults.yaml (defaults)"])

    def merged_with(self, overrides: dict[str, Any]) -> Config:
        """A new config with *overrides* deep-merged on top of this one."""
        return Config(_deep_merge(self._data, overrides), [*self._sources, "overrides"])

    def get(self, key: str, default: Any = None) -> Any:
        env_value = os.environ.get(env_key(key))
        if env_value is not None:
            return env_value
        value = self._lookup(key)
        if value is _MISSING or value is None:
            return default
        if isinstance(value, str) and "${" in value:
            return self._expand(value)
        return value

    def get_section(self, prefix: str) -> dict[str, Any]:
        """The raw mapping stored under *prefix*, or ``{}``."""
        value = self._lookup(prefix)
        return value if isinstance(value, dict) else {}

    def bind(self, config_cls: type[T]) -> T:
        """Instantiate *config_cls* from its prefix.

        Fields missing from the configuration keep their dataclass default.
        Strings (from the environment or placeholders) are converted to the
        field's ``int``, ``float`` or ``bool`` type.
        """
        prefix = getattr(config_cls, _PREFIX_ATTR, None)
        if prefix is None:
            raise ValueError(f"{config_cls.__name__} is not decorated with @config_properties")

        hints = get_type_hints(config_cls)
        values: dict[str, Any] = {}
        for field in dataclasses.fields(config_cls):  # type: ignore[arg-type]
            raw = self.get(f"{prefix}.{field.name}")
            if raw is not None:
                values[field.name] = _coerce(raw, hints.get(field.name))
        return config_cls(**values)

    def _lookup(self, key: str) -> Any:
        node: Any = self._data
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return _MISSING
            node = node[part]
        return node

    def _expand(self, value: str, depth: int = 0) -> str:
        if depth > _MAX_PLACEHOLDER_DEPTH:
            raise ValueError(f"Placeholder nesting too deep in '{value}' (circular reference?)")

        def substitute(match: re.Match[str]) -> str:
            name, _, fallback = match.group(1).partition(":")
            has_fallback = ":" in match.group(1)
            if name in os.environ:
                return os.environ[name]
            found = self._lookup(name)
            if found is not _MISSING and found is not None:
                text = str(found)
                return self._expand(text, depth + 1) if "${" in text else text
            if has_fallback:
                return fallback
            raise ValueError(f"Cannot resolve placeholder '${{{name}}}': not found in environment or config")

        return _PLACEHOLDER.sub(substitute, value)

    @staticmethod
    def _packaged_defaults() -> dict[str, Any]:
        resource = importlib.resources.files("stockfly.resources").joinpath("stockfly-defaults.yaml")
        return yaml.safe_load(resource.read_text(encoding="utf-8")) or {}


def _candidate_files(base_dir: Path, profiles: list[str]) -> Iterator[tuple[Path, str]]:
    stems = [("stockfly", None)] + [(f"stockfly-{profile}", profile) for profile in profiles]
    for stem, profile in stems:
        for directory in (base_dir / "config", base_dir):
            for suffix in (".yaml", ".toml"):
                path = directory / f"{stem}{suffix}"
                if path.is_file():
                    yield path, str(path) if profile is None else f"{path} (profile: {profile})"


def _read_file(path: Path) -> dict[str, Any]:
    if path.suffix == ".toml":
        with path.open("rb") as fh:
            return tomllib.load(fh)
    with path.open(encoding="utf-8") as fh:
        return yaml.safe_load(fh) or {}


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        merged[key] = _deep_merge(current, value) if isinstance(current, dict) and isinstance(value, dict) else value
    return merged


def _coerce(value: Any, expected: Any) -> Any:
    if expected is bool and isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "on")
    if expected is int and isinstance(value, str):
        return int(value)
    if expected is float and isinstance(value, (str, int)):
        return float(value)
    return value
