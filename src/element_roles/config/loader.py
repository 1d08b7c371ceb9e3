"""
element-roles — runtime settings loader.

File: src/element_roles/config/loader.py

Purpose
- Load effective settings from defaults, TOML file, env vars, and CLI overrides.

What should be included in this file
- Precedence logic: CLI > env (ELEMENT_ROLES_) > file > defaults.
- TOML loading via ``tomllib``.
- One env var per default setting: ``ELEMENT_ROLES_<SECTION>_<KEY>``, coerced to the
  default's type.
- Path normalization relative to the settings file location.
"""

from __future__ import annotations

import json
import os
import tomllib
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any, Final, cast

from element_roles.config.schema import (
    PATH_FIELDS,
    assert_valid_config,
    default_config,
    merge_config,
)
from element_roles.constants import BUILTIN_SCHEMA_SOURCE, DEFAULT_CONFIG_FILE, ENV_PREFIX

_TRUTHY: Final[frozenset[str]] = frozenset({"1", "true", "t", "yes", "y", "on"})
_FALSY: Final[frozenset[str]] = frozenset({"0", "false", "f", "no", "n", "off"})


class ConfigLoadError(ValueError):
    """Raised when settings cannot be loaded or overrides cannot be coerced."""


def load_config(
    config_path: str | Path | None = None,
    *,
    cli_overrides: Mapping[str, object] | None = None,
    environ: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Load effective settings with precedence: CLI > env > file > defaults.

    Without ``config_path`` an ``element_roles.toml`` in the working directory is used
    when present. The file layer is validated on its own first, so a typo in the file is
    reported against the file rather than against a later override.
    """

    settings_file = (
        Path(config_path).expanduser().resolve()
        if config_path is not None
        else (Path.cwd() / DEFAULT_CONFIG_FILE).resolve()
    )
    environment = os.environ if environ is None else environ

    effective = assert_valid_config(
        merge_config(default_config(), _read_settings_file(settings_file, config_path is not None))
    )
    for layer in (_env_layer(environment), _cli_layer(cli_overrides or {})):
        effective = merge_config(effective, layer)
    effective = assert_valid_config(effective)

    return normalize_paths(effective, base_dir=settings_file.parent)


def normalize_paths(config: Mapping[str, object], *, base_dir: Path) -> dict[str, Any]:
    """Resolve relative path settings against ``base_dir``; ``builtin`` is left alone."""

    normalized = merge_config({}, config)
    for section, key in PATH_FIELDS:
        values = normalized.get(section)
        if not isinstance(values, dict):
            continue
        raw = values.get(key)
        if isinstance(raw, str) and raw != BUILTIN_SCHEMA_SOURCE:
            values[key] = _absolute_posix(raw, base_dir)
    return normalized


def dump_effective_config(config: Mapping[str, object]) -> str:
    """Return deterministic JSON dump of effective settings."""

    return json.dumps(config, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def _read_settings_file(path: Path, required: bool) -> dict[str, Any]:
    if not path.exists():
        if required:
            raise ConfigLoadError(f"settings file not found: {path}")
        return {}
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ConfigLoadError(f"invalid TOML in {path}: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise ConfigLoadError(
            f"settings file {path} is not valid UTF-8 ({exc.reason} at byte {exc.start})"
        ) from exc
    except OSError as exc:
        raise ConfigLoadError(f"unable to read settings file {path}: {exc}") from exc


def _iter_settings() -> Iterator[tuple[str, str, object]]:
    defaults = cast("Mapping[str, Mapping[str, object]]", default_config())
    for section, values in defaults.items():
        for key, default in values.items():
            yield section, key, default


def _env_layer(environ: Mapping[str, str]) -> dict[str, Any]:
    layer: dict[str, Any] = {}
    for section, key, default in _iter_settings():
        env_name = f"{ENV_PREFIX}{section}_{key}".upper()
        raw = environ.get(env_name)
        if raw is not None:
            layer.setdefault(section, {})[key] = _coerce(
                raw.strip(), like=default, source=f"{env_name} -> {section}.{key}"
            )
    return layer


def _coerce(value: str, *, like: object, source: str) -> object:
    if isinstance(like, bool):
        lowered = value.lower()
        if lowered in _TRUTHY:
            return True
        if lowered in _FALSY:
            return False
        raise ConfigLoadError(f"{source} must be a boolean (true/false/1/0/yes/no/on/off)")
    if isinstance(like, int):
        try:
            return int(value)
        except ValueError as exc:
            raise ConfigLoadError(f"{source} must be an integer") from exc
    return value


def _cli_layer(overrides: Mapping[str, object]) -> dict[str, Any]:
    layer: dict[str, Any] = {}
    for dotted in sorted(overrides):
        parts = [part for part in dotted.split(".") if part]
        if not parts:
            raise ConfigLoadError(f"invalid CLI override key {dotted!r}")
        node = layer
        for part in parts[:-1]:
            node = node.setdefault(part, {})
        node[parts[-1]] = overrides[dotted]
    return layer


def _absolute_posix(raw: str, base_dir: Path) -> str:
    candidate = Path(os.path.expandvars(raw)).expanduser()
    if not candidate.is_absolute():
        candidate = base_dir / candidate
    return Path(os.path.normpath(candidate)).as_posix()


__all__ = [
    "ConfigLoadError",
    "dump_effective_config",
    "load_config",
    "normalize_paths",
]
