"""
element-roles — runtime settings schema and validation.

File: src/element_roles/config/schema.py

Purpose
- Define authoritative settings defaults and strict validation rules.

Functional requirements
- Validate settings payloads and return structured errors (field path + message).
- Reject unknown keys so typos in ``element_roles.toml`` fail loudly.

Non-functional requirements
- Keep rules deterministic and easy to audit: one checker per known key, in
  ``_FIELD_CHECKS``.
"""

from __future__ import annotations

import copy
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Final, Literal, TypedDict

from element_roles.constants import BUILTIN_SCHEMA_SOURCE, CONFIG_SCHEMA_VERSION

ConfigSchemaVersion: Final[int] = CONFIG_SCHEMA_VERSION
LOG_LEVELS: Final[tuple[str, ...]] = ("DEBUG", "INFO", "WARNING", "ERROR")

# Settings paths normalized relative to the settings file location.
PATH_FIELDS: Final[tuple[tuple[str, str], ...]] = (
    ("schema", "source"),
    ("observability", "log_dir"),
)


class MetaConfig(TypedDict):
    schema_version: int


class SchemaSourceConfig(TypedDict):
    source: str


class ValidationConfig(TypedDict):
    strict_ordering: bool
    report_reorderable_singletons: bool


class ObservabilityConfig(TypedDict):
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"]
    log_dir: str
    log_to_stdout: bool


class ElementRolesConfig(TypedDict):
    meta: MetaConfig
    schema: SchemaSourceConfig
    validation: ValidationConfig
    observability: ObservabilityConfig


DEFAULT_CONFIG: Final[ElementRolesConfig] = {
    "meta": {
        "schema_version": ConfigSchemaVersion,
    },
    "schema": {
        "source": BUILTIN_SCHEMA_SOURCE,
    },
    "validation": {
        "strict_ordering": True,
        "report_reorderable_singletons": True,
    },
    "observability": {
        "log_level": "INFO",
        "log_dir": "logs",
        "log_to_stdout": False,
    },
}


@dataclass(frozen=True, slots=True)
class ConfigValidationIssue:
    """Single structured validation failure."""

    path: str
    message: str


@dataclass(frozen=True, slots=True)
class ConfigValidationResult:
    config: dict[str, Any] | None
    issues: tuple[ConfigValidationIssue, ...]

    @property
    def is_valid(self) -> bool:
        return self.config is not None and not self.issues


class ConfigValidationError(ValueError):
    """Raised when strict settings validation fails."""

    def __init__(self, issues: Sequence[ConfigValidationIssue]) -> None:
        self.issues = tuple(issues)
        lines = [f"- {item.path}: {item.message}" for item in self.issues]
        super().__init__("invalid settings:\n" + ("\n".join(lines) or "- <unknown>"))


_Issues = list[ConfigValidationIssue]


def _string(value: object, path: str, issues: _Issues) -> str | None:
    if not isinstance(value, str):
        issues.append(ConfigValidationIssue(path, "expected string"))
        return None
    if not value.strip():
        issues.append(ConfigValidationIssue(path, "must not be empty"))
        return None
    return value.strip()


def _boolean(value: object, path: str, issues: _Issues) -> bool | None:
    if isinstance(value, bool):
        return value
    issues.append(ConfigValidationIssue(path, "expected bool"))
    return None


def _schema_version(value: object, path: str, issues: _Issues) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int):
        issues.append(ConfigValidationIssue(path, "expected integer"))
        return None
    if value != ConfigSchemaVersion:
        issues.append(
            ConfigValidationIssue(
                path,
                f"schema version {value} is not supported; expected {ConfigSchemaVersion}",
            )
        )
    return value


def _log_level(value: object, path: str, issues: _Issues) -> str | None:
    level = _string(value, path, issues)
    if level is None:
        return None
    if level.upper() not in LOG_LEVELS:
        issues.append(ConfigValidationIssue(path, f"expected one of {list(LOG_LEVELS)}"))
    return level.upper()


_FIELD_CHECKS: Final[dict[str, dict[str, Callable[[object, str, _Issues], object]]]] = {
    "meta": {"schema_version": _schema_version},
    "schema": {"source": _string},
    "validation": {
        "report_reorderable_singletons": _boolean,
        "strict_ordering": _boolean,
    },
    "observability": {
        "log_level": _log_level,
        "log_dir": _string,
        "log_to_stdout": _boolean,
    },
}


def default_config() -> ElementRolesConfig:
    """Return a deep copy of the built-in defaults."""

    return copy.deepcopy(DEFAULT_CONFIG)


def merge_config(base: Mapping[str, object], overlay: Mapping[str, object]) -> dict[str, Any]:
    """Deep-merge ``overlay`` onto a copy of ``base``; neither input is modified."""

    merged = _copy_tree(base)
    for key in sorted(overlay):
        value = overlay[key]
        current = merged.get(key)
        if isinstance(value, Mapping) and isinstance(current, dict):
            merged[key] = merge_config(current, value)
        else:
            merged[key] = _copy_tree(value) if isinstance(value, Mapping) else copy.deepcopy(value)
    return merged


def validate_config(config: Mapping[str, object] | object) -> ConfigValidationResult:
    """Validate settings and return structured issues with deterministic paths.

    Unknown keys are reported first at each level (sorted), then each known key in
    declaration order. ``config`` is only returned when there are no issues.
    """

    issues: _Issues = []
    if not isinstance(config, Mapping):
        issues.append(ConfigValidationIssue("<root>", "expected object"))
        return ConfigValidationResult(config=None, issues=tuple(issues))

    _report_unknown_keys(config, _FIELD_CHECKS, "", issues)
    normalized: dict[str, Any] = {}
    for section_name, checks in _FIELD_CHECKS.items():
        section = config.get(section_name)
        if not isinstance(section, Mapping):
            issues.append(
                ConfigValidationIssue(section_name, "section is required and must be an object")
            )
            continue
        _report_unknown_keys(section, checks, section_name, issues)
        normalized[section_name] = {
            key: check(section.get(key), f"{section_name}.{key}", issues)
            for key, check in checks.items()
        }

    if issues:
        return ConfigValidationResult(config=None, issues=tuple(issues))
    return ConfigValidationResult(config=normalized, issues=())


def assert_valid_config(config: Mapping[str, object] | object) -> dict[str, Any]:
    """Validate settings and raise ``ConfigValidationError`` on failure."""

    result = validate_config(config)
    if result.config is None:
        raise ConfigValidationError(result.issues)
    return result.config


def _report_unknown_keys(
    payload: Mapping[Any, object],
    known: Mapping[str, object],
    prefix: str,
    issues: _Issues,
) -> None:
    for key in sorted(str(item) for item in payload if str(item) not in known):
        issues.append(ConfigValidationIssue(f"{prefix}.{key}" if prefix else key, "unknown key"))


def _copy_tree(value: Mapping[str, object]) -> dict[str, Any]:
    return {
        str(key): _copy_tree(item) if isinstance(item, Mapping) else copy.deepcopy(item)
        for key, item in value.items()
    }


__all__ = [
    "ConfigSchemaVersion",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "ConfigValidationResult",
    "DEFAULT_CONFIG",
    "ElementRolesConfig",
    "LOG_LEVELS",
    "PATH_FIELDS",
    "assert_valid_config",
    "default_config",
    "merge_config",
    "validate_config",
]
