"""
element-roles — configuration tree validation against the role schema.

File: src/element_roles/validation/configuration.py

Purpose
- Check a concrete configuration element tree against a validated ``RoleRegistry``.

Functional requirements
- Report every problem with a deterministic element path: unknown roles, children not
  permitted under their parent, cardinality violations, and canonical-order breaks.
- A role marked reorderable but not multiple is a no-op; it yields a notice only.

Non-functional requirements
- Pure function of (registry, element, options); the registry is only read.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Final

import structlog

from element_roles.schema.loader import SchemaDocumentError, read_structured_file
from element_roles.schema.serialization import JSONValue

if TYPE_CHECKING:
    from element_roles.schema.registry import RoleRegistry
    from element_roles.schema.role import ElementRole

ISSUE_WRONG_ROOT: Final[str] = "wrong_root"
ISSUE_UNKNOWN_ROLE: Final[str] = "unknown_role"
ISSUE_UNEXPECTED_CHILD: Final[str] = "unexpected_child"
ISSUE_MISSING_REQUIRED: Final[str] = "missing_required"
ISSUE_TOO_MANY: Final[str] = "too_many"
ISSUE_OUT_OF_ORDER: Final[str] = "out_of_order"
NOTICE_REORDERABLE_SINGLETON: Final[str] = "reorderable_singleton"

_ALLOWED_ELEMENT_FIELDS: Final[frozenset[str]] = frozenset({"role", "label", "children"})


class ConfigurationDocumentError(ValueError):
    """Raised when a configuration document cannot be parsed into elements."""


@dataclass(frozen=True, slots=True)
class ConfigElement:
    """One instance of a role inside a user's configuration tree."""

    role_id: str
    label: str | None = None
    children: tuple[ConfigElement, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not isinstance(self.role_id, str) or not self.role_id.strip():
            raise ValueError("ConfigElement.role_id must be a non-empty string")
        if self.label is not None and not isinstance(self.label, str):
            raise ValueError("ConfigElement.label must be a string or None")
        children = tuple(self.children)
        for child in children:
            if not isinstance(child, ConfigElement):
                raise ValueError("ConfigElement.children entries must be ConfigElement")
        object.__setattr__(self, "children", children)

    @classmethod
    def from_mapping(
        cls,
        payload: object,
        *,
        location: str = "<configuration>",
    ) -> ConfigElement:
        if not isinstance(payload, Mapping):
            raise ConfigurationDocumentError(
                f"{location}: expected mapping, got {type(payload).__name__}"
            )
        unknown = sorted(str(key) for key in payload if key not in _ALLOWED_ELEMENT_FIELDS)
        if unknown:
            raise ConfigurationDocumentError(
                f"{location}: unexpected fields: {unknown}; allowed fields: "
                f"{sorted(_ALLOWED_ELEMENT_FIELDS)}"
            )

        role_raw = payload.get("role")
        if not isinstance(role_raw, str) or not role_raw.strip():
            raise ConfigurationDocumentError(f"{location}.role: expected non-empty string")
        label_raw = payload.get("label")
        if label_raw is not None and not isinstance(label_raw, str):
            raise ConfigurationDocumentError(f"{location}.label: expected string")

        children_raw = payload.get("children")
        if children_raw is None:
            children_raw = ()
        if not isinstance(children_raw, Sequence) or isinstance(children_raw, (str, bytes)):
            raise ConfigurationDocumentError(f"{location}.children: expected a sequence")

        children = tuple(
            cls.from_mapping(item, location=f"{location}.children[{index}]")
            for index, item in enumerate(children_raw)
        )
        return cls(role_id=role_raw.strip(), label=label_raw, children=children)

    def to_dict(self) -> dict[str, JSONValue]:
        payload: dict[str, JSONValue] = {"role": self.role_id}
        if self.label is not None:
            payload["label"] = self.label
        if self.children:
            payload["children"] = [child.to_dict() for child in self.children]
        return payload


@dataclass(frozen=True, slots=True)
class ConfigurationIssue:
    """Single structured validation finding."""

    path: str
    code: str
    message: str

    def to_dict(self) -> dict[str, JSONValue]:
        return {"path": self.path, "code": self.code, "message": self.message}


@dataclass(frozen=True, slots=True)
class ConfigurationReport:
    issues: tuple[ConfigurationIssue, ...]
    notices: tuple[ConfigurationIssue, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.issues

    def codes(self) -> tuple[str, ...]:
        return tuple(issue.code for issue in self.issues)

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "valid": self.is_valid,
            "issues": [issue.to_dict() for issue in self.issues],
            "notices": [notice.to_dict() for notice in self.notices],
        }


class ConfigurationValidationError(ValueError):
    """Raised by :func:`assert_valid_configuration` when issues were found."""

    def __init__(self, issues: Sequence[ConfigurationIssue]) -> None:
        self.issues = tuple(issues)
        if not self.issues:
            rendered = "unknown validation failure"
        else:
            rendered = "\n".join(
                f"- {item.path}: [{item.code}] {item.message}" for item in self.issues
            )
        super().__init__(f"invalid configuration:\n{rendered}")


class _IssueCollector:
    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: list[ConfigurationIssue] = []

    def add(self, path: str, code: str, message: str) -> None:
        self._items.append(ConfigurationIssue(path=path, code=code, message=message))

    def items(self) -> tuple[ConfigurationIssue, ...]:
        return tuple(self._items)


def validate_configuration(
    registry: RoleRegistry,
    element: ConfigElement,
    *,
    strict_ordering: bool = True,
    report_reorderable_singletons: bool = True,
    logger: Any | None = None,
) -> ConfigurationReport:
    """Validate ``element`` (the configuration root) against ``registry``."""

    log = logger if logger is not None else structlog.get_logger(__name__)
    issues = _IssueCollector()
    root = registry.root()
    root_path = element.role_id

    if element.role_id not in registry:
        issues.add(root_path, ISSUE_UNKNOWN_ROLE, f"role {element.role_id!r} is not defined")
    elif element.role_id != root.role_id:
        issues.add(
            root_path,
            ISSUE_WRONG_ROOT,
            f"configuration must start at root role {root.role_id!r}",
        )
    else:
        _check_children(
            registry,
            element,
            registry.lookup(element.role_id),
            root_path,
            issues,
            strict_ordering=strict_ordering,
        )

    notices = _IssueCollector()
    if report_reorderable_singletons:
        for role in registry.walk():
            if role.reorderable and not role.multiple:
                notices.add(
                    role.role_id,
                    NOTICE_REORDERABLE_SINGLETON,
                    "role is reorderable but allows a single instance; ordering is a no-op",
                )

    report = ConfigurationReport(issues=issues.items(), notices=notices.items())
    log_method = log.info if report.is_valid else log.warning
    log_method(
        "configuration_validated",
        root_role=element.role_id,
        valid=report.is_valid,
        issue_count=len(report.issues),
        notice_count=len(report.notices),
        issue_codes=sorted(set(report.codes())),
    )
    return report


def assert_valid_configuration(
    registry: RoleRegistry,
    element: ConfigElement,
    *,
    strict_ordering: bool = True,
) -> ConfigurationReport:
    report = validate_configuration(registry, element, strict_ordering=strict_ordering)
    if not report.is_valid:
        raise ConfigurationValidationError(report.issues)
    return report


def load_configuration(path: str | Path) -> ConfigElement:
    """Read a YAML/JSON configuration document into a :class:`ConfigElement` tree."""

    resolved = Path(path)
    try:
        payload = read_structured_file(resolved)
    except SchemaDocumentError as exc:
        raise ConfigurationDocumentError(str(exc)) from exc
    return ConfigElement.from_mapping(payload, location=resolved.name)


def _check_children(
    registry: RoleRegistry,
    element: ConfigElement,
    role: ElementRole,
    path: str,
    issues: _IssueCollector,
    *,
    strict_ordering: bool,
) -> None:
    counts: dict[str, int] = {}
    furthest_position = -1
    furthest_role: str | None = None

    for index, child in enumerate(element.children):
        child_path = f"{path}/{child.role_id}[{index}]"
        child_role = registry.get(child.role_id)
        if child_role is None:
            issues.add(child_path, ISSUE_UNKNOWN_ROLE, f"role {child.role_id!r} is not defined")
            continue
        if child.role_id not in role.children:
            allowed = list(role.children)
            issues.add(
                child_path,
                ISSUE_UNEXPECTED_CHILD,
                f"role {child.role_id!r} is not allowed under {role.role_id!r}; "
                f"allowed: {allowed}",
            )
            continue

        counts[child.role_id] = counts.get(child.role_id, 0) + 1

        position = role.children.index(child.role_id)
        if strict_ordering and position < furthest_position:
            issues.add(
                child_path,
                ISSUE_OUT_OF_ORDER,
                f"role {child.role_id!r} must appear before {furthest_role!r}",
            )
        elif position > furthest_position:
            furthest_position = position
            furthest_role = child.role_id

        _check_children(
            registry,
            child,
            child_role,
            child_path,
            issues,
            strict_ordering=strict_ordering,
        )

    for child_id in role.children:
        cardinality = registry.lookup(child_id).cardinality
        count = counts.get(child_id, 0)
        if cardinality.allows(count):
            continue
        if count < cardinality.min_occurs:
            issues.add(
                path,
                ISSUE_MISSING_REQUIRED,
                f"expected {cardinality.value} of {child_id!r}, found {count}",
            )
        else:
            issues.add(
                path,
                ISSUE_TOO_MANY,
                f"expected {cardinality.value} of {child_id!r}, found {count}",
            )


__all__ = [
    "ConfigElement",
    "ConfigurationDocumentError",
    "ConfigurationIssue",
    "ConfigurationReport",
    "ConfigurationValidationError",
    "ISSUE_MISSING_REQUIRED",
    "ISSUE_OUT_OF_ORDER",
    "ISSUE_TOO_MANY",
    "ISSUE_UNEXPECTED_CHILD",
    "ISSUE_UNKNOWN_ROLE",
    "ISSUE_WRONG_ROOT",
    "NOTICE_REORDERABLE_SINGLETON",
    "assert_valid_configuration",
    "load_configuration",
    "validate_configuration",
]
