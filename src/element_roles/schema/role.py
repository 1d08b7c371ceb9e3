"""
element-roles — role value objects.

File: src/element_roles/schema/role.py

Purpose
- Defines the immutable record describing one position in the configuration tree.

Functional requirements
- Roles are plain values: identity, optional display name, cardinality flags and an
  ordered tuple of child identities.
- Cardinality is derived from ``optional``/``multiple`` and never stored separately.

Non-functional requirements
- Instances are hashable and safe to share across threads.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import StrEnum


def _validate_role_id(value: object, field_name: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{field_name} must be a string")
    parsed = value.strip()
    if not parsed:
        raise ValueError(f"{field_name} cannot be empty")
    if parsed != value or any(char.isspace() for char in parsed):
        raise ValueError(f"{field_name} must not contain whitespace: {value!r}")
    if "\x00" in parsed:
        raise ValueError(f"{field_name} must not contain NUL bytes")
    return parsed


def _validate_optional_name(value: object, field_name: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"{field_name} must be a string or None")
    parsed = value.strip()
    if not parsed:
        raise ValueError(f"{field_name} cannot be blank; use None for grouping roles")
    return parsed


def _validate_flag(value: object, field_name: str) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"{field_name} must be a bool")
    return value


class Cardinality(StrEnum):
    """How many instances of a role may appear under its parent."""

    EXACTLY_ONE = "exactly_one"
    ZERO_OR_ONE = "zero_or_one"
    ONE_OR_MORE = "one_or_more"
    ZERO_OR_MORE = "zero_or_more"

    @classmethod
    def from_flags(cls, *, optional: bool, multiple: bool) -> Cardinality:
        if multiple:
            return cls.ZERO_OR_MORE if optional else cls.ONE_OR_MORE
        return cls.ZERO_OR_ONE if optional else cls.EXACTLY_ONE

    @property
    def min_occurs(self) -> int:
        return 0 if self in (Cardinality.ZERO_OR_ONE, Cardinality.ZERO_OR_MORE) else 1

    @property
    def max_occurs(self) -> int | None:
        """Upper bound on instances, or ``None`` when unbounded."""

        return None if self in (Cardinality.ONE_OR_MORE, Cardinality.ZERO_OR_MORE) else 1

    def allows(self, count: int) -> bool:
        if count < self.min_occurs:
            return False
        upper = self.max_occurs
        return upper is None or count <= upper


@dataclass(frozen=True, slots=True)
class ElementRole:
    """One named position in the configuration schema tree."""

    role_id: str
    name: str | None = None
    optional: bool = False
    multiple: bool = False
    reorderable: bool = False
    children: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "role_id", _validate_role_id(self.role_id, "ElementRole.role_id"))
        object.__setattr__(self, "name", _validate_optional_name(self.name, "ElementRole.name"))
        for flag in ("optional", "multiple", "reorderable"):
            _validate_flag(getattr(self, flag), f"ElementRole.{flag}")

        if isinstance(self.children, str) or not isinstance(self.children, Sequence):
            raise ValueError("ElementRole.children must be a sequence of role identities")
        object.__setattr__(
            self,
            "children",
            tuple(
                _validate_role_id(item, f"ElementRole.children[{index}]")
                for index, item in enumerate(self.children)
            ),
        )

    @property
    def cardinality(self) -> Cardinality:
        return Cardinality.from_flags(optional=self.optional, multiple=self.multiple)

    @property
    def is_grouping(self) -> bool:
        """Grouping roles carry no display name and are never rendered as a leaf."""

        return self.name is None

    @property
    def is_leaf(self) -> bool:
        return not self.children

    @property
    def display_label(self) -> str:
        return self.name if self.name is not None else self.role_id


__all__ = ["Cardinality", "ElementRole"]
