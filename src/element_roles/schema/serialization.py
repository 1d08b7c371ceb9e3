"""External representation of roles handed to configuration-editing UIs."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, NotRequired, TypeAlias, TypedDict, cast

if TYPE_CHECKING:
    from element_roles.schema.registry import RoleRegistry
    from element_roles.schema.role import ElementRole

JSONScalar: TypeAlias = str | int | float | bool | None
JSONValue: TypeAlias = JSONScalar | list["JSONValue"] | dict[str, "JSONValue"]


class RoleRecord(TypedDict):
    name: str | None
    optional: bool
    multiple: bool
    reorderable: bool
    children: NotRequired[list[str]]


def serialize_role(role: ElementRole) -> RoleRecord:
    """Return the one-level record for ``role``.

    ``children`` lists child identities in declared order and is omitted entirely for
    leaf roles; consumers expand further by identity.
    """

    record: RoleRecord = {
        "name": role.name,
        "optional": role.optional,
        "multiple": role.multiple,
        "reorderable": role.reorderable,
    }
    if role.children:
        record["children"] = list(role.children)
    return record


def serialize_registry(registry: RoleRegistry) -> dict[str, JSONValue]:
    """Return every role record keyed by identity, in declaration order."""

    roles: dict[str, JSONValue] = {
        role.role_id: cast("JSONValue", serialize_role(role)) for role in registry.roles
    }
    return {
        "root": registry.root().role_id,
        "roles": roles,
    }


def canonical_json(value: JSONValue | RoleRecord) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


__all__ = [
    "JSONScalar",
    "JSONValue",
    "RoleRecord",
    "canonical_json",
    "serialize_registry",
    "serialize_role",
]
