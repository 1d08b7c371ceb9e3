"""Load and dump role registries as YAML/JSON role documents."""

from __future__ import annotations

import json
import os
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Final, TypeAlias, cast

import yaml

from element_roles.constants import ROLE_DOCUMENT_SCHEMA_VERSION
from element_roles.schema.registry import RoleRegistry
from element_roles.schema.role import ElementRole

PathLike: TypeAlias = str | os.PathLike[str]

_ALLOWED_DOCUMENT_FIELDS: Final[frozenset[str]] = frozenset({"schema_version", "root", "roles"})
_REQUIRED_ROLE_FIELDS: Final[frozenset[str]] = frozenset({"id"})
_OPTIONAL_ROLE_FIELDS: Final[frozenset[str]] = frozenset(
    {"name", "optional", "multiple", "reorderable", "children"}
)
_ALLOWED_ROLE_FIELDS: Final[frozenset[str]] = _REQUIRED_ROLE_FIELDS | _OPTIONAL_ROLE_FIELDS
_YAML_SUFFIXES: Final[frozenset[str]] = frozenset({".yaml", ".yml"})


class SchemaDocumentError(ValueError):
    """Raised when a role document is unreadable or has the wrong shape."""


def registry_from_mapping(payload: object, *, location: str = "<document>") -> RoleRegistry:
    """Parse a role document mapping and build a validated registry.

    Shape errors raise :class:`SchemaDocumentError`; structural errors in the role tree
    surface as :class:`~element_roles.schema.errors.MalformedSchema` from the registry.
    """

    document = _as_string_key_mapping(payload, location)
    unknown = sorted(set(document) - _ALLOWED_DOCUMENT_FIELDS)
    if unknown:
        raise SchemaDocumentError(
            f"{location}: unexpected fields: {unknown}; allowed fields: "
            f"{sorted(_ALLOWED_DOCUMENT_FIELDS)}"
        )

    version = document.get("schema_version", ROLE_DOCUMENT_SCHEMA_VERSION)
    if isinstance(version, bool) or not isinstance(version, int):
        raise SchemaDocumentError(f"{location}.schema_version: expected integer")
    if version != ROLE_DOCUMENT_SCHEMA_VERSION:
        raise SchemaDocumentError(
            f"{location}.schema_version: unsupported version {version}; "
            f"expected {ROLE_DOCUMENT_SCHEMA_VERSION}"
        )

    root_raw = document.get("root")
    if root_raw is not None and not isinstance(root_raw, str):
        raise SchemaDocumentError(f"{location}.root: expected string")

    roles_raw = document.get("roles")
    if not isinstance(roles_raw, Sequence) or isinstance(roles_raw, (str, bytes)):
        raise SchemaDocumentError(f"{location}.roles: expected a sequence of role mappings")

    roles = tuple(
        _parse_role_mapping(item, location=f"{location}.roles[{index}]")
        for index, item in enumerate(roles_raw)
    )
    return RoleRegistry(roles=roles, root_id=root_raw)


def load_registry(path: PathLike) -> RoleRegistry:
    """Load a registry from a ``.yaml``/``.yml`` or ``.json`` role document."""

    resolved = Path(path)
    return registry_from_mapping(_read_document(resolved), location=resolved.name)


def registry_to_document(registry: RoleRegistry) -> dict[str, object]:
    roles: list[dict[str, object]] = []
    for role in registry.roles:
        record: dict[str, object] = {"id": role.role_id}
        if role.name is not None:
            record["name"] = role.name
        record["optional"] = role.optional
        record["multiple"] = role.multiple
        record["reorderable"] = role.reorderable
        if role.children:
            record["children"] = list(role.children)
        roles.append(record)
    return {
        "schema_version": ROLE_DOCUMENT_SCHEMA_VERSION,
        "root": registry.root().role_id,
        "roles": roles,
    }


def render_registry_yaml(registry: RoleRegistry) -> str:
    rendered = yaml.safe_dump(
        registry_to_document(registry),
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=False,
        width=120,
    )
    if not rendered.endswith("\n"):
        rendered = rendered + "\n"
    return rendered


def dump_registry(registry: RoleRegistry, path: PathLike) -> Path:
    """Write ``registry`` as a role document; format follows the file suffix."""

    destination = Path(path)
    if destination.suffix.lower() in _YAML_SUFFIXES:
        rendered = render_registry_yaml(registry)
    elif destination.suffix.lower() == ".json":
        rendered = json.dumps(registry_to_document(registry), indent=2) + "\n"
    else:
        raise SchemaDocumentError(f"{destination}: unsupported role document suffix")

    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_text(rendered, encoding="utf-8")
    return destination


def read_structured_file(path: Path) -> object:
    """Read a YAML or JSON file, choosing the parser by suffix."""

    return _read_document(path)


def _read_document(path: Path) -> object:
    suffix = path.suffix.lower()
    try:
        with path.open("r", encoding="utf-8") as handle:
            if suffix in _YAML_SUFFIXES:
                return cast("object", yaml.safe_load(handle))
            if suffix == ".json":
                return cast("object", json.load(handle))
    except yaml.YAMLError as exc:
        raise SchemaDocumentError(f"{path}: invalid YAML ({exc})") from exc
    except json.JSONDecodeError as exc:
        raise SchemaDocumentError(f"{path}: invalid JSON ({exc})") from exc
    except UnicodeDecodeError as exc:
        raise SchemaDocumentError(
            f"{path}: not valid UTF-8 ({exc.reason} at byte {exc.start})"
        ) from exc
    except OSError as exc:
        raise SchemaDocumentError(f"{path}: unable to read file ({exc})") from exc
    raise SchemaDocumentError(f"{path}: unsupported file suffix {suffix!r}; use .yaml or .json")


def _parse_role_mapping(value: object, *, location: str) -> ElementRole:
    parsed = _as_string_key_mapping(value, location)
    parsed_keys = set(parsed)

    missing = sorted(_REQUIRED_ROLE_FIELDS - parsed_keys)
    if missing:
        raise SchemaDocumentError(f"{location}: missing required fields: {missing}")

    unknown = sorted(parsed_keys - _ALLOWED_ROLE_FIELDS)
    if unknown:
        raise SchemaDocumentError(
            f"{location}: unexpected fields: {unknown}; allowed fields: "
            f"{sorted(_ALLOWED_ROLE_FIELDS)}"
        )

    children_raw = parsed.get("children", ())
    if children_raw is None:
        children_raw = ()
    if not isinstance(children_raw, Sequence) or isinstance(children_raw, (str, bytes)):
        raise SchemaDocumentError(f"{location}.children: expected a sequence of role ids")

    for flag in ("optional", "multiple", "reorderable"):
        if flag in parsed and not isinstance(parsed[flag], bool):
            raise SchemaDocumentError(f"{location}.{flag}: expected bool")

    try:
        return ElementRole(
            role_id=cast("str", parsed["id"]),
            name=cast("str | None", parsed.get("name")),
            optional=cast("bool", parsed.get("optional", False)),
            multiple=cast("bool", parsed.get("multiple", False)),
            reorderable=cast("bool", parsed.get("reorderable", False)),
            children=tuple(cast("Sequence[str]", children_raw)),
        )
    except ValueError as exc:
        raise SchemaDocumentError(f"{location}: {exc}") from exc


def _as_string_key_mapping(value: object, location: str) -> dict[str, object]:
    if not isinstance(value, Mapping):
        raise SchemaDocumentError(f"{location}: expected mapping, got {type(value).__name__}")
    output: dict[str, object] = {}
    for key, item in value.items():
        if not isinstance(key, str):
            raise SchemaDocumentError(f"{location}: mapping keys must be strings")
        output[key] = item
    return output


__all__ = [
    "SchemaDocumentError",
    "dump_registry",
    "load_registry",
    "read_structured_file",
    "registry_from_mapping",
    "registry_to_document",
    "render_registry_yaml",
]
