"""
element-roles schema package public API.

File: src/element_roles/schema/__init__.py

Purpose
- Export the role model, the validated registry, its error taxonomy, and the
  serialization/loading entrypoints.

Non-functional requirements
- Importing this package must not build any registry; callers construct one explicitly.
"""

from element_roles.schema.errors import (
    AmbiguousRoot,
    CyclicSchema,
    DanglingReference,
    DuplicateParent,
    DuplicateRole,
    MalformedSchema,
    RoleSchemaError,
    UnknownRole,
    UnreachableRole,
)
from element_roles.schema.loader import (
    SchemaDocumentError,
    dump_registry,
    load_registry,
    registry_from_mapping,
    registry_to_document,
    render_registry_yaml,
)
from element_roles.schema.registry import RoleRegistry
from element_roles.schema.role import Cardinality, ElementRole
from element_roles.schema.serialization import (
    RoleRecord,
    canonical_json,
    serialize_registry,
    serialize_role,
)

__all__ = [
    "AmbiguousRoot",
    "Cardinality",
    "CyclicSchema",
    "DanglingReference",
    "DuplicateParent",
    "DuplicateRole",
    "ElementRole",
    "MalformedSchema",
    "RoleRecord",
    "RoleRegistry",
    "RoleSchemaError",
    "SchemaDocumentError",
    "UnknownRole",
    "UnreachableRole",
    "canonical_json",
    "dump_registry",
    "load_registry",
    "registry_from_mapping",
    "registry_to_document",
    "render_registry_yaml",
    "serialize_registry",
    "serialize_role",
]
