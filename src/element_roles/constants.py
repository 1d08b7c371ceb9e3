"""Stable constants shared across element-roles modules."""

from __future__ import annotations

from typing import Final

# Schema versions for persisted documents.
CONFIG_SCHEMA_VERSION: Final[int] = 1
ROLE_DOCUMENT_SCHEMA_VERSION: Final[int] = 1

# Runtime settings discovery.
DEFAULT_CONFIG_FILE: Final[str] = "element_roles.toml"
ENV_PREFIX: Final[str] = "ELEMENT_ROLES_"
BUILTIN_SCHEMA_SOURCE: Final[str] = "builtin"

__all__ = [
    "BUILTIN_SCHEMA_SOURCE",
    "CONFIG_SCHEMA_VERSION",
    "DEFAULT_CONFIG_FILE",
    "ENV_PREFIX",
    "ROLE_DOCUMENT_SCHEMA_VERSION",
]
