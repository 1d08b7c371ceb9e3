"""
element-roles — hierarchical configuration role schema.

File: src/element_roles/__init__.py

Purpose
- Package root. Defines the package version and a small public surface.

Functional requirements
- Must not have side effects at import time (no registry construction, no logging init).
"""

from element_roles.schema import (
    ElementRole,
    MalformedSchema,
    RoleRegistry,
    UnknownRole,
)

__version__ = "0.1.0"

__all__ = ["ElementRole", "MalformedSchema", "RoleRegistry", "UnknownRole", "__version__"]
