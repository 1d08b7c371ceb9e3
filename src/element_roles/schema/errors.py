"""Error taxonomy for the configuration role schema."""

from __future__ import annotations

from collections.abc import Iterable, Sequence


class RoleSchemaError(ValueError):
    """Base class for role schema failures."""


class MalformedSchema(RoleSchemaError):
    """Raised once, at registry construction, when a structural invariant fails."""

    invariant: str = "malformed_schema"

    def __init__(self, message: str, *, role_id: str | None = None) -> None:
        self.role_id = role_id
        super().__init__(f"{self.invariant}: {message}")


class DuplicateRole(MalformedSchema):
    invariant = "duplicate_role"


class DanglingReference(MalformedSchema):
    invariant = "dangling_reference"

    def __init__(self, parent_id: str, child_id: str) -> None:
        self.parent_id = parent_id
        super().__init__(
            f"role {parent_id!r} lists undefined child role {child_id!r}",
            role_id=child_id,
        )


class UnreachableRole(MalformedSchema):
    invariant = "unreachable_role"

    def __init__(self, role_id: str, root_id: str) -> None:
        super().__init__(
            f"role {role_id!r} is not reachable from root {root_id!r}",
            role_id=role_id,
        )


class DuplicateParent(MalformedSchema):
    invariant = "duplicate_parent"

    def __init__(self, role_id: str, parents: Sequence[str]) -> None:
        self.parents = tuple(parents)
        rendered = ", ".join(repr(item) for item in self.parents)
        super().__init__(
            f"role {role_id!r} is listed as a child more than once (by {rendered})",
            role_id=role_id,
        )


class CyclicSchema(MalformedSchema):
    invariant = "cyclic_schema"

    def __init__(self, cycle: Iterable[str]) -> None:
        self.cycle = tuple(cycle)
        super().__init__(
            f"role tree contains cycle {' -> '.join(self.cycle)}",
            role_id=self.cycle[0] if self.cycle else None,
        )


class AmbiguousRoot(MalformedSchema):
    invariant = "ambiguous_root"

    def __init__(self, candidates: Sequence[str], *, declared_root: str | None = None) -> None:
        self.candidates = tuple(candidates)
        if declared_root is not None:
            message = (
                f"declared root {declared_root!r} is not the unreferenced top-level role; "
                f"candidates: {list(self.candidates)}"
            )
        elif not self.candidates:
            message = "no top-level role found; every role is listed as a child"
        else:
            message = f"expected exactly one top-level role, found {list(self.candidates)}"
        super().__init__(message, role_id=declared_root)


class UnknownRole(RoleSchemaError, KeyError):
    """Raised by registry queries given an identity that is not registered."""

    def __init__(self, role_id: str) -> None:
        self.role_id = role_id
        super().__init__(f"unknown role: {role_id}")

    def __str__(self) -> str:
        return f"unknown role: {self.role_id}"


__all__ = [
    "AmbiguousRoot",
    "CyclicSchema",
    "DanglingReference",
    "DuplicateParent",
    "DuplicateRole",
    "MalformedSchema",
    "RoleSchemaError",
    "UnknownRole",
    "UnreachableRole",
]
