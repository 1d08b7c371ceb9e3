"""
element-roles — role schema registry.

File: src/element_roles/schema/registry.py

Purpose
- Holds the validated, immutable tree of configuration roles and answers read-only
  queries against it.

Functional requirements
- All structural validation happens once, in the constructor: duplicate identities,
  dangling child references, roles claimed by more than one parent, cycles, a single
  root, and reachability from that root.
- Queries never mutate state and fail with ``UnknownRole`` for unregistered identities.

Non-functional requirements
- Lock-free reads; every container exposed is a tuple or a read-only mapping view.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, cast

import structlog

from element_roles.schema.errors import (
    AmbiguousRoot,
    CyclicSchema,
    DanglingReference,
    DuplicateParent,
    DuplicateRole,
    MalformedSchema,
    UnknownRole,
    UnreachableRole,
)
from element_roles.schema.role import ElementRole
from element_roles.schema.serialization import (
    JSONValue,
    RoleRecord,
    canonical_json,
    serialize_registry,
    serialize_role,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

_LOGGER = structlog.get_logger(__name__)

_UNVISITED = 0
_IN_PROGRESS = 1
_DONE = 2


@dataclass(frozen=True, slots=True)
class RoleRegistry:
    """Immutable, validated role tree with deterministic lookups."""

    roles: tuple[ElementRole, ...]
    root_id: str | None = None
    logger: Any | None = field(default=None, repr=False, compare=False)
    _roles_by_id: Mapping[str, ElementRole] = field(init=False, repr=False, compare=False)
    _parent_by_id: Mapping[str, str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        role_list = tuple(self.roles)
        for role in role_list:
            if not isinstance(role, ElementRole):
                raise ValueError("RoleRegistry.roles entries must be ElementRole")

        log = self.logger if self.logger is not None else _LOGGER
        try:
            if not role_list:
                raise MalformedSchema("registry must define at least one role")
            role_lookup = _index_roles(role_list)
            parent_lookup = _index_parents(role_list, role_lookup)
            cycle = _find_cycle(role_list, role_lookup)
            if cycle is not None:
                raise CyclicSchema(cycle)
            root_id = _resolve_root(role_list, parent_lookup, self.root_id)
            _assert_reachable(role_list, role_lookup, root_id)
        except MalformedSchema as exc:
            log.error(
                "role_schema_rejected",
                invariant=exc.invariant,
                role_id=exc.role_id,
                error=str(exc),
            )
            raise

        object.__setattr__(self, "roles", role_list)
        object.__setattr__(self, "root_id", root_id)
        object.__setattr__(self, "_roles_by_id", MappingProxyType(role_lookup))
        object.__setattr__(self, "_parent_by_id", MappingProxyType(parent_lookup))
        log.debug("role_schema_validated", root_id=root_id, role_count=len(role_list))

    @classmethod
    def default(cls, *, logger: Any | None = None) -> RoleRegistry:
        """Build the built-in device-management configuration schema."""

        from element_roles.schema.defaults import default_roles

        return cls(roles=default_roles(), root_id="Root", logger=logger)

    def __contains__(self, role_id: object) -> bool:
        return isinstance(role_id, str) and role_id in self._roles_by_id

    def __len__(self) -> int:
        return len(self.roles)

    def __iter__(self) -> Iterator[ElementRole]:
        return iter(self.roles)

    def get(self, role_id: str) -> ElementRole | None:
        if not isinstance(role_id, str):
            return None
        return self._roles_by_id.get(role_id)

    def lookup(self, role_id: str) -> ElementRole:
        role = self.get(role_id)
        if role is None:
            raise UnknownRole(str(role_id))
        return role

    def children(self, role_id: str) -> tuple[ElementRole, ...]:
        """Resolve a role's children in declared order; leaves yield an empty tuple."""

        role = self.lookup(role_id)
        return tuple(self._roles_by_id[child_id] for child_id in role.children)

    def root(self) -> ElementRole:
        return self._roles_by_id[cast("str", self.root_id)]

    def serialize(self, role_id: str) -> RoleRecord:
        return serialize_role(self.lookup(role_id))

    def role_ids(self) -> tuple[str, ...]:
        return tuple(role.role_id for role in self.roles)

    def parent(self, role_id: str) -> ElementRole | None:
        self.lookup(role_id)
        parent_id = self._parent_by_id.get(role_id)
        if parent_id is None:
            return None
        return self._roles_by_id[parent_id]

    def ancestors(self, role_id: str) -> tuple[ElementRole, ...]:
        """Return the chain of ancestors, root first, excluding ``role_id`` itself."""

        self.lookup(role_id)
        chain: list[ElementRole] = []
        cursor = self._parent_by_id.get(role_id)
        while cursor is not None:
            chain.append(self._roles_by_id[cursor])
            cursor = self._parent_by_id.get(cursor)
        chain.reverse()
        return tuple(chain)

    def depth(self, role_id: str) -> int:
        return len(self.ancestors(role_id))

    def walk(self) -> tuple[ElementRole, ...]:
        """Depth-first pre-order traversal from the root in declared child order."""

        ordered: list[ElementRole] = []
        pending = [self.root()]
        while pending:
            role = pending.pop()
            ordered.append(role)
            pending.extend(self._roles_by_id[child] for child in reversed(role.children))
        return tuple(ordered)

    def leaves(self) -> tuple[ElementRole, ...]:
        return tuple(role for role in self.walk() if role.is_leaf)

    def to_dict(self) -> dict[str, JSONValue]:
        return serialize_registry(self)

    def to_json(self) -> str:
        return canonical_json(self.to_dict())


def _index_roles(roles: Sequence[ElementRole]) -> dict[str, ElementRole]:
    lookup: dict[str, ElementRole] = {}
    for role in roles:
        if role.role_id in lookup:
            raise DuplicateRole(
                f"role identity {role.role_id!r} is declared more than once",
                role_id=role.role_id,
            )
        lookup[role.role_id] = role
    return lookup


def _index_parents(
    roles: Sequence[ElementRole],
    lookup: Mapping[str, ElementRole],
) -> dict[str, str]:
    claims: dict[str, list[str]] = {}
    for role in roles:
        for child_id in role.children:
            if child_id not in lookup:
                raise DanglingReference(role.role_id, child_id)
            claims.setdefault(child_id, []).append(role.role_id)

    parents: dict[str, str] = {}
    for role in roles:
        claimed_by = claims.get(role.role_id)
        if not claimed_by:
            continue
        if len(claimed_by) > 1:
            raise DuplicateParent(role.role_id, claimed_by)
        parents[role.role_id] = claimed_by[0]
    return parents


def _find_cycle(
    roles: Sequence[ElementRole],
    lookup: Mapping[str, ElementRole],
) -> tuple[str, ...] | None:
    """Return the first closed cycle path, e.g. ``("A", "B", "A")``, or ``None``."""

    state: dict[str, int] = {}
    stack: list[str] = []
    stack_index: dict[str, int] = {}

    for start in roles:
        if state.get(start.role_id, _UNVISITED) != _UNVISITED:
            continue

        state[start.role_id] = _IN_PROGRESS
        stack_index[start.role_id] = len(stack)
        stack.append(start.role_id)
        frames: list[tuple[str, Iterator[str]]] = [(start.role_id, iter(start.children))]

        while frames:
            node, child_iter = frames[-1]
            try:
                child = next(child_iter)
            except StopIteration:
                frames.pop()
                state[node] = _DONE
                stack.pop()
                del stack_index[node]
                continue

            child_state = state.get(child, _UNVISITED)
            if child_state == _IN_PROGRESS:
                return (*stack[stack_index[child] :], child)
            if child_state == _UNVISITED:
                state[child] = _IN_PROGRESS
                stack_index[child] = len(stack)
                stack.append(child)
                frames.append((child, iter(lookup[child].children)))

    return None


def _resolve_root(
    roles: Sequence[ElementRole],
    parents: Mapping[str, str],
    declared_root: str | None,
) -> str:
    candidates = [role.role_id for role in roles if role.role_id not in parents]
    if declared_root is None:
        if len(candidates) != 1:
            raise AmbiguousRoot(candidates)
        return candidates[0]

    if declared_root not in candidates:
        raise AmbiguousRoot(candidates, declared_root=declared_root)
    for candidate in candidates:
        if candidate != declared_root:
            raise UnreachableRole(candidate, declared_root)
    return declared_root


def _assert_reachable(
    roles: Iterable[ElementRole],
    lookup: Mapping[str, ElementRole],
    root_id: str,
) -> None:
    visited: set[str] = set()
    pending = [root_id]
    while pending:
        role_id = pending.pop()
        visited.add(role_id)
        pending.extend(lookup[role_id].children)

    for role in roles:
        if role.role_id not in visited:
            raise UnreachableRole(role.role_id, root_id)


__all__ = ["RoleRegistry"]
