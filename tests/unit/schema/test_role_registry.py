"""
element-roles — unit tests for the role schema registry

File: tests/unit/schema/test_role_registry.py

Purpose
- Validate construction-time structural checks and the read-only query surface.

What this test file should cover
- Single root and single parent for every non-root role, on random valid trees.
- Serialized records: ``children`` present iff non-empty, declared order preserved.
- ``UnknownRole`` for unregistered identities.
- Each ``MalformedSchema`` subclass, raised at construction and logged once.
"""

from __future__ import annotations

import dataclasses
from collections import Counter

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st
from structlog.testing import capture_logs

from element_roles.schema import (
    AmbiguousRoot,
    CyclicSchema,
    DanglingReference,
    DuplicateParent,
    DuplicateRole,
    ElementRole,
    MalformedSchema,
    RoleRegistry,
    UnknownRole,
    UnreachableRole,
)


def _role(role_id: str, *children: str, **flags: object) -> ElementRole:
    return ElementRole(role_id=role_id, children=children, **flags)  # type: ignore[arg-type]


@dataclasses.dataclass
class RecordingLogger:
    events: list[tuple[str, str, dict[str, object]]] = dataclasses.field(default_factory=list)

    def error(self, event: str, **kwargs: object) -> None:
        self.events.append(("error", event, dict(kwargs)))

    def debug(self, event: str, **kwargs: object) -> None:
        self.events.append(("debug", event, dict(kwargs)))


def _scenario_registry() -> RoleRegistry:
    return RoleRegistry(
        roles=(
            _role("Root", "A", "B", multiple=True),
            _role("A", name="Alpha", multiple=True),
            _role("B", "C", name="Beta", optional=True),
            _role("C", name="Gamma"),
        )
    )


@st.composite
def _random_trees(draw: st.DrawFn) -> tuple[ElementRole, ...]:
    parent_seeds = draw(st.lists(st.integers(min_value=0, max_value=10_000), max_size=30))
    children: dict[str, list[str]] = {"R0": []}
    for index, seed in enumerate(parent_seeds, start=1):
        role_id = f"R{index}"
        children[f"R{seed % index}"].append(role_id)
        children[role_id] = []

    flags = draw(
        st.lists(
            st.tuples(st.booleans(), st.booleans(), st.booleans()),
            min_size=len(children),
            max_size=len(children),
        )
    )
    roles = [
        ElementRole(
            role_id=role_id,
            name=None if kids else role_id.lower(),
            optional=optional,
            multiple=multiple,
            reorderable=reorderable,
            children=tuple(kids),
        )
        for (role_id, kids), (optional, multiple, reorderable) in zip(
            children.items(), flags, strict=True
        )
    ]
    return tuple(draw(st.permutations(roles)))


@pytest.mark.unit
@settings(max_examples=75, deadline=None)
@given(roles=_random_trees())
def test_random_valid_tree_has_one_root_and_one_parent_per_role(
    roles: tuple[ElementRole, ...],
) -> None:
    registry = RoleRegistry(roles=roles)

    claims = Counter(child for role in registry for child in role.children)
    root = registry.root()

    assert root.role_id == "R0"
    assert claims[root.role_id] == 0
    assert registry.parent(root.role_id) is None
    for role in registry:
        if role.role_id == root.role_id:
            continue
        assert claims[role.role_id] == 1
        parent = registry.parent(role.role_id)
        assert parent is not None
        assert role.role_id in parent.children
    assert len(registry.walk()) == len(roles)


@pytest.mark.unit
@settings(max_examples=50, deadline=None)
@given(roles=_random_trees())
def test_children_resolve_to_declared_child_list(roles: tuple[ElementRole, ...]) -> None:
    registry = RoleRegistry(roles=roles)

    for role in registry:
        resolved = registry.children(role.role_id)
        assert len(resolved) == len(role.children)
        assert tuple(child.role_id for child in resolved) == role.children
        for child in resolved:
            assert registry.lookup(child.role_id) is child


@pytest.mark.unit
@settings(max_examples=50, deadline=None)
@given(role_id=st.text(max_size=12))
def test_lookup_and_children_reject_unregistered_identities(role_id: str) -> None:
    registry = _scenario_registry()
    if role_id in registry:
        return

    with pytest.raises(UnknownRole) as lookup_error:
        registry.lookup(role_id)
    with pytest.raises(UnknownRole):
        registry.children(role_id)
    with pytest.raises(UnknownRole):
        registry.serialize(role_id)

    assert lookup_error.value.role_id == role_id
    assert registry.get(role_id) is None


@pytest.mark.unit
def test_unknown_role_is_a_key_error_with_readable_message() -> None:
    registry = _scenario_registry()

    with pytest.raises(KeyError) as exc_info:
        registry.lookup("Missing")

    assert str(exc_info.value) == "unknown role: Missing"
    with pytest.raises(UnknownRole):
        registry.parent("Missing")
    with pytest.raises(UnknownRole):
        registry.depth("Missing")


@pytest.mark.unit
def test_serialize_concrete_scenario() -> None:
    registry = _scenario_registry()

    root_record = registry.serialize("Root")
    a_record = registry.serialize("A")

    assert root_record == {
        "name": None,
        "optional": False,
        "multiple": True,
        "reorderable": False,
        "children": ["A", "B"],
    }
    assert list(root_record) == ["name", "optional", "multiple", "reorderable", "children"]
    assert a_record == {"name": "Alpha", "optional": False, "multiple": True, "reorderable": False}
    assert "children" not in a_record
    assert registry.serialize("B")["children"] == ["C"]


@pytest.mark.unit
def test_serialize_keeps_declared_child_order() -> None:
    registry = RoleRegistry(
        roles=(
            _role("Root", "Zeta", "Alpha", "Mid"),
            _role("Zeta", name="z"),
            _role("Alpha", name="a"),
            _role("Mid", name="m"),
        )
    )

    assert registry.serialize("Root")["children"] == ["Zeta", "Alpha", "Mid"]
    assert [child.role_id for child in registry.children("Root")] == ["Zeta", "Alpha", "Mid"]
    assert registry.children("Zeta") == ()


@pytest.mark.unit
def test_mutual_children_fail_with_cyclic_schema() -> None:
    with pytest.raises(CyclicSchema) as exc_info:
        RoleRegistry(roles=(_role("X", "Y"), _role("Y", "X")))

    assert exc_info.value.cycle == ("X", "Y", "X")
    assert exc_info.value.invariant == "cyclic_schema"
    assert isinstance(exc_info.value, MalformedSchema)


@pytest.mark.unit
def test_detached_cycle_is_reported_before_reachability() -> None:
    with pytest.raises(CyclicSchema) as exc_info:
        RoleRegistry(roles=(_role("Root", "A"), _role("A"), _role("X", "Y"), _role("Y", "X")))

    assert exc_info.value.cycle == ("X", "Y", "X")


@pytest.mark.unit
def test_self_reference_is_a_cycle() -> None:
    with pytest.raises(CyclicSchema) as exc_info:
        RoleRegistry(roles=(_role("Loop", "Loop"),))

    assert exc_info.value.cycle == ("Loop", "Loop")


@pytest.mark.unit
def test_dangling_child_reference_is_rejected() -> None:
    with pytest.raises(DanglingReference) as exc_info:
        RoleRegistry(roles=(_role("Root", "Missing"),))

    assert exc_info.value.role_id == "Missing"
    assert exc_info.value.parent_id == "Root"
    assert "Missing" in str(exc_info.value)


@pytest.mark.unit
def test_role_claimed_by_two_parents_is_rejected() -> None:
    with pytest.raises(DuplicateParent) as exc_info:
        RoleRegistry(
            roles=(
                _role("Root", "A", "B"),
                _role("A", "Shared"),
                _role("B", "Shared"),
                _role("Shared"),
            )
        )

    assert exc_info.value.role_id == "Shared"
    assert exc_info.value.parents == ("A", "B")


@pytest.mark.unit
def test_child_listed_twice_by_one_parent_is_rejected() -> None:
    with pytest.raises(DuplicateParent) as exc_info:
        RoleRegistry(roles=(_role("Root", "A", "A"), _role("A")))

    assert exc_info.value.parents == ("Root", "Root")


@pytest.mark.unit
def test_duplicate_identity_is_rejected() -> None:
    with pytest.raises(DuplicateRole) as exc_info:
        RoleRegistry(roles=(_role("Root", "A"), _role("A"), _role("A", name="again")))

    assert exc_info.value.role_id == "A"


@pytest.mark.unit
def test_second_top_level_role_is_ambiguous_without_declared_root() -> None:
    with pytest.raises(AmbiguousRoot) as exc_info:
        RoleRegistry(roles=(_role("Root", "A"), _role("A"), _role("Orphan")))

    assert exc_info.value.candidates == ("Root", "Orphan")


@pytest.mark.unit
def test_second_top_level_role_is_unreachable_from_declared_root() -> None:
    with pytest.raises(UnreachableRole) as exc_info:
        RoleRegistry(roles=(_role("Root", "A"), _role("A"), _role("Orphan")), root_id="Root")

    assert exc_info.value.role_id == "Orphan"
    assert "Root" in str(exc_info.value)


@pytest.mark.unit
def test_declared_root_must_be_top_level() -> None:
    with pytest.raises(AmbiguousRoot, match="declared root 'A'"):
        RoleRegistry(roles=(_role("Root", "A"), _role("A")), root_id="A")


@pytest.mark.unit
def test_empty_registry_is_malformed() -> None:
    with pytest.raises(MalformedSchema, match="at least one role"):
        RoleRegistry(roles=())


@pytest.mark.unit
def test_non_role_entries_are_rejected() -> None:
    with pytest.raises(ValueError, match="ElementRole"):
        RoleRegistry(roles=({"role_id": "Root"},))  # type: ignore[arg-type]


@pytest.mark.unit
def test_rejection_is_logged_once_with_invariant() -> None:
    with capture_logs() as captured, pytest.raises(CyclicSchema):
        RoleRegistry(roles=(_role("X", "Y"), _role("Y", "X")))

    rejected = [entry for entry in captured if entry["event"] == "role_schema_rejected"]
    assert len(rejected) == 1
    assert rejected[0]["log_level"] == "error"
    assert rejected[0]["invariant"] == "cyclic_schema"
    assert rejected[0]["role_id"] == "X"


@pytest.mark.unit
def test_injected_logger_receives_registry_events() -> None:
    logger = RecordingLogger()

    with pytest.raises(CyclicSchema):
        RoleRegistry(roles=(_role("X", "Y"), _role("Y", "X")), logger=logger)
    registry = RoleRegistry.default(logger=logger)

    assert [(level, event) for level, event, _ in logger.events] == [
        ("error", "role_schema_rejected"),
        ("debug", "role_schema_validated"),
    ]
    assert logger.events[0][2]["invariant"] == "cyclic_schema"
    assert logger.events[1][2]["role_count"] == len(registry.roles)
    assert registry == RoleRegistry.default()


@pytest.mark.unit
def test_successful_construction_logs_validation_summary() -> None:
    with capture_logs() as captured:
        _scenario_registry()

    assert captured == [
        {
            "event": "role_schema_validated",
            "log_level": "debug",
            "root_id": "Root",
            "role_count": 4,
        }
    ]


@pytest.mark.unit
def test_navigation_queries_follow_declared_order() -> None:
    registry = _scenario_registry()

    assert [role.role_id for role in registry.walk()] == ["Root", "A", "B", "C"]
    assert [role.role_id for role in registry.leaves()] == ["A", "C"]
    assert [role.role_id for role in registry.ancestors("C")] == ["Root", "B"]
    assert registry.depth("Root") == 0
    assert registry.depth("C") == 2
    parent = registry.parent("C")
    assert parent is not None and parent.role_id == "B"
    assert registry.role_ids() == ("Root", "A", "B", "C")
    assert len(registry) == 4
    assert "A" in registry
    assert 42 not in registry


@pytest.mark.unit
def test_registry_is_immutable_after_construction() -> None:
    registry = _scenario_registry()

    with pytest.raises(dataclasses.FrozenInstanceError):
        registry.root_id = "A"  # type: ignore[misc]
    with pytest.raises(TypeError):
        registry._roles_by_id["New"] = _role("New")  # type: ignore[index]
    assert isinstance(registry.roles, tuple)


@pytest.mark.unit
def test_root_is_inferred_and_roles_accept_any_declaration_order() -> None:
    forward = _scenario_registry()
    backward = RoleRegistry(roles=tuple(reversed(forward.roles)))

    assert backward.root().role_id == "Root"
    assert backward.root_id == "Root"
    assert [role.role_id for role in backward.walk()] == ["Root", "A", "B", "C"]


@pytest.mark.unit
def test_full_export_lists_every_role_in_declaration_order() -> None:
    registry = _scenario_registry()

    exported = registry.to_dict()

    assert exported["root"] == "Root"
    roles = exported["roles"]
    assert isinstance(roles, dict)
    assert list(roles) == ["Root", "A", "B", "C"]
    assert roles["C"] == {
        "name": "Gamma",
        "optional": False,
        "multiple": False,
        "reorderable": False,
    }
    assert registry.to_json().startswith('{"root":"Root","roles":{"Root":{"name":null,')
