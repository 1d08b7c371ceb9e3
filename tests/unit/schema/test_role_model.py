"""Unit tests for role value objects and cardinality mapping."""

from __future__ import annotations

import pytest

from element_roles.schema import Cardinality, ElementRole, serialize_role


@pytest.mark.unit
@pytest.mark.parametrize(
    ("optional", "multiple", "expected"),
    [
        (False, False, Cardinality.EXACTLY_ONE),
        (True, False, Cardinality.ZERO_OR_ONE),
        (False, True, Cardinality.ONE_OR_MORE),
        (True, True, Cardinality.ZERO_OR_MORE),
    ],
)
def test_cardinality_from_flags(optional: bool, multiple: bool, expected: Cardinality) -> None:
    role = ElementRole(role_id="R", optional=optional, multiple=multiple)

    assert role.cardinality is expected


@pytest.mark.unit
def test_exactly_one_rejects_zero_and_two() -> None:
    cardinality = Cardinality.EXACTLY_ONE

    assert not cardinality.allows(0)
    assert cardinality.allows(1)
    assert not cardinality.allows(2)
    assert cardinality.min_occurs == 1
    assert cardinality.max_occurs == 1


@pytest.mark.unit
def test_unbounded_cardinalities_have_no_upper_limit() -> None:
    assert Cardinality.ZERO_OR_MORE.max_occurs is None
    assert Cardinality.ZERO_OR_MORE.allows(0)
    assert Cardinality.ONE_OR_MORE.allows(50)
    assert not Cardinality.ONE_OR_MORE.allows(0)
    assert not Cardinality.ZERO_OR_ONE.allows(-1)


@pytest.mark.unit
def test_children_sequence_is_frozen_to_tuple() -> None:
    role = ElementRole(role_id="Parent", children=["B", "A", "C"])  # type: ignore[arg-type]

    assert role.children == ("B", "A", "C")
    assert not role.is_leaf
    assert role.is_grouping
    assert role.display_label == "Parent"


@pytest.mark.unit
def test_named_leaf_properties() -> None:
    role = ElementRole(role_id="Leaf", name="  Cache Provider ", optional=True)

    assert role.name == "Cache Provider"
    assert role.is_leaf
    assert not role.is_grouping
    assert role.display_label == "Cache Provider"


@pytest.mark.unit
@pytest.mark.parametrize("role_id", ["", "   ", "has space", " Lead", "nul\x00byte"])
def test_invalid_role_identities_are_rejected(role_id: str) -> None:
    with pytest.raises(ValueError, match="role_id"):
        ElementRole(role_id=role_id)


@pytest.mark.unit
def test_invalid_fields_are_rejected() -> None:
    with pytest.raises(ValueError, match="name"):
        ElementRole(role_id="R", name="")
    with pytest.raises(ValueError, match="optional"):
        ElementRole(role_id="R", optional="yes")  # type: ignore[arg-type]
    with pytest.raises(ValueError, match="children"):
        ElementRole(role_id="R", children="ABC")  # type: ignore[arg-type]
    with pytest.raises(ValueError, match=r"children\[1\]"):
        ElementRole(role_id="R", children=("A", ""))


@pytest.mark.unit
def test_reorderable_singleton_is_allowed_by_the_model() -> None:
    role = ElementRole(role_id="Solo", name="Solo", reorderable=True)

    assert serialize_role(role) == {
        "name": "Solo",
        "optional": False,
        "multiple": False,
        "reorderable": True,
    }
