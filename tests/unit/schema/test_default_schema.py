"""Unit tests for the built-in device-management role tree."""

from __future__ import annotations

import pytest

from element_roles.schema import Cardinality, RoleRegistry
from element_roles.schema import defaults


@pytest.fixture(scope="module")
def registry() -> RoleRegistry:
    return RoleRegistry.default()


@pytest.mark.unit
def test_default_registry_builds_and_reaches_every_role(registry: RoleRegistry) -> None:
    assert registry.root().role_id == defaults.ROLE_ROOT
    assert len(registry) == 30
    assert len(registry.walk()) == len(registry)
    assert {role.role_id for role in registry} == {
        getattr(defaults, name) for name in defaults.__all__ if name.startswith("ROLE_")
    }


@pytest.mark.unit
def test_default_root_record(registry: RoleRegistry) -> None:
    assert registry.serialize("Root") == {
        "name": None,
        "optional": False,
        "multiple": True,
        "reorderable": False,
        "children": [
            "Globals",
            "DataManagement",
            "DeviceCommunication",
            "InboundProcessingChain",
            "OutboundProcessingChain",
            "AssetManagment",
        ],
    }


@pytest.mark.unit
def test_default_leaf_records(registry: RoleRegistry) -> None:
    assert registry.serialize("Globals_Global") == {
        "name": "Global",
        "optional": True,
        "multiple": True,
        "reorderable": True,
    }
    assert registry.serialize("DataManagement_CacheProvider") == {
        "name": "Cache Provider",
        "optional": True,
        "multiple": False,
        "reorderable": False,
    }
    assert registry.lookup("DataManagement_Datastore").cardinality is Cardinality.EXACTLY_ONE


@pytest.mark.unit
def test_device_communication_children_keep_declared_order(registry: RoleRegistry) -> None:
    assert [role.role_id for role in registry.children("DeviceCommunication")] == [
        "DeviceCommunication_EventSources",
        "DeviceCommunication_InboundProcessingStrategy",
        "DeviceCommunication_Registration",
        "DeviceCommunication_BatchOperations",
        "DeviceCommunication_CommandRouting",
        "DeviceCommunication_CommandDestinations",
    ]
    destination_children = registry.children("CommandDestinations_CommandDestination")
    assert [role.role_id for role in destination_children] == [
        "CommandDestinations_BinaryCommandEncoder",
        "CommandDestinations_ParameterExtractor",
    ]


@pytest.mark.unit
def test_specification_mapping_hangs_under_command_router(registry: RoleRegistry) -> None:
    mapping = registry.lookup("CommandRouting_SpecificationMappingRouter_Mapping")
    parent = registry.parent(mapping.role_id)

    assert parent is not None
    assert parent.role_id == "CommandRouting_CommandRouter"
    assert (mapping.name, mapping.optional, mapping.multiple, mapping.reorderable) == (
        "Mapping",
        True,
        True,
        True,
    )


@pytest.mark.unit
def test_deepest_role_ancestry(registry: RoleRegistry) -> None:
    assert [role.role_id for role in registry.ancestors("EventSource_BinaryEventDecoder")] == [
        "Root",
        "DeviceCommunication",
        "DeviceCommunication_EventSources",
        "EventSources_EventSource",
    ]
    assert registry.depth("EventSource_BinaryEventDecoder") == 4


@pytest.mark.unit
def test_empty_top_level_groups_are_leaves(registry: RoleRegistry) -> None:
    assert "children" not in registry.serialize("OutboundProcessingChain")
    assert "children" not in registry.serialize("AssetManagment")
    assert registry.children("AssetManagment") == ()


@pytest.mark.unit
def test_each_default_build_is_a_fresh_equal_value() -> None:
    first = RoleRegistry.default()
    second = RoleRegistry.default()

    assert first is not second
    assert first == second
    assert first.to_json() == second.to_json()
