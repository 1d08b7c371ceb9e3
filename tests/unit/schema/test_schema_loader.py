"""
element-roles — unit tests for role document loading

File: tests/unit/schema/test_schema_loader.py

Purpose
- Validate YAML/JSON role documents: shape errors, structural errors, and dumping.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml

from element_roles.schema import (
    CyclicSchema,
    DanglingReference,
    RoleRegistry,
    SchemaDocumentError,
    dump_registry,
    load_registry,
    registry_from_mapping,
    registry_to_document,
    render_registry_yaml,
)

REPO_ROOT = Path(__file__).resolve().parents[3]


def _write(path: Path, contents: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(contents, encoding="utf-8")
    return path


_PIPELINE_YAML = """
schema_version: 1
root: Pipeline
roles:
  - id: Pipeline
    multiple: true
    children: [Source, Sink]
  - id: Source
    name: Source
  - id: Sink
    name: Sink
    optional: true
""".lstrip()


@pytest.mark.unit
def test_load_yaml_role_document(tmp_path: Path) -> None:
    registry = load_registry(_write(tmp_path / "roles.yaml", _PIPELINE_YAML))

    assert registry.root().role_id == "Pipeline"
    assert registry.serialize("Pipeline") == {
        "name": None,
        "optional": False,
        "multiple": True,
        "reorderable": False,
        "children": ["Source", "Sink"],
    }
    assert registry.lookup("Sink").optional is True


@pytest.mark.unit
def test_load_json_role_document_without_explicit_root(tmp_path: Path) -> None:
    payload = {
        "roles": [
            {"id": "Top", "children": ["Leaf"]},
            {"id": "Leaf", "name": "Leaf", "multiple": True},
        ]
    }
    registry = load_registry(_write(tmp_path / "roles.json", json.dumps(payload)))

    assert registry.root().role_id == "Top"
    assert registry.lookup("Leaf").multiple is True


@pytest.mark.unit
def test_repository_sample_schema_loads() -> None:
    registry = load_registry(REPO_ROOT / "samples" / "schemas" / "pipeline.yaml")

    assert registry.root().role_id == "Pipeline"
    assert [role.role_id for role in registry.leaves()] == [
        "Pipeline_Source",
        "Stages_Stage",
        "Pipeline_Sink",
    ]


@pytest.mark.unit
def test_dump_then_load_preserves_the_default_registry(tmp_path: Path) -> None:
    original = RoleRegistry.default()

    yaml_path = dump_registry(original, tmp_path / "out" / "roles.yaml")
    json_path = dump_registry(original, tmp_path / "out" / "roles.json")

    assert load_registry(yaml_path) == original
    assert load_registry(json_path) == original


@pytest.mark.unit
def test_rendered_yaml_keeps_declaration_and_field_order() -> None:
    rendered = render_registry_yaml(RoleRegistry.default())
    document = yaml.safe_load(rendered)

    assert list(document) == ["schema_version", "root", "roles"]
    assert document["roles"][0] == {
        "id": "Globals_Global",
        "name": "Global",
        "optional": True,
        "multiple": True,
        "reorderable": True,
    }
    assert rendered.endswith("\n")


@pytest.mark.unit
def test_document_omits_name_and_children_when_absent() -> None:
    registry = registry_from_mapping({"roles": [{"id": "Only"}]})

    assert registry_to_document(registry) == {
        "schema_version": 1,
        "root": "Only",
        "roles": [{"id": "Only", "optional": False, "multiple": False, "reorderable": False}],
    }


@pytest.mark.unit
@pytest.mark.parametrize(
    ("payload", "message"),
    [
        ([], "expected mapping"),
        ({"roles": [], "extra": 1}, "unexpected fields"),
        ({"schema_version": 2, "roles": []}, "unsupported version 2"),
        ({"schema_version": True, "roles": []}, "expected integer"),
        ({"root": 5, "roles": []}, r"root: expected string"),
        ({"roles": "Root"}, "expected a sequence of role mappings"),
        ({"roles": [{"name": "x"}]}, r"roles\[0\]: missing required fields"),
        ({"roles": [{"id": "A", "color": "red"}]}, r"roles\[0\]: unexpected fields"),
        ({"roles": [{"id": "A", "optional": "no"}]}, r"roles\[0\]\.optional: expected bool"),
        ({"roles": [{"id": "A", "children": "B"}]}, r"roles\[0\]\.children"),
        ({"roles": [{"id": "has space"}]}, r"roles\[0\]: ElementRole.role_id"),
    ],
)
def test_document_shape_errors(payload: object, message: str) -> None:
    with pytest.raises(SchemaDocumentError, match=message):
        registry_from_mapping(payload, location="doc")


@pytest.mark.unit
def test_structural_errors_surface_from_the_registry() -> None:
    with pytest.raises(DanglingReference):
        registry_from_mapping({"roles": [{"id": "Root", "children": ["Nope"]}]})
    with pytest.raises(CyclicSchema):
        registry_from_mapping(
            {"roles": [{"id": "X", "children": ["Y"]}, {"id": "Y", "children": ["X"]}]}
        )


@pytest.mark.unit
def test_unreadable_files_raise_schema_document_error(tmp_path: Path) -> None:
    with pytest.raises(SchemaDocumentError, match="invalid YAML"):
        load_registry(_write(tmp_path / "bad.yaml", "roles: [unclosed\n"))
    with pytest.raises(SchemaDocumentError, match="invalid JSON"):
        load_registry(_write(tmp_path / "bad.json", "{not json"))
    with pytest.raises(SchemaDocumentError, match="unsupported file suffix"):
        load_registry(_write(tmp_path / "roles.txt", "roles: []"))
    with pytest.raises(SchemaDocumentError, match="unable to read"):
        load_registry(tmp_path / "missing.yaml")


@pytest.mark.unit
def test_non_utf8_documents_raise_schema_document_error(tmp_path: Path) -> None:
    roles_json = tmp_path / "roles.json"
    roles_json.write_bytes(b'{"roles": [\xff]}')
    roles_yaml = tmp_path / "roles.yaml"
    roles_yaml.write_bytes(b"roles:\n  - id: \xff\xfe\n")

    with pytest.raises(SchemaDocumentError, match="not valid UTF-8"):
        load_registry(roles_json)
    with pytest.raises(SchemaDocumentError, match="not valid UTF-8"):
        load_registry(roles_yaml)


@pytest.mark.unit
def test_dump_rejects_unknown_suffix(tmp_path: Path) -> None:
    with pytest.raises(SchemaDocumentError, match="unsupported role document suffix"):
        dump_registry(RoleRegistry.default(), tmp_path / "roles.toml")
