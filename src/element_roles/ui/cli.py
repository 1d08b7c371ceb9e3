"""Command-line interface router for element-roles."""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Final
from uuid import uuid4

from element_roles.config import (
    ConfigLoadError,
    ConfigValidationError,
    load_config,
)
from element_roles.constants import BUILTIN_SCHEMA_SOURCE
from element_roles.observability import (
    configure_structlog,
    reset_structlog,
    setup_logging,
    shutdown_logging,
)
from element_roles.schema import (
    ElementRole,
    MalformedSchema,
    RoleRegistry,
    SchemaDocumentError,
    UnknownRole,
    load_registry,
    render_registry_yaml,
)
from element_roles.ui.render import CLIRenderer, create_renderer
from element_roles.validation import (
    ConfigurationDocumentError,
    load_configuration,
    validate_configuration,
)

EXIT_SUCCESS: Final[int] = 0
EXIT_CONFIGURATION_REJECTED: Final[int] = 1
EXIT_SETTINGS_ERROR: Final[int] = 2
EXIT_UNKNOWN_ROLE: Final[int] = 3

EXPORT_FORMATS: Final[tuple[str, ...]] = ("json", "yaml")


@dataclass(frozen=True, slots=True)
class CLIError(RuntimeError):
    """Typed CLI failure with an explicit process exit code."""

    message: str
    exit_code: int = EXIT_SETTINGS_ERROR

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse command router for all supported CLI workflows."""

    parser = argparse.ArgumentParser(
        prog="element-roles",
        description=(
            "element-roles — hierarchical configuration role schema.\n\n"
            "Common workflows:\n"
            "  element-roles tree                    Show the whole role tree\n"
            "  element-roles show DataManagement     Show one serialized role\n"
            "  element-roles validate config.yaml    Validate a configuration tree\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="Path to settings TOML (default: ./element_roles.toml if present).",
    )
    common.add_argument(
        "--schema",
        dest="schema_source",
        default=None,
        help="Role document (.yaml/.json) to use instead of the configured schema source.",
    )
    common.add_argument("--json", action="store_true", help="Emit deterministic JSON output")
    common.add_argument(
        "--log",
        action="store_true",
        default=False,
        help="Write JSON-lines logs for this invocation under the configured log_dir.",
    )
    common.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        default=False,
        help="Show detailed output.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # show ----------------------------------------------------------------
    show_parser = subparsers.add_parser(
        "show",
        parents=[common],
        help="Show the serialized record of a role",
        description=(
            "Print the external representation of one role.\n\n"
            "Examples:\n"
            "  element-roles show                    Show the root role\n"
            "  element-roles show Globals_Global\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    show_parser.add_argument("role", nargs="?", default=None, help="Role id (default: root)")
    show_parser.set_defaults(handler=_cmd_show)

    # children ------------------------------------------------------------
    children_parser = subparsers.add_parser(
        "children",
        parents=[common],
        help="List the child roles of a role in declared order",
    )
    children_parser.add_argument("role", help="Role id")
    children_parser.set_defaults(handler=_cmd_children)

    # tree ----------------------------------------------------------------
    tree_parser = subparsers.add_parser(
        "tree",
        parents=[common],
        help="Render the whole role tree with cardinalities",
    )
    tree_parser.set_defaults(handler=_cmd_tree)

    # export --------------------------------------------------------------
    export_parser = subparsers.add_parser(
        "export",
        parents=[common],
        help="Export the full role schema document",
        description=(
            "Write the role schema as a document.\n\n"
            "Examples:\n"
            "  element-roles export                          JSON registry to stdout\n"
            "  element-roles export --format yaml            Role document as YAML\n"
            "  element-roles export --output roles.yaml --format yaml\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    export_parser.add_argument(
        "--format",
        dest="export_format",
        choices=EXPORT_FORMATS,
        default="json",
        help="Output format (default: json)",
    )
    export_parser.add_argument("--output", default=None, help="Optional output file path")
    export_parser.set_defaults(handler=_cmd_export)

    # validate ------------------------------------------------------------
    validate_parser = subparsers.add_parser(
        "validate",
        parents=[common],
        help="Validate a configuration tree against the role schema",
    )
    validate_parser.add_argument("configuration", help="Configuration document (.yaml/.json)")
    validate_parser.set_defaults(handler=_cmd_validate)

    # check-schema --------------------------------------------------------
    check_parser = subparsers.add_parser(
        "check-schema",
        parents=[common],
        help="Load a role document and run structural validation",
    )
    check_parser.add_argument("path", help="Role document (.yaml/.json)")
    check_parser.set_defaults(handler=_cmd_check_schema)

    return parser


# ---------------------------------------------------------------------------
# Entrypoints
# ---------------------------------------------------------------------------


def run_cli(argv: Sequence[str] | None = None) -> int:
    """Parse argv, route to a command handler, and return process exit code."""

    parser = build_parser()
    namespace = parser.parse_args(list(argv) if argv is not None else None)
    handler = getattr(namespace, "handler", None)
    if not callable(handler):
        parser.print_help(sys.stderr)
        return EXIT_SETTINGS_ERROR

    # Domain events stay off stdout; --log attaches the JSON-lines sink.
    configure_structlog()
    try:
        result = handler(namespace)
    except CLIError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return exc.exit_code
    finally:
        if _flag(namespace, "log"):
            shutdown_logging()
        reset_structlog()
    return int(result)


def main(argv: Sequence[str] | None = None) -> int:
    """Compatibility wrapper for main-module wiring."""

    return run_cli(argv)


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _cmd_show(args: argparse.Namespace) -> int:
    registry = _load_registry(_load_effective_config(args))
    role_id = _optional_str(getattr(args, "role", None)) or registry.root().role_id
    role = _lookup(registry, role_id)

    if _flag(args, "json"):
        _emit_json({"command": "show", "role": role.role_id, "record": registry.serialize(role_id)})
        return EXIT_SUCCESS

    renderer = _get_renderer(args)
    _render_role(renderer, registry, role)
    return EXIT_SUCCESS


def _cmd_children(args: argparse.Namespace) -> int:
    registry = _load_registry(_load_effective_config(args))
    role_id = _require_str(getattr(args, "role", None), "role")
    try:
        children = registry.children(role_id)
    except UnknownRole as exc:
        raise CLIError(str(exc), exit_code=EXIT_UNKNOWN_ROLE) from exc

    if _flag(args, "json"):
        _emit_json(
            {
                "command": "children",
                "role": role_id,
                "children": [
                    {"id": child.role_id, "record": registry.serialize(child.role_id)}
                    for child in children
                ],
            }
        )
        return EXIT_SUCCESS

    renderer = _get_renderer(args)
    if not children:
        renderer.text(f"{role_id} has no child roles")
        return EXIT_SUCCESS
    renderer.table(
        ["Role", "Name", "Cardinality", "Reorderable"],
        [
            [
                child.role_id,
                child.name or "-",
                child.cardinality.value,
                "yes" if child.reorderable else "no",
            ]
            for child in children
        ],
        title=f"Children of {role_id}:",
    )
    return EXIT_SUCCESS


def _cmd_tree(args: argparse.Namespace) -> int:
    registry = _load_registry(_load_effective_config(args))

    if _flag(args, "json"):
        _emit_json({"command": "tree", "schema": registry.to_dict()})
        return EXIT_SUCCESS

    renderer = _get_renderer(args)
    for role in registry.walk():
        indent = "  " * registry.depth(role.role_id)
        suffix = " reorderable" if role.reorderable else ""
        label = role.display_label
        if renderer.verbose and role.name is not None:
            label = f"{label} ({role.role_id})"
        renderer.text(f"{indent}{label} [{role.cardinality.value}]{suffix}")
    return EXIT_SUCCESS


def _cmd_export(args: argparse.Namespace) -> int:
    registry = _load_registry(_load_effective_config(args))
    export_format = _optional_str(getattr(args, "export_format", None)) or "json"

    if export_format == "yaml":
        rendered = render_registry_yaml(registry)
    else:
        rendered = json.dumps(registry.to_dict(), indent=2, ensure_ascii=False) + "\n"

    output_raw = _optional_str(getattr(args, "output", None))
    if output_raw is None:
        sys.stdout.write(rendered)
        return EXIT_SUCCESS

    output_path = Path(output_raw).expanduser().resolve()
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(rendered, encoding="utf-8")
    except OSError as exc:
        raise CLIError(f"export failed: {exc}", exit_code=EXIT_SETTINGS_ERROR) from exc

    if _flag(args, "json"):
        _emit_json(
            {
                "command": "export",
                "format": export_format,
                "output": output_path.as_posix(),
                "role_count": len(registry),
            }
        )
        return EXIT_SUCCESS

    renderer = _get_renderer(args)
    renderer.kv("Exported roles", len(registry))
    renderer.kv("Format", export_format)
    renderer.kv("Output", output_path.as_posix())
    return EXIT_SUCCESS


def _cmd_validate(args: argparse.Namespace) -> int:
    config = _load_effective_config(args)
    registry = _load_registry(config)
    configuration_path = _require_str(getattr(args, "configuration", None), "configuration")

    try:
        element = load_configuration(configuration_path)
    except ConfigurationDocumentError as exc:
        raise CLIError(str(exc), exit_code=EXIT_SETTINGS_ERROR) from exc

    validation = config.get("validation")
    options = validation if isinstance(validation, Mapping) else {}
    report = validate_configuration(
        registry,
        element,
        strict_ordering=bool(options.get("strict_ordering", True)),
        report_reorderable_singletons=bool(options.get("report_reorderable_singletons", True)),
    )
    exit_code = EXIT_SUCCESS if report.is_valid else EXIT_CONFIGURATION_REJECTED

    if _flag(args, "json"):
        _emit_json({"command": "validate", "configuration": configuration_path, **report.to_dict()})
        return exit_code

    renderer = _get_renderer(args)
    if report.is_valid:
        renderer.ok(f"{configuration_path} matches the role schema")
    else:
        renderer.fail(f"{configuration_path} has {len(report.issues)} issue(s)")
        renderer.items([f"{item.path}: [{item.code}] {item.message}" for item in report.issues])
    if report.notices and renderer.verbose:
        renderer.section("Notices:")
        renderer.items([f"{item.path}: [{item.code}] {item.message}" for item in report.notices])
    return exit_code


def _cmd_check_schema(args: argparse.Namespace) -> int:
    _load_effective_config(args)
    path = _require_str(getattr(args, "path", None), "path")
    try:
        registry = load_registry(path)
    except (MalformedSchema, SchemaDocumentError) as exc:
        raise CLIError(str(exc), exit_code=EXIT_SETTINGS_ERROR) from exc

    if _flag(args, "json"):
        _emit_json(
            {
                "command": "check-schema",
                "path": path,
                "root": registry.root().role_id,
                "role_count": len(registry),
                "leaf_count": len(registry.leaves()),
            }
        )
        return EXIT_SUCCESS

    renderer = _get_renderer(args)
    renderer.ok(f"{path} is a well-formed role schema")
    renderer.kv("Root", registry.root().role_id)
    renderer.kv("Roles", len(registry))
    renderer.kv("Leaves", len(registry.leaves()))
    return EXIT_SUCCESS


# ---------------------------------------------------------------------------
# Helpers: config, schema, output
# ---------------------------------------------------------------------------


def _emit_json(payload: Mapping[str, object]) -> None:
    """Emit a JSON payload to stdout with deterministic formatting."""

    print(json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False))


def _get_renderer(args: argparse.Namespace) -> CLIRenderer:
    return create_renderer(verbose=_flag(args, "verbose"))


def _render_role(renderer: CLIRenderer, registry: RoleRegistry, role: ElementRole) -> None:
    renderer.heading(role.role_id)
    renderer.kv("Name", role.name if role.name is not None else "(grouping)")
    renderer.kv("Cardinality", role.cardinality.value)
    renderer.kv("Reorderable", "yes" if role.reorderable else "no")
    parent = registry.parent(role.role_id)
    renderer.kv("Parent", parent.role_id if parent is not None else "(root)")
    if role.children:
        renderer.section("Children:")
        renderer.items(list(role.children))


def _load_effective_config(args: argparse.Namespace) -> dict[str, object]:
    config_path = _optional_str(getattr(args, "config_path", None))
    schema_source = _optional_str(getattr(args, "schema_source", None))

    overrides: dict[str, object] = {}
    if schema_source is not None and schema_source != BUILTIN_SCHEMA_SOURCE:
        overrides["schema.source"] = Path(schema_source).expanduser().resolve().as_posix()
    elif schema_source is not None:
        overrides["schema.source"] = schema_source

    try:
        loaded = load_config(config_path, cli_overrides=overrides)
    except (ConfigLoadError, ConfigValidationError) as exc:
        raise CLIError(str(exc), exit_code=EXIT_SETTINGS_ERROR) from exc

    if _flag(args, "log"):
        observability = loaded.get("observability")
        setup_logging(
            observability if isinstance(observability, Mapping) else None,
            run_id=_new_run_id(),
        )
    return {key: value for key, value in loaded.items()}


def _load_registry(config: Mapping[str, object]) -> RoleRegistry:
    schema_section = config.get("schema")
    source = (
        schema_section.get("source") if isinstance(schema_section, Mapping) else None
    ) or BUILTIN_SCHEMA_SOURCE

    try:
        if source == BUILTIN_SCHEMA_SOURCE:
            return RoleRegistry.default()
        return load_registry(str(source))
    except (MalformedSchema, SchemaDocumentError) as exc:
        raise CLIError(str(exc), exit_code=EXIT_SETTINGS_ERROR) from exc


def _lookup(registry: RoleRegistry, role_id: str) -> ElementRole:
    try:
        return registry.lookup(role_id)
    except UnknownRole as exc:
        raise CLIError(str(exc), exit_code=EXIT_UNKNOWN_ROLE) from exc


def _new_run_id() -> str:
    stamp = datetime.now(tz=UTC).strftime("%Y%m%dT%H%M%SZ")
    return f"cli-{stamp}-{uuid4().hex[:8]}"


def _require_str(value: object, name: str) -> str:
    parsed = _optional_str(value)
    if parsed is None:
        raise CLIError(f"{name} is required", exit_code=EXIT_SETTINGS_ERROR)
    return parsed


def _optional_str(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    parsed = value.strip()
    return parsed or None


def _flag(args: argparse.Namespace, name: str) -> bool:
    return bool(getattr(args, name, False))


__all__ = ["CLIError", "build_parser", "main", "run_cli"]
