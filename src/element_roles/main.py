"""Executable CLI entrypoint for ``element_roles``.

Every outcome becomes one of the ``ExitCode`` values: handlers return them directly,
argparse exits are passed through, and anything that escapes a handler is classified
by walking its cause chain.
"""

from __future__ import annotations

import sys
import traceback
from enum import IntEnum
from typing import TYPE_CHECKING

from element_roles.config import ConfigLoadError, ConfigValidationError
from element_roles.schema import MalformedSchema, SchemaDocumentError, UnknownRole
from element_roles.validation import ConfigurationDocumentError, ConfigurationValidationError

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence


class ExitCode(IntEnum):
    """Deterministic process exit-code contract."""

    SUCCESS = 0
    CONFIGURATION_REJECTED = 1
    SETTINGS_ERROR = 2
    UNKNOWN_ROLE = 3
    INTERNAL_ERROR = 4


# Checked in order; UnknownRole is also a KeyError and must win over the generic types.
_EXCEPTION_ROUTES: tuple[tuple[tuple[type[BaseException], ...], ExitCode], ...] = (
    ((UnknownRole,), ExitCode.UNKNOWN_ROLE),
    ((ConfigurationValidationError,), ExitCode.CONFIGURATION_REJECTED),
    (
        (
            ConfigLoadError,
            ConfigValidationError,
            ConfigurationDocumentError,
            MalformedSchema,
            SchemaDocumentError,
            FileNotFoundError,
            NotADirectoryError,
            PermissionError,
        ),
        ExitCode.SETTINGS_ERROR,
    ),
)


def cli_entrypoint(argv: Sequence[str] | None = None) -> int:
    """Entrypoint used by ``python -m element_roles`` and the console script."""

    try:
        from element_roles.ui.cli import run_cli

        return _as_exit_code(run_cli(argv))
    except SystemExit as exc:
        return _as_exit_code(exc.code)
    except Exception as exc:  # noqa: BLE001 - CLI boundary normalization.
        exit_code = _route_exception(exc)
        if exit_code is ExitCode.INTERNAL_ERROR:
            traceback.print_exception(exc, file=sys.stderr)
        else:
            print(str(exc).strip() or type(exc).__name__, file=sys.stderr)
        return int(exit_code)


def _as_exit_code(raw: object) -> int:
    if raw is None:
        return int(ExitCode.SUCCESS)
    if isinstance(raw, int) and not isinstance(raw, bool):
        try:
            return int(ExitCode(raw))
        except ValueError:
            return int(ExitCode.INTERNAL_ERROR)
    if isinstance(raw, str) and raw.strip():
        print(raw.strip(), file=sys.stderr)
    return int(ExitCode.INTERNAL_ERROR)


def _route_exception(exc: BaseException) -> ExitCode:
    for item in _exception_chain(exc):
        for types, exit_code in _EXCEPTION_ROUTES:
            if isinstance(item, types):
                return exit_code
    return ExitCode.INTERNAL_ERROR


def _exception_chain(exc: BaseException) -> Iterator[BaseException]:
    """Yield ``exc`` then its explicit causes or unsuppressed contexts."""

    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        if current.__cause__ is not None:
            current = current.__cause__
        elif current.__suppress_context__:
            current = None
        else:
            current = current.__context__


__all__ = ["ExitCode", "cli_entrypoint"]
