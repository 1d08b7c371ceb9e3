"""Plain-text output for the element-roles CLI.

Command handlers describe what to show; this module decides how it looks. Output is
deterministic plain text so it can be diffed and asserted on.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, TextIO

if TYPE_CHECKING:
    from collections.abc import Sequence


class CLIRenderer:
    """Line-oriented writer; ``stream`` defaults to whatever ``sys.stdout`` is at write time."""

    def __init__(self, *, verbose: bool = False, stream: TextIO | None = None) -> None:
        self.verbose = verbose
        self._stream = stream

    def _write(self, line: str = "") -> None:
        print(line, file=self._stream if self._stream is not None else sys.stdout)

    def heading(self, text: str) -> None:
        self._write(text)

    def kv(self, key: str, value: object) -> None:
        self._write(f"{key}: {value}")

    def text(self, line: str) -> None:
        self._write(line)

    def section(self, title: str) -> None:
        self._write()
        self._write(title)

    def items(self, entries: Sequence[str], *, bullet: str = "-") -> None:
        for entry in entries:
            self._write(f"  {bullet} {entry}")

    def table(
        self,
        headers: Sequence[str],
        rows: Sequence[Sequence[object]],
        *,
        title: str | None = None,
    ) -> None:
        """Left-aligned columns, two spaces apart, with a dashed rule under the header."""

        if not rows:
            return
        if title:
            self.section(title)
        cells = [[str(value) for value in row] for row in rows]
        widths = [
            max([len(header), *(len(row[index]) for row in cells if index < len(row))])
            for index, header in enumerate(headers)
        ]
        self._write("  " + _join_padded(headers, widths))
        self._write("  " + "  ".join("-" * width for width in widths))
        for row in cells:
            self._write("  " + _join_padded(row, widths))

    def ok(self, label: str) -> None:
        self._write(f"  OK  {label}")

    def fail(self, label: str) -> None:
        self._write(f"  FAIL  {label}")


def _join_padded(cells: Sequence[str], widths: Sequence[int]) -> str:
    padded = [
        (cells[index] if index < len(cells) else "").ljust(width)
        for index, width in enumerate(widths)
    ]
    return "  ".join(padded).rstrip()


def create_renderer(*, verbose: bool = False) -> CLIRenderer:
    return CLIRenderer(verbose=verbose)


__all__ = ["CLIRenderer", "create_renderer"]
