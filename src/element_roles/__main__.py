"""Module entrypoint for ``python -m element_roles``."""

from __future__ import annotations

from element_roles.main import cli_entrypoint

if __name__ == "__main__":
    raise SystemExit(cli_entrypoint())
