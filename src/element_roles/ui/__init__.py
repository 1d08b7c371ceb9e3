"""Command-line surface: argparse router and plain-text renderer."""

from element_roles.ui.cli import CLIError, build_parser, main, run_cli

__all__ = ["CLIError", "build_parser", "main", "run_cli"]
