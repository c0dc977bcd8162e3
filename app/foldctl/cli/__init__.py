"""CLI package for foldctl.

This package contains the Typer application and all subcommands.
"""

from foldctl.cli.main import app

__all__ = ["app"]
