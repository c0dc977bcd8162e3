"""CLI commands for foldctl.

This package contains all subcommand implementations.
"""

from foldctl.cli.commands import config, folder, listing

__all__ = ["config", "folder", "listing"]
