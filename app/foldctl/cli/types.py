"""Shared types and utilities for CLI commands.

This module provides common enums and helper functions used across
multiple CLI command modules to avoid code duplication.
"""

from enum import Enum
from pathlib import Path

import typer
from rich.markup import escape

from foldctl.core.config import ConfigError, EngineConfig, load_config_or_default
from foldctl.folder.engine import FolderEngine
from foldctl.utils.formatting import print_error


class OutputFormat(str, Enum):
    """Output format options."""

    TABLE = "table"
    JSON = "json"


def get_config(ctx: typer.Context) -> EngineConfig:
    """Load the engine config selected by the global ``--config`` option.

    Exits with code 1 when an existing config file is malformed.
    """
    obj = ctx.obj or {}
    config_path: Path | None = obj.get("config_path")
    try:
        return load_config_or_default(config_path)
    except ConfigError as e:
        print_error(escape(str(e)))
        raise typer.Exit(code=1) from None


def get_engine(ctx: typer.Context) -> FolderEngine:
    """Build a FolderEngine from the active configuration."""
    return FolderEngine(get_config(ctx))


def parse_mode(value: str | None) -> int | None:
    """Parse an octal permission string such as "0755".

    Raises:
        typer.BadParameter: If the value is not a valid octal mode.
    """
    if value is None:
        return None
    try:
        mode = int(value, 8)
    except ValueError:
        raise typer.BadParameter(f"Invalid octal mode: {value}") from None
    if not 0 <= mode <= 0o7777:
        raise typer.BadParameter(f"Mode out of range: {value}")
    return mode
