"""Configuration commands.

Provides commands to show the effective engine configuration and to
write a starter config file.
"""

import json
from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape

from foldctl.cli.types import get_config
from foldctl.core.config import ConfigError, EngineConfig, FtpCredentials, save_config
from foldctl.core.paths import ensure_config_dir, get_config_path
from foldctl.folder.transport import LFTP_BIN
from foldctl.utils.formatting import console, print_error, print_success, print_warning
from foldctl.utils.shell import command_exists

app = typer.Typer(
    help="Show or initialize the engine configuration.",
    invoke_without_command=True,
    no_args_is_help=True,
)


@app.command()
def show(ctx: typer.Context) -> None:
    """Print the effective configuration as JSON (password masked)."""
    config = get_config(ctx)
    data = config.model_dump()
    if data["ftp"]["password"]:
        data["ftp"]["password"] = "********"
    data["default_mode"] = f"{config.default_mode:04o}"
    console.print_json(json.dumps(data))

    if config.ftp.enabled and not command_exists(LFTP_BIN):
        print_warning(f"FTP is enabled but '{LFTP_BIN}' was not found in PATH")


@app.command()
def init(
    ctx: typer.Context,
    app_root: Annotated[
        Path | None,
        typer.Option("--app-root", help="Application root (default: current directory)."),
    ] = None,
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite an existing config file."),
    ] = False,
) -> None:
    """Write a config file with default settings."""
    obj = ctx.obj or {}
    path: Path | None = obj.get("config_path")
    if path is None:
        try:
            ensure_config_dir()
        except RuntimeError as e:
            print_error(escape(str(e)))
            raise typer.Exit(code=1) from None
        path = get_config_path()

    if path.exists() and not force:
        print_warning(escape(f"Config already exists: {path} (use --force to overwrite)"))
        raise typer.Exit(code=1)

    config = EngineConfig(ftp=FtpCredentials())
    if app_root is not None:
        config = config.model_copy(update={"app_root": str(app_root.resolve())})

    try:
        saved = save_config(config, path)
    except ConfigError as e:
        print_error(escape(str(e)))
        raise typer.Exit(code=1) from None

    print_success(escape(f"Config written to {saved}"))
