"""Main CLI application entry point.

Defines the Typer application and global options.
"""

import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.logging import RichHandler

from foldctl import __version__
from foldctl.cli.commands import config, folder, listing
from foldctl.utils.formatting import err_console

# Create main Typer app
app = typer.Typer(
    name="foldctl",
    help="Recursive folder operations over local and FTP transports.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"foldctl version {__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    """Route engine warnings (and debug output with --verbose) to stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False, show_time=False)],
        force=True,
    )


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output.",
        ),
    ] = False,
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Config file (default: ~/.config/foldctl/config.toml).",
        ),
    ] = None,
) -> None:
    """foldctl - Create, copy, move, delete and list folder trees.

    Folder mutations go through FTP when the [ftp] section of the
    config file is enabled.
    """
    configure_logging(verbose)

    # Store options in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["config_path"] = config_path


# Register commands
app.add_typer(folder.app, name="folder")
app.add_typer(listing.app, name="list")
app.add_typer(config.app, name="config")


if __name__ == "__main__":
    app()
