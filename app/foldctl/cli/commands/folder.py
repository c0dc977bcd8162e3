"""Folder mutation commands.

Provides commands to create, delete, copy and move folder trees, to
check whether a folder exists, and to sanitize folder names.
"""

from collections.abc import Callable
from typing import Annotated, TypeVar

import typer
from rich.markup import escape

from foldctl.cli.types import get_engine, parse_mode
from foldctl.folder.models import FolderError, FolderResult
from foldctl.folder.paths import make_safe
from foldctl.utils.formatting import console, print_error, print_info, print_success

T = TypeVar("T")

app = typer.Typer(
    help="Create, delete, copy and move folders.",
    invoke_without_command=True,
    no_args_is_help=True,
)


@app.command()
def create(
    ctx: typer.Context,
    path: Annotated[str, typer.Argument(help="Folder to create.")],
    mode: Annotated[
        str | None,
        typer.Option("--mode", "-m", help="Octal permission bits, e.g. 0755."),
    ] = None,
) -> None:
    """Create a folder and any missing parent folders."""
    engine = get_engine(ctx)
    result = _guard(lambda: engine.create(path, parse_mode(mode)))
    _report(result, f"Created {result.path}")


@app.command()
def delete(
    ctx: typer.Context,
    path: Annotated[str, typer.Argument(help="Folder to delete.")],
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompt."),
    ] = False,
) -> None:
    """Delete a folder and everything below it."""
    engine = get_engine(ctx)

    if path.strip() and not yes:
        confirmed = typer.confirm(f"Delete {path} and all of its contents?", default=False)
        if not confirmed:
            print_info("Aborted.")
            raise typer.Exit(code=0)

    result = _guard(lambda: engine.delete(path))
    _report(result, f"Deleted {result.path}")


@app.command()
def copy(
    ctx: typer.Context,
    src: Annotated[str, typer.Argument(help="Source folder.")],
    dest: Annotated[str, typer.Argument(help="Destination folder.")],
    base: Annotated[
        str,
        typer.Option("--base", "-b", help="Base path prefixed to SRC and DEST."),
    ] = "",
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Copy into an existing destination."),
    ] = False,
    streams: Annotated[
        bool,
        typer.Option("--streams", help="Copy files through streams instead of the transport."),
    ] = False,
) -> None:
    """Copy a folder tree."""
    engine = get_engine(ctx)
    _guard(lambda: engine.copy(src, dest, base, force=force, use_streams=streams))
    print_success(escape(f"Copied {src} to {dest}"))


@app.command()
def move(
    ctx: typer.Context,
    src: Annotated[str, typer.Argument(help="Source folder.")],
    dest: Annotated[str, typer.Argument(help="Destination path (must not exist).")],
    base: Annotated[
        str,
        typer.Option("--base", "-b", help="Base path prefixed to SRC and DEST."),
    ] = "",
    streams: Annotated[
        bool,
        typer.Option("--streams", help="Move through streams instead of the transport."),
    ] = False,
) -> None:
    """Move (rename) a folder. Never overwrites the destination."""
    engine = get_engine(ctx)
    result = _guard(lambda: engine.move(src, dest, base, use_streams=streams))
    _report(result, f"Moved {src} to {result.path}")


@app.command()
def exists(
    ctx: typer.Context,
    path: Annotated[str, typer.Argument(help="Path to check.")],
) -> None:
    """Exit with 0 if PATH is a folder, 1 otherwise."""
    engine = get_engine(ctx)
    found = _guard(lambda: engine.exists(path))
    console.print("yes" if found else "no")
    if not found:
        raise typer.Exit(code=1)


@app.command()
def safe(
    name: Annotated[str, typer.Argument(help="Folder name or path to sanitize.")],
) -> None:
    """Print NAME with every unsafe character removed."""
    typer.echo(make_safe(name))


# === Private helper functions ===


def _guard(operation: Callable[[], T]) -> T:
    """Run an engine call, turning FolderError into exit code 1."""
    try:
        return operation()
    except FolderError as e:
        suffix = f": {e.path}" if e.path else ""
        print_error(escape(f"{e} ({e.kind.value}){suffix}"))
        raise typer.Exit(code=1) from None


def _report(result: FolderResult, message: str) -> None:
    """Print the outcome of a result-returning operation."""
    if result.success:
        print_success(escape(message))
        return

    kind = result.kind.value if result.kind else "error"
    print_error(escape(f"{result.error} ({kind}): {result.path}"))
    raise typer.Exit(code=1)
