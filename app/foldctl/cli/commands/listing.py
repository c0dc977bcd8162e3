"""Listing commands.

Provides filtered file and folder listings and the folder tree view.
"""

import json
from dataclasses import asdict
from typing import Annotated

import typer
from rich.markup import escape

from foldctl.cli.types import OutputFormat, get_engine
from foldctl.folder.listing import (
    DEFAULT_EXCLUDE,
    DEFAULT_FILE_EXCLUDE_PATTERNS,
    DEFAULT_FOLDER_EXCLUDE_PATTERNS,
    Recurse,
)
from foldctl.folder.models import FolderError
from foldctl.utils.formatting import (
    build_tree,
    console,
    create_listing_table,
    print_error,
    print_info,
)

app = typer.Typer(
    help="List files, folders and folder trees.",
    invoke_without_command=True,
    no_args_is_help=True,
)

PatternOption = Annotated[
    str,
    typer.Option("--filter", "-p", help="Regular expression names must match."),
]
RecurseOption = Annotated[
    bool,
    typer.Option("--recurse", "-r", help="Descend into every sub-folder."),
]
DepthOption = Annotated[
    int | None,
    typer.Option("--depth", "-d", min=0, help="Descend at most this many levels."),
]
FullOption = Annotated[
    bool,
    typer.Option("--full", help="Show full paths instead of names."),
]
AllOption = Annotated[
    bool,
    typer.Option("--all", "-a", help="Do not hide VCS metadata, dotfiles and backups."),
]
ExcludeOption = Annotated[
    list[str] | None,
    typer.Option("--exclude", "-x", help="Name to hide (repeatable)."),
]
ExcludePatternOption = Annotated[
    list[str] | None,
    typer.Option("--exclude-pattern", "-X", help="Regular expression to hide (repeatable)."),
]
FormatOption = Annotated[
    OutputFormat,
    typer.Option("--format", "-f", help="Output format.", case_sensitive=False),
]


@app.command()
def files(
    ctx: typer.Context,
    path: Annotated[str, typer.Argument(help="Folder to read.")],
    pattern: PatternOption = ".",
    recurse: RecurseOption = False,
    depth: DepthOption = None,
    full: FullOption = False,
    show_all: AllOption = False,
    exclude: ExcludeOption = None,
    exclude_pattern: ExcludePatternOption = None,
    output_format: FormatOption = OutputFormat.TABLE,
) -> None:
    """List files in a folder."""
    engine = get_engine(ctx)
    names, patterns = _exclusions(
        show_all, exclude, exclude_pattern, DEFAULT_FILE_EXCLUDE_PATTERNS
    )
    try:
        items = engine.files(path, pattern, _recurse(recurse, depth), full, names, patterns)
    except FolderError as e:
        print_error(escape(str(e)))
        raise typer.Exit(code=1) from None

    _print_items(items, path, "File", output_format)


@app.command()
def folders(
    ctx: typer.Context,
    path: Annotated[str, typer.Argument(help="Folder to read.")],
    pattern: PatternOption = ".",
    recurse: RecurseOption = False,
    depth: DepthOption = None,
    full: FullOption = False,
    show_all: AllOption = False,
    exclude: ExcludeOption = None,
    exclude_pattern: ExcludePatternOption = None,
    output_format: FormatOption = OutputFormat.TABLE,
) -> None:
    """List sub-folders of a folder."""
    engine = get_engine(ctx)
    names, patterns = _exclusions(
        show_all, exclude, exclude_pattern, DEFAULT_FOLDER_EXCLUDE_PATTERNS
    )
    try:
        items = engine.folders(path, pattern, _recurse(recurse, depth), full, names, patterns)
    except FolderError as e:
        print_error(escape(str(e)))
        raise typer.Exit(code=1) from None

    _print_items(items, path, "Folder", output_format)


@app.command()
def tree(
    ctx: typer.Context,
    path: Annotated[str, typer.Argument(help="Root folder of the tree.")],
    pattern: PatternOption = ".",
    max_level: Annotated[
        int,
        typer.Option("--max-level", "-l", min=0, help="Number of levels to read."),
    ] = 3,
    output_format: FormatOption = OutputFormat.TABLE,
) -> None:
    """Show the folder tree below PATH."""
    engine = get_engine(ctx)
    try:
        if not engine.exists(path):
            print_error(escape(f"Path is not a folder: {path}"))
            raise typer.Exit(code=1)
        nodes = engine.list_folder_tree(path, pattern, max_level)
    except FolderError as e:
        print_error(escape(str(e)))
        raise typer.Exit(code=1) from None

    if output_format == OutputFormat.JSON:
        typer.echo(json.dumps([asdict(node) for node in nodes], indent=2))
        return

    console.print(build_tree(engine.clean(path), nodes))


# === Private helper functions ===


def _recurse(recurse: bool, depth: int | None) -> Recurse:
    """Combine --recurse and --depth into the engine's recursion budget."""
    if depth is not None:
        return depth
    return recurse


def _exclusions(
    show_all: bool,
    exclude: list[str] | None,
    exclude_pattern: list[str] | None,
    default_patterns: tuple[str, ...],
) -> tuple[tuple[str, ...], tuple[str, ...]]:
    """Build the exclusion lists from defaults and repeated options."""
    names = () if show_all else DEFAULT_EXCLUDE
    patterns = () if show_all else default_patterns
    return (*names, *(exclude or [])), (*patterns, *(exclude_pattern or []))


def _print_items(
    items: list[str] | None,
    path: str,
    kind: str,
    output_format: OutputFormat,
) -> None:
    """Print a listing, or exit with code 1 if the listing failed."""
    if items is None:
        print_error(escape(f"Cannot list {path}: not a folder or invalid filter"))
        raise typer.Exit(code=1)

    if output_format == OutputFormat.JSON:
        typer.echo(json.dumps(items, indent=2))
        return

    if not items:
        print_info("Nothing found.")
        return

    table = create_listing_table(f"{kind}s in {escape(path)}", kind)
    for index, item in enumerate(items, start=1):
        table.add_row(str(index), escape(item))
    console.print(table)
