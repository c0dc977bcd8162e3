"""Rich console formatting utilities.

Provides consistent formatting for CLI output using Rich.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.theme import Theme
from rich.tree import Tree

if TYPE_CHECKING:
    from foldctl.folder.models import TreeNode

THEME = Theme(
    {
        "text": "#ffffff",
        "muted": "#b2bec3",
        "header": "bold #69B9A1",
        "border": "#29526d",
        "success": "#03b971",
        "warning": "#f5b332",
        "error": "bold #f53263",
        "info": "#0ec1c8",
        "folder": "bold #0e8ac8",
        "dim": "#b2bec3",
    }
)


def _detect_color_system() -> str | None:
    """Detect the best color system for the current terminal.

    Returns "truecolor" for interactive terminals to enable full hex color support,
    None otherwise to let Rich auto-detect.
    """
    if sys.stdout.isatty():
        return "truecolor"
    return None


# Shared console instances
console = Console(theme=THEME, color_system=_detect_color_system())
err_console = Console(theme=THEME, stderr=True, color_system=_detect_color_system())


def create_listing_table(title: str, kind: str) -> Table:
    """Create a pre-configured table for a files or folders listing.

    Args:
        title: Table title.
        kind: Column heading, e.g. "File" or "Folder".

    Returns:
        Rich Table with an index column and an entry column.
    """
    table = Table(
        title=title,
        show_header=True,
        header_style="header",
        border_style="border",
        row_styles=["", "on grey7"],
    )
    table.add_column("#", style="muted", justify="right", width=5)
    table.add_column(kind, style="text", overflow="fold")
    return table


def build_tree(root: str, nodes: list[TreeNode]) -> Tree:
    """Render flat tree nodes as a Rich tree.

    Args:
        root: Label of the root folder.
        nodes: Pre-order TreeNode records.

    Returns:
        Rich Tree mirroring the parent links.
    """
    tree = Tree(f"[folder]{escape(root)}[/]")
    branches: dict[int, Tree] = {0: tree}
    for node in nodes:
        parent = branches.get(node.parent, tree)
        branches[node.id] = parent.add(
            f"[folder]{escape(node.name)}[/] [muted]{escape(node.relname)}[/]"
        )
    return tree


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]{message}[/]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    err_console.print(f"[warning]Warning:[/] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[error]Error:[/] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{message}[/]")
