"""Recursive directory traversal with include and exclude filters.

One directory level is read per call. Exclusions (literal names and the
combined exclude pattern) are applied first; an entry is a hit when it is a
directory and directories are wanted, or a file and files are wanted, and
its name matches the include pattern. Directories are descended into
whether or not they were hits, as long as the recursion budget allows.
"""

import logging
import os
import re
from collections.abc import Collection, Iterable

logger = logging.getLogger(__name__)

# Version-control and OS metadata names hidden by default
DEFAULT_EXCLUDE: tuple[str, ...] = (".svn", "CVS", ".DS_Store", "__MACOSX")

# Hidden entries and editor backups
DEFAULT_FILE_EXCLUDE_PATTERNS: tuple[str, ...] = (r"^\..*", r".*~")
DEFAULT_FOLDER_EXCLUDE_PATTERNS: tuple[str, ...] = (r"^\..*",)

# False: one level; True: unlimited; int: remaining levels below this one
Recurse = bool | int


def compile_exclude_pattern(patterns: Iterable[str]) -> re.Pattern[str] | None:
    """Combine exclude patterns into a single alternation.

    Args:
        patterns: Regular expressions; an entry matching any of them is excluded.

    Returns:
        Compiled ``(p1|p2|...)`` pattern, or None when no patterns are given.

    Raises:
        re.error: If a pattern is not a valid regular expression.
    """
    patterns = list(patterns)
    if not patterns:
        return None
    return re.compile("(" + "|".join(patterns) + ")")


def next_recurse(recurse: Recurse) -> Recurse | None:
    """Return the budget for the next level, or None to stop descending."""
    if isinstance(recurse, bool):
        return True if recurse else None
    if recurse > 0:
        return recurse - 1
    return None


def collect_items(
    path: str,
    include: re.Pattern[str],
    recurse: Recurse,
    full: bool,
    exclude: Collection[str],
    exclude_pattern: re.Pattern[str] | None,
    find_files: bool,
) -> list[str]:
    """Collect matching entries below ``path`` (unsorted).

    Args:
        path: Directory to read.
        include: Pattern searched in each entry name.
        recurse: Recursion budget (see ``Recurse``).
        full: Return full paths instead of names.
        exclude: Literal names to skip.
        exclude_pattern: Combined exclude pattern, or None.
        find_files: True to collect files, False to collect directories.

    Returns:
        Matching names or paths in directory order. A directory that cannot
        be opened contributes nothing.
    """
    try:
        with os.scandir(path) as it:
            entries = list(it)
    except OSError as e:
        logger.debug("Cannot open directory %s: %s", path, e)
        return []

    items: list[str] = []
    for entry in entries:
        name = entry.name
        if name in exclude:
            continue
        if exclude_pattern is not None and exclude_pattern.search(name):
            continue

        fullpath = os.path.join(path, name)
        try:
            is_dir = entry.is_dir()
        except OSError:
            is_dir = False

        if (is_dir != find_files) and include.search(name):
            items.append(fullpath if full else name)

        if is_dir:
            budget = next_recurse(recurse)
            if budget is not None:
                items.extend(
                    collect_items(
                        fullpath, include, budget, full, exclude, exclude_pattern, find_files
                    )
                )

    return items
