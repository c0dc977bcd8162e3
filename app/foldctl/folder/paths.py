"""Path normalization and translation helpers.

All helpers operate on plain strings with ``/`` as the canonical separator
and compare paths segment by segment, so ``/var/www`` is never treated as a
prefix of ``/var/www2``.
"""

import os
import re
from collections.abc import Iterable
from pathlib import PurePosixPath

from foldctl.folder.models import FolderError, FolderErrorKind

_SEPARATOR_RUN = re.compile(r"[/\\]+")

# Everything outside this set is stripped by make_safe()
_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_\\/()\[\]{}#$^+.'~`!@&=;,-]")


def clean_path(path: str, root: str | None = None, sep: str = os.sep) -> str:
    """Normalize a path.

    Collapses runs of ``/`` and ``\\`` into ``sep``, trims surrounding
    whitespace and strips trailing separators (the filesystem root itself
    is kept). An empty path resolves to ``root``.

    Args:
        path: Path to clean.
        root: Application root used when ``path`` is empty.
        sep: Separator to normalize to.

    Returns:
        The cleaned path.

    Raises:
        FolderError: If the path contains a ``..`` segment.
    """
    path = path.strip()
    if not path:
        path = root if root is not None else os.getcwd()

    cleaned = _SEPARATOR_RUN.sub(lambda _: sep, path)
    if len(cleaned) > 1:
        cleaned = cleaned.rstrip(sep) or sep

    if ".." in cleaned.split(sep):
        msg = f"Path traversal is not allowed: {path}"
        raise FolderError(msg, FolderErrorKind.INVALID_ARGUMENT, path)

    return cleaned


def join_base(base_path: str, path: str) -> str:
    """Prefix ``path`` with ``base_path`` and clean the result."""
    return clean_path(f"{base_path}/{path}")


def is_within(path: str, bases: Iterable[str]) -> bool:
    """Check whether ``path`` lies inside (or equals) any of ``bases``.

    Args:
        path: Cleaned absolute path.
        bases: Allowed root paths.

    Returns:
        True if at least one base contains the path.
    """
    candidate = PurePosixPath(clean_path(path, sep="/"))
    for base in bases:
        if not base.strip():
            continue
        if candidate.is_relative_to(PurePosixPath(clean_path(base, sep="/"))):
            return True
    return False


def rebase_path(path: str, old_root: str, new_root: str) -> str:
    """Translate ``path`` from one root namespace into another.

    Used to map local paths into the remote FTP account's namespace. Paths
    outside ``old_root`` are returned cleaned but otherwise unchanged.

    Args:
        path: Path in the local namespace.
        old_root: Local root (the application root).
        new_root: Remote root.

    Returns:
        The translated path, always ``/``-separated.
    """
    local = PurePosixPath(clean_path(path, sep="/"))
    old = PurePosixPath(clean_path(old_root, sep="/"))
    if not local.is_relative_to(old):
        return str(local)

    rebased = PurePosixPath(clean_path(new_root or "/", sep="/")) / local.relative_to(old)
    return clean_path(str(rebased), sep="/")


def relative_name(path: str, root: str) -> str:
    """Strip ``root`` from ``path``, keeping a leading separator.

    ``/srv/site/images`` with root ``/srv/site`` becomes ``/images``.
    Paths outside the root are returned unchanged.
    """
    full = PurePosixPath(clean_path(path, sep="/"))
    base = PurePosixPath(clean_path(root, sep="/"))
    if not full.is_relative_to(base):
        return path
    relative = full.relative_to(base)
    if relative == PurePosixPath("."):
        return "/"
    return f"/{relative}"


def make_safe(path: str) -> str:
    """Remove every character that is unsafe in a folder name.

    Alphanumerics, underscore, path separators, brackets and the
    punctuation ``#$^+.'~`!@&=;,-`` survive.
    """
    return _UNSAFE_CHARS.sub("", path)
