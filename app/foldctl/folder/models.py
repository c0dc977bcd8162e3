"""Folder engine result types.

This module defines the error taxonomy shared by every folder operation,
the result record returned by non-raising operations, the exception raised
by fail-fast operations, and the tree node produced by tree listings.
"""

from dataclasses import dataclass
from enum import Enum


class FolderErrorKind(str, Enum):
    """Classification of a failed folder operation.

    Attributes:
        NOT_FOUND: Source path or folder does not exist.
        ALREADY_EXISTS: Destination already exists and may not be replaced.
        PERMISSION_DENIED: The OS or a path restriction refused the operation.
        TRANSPORT_FAILURE: The local call or the remote transport failed.
        INVALID_ARGUMENT: The caller passed an unusable path.
    """

    NOT_FOUND = "not_found"
    ALREADY_EXISTS = "already_exists"
    PERMISSION_DENIED = "permission_denied"
    TRANSPORT_FAILURE = "transport_failure"
    INVALID_ARGUMENT = "invalid_argument"


@dataclass(frozen=True, slots=True)
class FolderResult:
    """Result of a create, delete or move operation.

    Attributes:
        path: Path the operation was performed on.
        success: Whether the operation completed successfully.
        error: Human-readable error message if the operation failed.
        kind: Error classification if the operation failed.
    """

    path: str
    success: bool
    error: str | None = None
    kind: FolderErrorKind | None = None

    @classmethod
    def ok(cls, path: str) -> "FolderResult":
        """Build a successful result for ``path``."""
        return cls(path=path, success=True)

    @classmethod
    def fail(cls, path: str, kind: FolderErrorKind, error: str) -> "FolderResult":
        """Build a failed result for ``path``."""
        return cls(path=path, success=False, error=error, kind=kind)


class FolderError(Exception):
    """Raised by fail-fast folder operations (copy, path validation).

    Attributes:
        kind: Error classification.
        path: Path involved in the failure, if known.
    """

    def __init__(self, message: str, kind: FolderErrorKind, path: str | None = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.path = path


@dataclass(frozen=True, slots=True)
class TreeNode:
    """One directory in a flattened, parent-linked folder tree.

    Attributes:
        id: Sequence number within one tree listing, starting at 1.
        parent: Id of the parent node, 0 for first-level entries.
        name: Directory name.
        fullname: Cleaned full path of the directory.
        relname: Full path with the application root stripped.
    """

    id: int
    parent: int
    name: str
    fullname: str
    relname: str
