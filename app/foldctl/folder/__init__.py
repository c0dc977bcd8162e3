"""Folder engine module.

This module provides recursive folder creation, deletion, copying,
moving and filtered listing over local and FTP transports.
"""

from foldctl.folder.engine import FolderEngine
from foldctl.folder.models import FolderError, FolderErrorKind, FolderResult, TreeNode
from foldctl.folder.paths import clean_path, make_safe, rebase_path
from foldctl.folder.transport import LocalTransport, RemoteTransport, Transport

__all__ = [
    "FolderEngine",
    "FolderError",
    "FolderErrorKind",
    "FolderResult",
    "LocalTransport",
    "RemoteTransport",
    "Transport",
    "TreeNode",
    "clean_path",
    "make_safe",
    "rebase_path",
]
