"""Folder engine: recursive create, delete, copy, move and listing.

Every top-level operation picks its transport once (local filesystem or
FTP, depending on the configured credentials) and passes it down through
the recursion. Failure reporting differs per operation:

- ``create``, ``delete`` and ``move`` return a FolderResult and log a
  warning; they do not raise for filesystem failures.
- ``files`` and ``folders`` return None when the path is not a folder.
- ``copy`` raises FolderError on the first failure and leaves whatever was
  already copied in place.

Paths containing ``..`` segments are rejected with FolderError by every
operation.
"""

import itertools
import logging
import os
import re
from collections.abc import Callable, Collection, Iterable, Iterator
from pathlib import PurePosixPath

from foldctl.core.config import EngineConfig, FtpCredentials
from foldctl.folder.files import delete_files
from foldctl.folder.listing import (
    DEFAULT_EXCLUDE,
    DEFAULT_FILE_EXCLUDE_PATTERNS,
    DEFAULT_FOLDER_EXCLUDE_PATTERNS,
    Recurse,
    collect_items,
    compile_exclude_pattern,
)
from foldctl.folder.models import FolderError, FolderErrorKind, FolderResult, TreeNode
from foldctl.folder.paths import clean_path, join_base, make_safe, relative_name
from foldctl.folder.streams import StreamHandler
from foldctl.folder.transport import LocalTransport, Transport, select_transport

logger = logging.getLogger(__name__)

CredentialSource = Callable[[], FtpCredentials]

DEFAULT_TREE_LEVELS = 3


class FolderEngine:
    """Folder operations over a local tree, optionally mutated through FTP.

    Args:
        config: Engine settings. Defaults to ``EngineConfig()``.
        credentials: Callable returning the FTP credentials, consulted once
            per top-level operation. Defaults to ``config.ftp``.
        stream_factory: Builds the stream handler used when an operation
            is asked to use streams.
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        credentials: CredentialSource | None = None,
        stream_factory: Callable[[], StreamHandler] = StreamHandler,
    ) -> None:
        self._config = config if config is not None else EngineConfig()
        self._credentials = credentials or (lambda: self._config.ftp)
        self._stream_factory = stream_factory

    @property
    def config(self) -> EngineConfig:
        """Engine settings."""
        return self._config

    def pick_transport(self) -> Transport:
        """Pick the transport for one top-level operation."""
        return select_transport(
            self._credentials(), self._config.app_root, self._config.open_basedir
        )

    def clean(self, path: str) -> str:
        """Clean ``path``; empty paths resolve to the application root."""
        return clean_path(path, root=self._config.app_root)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def exists(self, path: str) -> bool:
        """Check whether ``path`` is an existing directory."""
        return os.path.isdir(self.clean(path))

    def files(
        self,
        path: str,
        pattern: str = ".",
        recurse: Recurse = False,
        full: bool = False,
        exclude: Collection[str] = DEFAULT_EXCLUDE,
        exclude_patterns: Iterable[str] = DEFAULT_FILE_EXCLUDE_PATTERNS,
    ) -> list[str] | None:
        """List files in a folder.

        Args:
            path: Folder to read.
            pattern: Regular expression an entry name must match.
            recurse: False for one level, True for unlimited depth, or the
                number of levels to descend below ``path``.
            full: Return full paths instead of names.
            exclude: Names that are never listed.
            exclude_patterns: Regular expressions; matching names are never listed.

        Returns:
            Sorted names or paths, or None if ``path`` is not a folder or a
            pattern is invalid.
        """
        return self._list("files", path, pattern, recurse, full, exclude, exclude_patterns, True)

    def folders(
        self,
        path: str,
        pattern: str = ".",
        recurse: Recurse = False,
        full: bool = False,
        exclude: Collection[str] = DEFAULT_EXCLUDE,
        exclude_patterns: Iterable[str] = DEFAULT_FOLDER_EXCLUDE_PATTERNS,
    ) -> list[str] | None:
        """List folders in a folder. Arguments mirror :meth:`files`."""
        return self._list(
            "folders", path, pattern, recurse, full, exclude, exclude_patterns, False
        )

    def list_folder_tree(
        self,
        path: str,
        pattern: str = ".",
        max_level: int = DEFAULT_TREE_LEVELS,
    ) -> list[TreeNode]:
        """List folders as a flat, parent-linked tree in pre-order.

        Node ids are numbered from 1 for each call; first-level nodes have
        parent 0.

        Args:
            path: Root folder of the tree (not itself included).
            pattern: Regular expression folder names must match.
            max_level: Number of levels to read.

        Returns:
            TreeNode records in pre-order.
        """
        counter = itertools.count(1)
        return list(self._walk_tree(self.clean(path), pattern, max_level, 0, 0, counter))

    @staticmethod
    def make_safe(path: str) -> str:
        """Strip characters that are unsafe in folder names."""
        return make_safe(path)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def create(self, path: str, mode: int | None = None) -> FolderResult:
        """Create a folder and every missing parent folder.

        Args:
            path: Folder to create.
            mode: Permission bits. Defaults to the configured default mode.

        Returns:
            FolderResult; succeeds immediately if the folder already exists.
        """
        mode = self._config.default_mode if mode is None else mode
        return self._create(self.clean(path), mode, self.pick_transport(), 0)

    def delete(self, path: str) -> FolderResult:
        """Delete a folder together with everything below it.

        Symbolic links to folders are removed as links; their targets are
        left alone.

        Args:
            path: Folder to delete. An empty path is refused.

        Returns:
            FolderResult describing the first failure, if any.

        Raises:
            FolderError: If the path contains a ``..`` segment.
        """
        if not path or not path.strip():
            logger.warning("delete: You can not delete a base directory.")
            return FolderResult.fail(
                path, FolderErrorKind.INVALID_ARGUMENT, "You can not delete a base directory"
            )

        return self._delete(self.clean(path), self.pick_transport())

    def copy(
        self,
        src: str,
        dest: str,
        base_path: str = "",
        force: bool = False,
        use_streams: bool = False,
    ) -> bool:
        """Copy a folder tree.

        Args:
            src: Source folder.
            dest: Destination folder.
            base_path: Optional prefix joined to both ``src`` and ``dest``.
            force: Copy into ``dest`` even if it already exists.
            use_streams: Copy files through the stream handler instead of
                the transport.

        Returns:
            True once every entry has been copied.

        Raises:
            FolderError: On the first failure; partial copies are left in place.
        """
        src, dest = self._prepare_pair(src, dest, base_path)

        if not self.exists(src):
            raise FolderError("Source folder not found", FolderErrorKind.NOT_FOUND, src)

        if PurePosixPath(os.path.abspath(dest)).is_relative_to(os.path.abspath(src)):
            raise FolderError(
                "Cannot copy a folder into itself", FolderErrorKind.INVALID_ARGUMENT, dest
            )

        if self.exists(dest) and not force:
            raise FolderError(
                "Destination folder already exists", FolderErrorKind.ALREADY_EXISTS, dest
            )

        streams = self._stream_factory() if use_streams else None
        self._copy(src, dest, self.pick_transport(), streams)
        return True

    def move(
        self,
        src: str,
        dest: str,
        base_path: str = "",
        use_streams: bool = False,
    ) -> FolderResult:
        """Move a folder by renaming it. Never overwrites ``dest``.

        Args:
            src: Source folder.
            dest: Destination path; must not exist.
            base_path: Optional prefix joined to both ``src`` and ``dest``.
            use_streams: Move through the stream handler instead of the transport.

        Returns:
            FolderResult with a descriptive error on failure.
        """
        src, dest = self._prepare_pair(src, dest, base_path)

        if not self.exists(src):
            return FolderResult.fail(src, FolderErrorKind.NOT_FOUND, "Cannot find source folder")

        if self.exists(dest):
            return FolderResult.fail(dest, FolderErrorKind.ALREADY_EXISTS, "Folder already exists")

        if use_streams:
            stream = self._stream_factory()
            if not stream.move(src, dest):
                return FolderResult.fail(
                    src, FolderErrorKind.TRANSPORT_FAILURE, f"Rename failed: {stream.get_error()}"
                )
            return FolderResult.ok(dest)

        result = self.pick_transport().rename(src, dest)
        if not result.success:
            return FolderResult.fail(
                src, result.kind or FolderErrorKind.TRANSPORT_FAILURE, "Rename failed"
            )
        return FolderResult.ok(dest)

    # === Private helpers ===

    def _prepare_pair(self, src: str, dest: str, base_path: str) -> tuple[str, str]:
        """Apply the optional base path and clean both paths."""
        if base_path:
            return join_base(base_path, src), join_base(base_path, dest)
        return self.clean(src), self.clean(dest)

    def _list(
        self,
        caller: str,
        path: str,
        pattern: str,
        recurse: Recurse,
        full: bool,
        exclude: Collection[str],
        exclude_patterns: Iterable[str],
        find_files: bool,
    ) -> list[str] | None:
        path = self.clean(path)

        if not os.path.isdir(path):
            logger.warning("%s: Path is not a folder. Path: %s", caller, path)
            return None

        try:
            include = re.compile(pattern)
            exclude_pattern = compile_exclude_pattern(exclude_patterns)
        except re.error as e:
            logger.warning("%s: Invalid filter pattern: %s", caller, e)
            return None

        items = collect_items(
            path, include, recurse, full, frozenset(exclude), exclude_pattern, find_files
        )
        return sorted(items)

    def _walk_tree(
        self,
        path: str,
        pattern: str,
        max_level: int,
        level: int,
        parent: int,
        counter: Iterator[int],
    ) -> Iterator[TreeNode]:
        if level >= max_level:
            return

        for name in self.folders(path, pattern) or []:
            node_id = next(counter)
            fullname = clean_path(f"{path}/{name}")
            yield TreeNode(
                id=node_id,
                parent=parent,
                name=name,
                fullname=fullname,
                relname=relative_name(fullname, self._config.app_root),
            )
            yield from self._walk_tree(fullname, pattern, max_level, level + 1, node_id, counter)

    def _create(self, path: str, mode: int, transport: Transport, depth: int) -> FolderResult:
        # A bare relative name has the working directory as its parent
        parent = os.path.dirname(path) or os.curdir

        if not os.path.isdir(parent):
            if depth + 1 > self._config.max_create_depth or parent == path:
                logger.warning("create: Infinite loop detected. Path: %s", path)
                return FolderResult.fail(
                    path, FolderErrorKind.INVALID_ARGUMENT, "Infinite loop detected"
                )

            result = self._create(parent, mode, transport, depth + 1)
            if not result.success:
                return result

        if os.path.isdir(path):
            return FolderResult.ok(path)

        return transport.make_dir(path, mode)

    def _delete(self, path: str, transport: Transport) -> FolderResult:
        if not os.path.isdir(path):
            logger.warning("delete: Path is not a folder. Path: %s", path)
            return FolderResult.fail(path, FolderErrorKind.NOT_FOUND, "Path is not a folder")

        # No filtering: hidden and metadata entries must go too
        files = self.files(path, ".", False, True, (), ())
        if files:
            result = delete_files(files, transport)
            if not result.success:
                return result

        for folder in self.folders(path, ".", False, True, (), ()) or []:
            if os.path.islink(folder):
                result = delete_files(folder, transport)
            else:
                result = self._delete(folder, transport)
            if not result.success:
                return result

        result = LocalTransport().remove_dir(path)
        if result.success:
            return result

        if transport.is_remote:
            remote = transport.remove_dir(path)
            return FolderResult.ok(path) if remote.success else remote

        logger.warning("delete: Could not delete folder. Path: %s (%s)", path, result.error)
        return result

    def _copy(
        self,
        src: str,
        dest: str,
        transport: Transport,
        streams: StreamHandler | None,
    ) -> None:
        created = self._create(dest, self._config.default_mode, transport, 0)
        if not created.success:
            raise FolderError(
                "Cannot create destination folder",
                created.kind or FolderErrorKind.TRANSPORT_FAILURE,
                dest,
            )

        try:
            with os.scandir(src) as it:
                entries = list(it)
        except OSError as e:
            kind = (
                FolderErrorKind.PERMISSION_DENIED
                if isinstance(e, PermissionError)
                else FolderErrorKind.NOT_FOUND
            )
            raise FolderError("Cannot open source folder", kind, src) from e

        for entry in entries:
            target = os.path.join(dest, entry.name)

            # Links and special files are skipped
            if entry.is_dir(follow_symlinks=False):
                self._copy(entry.path, target, transport, streams)
            elif entry.is_file(follow_symlinks=False):
                self._copy_file(entry.path, target, transport, streams)

    def _copy_file(
        self,
        src: str,
        dest: str,
        transport: Transport,
        streams: StreamHandler | None,
    ) -> None:
        if streams is not None:
            if not streams.copy(src, dest):
                raise FolderError(
                    f"Cannot copy file: {streams.get_error()}",
                    FolderErrorKind.TRANSPORT_FAILURE,
                    src,
                )
            return

        result = transport.copy_file(src, dest)
        if not result.success:
            logger.warning("copy: Copy file failed. %s -> %s: %s", src, dest, result.error)
            raise FolderError(
                "Copy file failed", result.kind or FolderErrorKind.TRANSPORT_FAILURE, src
            )
