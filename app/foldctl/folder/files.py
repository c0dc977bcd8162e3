"""File deletion used when emptying folders."""

import logging
from collections.abc import Iterable

from foldctl.folder.models import FolderResult
from foldctl.folder.transport import LocalTransport, Transport

logger = logging.getLogger(__name__)


def delete_files(paths: str | Iterable[str], transport: Transport | None = None) -> FolderResult:
    """Delete one file or a sequence of files.

    Each path is unlinked locally first. When that fails and the transport
    is remote, the deletion is retried through the remote account. The
    first failure stops the run.

    Args:
        paths: A single path or an iterable of paths.
        transport: Transport selected for the enclosing operation.

    Returns:
        FolderResult for the whole batch; on failure it names the path
        that could not be deleted.
    """
    if isinstance(paths, str):
        paths = [paths]

    local = LocalTransport()
    last = ""
    for path in paths:
        last = path
        result = local.delete_file(path)
        if not result.success and transport is not None and transport.is_remote:
            result = transport.delete_file(path)
        if not result.success:
            logger.warning("delete_files: Failed deleting %s: %s", path, result.error)
            return result

    return FolderResult.ok(last)
