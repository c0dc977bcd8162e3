"""Stream-based file copy and move.

Used when callers ask for streams instead of the configured transport.
Failures are recorded rather than raised; ``get_error()`` returns the
description of the last failure.
"""

import logging
import shutil

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


class StreamHandler:
    """Copies and moves files through buffered file streams."""

    def __init__(self, chunk_size: int = CHUNK_SIZE) -> None:
        self._chunk_size = chunk_size
        self._error: str | None = None

    def get_error(self) -> str | None:
        """Return the description of the last failure, if any."""
        return self._error

    def copy(self, src: str, dest: str) -> bool:
        """Copy the bytes of ``src`` into ``dest``.

        Returns:
            True on success, False with the error recorded otherwise.
        """
        self._error = None
        try:
            with open(src, "rb") as reader, open(dest, "wb") as writer:
                shutil.copyfileobj(reader, writer, self._chunk_size)
        except OSError as e:
            self._error = f"{e.strerror or e}: {src}"
            logger.warning("Stream copy failed %s -> %s: %s", src, dest, e)
            return False
        return True

    def move(self, src: str, dest: str) -> bool:
        """Move ``src`` to ``dest``, copying across filesystems when needed.

        Returns:
            True on success, False with the error recorded otherwise.
        """
        self._error = None
        try:
            shutil.move(src, dest)
        except OSError as e:
            self._error = f"{e.strerror or e}: {src}"
            logger.warning("Stream move failed %s -> %s: %s", src, dest, e)
            return False
        return True
