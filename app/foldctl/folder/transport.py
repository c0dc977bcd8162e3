"""Transports performing folder mutations.

A transport is selected once per top-level engine call and handed down
through the recursion. ``LocalTransport`` issues direct OS calls;
``RemoteTransport`` drives an FTP account through ``lftp`` for hosts where
the application user cannot write to its own tree.
"""

import logging
import os
import re
import shutil
import subprocess
from abc import ABC, abstractmethod
from collections.abc import Sequence

from foldctl.core.config import FtpCredentials
from foldctl.folder.models import FolderErrorKind, FolderResult
from foldctl.folder.paths import is_within, rebase_path
from foldctl.utils.shell import run_command

logger = logging.getLogger(__name__)

LFTP_BIN = "lftp"


class Transport(ABC):
    """Abstract base class for folder transports.

    Every operation returns a FolderResult; transports never raise for
    filesystem or network failures.
    """

    @property
    @abstractmethod
    def is_remote(self) -> bool:
        """Whether mutations go through a remote account."""

    @abstractmethod
    def make_dir(self, path: str, mode: int) -> FolderResult:
        """Create a single directory whose parent already exists."""

    @abstractmethod
    def remove_dir(self, path: str) -> FolderResult:
        """Remove a single empty directory."""

    @abstractmethod
    def delete_file(self, path: str) -> FolderResult:
        """Delete a single file or symbolic link."""

    @abstractmethod
    def copy_file(self, src: str, dest: str) -> FolderResult:
        """Copy one local file to ``dest``."""

    @abstractmethod
    def rename(self, src: str, dest: str) -> FolderResult:
        """Rename ``src`` to ``dest``."""


class LocalTransport(Transport):
    """Direct filesystem transport.

    Args:
        open_basedir: Allowed roots for directory creation. Empty means
            no restriction.
    """

    def __init__(self, open_basedir: Sequence[str] = ()) -> None:
        self._open_basedir = tuple(open_basedir)

    @property
    def is_remote(self) -> bool:
        return False

    def make_dir(self, path: str, mode: int) -> FolderResult:
        """Create ``path`` with exact permission bits.

        The process umask is cleared for the duration of the call and
        always restored afterwards.
        """
        if self._open_basedir and not is_within(path, self._open_basedir):
            logger.warning("make_dir: Path not in open_basedir paths. Path: %s", path)
            return FolderResult.fail(
                path, FolderErrorKind.PERMISSION_DENIED, "Path not in open_basedir paths"
            )

        original_mask = os.umask(0)
        try:
            os.mkdir(path, mode)
        except OSError as e:
            logger.warning("make_dir: Could not create directory. Path: %s (%s)", path, e)
            return FolderResult.fail(path, _kind_for(e), f"Could not create directory: {e}")
        finally:
            os.umask(original_mask)

        return FolderResult.ok(path)

    def remove_dir(self, path: str) -> FolderResult:
        try:
            os.rmdir(path)
        except OSError as e:
            return FolderResult.fail(path, _kind_for(e), f"Could not delete folder: {e}")
        return FolderResult.ok(path)

    def delete_file(self, path: str) -> FolderResult:
        try:
            os.unlink(path)
        except OSError as e:
            return FolderResult.fail(path, _kind_for(e), f"Could not delete file: {e}")
        return FolderResult.ok(path)

    def copy_file(self, src: str, dest: str) -> FolderResult:
        try:
            shutil.copyfile(src, dest)
        except OSError as e:
            return FolderResult.fail(dest, _kind_for(e), f"Copy file failed: {e}")
        return FolderResult.ok(dest)

    def rename(self, src: str, dest: str) -> FolderResult:
        try:
            os.rename(src, dest)
        except OSError as e:
            return FolderResult.fail(src, _kind_for(e), f"Rename failed: {e}")
        return FolderResult.ok(dest)


class RemoteTransport(Transport):
    """FTP transport driven through the ``lftp`` client.

    Local paths are translated into the FTP account's namespace by
    rebasing them from ``local_root`` onto ``credentials.root``.

    Args:
        credentials: FTP connection settings.
        local_root: Local application root mirrored by the FTP root.
        lftp_bin: lftp executable name or path.
    """

    def __init__(
        self,
        credentials: FtpCredentials,
        local_root: str,
        lftp_bin: str = LFTP_BIN,
    ) -> None:
        self._credentials = credentials
        self._local_root = local_root
        self._lftp_bin = lftp_bin

    @property
    def is_remote(self) -> bool:
        return True

    def remote_path(self, path: str) -> str:
        """Translate a local path into the FTP account's namespace."""
        return rebase_path(path, self._local_root, self._credentials.root)

    def make_dir(self, path: str, mode: int) -> FolderResult:
        """Create the directory remotely, then apply ``mode``.

        A failing chmod is logged but does not fail the creation.
        """
        remote = self.remote_path(path)
        result = self._run(path, [f"mkdir {lftp_quote(remote)}"])
        if not result.success:
            return result

        chmod = self._run(path, [f"chmod {mode:o} {lftp_quote(remote)}"])
        if not chmod.success:
            logger.warning("make_dir: chmod %o failed for %s", mode, remote)
        return FolderResult.ok(path)

    def remove_dir(self, path: str) -> FolderResult:
        return self._run(path, [f"rmdir {lftp_quote(self.remote_path(path))}"])

    def delete_file(self, path: str) -> FolderResult:
        return self._run(path, [f"rm {lftp_quote(self.remote_path(path))}"])

    def copy_file(self, src: str, dest: str) -> FolderResult:
        remote = self.remote_path(dest)
        return self._run(dest, [f"put {lftp_quote(src)} -o {lftp_quote(remote)}"])

    def rename(self, src: str, dest: str) -> FolderResult:
        command = f"mv {lftp_quote(self.remote_path(src))} {lftp_quote(self.remote_path(dest))}"
        result = self._run(src, [command])
        if result.success:
            return FolderResult.ok(dest)
        return result

    def build_script(self, commands: list[str]) -> str:
        """Build an lftp ``-c`` script that connects and runs ``commands``."""
        creds = self._credentials
        parts = [
            "set cmd:fail-exit yes",
            f"set net:timeout {creds.timeout_seconds}",
            "set net:max-retries 1",
            "set net:persist-retries 0",
            "set cmd:interactive false",
            f"open -u {lftp_quote(creds.user)},{lftp_quote(creds.password)} "
            f"ftp://{creds.host}:{creds.port}",
        ]
        parts.extend(commands)
        parts.append("bye")
        return "; ".join(parts)

    def _run(self, path: str, commands: list[str]) -> FolderResult:
        """Run lftp commands and map the exit status to a FolderResult."""
        script = self.build_script(commands)
        # The script carries the password; log the commands only
        logger.debug("lftp %s: %s", self._credentials.host, "; ".join(commands))
        try:
            result = run_command(
                [self._lftp_bin, "-c", script],
                timeout=float(self._credentials.timeout_seconds) * 3,
                env={"LC_ALL": "C", "LANG": "C"},
            )
        except (FileNotFoundError, OSError, subprocess.TimeoutExpired) as e:
            logger.warning("FTP transport unavailable for %s: %s", path, e)
            return FolderResult.fail(path, FolderErrorKind.TRANSPORT_FAILURE, str(e))

        if not result.success:
            error = result.stderr.strip() or f"lftp exited with {result.returncode}"
            logger.warning("FTP command failed for %s: %s", path, error)
            return FolderResult.fail(path, FolderErrorKind.TRANSPORT_FAILURE, error)

        return FolderResult.ok(path)


def lftp_quote(value: str) -> str:
    """Quote a value for the lftp command language.

    Control characters are stripped; backslashes and double quotes are
    escaped inside a double-quoted string.
    """
    value = re.sub(r"[\x00-\x1f\x7f]", "", value)
    value = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{value}"'


def _kind_for(error: OSError) -> FolderErrorKind:
    """Map an OSError onto the folder error taxonomy."""
    if isinstance(error, PermissionError):
        return FolderErrorKind.PERMISSION_DENIED
    if isinstance(error, FileNotFoundError):
        return FolderErrorKind.NOT_FOUND
    if isinstance(error, FileExistsError):
        return FolderErrorKind.ALREADY_EXISTS
    return FolderErrorKind.TRANSPORT_FAILURE


def select_transport(
    credentials: FtpCredentials,
    local_root: str,
    open_basedir: Sequence[str] = (),
) -> Transport:
    """Pick the transport for one top-level operation.

    Args:
        credentials: FTP settings; the remote transport is used when enabled.
        local_root: Application root mirrored by the FTP root.
        open_basedir: Creation restriction for the local transport.

    Returns:
        RemoteTransport when FTP is enabled, LocalTransport otherwise.
    """
    if credentials.enabled:
        return RemoteTransport(credentials, local_root)
    return LocalTransport(open_basedir)
