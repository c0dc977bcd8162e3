"""Unit tests for folder transports."""

import os
import stat
import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from foldctl.core.config import FtpCredentials
from foldctl.folder.models import FolderErrorKind
from foldctl.folder.transport import (
    LocalTransport,
    RemoteTransport,
    lftp_quote,
    select_transport,
)
from foldctl.utils.shell import CommandResult

OK = CommandResult(stdout="", stderr="", returncode=0)


@pytest.fixture
def remote(ftp_credentials: FtpCredentials) -> RemoteTransport:
    """RemoteTransport mirroring /srv/site onto /public_html."""
    return RemoteTransport(ftp_credentials, "/srv/site")


def _script(mock_run: MagicMock, call: int = 0) -> str:
    """Extract the lftp script of one run_command call."""
    args = mock_run.call_args_list[call].args[0]
    assert args[:2] == ["lftp", "-c"]
    return args[2]


class TestLocalTransport:
    """Tests for LocalTransport."""

    def test_is_local(self) -> None:
        """Local transport is not remote."""
        assert LocalTransport().is_remote is False

    def test_make_dir_exact_mode(self, tmp_path: Path) -> None:
        """make_dir applies the mode regardless of the umask."""
        old_mask = os.umask(0o022)
        try:
            result = LocalTransport().make_dir(str(tmp_path / "d"), 0o777)
        finally:
            os.umask(old_mask)

        assert result.success is True
        assert stat.S_IMODE((tmp_path / "d").stat().st_mode) == 0o777

    def test_make_dir_missing_parent(self, tmp_path: Path) -> None:
        """make_dir does not create parents."""
        result = LocalTransport().make_dir(str(tmp_path / "a" / "b"), 0o755)

        assert result.success is False
        assert result.kind == FolderErrorKind.NOT_FOUND

    def test_make_dir_open_basedir(self, tmp_path: Path) -> None:
        """Paths outside open_basedir are refused before touching the OS."""
        transport = LocalTransport([str(tmp_path / "allowed")])

        with patch("foldctl.folder.transport.os.mkdir") as mock_mkdir:
            result = transport.make_dir(str(tmp_path / "other"), 0o755)

        assert result.kind == FolderErrorKind.PERMISSION_DENIED
        mock_mkdir.assert_not_called()

    def test_remove_dir_not_empty(self, tmp_path: Path) -> None:
        """Removing a non-empty directory fails."""
        (tmp_path / "d").mkdir()
        (tmp_path / "d" / "f").write_text("x")

        result = LocalTransport().remove_dir(str(tmp_path / "d"))

        assert result.success is False
        assert result.kind == FolderErrorKind.TRANSPORT_FAILURE

    def test_delete_file(self, tmp_path: Path) -> None:
        """delete_file unlinks a file."""
        target = tmp_path / "f"
        target.write_text("x")

        assert LocalTransport().delete_file(str(target)).success is True
        assert not target.exists()

    def test_copy_file(self, tmp_path: Path) -> None:
        """copy_file copies contents."""
        (tmp_path / "a").write_bytes(b"abc")

        result = LocalTransport().copy_file(str(tmp_path / "a"), str(tmp_path / "b"))

        assert result.success is True
        assert result.path == str(tmp_path / "b")
        assert (tmp_path / "b").read_bytes() == b"abc"

    def test_rename(self, tmp_path: Path) -> None:
        """rename moves the entry and reports the destination."""
        (tmp_path / "a").mkdir()

        result = LocalTransport().rename(str(tmp_path / "a"), str(tmp_path / "b"))

        assert result.path == str(tmp_path / "b")
        assert (tmp_path / "b").is_dir()

    def test_rename_missing(self, tmp_path: Path) -> None:
        """Renaming a missing entry fails with NOT_FOUND."""
        result = LocalTransport().rename(str(tmp_path / "a"), str(tmp_path / "b"))

        assert result.kind == FolderErrorKind.NOT_FOUND


class TestRemoteTransport:
    """Tests for RemoteTransport."""

    def test_is_remote(self, remote: RemoteTransport) -> None:
        """Remote transport reports itself as remote."""
        assert remote.is_remote is True

    def test_remote_path(self, remote: RemoteTransport) -> None:
        """Local paths are rebased onto the FTP root."""
        assert remote.remote_path("/srv/site/images/a") == "/public_html/images/a"

    def test_build_script(self, remote: RemoteTransport) -> None:
        """The script sets fail-exit, connects, runs commands and quits."""
        script = remote.build_script(['mkdir "/x"'])

        assert script.startswith("set cmd:fail-exit yes; set net:timeout 10;")
        assert 'open -u "deploy","s3cret" ftp://ftp.example.com:2121; mkdir "/x"; bye' in script

    @patch("foldctl.folder.transport.run_command")
    def test_make_dir_then_chmod(self, mock_run: MagicMock, remote: RemoteTransport) -> None:
        """mkdir is followed by a chmod with the octal mode."""
        mock_run.return_value = OK

        result = remote.make_dir("/srv/site/new", 0o750)

        assert result.success is True
        assert result.path == "/srv/site/new"
        assert 'mkdir "/public_html/new"' in _script(mock_run, 0)
        assert 'chmod 750 "/public_html/new"' in _script(mock_run, 1)

    @patch("foldctl.folder.transport.run_command")
    def test_make_dir_chmod_failure_tolerated(
        self, mock_run: MagicMock, remote: RemoteTransport
    ) -> None:
        """A failing chmod does not fail the creation."""
        mock_run.side_effect = [OK, CommandResult(stdout="", stderr="550", returncode=1)]

        assert remote.make_dir("/srv/site/new", 0o750).success is True

    @patch("foldctl.folder.transport.run_command")
    def test_make_dir_failure(self, mock_run: MagicMock, remote: RemoteTransport) -> None:
        """A failing mkdir is a transport failure carrying stderr."""
        mock_run.return_value = CommandResult(
            stdout="", stderr="mkdir: Access failed\n", returncode=1
        )

        result = remote.make_dir("/srv/site/new", 0o755)

        assert result.success is False
        assert result.kind == FolderErrorKind.TRANSPORT_FAILURE
        assert result.error == "mkdir: Access failed"
        assert mock_run.call_count == 1

    @patch("foldctl.folder.transport.run_command")
    def test_commands(self, mock_run: MagicMock, remote: RemoteTransport) -> None:
        """rmdir, rm, put and mv are issued with rebased paths."""
        mock_run.return_value = OK

        remote.remove_dir("/srv/site/old")
        remote.delete_file("/srv/site/old/f.txt")
        remote.copy_file("/tmp/upload.bin", "/srv/site/f.bin")
        renamed = remote.rename("/srv/site/a", "/srv/site/b")

        assert 'rmdir "/public_html/old"' in _script(mock_run, 0)
        assert 'rm "/public_html/old/f.txt"' in _script(mock_run, 1)
        assert 'put "/tmp/upload.bin" -o "/public_html/f.bin"' in _script(mock_run, 2)
        assert 'mv "/public_html/a" "/public_html/b"' in _script(mock_run, 3)
        assert renamed.path == "/srv/site/b"

    @patch("foldctl.folder.transport.run_command")
    def test_environment_and_timeout(self, mock_run: MagicMock, remote: RemoteTransport) -> None:
        """lftp runs under the C locale with a bounded timeout."""
        mock_run.return_value = OK

        remote.remove_dir("/srv/site/old")

        kwargs = mock_run.call_args.kwargs
        assert kwargs["env"] == {"LC_ALL": "C", "LANG": "C"}
        assert kwargs["timeout"] == 30.0

    @pytest.mark.parametrize(
        "error",
        [
            FileNotFoundError("lftp"),
            OSError("boom"),
            subprocess.TimeoutExpired(cmd="lftp", timeout=30),
        ],
    )
    def test_unavailable(self, remote: RemoteTransport, error: Exception) -> None:
        """A missing or hanging lftp is a transport failure."""
        with patch("foldctl.folder.transport.run_command", side_effect=error):
            result = remote.delete_file("/srv/site/f")

        assert result.success is False
        assert result.kind == FolderErrorKind.TRANSPORT_FAILURE

    @patch("foldctl.folder.transport.run_command")
    def test_password_not_logged(
        self,
        mock_run: MagicMock,
        remote: RemoteTransport,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Debug logging shows the commands but not the password."""
        mock_run.return_value = CommandResult(stdout="", stderr="", returncode=1)

        with caplog.at_level("DEBUG", logger="foldctl.folder.transport"):
            remote.remove_dir("/srv/site/old")

        assert "rmdir" in caplog.text
        assert "s3cret" not in caplog.text


class TestLftpQuote:
    """Tests for lftp_quote."""

    def test_plain(self) -> None:
        """Values are wrapped in double quotes."""
        assert lftp_quote("/a b") == '"/a b"'

    def test_escapes(self) -> None:
        """Quotes and backslashes are escaped."""
        assert lftp_quote('a"b\\c') == '"a\\"b\\\\c"'

    def test_strips_control_characters(self) -> None:
        """Newlines cannot inject extra commands."""
        assert lftp_quote("x\n; rm -r /") == '"x; rm -r /"'


class TestSelectTransport:
    """Tests for select_transport."""

    def test_local_by_default(self) -> None:
        """Disabled FTP selects the local transport."""
        assert isinstance(select_transport(FtpCredentials(), "/srv"), LocalTransport)

    def test_remote_when_enabled(self, ftp_credentials: FtpCredentials) -> None:
        """Enabled FTP selects the remote transport."""
        assert isinstance(select_transport(ftp_credentials, "/srv"), RemoteTransport)
