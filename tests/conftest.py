"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

from pathlib import Path

import pytest
from foldctl.core.config import EngineConfig, FtpCredentials
from foldctl.folder.engine import FolderEngine


@pytest.fixture
def engine(tmp_path: Path) -> FolderEngine:
    """FolderEngine rooted at the test's temporary directory."""
    return FolderEngine(EngineConfig(app_root=str(tmp_path)))


@pytest.fixture
def sample_tree(tmp_path: Path) -> Path:
    """Build a small folder tree.

    Layout::

        site/
            index.html
            .htaccess
            notes.txt~
            CVS/
                Entries
            images/
                logo.png
                icons/
                    home.svg
            media/
            .git/
                HEAD
    """
    root = tmp_path / "site"
    (root / "images" / "icons").mkdir(parents=True)
    (root / "media").mkdir()
    (root / "CVS").mkdir()
    (root / ".git").mkdir()

    (root / "index.html").write_text("<html></html>")
    (root / ".htaccess").write_text("Deny from all")
    (root / "notes.txt~").write_text("backup")
    (root / "CVS" / "Entries").write_text("")
    (root / "images" / "logo.png").write_bytes(b"\x89PNG\r\n")
    (root / "images" / "icons" / "home.svg").write_text("<svg/>")
    (root / ".git" / "HEAD").write_text("ref: refs/heads/main")
    return root


@pytest.fixture
def ftp_credentials() -> FtpCredentials:
    """Enabled FTP credentials pointing at a fake server."""
    return FtpCredentials(
        enabled=True,
        host="ftp.example.com",
        port=2121,
        user="deploy",
        password="s3cret",
        root="/public_html",
    )
