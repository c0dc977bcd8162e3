"""Unit tests for engine configuration loading and saving."""

import os
import stat
from pathlib import Path
from unittest.mock import patch

import pytest
from foldctl.core.config import (
    DEFAULT_MAX_CREATE_DEPTH,
    DEFAULT_MODE,
    ConfigError,
    ConfigNotFoundError,
    ConfigParseError,
    EngineConfig,
    FtpCredentials,
    load_config,
    load_config_or_default,
    save_config,
)
from pydantic import ValidationError


class TestEngineConfig:
    """Tests for the EngineConfig model."""

    def test_defaults(self) -> None:
        """Defaults match the documented values."""
        config = EngineConfig()

        assert config.app_root == os.getcwd()
        assert config.open_basedir == []
        assert config.max_create_depth == DEFAULT_MAX_CREATE_DEPTH == 20
        assert config.default_mode == DEFAULT_MODE == 0o755
        assert config.ftp.enabled is False

    def test_octal_string_mode(self) -> None:
        """default_mode accepts octal strings."""
        assert EngineConfig(default_mode="0700").default_mode == 0o700

    def test_invalid_octal_mode(self) -> None:
        """A non-octal string is rejected."""
        with pytest.raises(ValidationError, match="invalid octal mode"):
            EngineConfig(default_mode="0999")

    def test_extra_keys_forbidden(self) -> None:
        """Unknown keys are rejected."""
        with pytest.raises(ValidationError):
            EngineConfig.model_validate({"unknown": 1})

    def test_depth_bounds(self) -> None:
        """max_create_depth must be positive."""
        with pytest.raises(ValidationError):
            EngineConfig(max_create_depth=0)


class TestFtpCredentials:
    """Tests for the FtpCredentials model."""

    def test_password_hidden_from_repr(self) -> None:
        """The password never shows up in repr()."""
        creds = FtpCredentials(user="deploy", password="s3cret")

        assert "s3cret" not in repr(creds)

    def test_port_range(self) -> None:
        """Ports outside 1-65535 are rejected."""
        with pytest.raises(ValidationError):
            FtpCredentials(port=70000)


class TestLoadConfig:
    """Tests for load_config and load_config_or_default."""

    def test_missing_file(self, tmp_path: Path) -> None:
        """A missing file raises ConfigNotFoundError."""
        with pytest.raises(ConfigNotFoundError):
            load_config(tmp_path / "config.toml")

    def test_missing_file_defaults(self, tmp_path: Path) -> None:
        """load_config_or_default falls back to defaults."""
        assert load_config_or_default(tmp_path / "config.toml") == EngineConfig()

    def test_valid_file(self, tmp_path: Path) -> None:
        """A complete file is parsed and validated."""
        path = tmp_path / "config.toml"
        path.write_text(
            'app_root = "/var/www/site"\n'
            'open_basedir = ["/var/www"]\n'
            'default_mode = "0750"\n'
            "\n"
            "[ftp]\n"
            "enabled = true\n"
            'host = "ftp.example.com"\n'
            'root = "/public_html"\n'
        )

        config = load_config(path)

        assert config.app_root == "/var/www/site"
        assert config.open_basedir == ["/var/www"]
        assert config.default_mode == 0o750
        assert config.ftp.enabled is True
        assert config.ftp.port == 21

    def test_invalid_toml(self, tmp_path: Path) -> None:
        """Broken TOML raises ConfigParseError."""
        path = tmp_path / "config.toml"
        path.write_text("app_root = [")

        with pytest.raises(ConfigParseError):
            load_config(path)

    def test_invalid_content(self, tmp_path: Path) -> None:
        """Schema violations raise ConfigError, also from load_config_or_default."""
        path = tmp_path / "config.toml"
        path.write_text("max_create_depth = -1\n")

        with pytest.raises(ConfigError, match="Invalid config content"):
            load_config_or_default(path)

    def test_default_path(self, tmp_path: Path) -> None:
        """Without a path the XDG config file is read."""
        with patch.dict(os.environ, {"XDG_CONFIG_HOME": str(tmp_path)}):
            (tmp_path / "foldctl").mkdir()
            (tmp_path / "foldctl" / "config.toml").write_text('app_root = "/srv"\n')

            config = load_config()

        assert config.app_root == "/srv"


class TestSaveConfig:
    """Tests for save_config."""

    def test_round_trip(self, tmp_path: Path) -> None:
        """A saved config loads back unchanged."""
        config = EngineConfig(
            app_root="/srv/site",
            open_basedir=["/srv"],
            default_mode=0o750,
            ftp=FtpCredentials(enabled=True, user="deploy", password="s3cret"),
        )
        path = tmp_path / "nested" / "config.toml"

        saved = save_config(config, path)

        assert saved == path
        assert load_config(path) == config

    def test_mode_written_as_octal(self, tmp_path: Path) -> None:
        """default_mode is stored as a readable octal string."""
        path = save_config(EngineConfig(app_root="/srv"), tmp_path / "config.toml")

        assert 'default_mode = "0755"' in path.read_text()

    def test_file_permissions(self, tmp_path: Path) -> None:
        """The file holding the FTP password is private."""
        path = save_config(EngineConfig(app_root="/srv"), tmp_path / "config.toml")

        assert stat.S_IMODE(path.stat().st_mode) == 0o600

    def test_no_temp_files_left(self, tmp_path: Path) -> None:
        """The atomic write leaves no temporary files behind."""
        save_config(EngineConfig(app_root="/srv"), tmp_path / "config.toml")

        assert [p.name for p in tmp_path.iterdir()] == ["config.toml"]

    def test_write_failure(self, tmp_path: Path) -> None:
        """A failing replace raises ConfigError and cleans up."""
        with (
            patch("foldctl.core.config.os.replace", side_effect=OSError("disk full")),
            pytest.raises(ConfigError, match="Failed to write config"),
        ):
            save_config(EngineConfig(app_root="/srv"), tmp_path / "config.toml")

        assert list(tmp_path.iterdir()) == []
