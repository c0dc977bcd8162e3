"""Engine configuration and FTP credentials.

Configuration is stored in ~/.config/foldctl/config.toml:

    app_root = "/var/www/site"
    open_basedir = ["/var/www"]
    max_create_depth = 20
    default_mode = "0755"

    [ftp]
    enabled = false
    host = "127.0.0.1"
    port = 21
    user = ""
    password = ""
    root = "/"
"""

import os
import tomllib
from pathlib import Path
from typing import Annotated

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from foldctl.core.paths import get_config_path

DEFAULT_MODE = 0o755
DEFAULT_MAX_CREATE_DEPTH = 20


class FtpCredentials(BaseModel):
    """FTP account used by the remote transport.

    Attributes:
        enabled: Route folder mutations through FTP.
        host: FTP server host.
        port: FTP server port.
        user: Login name.
        password: Login password.
        root: Remote directory that mirrors the local application root.
        timeout_seconds: Network timeout for each lftp invocation.
    """

    model_config = ConfigDict(extra="forbid")

    enabled: Annotated[bool, Field(description="Use the FTP transport")] = False
    host: Annotated[str, Field(description="FTP host")] = "127.0.0.1"
    port: Annotated[int, Field(ge=1, le=65535, description="FTP port")] = 21
    user: Annotated[str, Field(description="FTP user")] = ""
    password: Annotated[str, Field(description="FTP password", repr=False)] = ""
    root: Annotated[str, Field(description="Remote root mirroring app_root")] = "/"
    timeout_seconds: Annotated[int, Field(ge=1, le=600, description="Network timeout")] = 10


class EngineConfig(BaseModel):
    """Folder engine settings.

    Attributes:
        app_root: Application root. Empty paths resolve here, tree listings
            strip it from ``relname`` and FTP paths are rebased from it.
        open_basedir: Roots outside which directories may not be created.
        max_create_depth: Number of missing ancestors create() may add.
        default_mode: Permission bits for created directories.
        ftp: FTP transport settings.
    """

    model_config = ConfigDict(extra="forbid")

    app_root: Annotated[str, Field(default_factory=os.getcwd, description="Application root")]
    open_basedir: Annotated[
        list[str],
        Field(default_factory=list, description="Allowed creation roots"),
    ]
    max_create_depth: Annotated[
        int,
        Field(ge=1, le=1000, description="Maximum missing ancestors created"),
    ] = DEFAULT_MAX_CREATE_DEPTH
    default_mode: Annotated[int, Field(ge=0, le=0o7777, description="Directory mode")] = (
        DEFAULT_MODE
    )
    ftp: Annotated[FtpCredentials, Field(default_factory=FtpCredentials)]

    @field_validator("default_mode", mode="before")
    @classmethod
    def parse_octal_mode(cls, v: object) -> object:
        """Accept modes written as octal strings such as "0755"."""
        if isinstance(v, str):
            try:
                return int(v, 8)
            except ValueError:
                msg = f"default_mode: invalid octal mode '{v}'"
                raise ValueError(msg) from None
        return v


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigNotFoundError(ConfigError):
    """Raised when the config file is not found."""


class ConfigParseError(ConfigError):
    """Raised when the config file cannot be parsed."""


def load_config(path: Path | None = None) -> EngineConfig:
    """Load engine configuration from a TOML file.

    Args:
        path: Path to the config file. If None, uses the default config path.

    Returns:
        Validated EngineConfig object.

    Raises:
        ConfigNotFoundError: If the config file doesn't exist.
        ConfigParseError: If the TOML syntax is invalid.
        ConfigError: If the content doesn't match the schema.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        raise ConfigNotFoundError(f"Config not found: {config_path}")

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config: {e}") from e

    try:
        return EngineConfig.model_validate(data)
    except (ValueError, ValidationError) as e:
        raise ConfigError(f"Invalid config content: {e}") from e


def load_config_or_default(path: Path | None = None) -> EngineConfig:
    """Load the config file, falling back to defaults when it is absent.

    Raises:
        ConfigError: If an existing file is malformed.
    """
    try:
        return load_config(path)
    except ConfigNotFoundError:
        return EngineConfig()


def save_config(config: EngineConfig, path: Path | None = None) -> Path:
    """Save engine configuration to a TOML file.

    The file is written atomically by first writing to a temporary file
    and then using os.replace() for atomic rename.

    Args:
        config: The EngineConfig object to save.
        path: Path to save the config. If None, uses the default config path.

    Returns:
        Path where the config was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    from tempfile import NamedTemporaryFile

    config_path = path or get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    data = _config_to_dict(config)

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write config: {e}") from e

    # Holds the FTP password
    os.chmod(config_path, 0o600)
    return config_path


def _config_to_dict(config: EngineConfig) -> dict[str, object]:
    """Convert EngineConfig to a dictionary for TOML serialization.

    The directory mode is written as an octal string for readability.
    """
    return {
        "app_root": config.app_root,
        "open_basedir": list(config.open_basedir),
        "max_create_depth": config.max_create_depth,
        "default_mode": f"{config.default_mode:04o}",
        "ftp": config.ftp.model_dump(),
    }
