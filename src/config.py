"""Unified configuration loaded from glt.toml, env vars, and CLI flags.

Loading order: defaults → TOML file → env vars → CLI flags.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path

from glt.errors import ConfigError
from glt.worklog.models import DAY_ARCHIVE_DIRNAME, OPEN_RECORD_FILENAME, DataRoot
from pydantic import BaseModel, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "glt.toml"
CONFIG_SEARCH_PATHS = [
    Path("."),
]
GLOBAL_CONFIG_PATH = Path.home() / ".config" / "glt" / "config.toml"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class SlackSectionConfig(BaseModel):
    """[slack] section."""

    verification_token: str = ""
    route: str = "/glt/request"

    @property
    def is_configured(self) -> bool:
        return bool(self.verification_token)


class StorageSectionConfig(BaseModel):
    """[storage] section."""

    data_path: str = "./data"
    open_record: str = OPEN_RECORD_FILENAME
    day_archive_dir: str = DAY_ARCHIVE_DIRNAME


class ServerSectionConfig(BaseModel):
    """[server] section."""

    host: str = "127.0.0.1"
    port: int = 8000


class ClockSectionConfig(BaseModel):
    """[clock] section; empty timezone means machine local time."""

    timezone: str = ""


class LoggingSectionConfig(BaseModel):
    """[logging] section."""

    level: str = "INFO"

    @field_validator("level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            expected = ", ".join(LOG_LEVELS)
            raise ValueError(f"unknown log level {value!r}, expected one of {expected}")
        return level


class GltConfig(BaseModel):
    """Top-level configuration for the glt service."""

    slack: SlackSectionConfig = Field(default_factory=SlackSectionConfig)
    storage: StorageSectionConfig = Field(default_factory=StorageSectionConfig)
    server: ServerSectionConfig = Field(default_factory=ServerSectionConfig)
    clock: ClockSectionConfig = Field(default_factory=ClockSectionConfig)
    logging: LoggingSectionConfig = Field(default_factory=LoggingSectionConfig)

    def data_root(self) -> DataRoot:
        """Build the storage context for the configured data directory.

        Raises:
            ConfigError: If the data directory does not exist.
        """
        path = Path(self.storage.data_path).expanduser()
        if not path.is_dir():
            raise ConfigError(f"Data directory does not exist: {path}")
        return DataRoot(
            path=path,
            open_record=self.storage.open_record,
            day_archive_dir=self.storage.day_archive_dir,
        )


def load_config(path: str | Path | None = None) -> GltConfig:
    """Load configuration from a TOML file.

    Search order:
    1. Explicit path (if provided)
    2. glt.toml in CWD
    3. ~/.config/glt/config.toml

    Then overlay environment variables.

    Args:
        path: Explicit path to a TOML file.

    Returns:
        Merged GltConfig.
    """
    data: dict[str, object] = {}

    if path is not None:
        toml_path = Path(path)
        if toml_path.exists():
            data = _load_toml(toml_path)
        else:
            logger.warning("Config file not found: %s", toml_path)
    else:
        for search_dir in CONFIG_SEARCH_PATHS:
            candidate = search_dir / CONFIG_FILENAME
            if candidate.exists():
                data = _load_toml(candidate)
                logger.info("Loaded config from %s", candidate)
                break
        if not data and GLOBAL_CONFIG_PATH.exists():
            data = _load_toml(GLOBAL_CONFIG_PATH)
            logger.info("Loaded config from %s", GLOBAL_CONFIG_PATH)

    config = _validate(data)

    return _apply_env_vars(config)


def merge_cli_overrides(config: GltConfig, **cli_kwargs: object) -> GltConfig:
    """Overlay explicitly-set CLI flags onto the config.

    Only overrides values where the CLI flag was explicitly provided
    (i.e., not None).
    """
    data = config.model_dump()

    mapping: dict[str, tuple[str, str]] = {
        "data_path": ("storage", "data_path"),
        "host": ("server", "host"),
        "port": ("server", "port"),
        "timezone": ("clock", "timezone"),
        "log_level": ("logging", "level"),
        "verification_token": ("slack", "verification_token"),
    }

    for key, value in cli_kwargs.items():
        if value is None:
            continue
        if key in mapping:
            section, field = mapping[key]
            data[section][field] = value

    return _validate(data)


def _validate(data: dict[str, object]) -> GltConfig:
    try:
        return GltConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc


def _load_toml(path: Path) -> dict[str, object]:
    """Load a TOML file and return the data dict."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        logger.warning("Failed to parse %s: %s", path, exc)
        return {}


def _apply_env_vars(config: GltConfig) -> GltConfig:
    """Apply environment variable overrides to config."""
    data = config.model_dump()

    env_mapping: dict[str, tuple[str, str]] = {
        "GLT_VERIFICATION_TOKEN": ("slack", "verification_token"),
        "GLT_DATA_PATH": ("storage", "data_path"),
        "GLT_HOST": ("server", "host"),
        "GLT_TIMEZONE": ("clock", "timezone"),
        "GLT_LOG_LEVEL": ("logging", "level"),
    }

    for env_var, (section, field) in env_mapping.items():
        value = os.environ.get(env_var)
        if value is not None:
            data[section][field] = value

    port_raw = os.environ.get("GLT_PORT")
    if port_raw is not None:
        try:
            data["server"]["port"] = int(port_raw)
        except ValueError as exc:
            raise ConfigError(f"GLT_PORT must be an integer, got {port_raw!r}") from exc

    return _validate(data)
