"""Configuration management with YAML file support.

Priority (highest to lowest):
1. Environment variables (DOWNLOGGER_*)
2. .env file
3. downlogger.yaml file
4. Default values
"""

import logging
import os
from pathlib import Path
from typing import Annotated, Any, Literal

import yaml  # type: ignore[import-untyped]
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from downlogger.core.logger import (
    DEFAULT_BUFFER_CAPACITY,
    DEFAULT_FLUSH_INTERVAL_MILLIS,
    LoggerConfig,
)

logger = logging.getLogger(__name__)

ENV_PREFIX = "DOWNLOGGER_"

# Default config file locations (checked in order)
CONFIG_FILE_LOCATIONS = [
    Path("downlogger.yaml"),
    Path("downlogger.yml"),
    Path("./config/downlogger.yaml"),
]


def find_config_file() -> Path | None:
    """Find the first existing config file.

    Returns:
        Path to config file if found, None otherwise.
    """
    for path in CONFIG_FILE_LOCATIONS:
        if path.exists():
            return path
    return None


def load_yaml_config(config_path: Path | None = None) -> dict[str, Any]:
    """Load configuration from YAML file.

    Args:
        config_path: Optional explicit path to config file.

    Returns:
        Dictionary of configuration values.
    """
    if config_path is None:
        config_path = find_config_file()

    if config_path is None or not config_path.exists():
        return {}

    try:
        with open(config_path, encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}
        logger.info(f"Loaded configuration from {config_path}")
        return config
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Failed to load config from {config_path}: {e}")
        return {}


def save_yaml_config(config: dict[str, Any], config_path: Path | None = None) -> Path:
    """Save configuration to YAML file.

    Args:
        config: Configuration dictionary to save.
        config_path: Optional explicit path. Defaults to downlogger.yaml in cwd.

    Returns:
        Path where config was saved.
    """
    if config_path is None:
        config_path = find_config_file() or Path("downlogger.yaml")

    config_path.parent.mkdir(parents=True, exist_ok=True)

    header = """# downlogger configuration
# ========================
# Settings here can be overridden by environment variables or .env file.
#
# To use environment variables, prefix the UPPER_SNAKE_CASE setting name:
#   buffer_capacity -> DOWNLOGGER_BUFFER_CAPACITY
#   log_files -> DOWNLOGGER_LOG_FILES (comma-separated)
#

"""

    with open(config_path, "w", encoding="utf-8") as f:
        f.write(header)
        yaml.dump(config, f, default_flow_style=False, sort_keys=False, allow_unicode=True)

    logger.info(f"Saved configuration to {config_path}")
    return config_path


class Settings(BaseSettings):
    """Logger settings with YAML and environment variable support."""

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Buffering and flushing
    console_output: bool = Field(
        default=True,
        description="Mirror leveled messages to the console",
    )
    buffer_capacity: int = Field(
        default=DEFAULT_BUFFER_CAPACITY,
        description="Buffered lines before an overflow flush (negative means default)",
    )
    flush_interval_millis: int = Field(
        default=DEFAULT_FLUSH_INTERVAL_MILLIS,
        ge=1,
        description="Period of the background flush in milliseconds",
    )
    synchronous: bool = Field(
        default=True,
        description="Block on flush writes; False makes them fire-and-forget",
    )

    # Sinks
    log_files: Annotated[list[Path], NoDecode] = Field(
        default_factory=list,
        description="Log files piped when the default logger is created",
    )

    # Lifecycle
    register_lifecycle: bool = Field(
        default=True,
        description="Flush on exit, SIGINT, SIGTERM and uncaught exceptions",
    )

    # Library diagnostics
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING",
        description="Level of downlogger's own diagnostics",
    )
    log_format: Literal["json", "console"] = Field(
        default="console",
        description="Format of downlogger's own diagnostics",
    )

    @field_validator("buffer_capacity", mode="after")
    @classmethod
    def normalize_buffer_capacity(cls, v: int) -> int:
        """Replace a negative capacity with the default instead of rejecting it."""
        return DEFAULT_BUFFER_CAPACITY if v < 0 else v

    @field_validator("log_files", mode="before")
    @classmethod
    def parse_log_files(cls, v: str | list[str | Path] | None) -> list[Path]:
        """Parse log files from a comma-separated string or list."""
        if v is None:
            return []
        if isinstance(v, str):
            return [Path(p.strip()) for p in v.split(",") if p.strip()]
        return [Path(p) if isinstance(p, str) else p for p in v]

    def to_logger_config(self) -> LoggerConfig:
        """Build the immutable logger configuration."""
        return LoggerConfig(
            console_enabled=self.console_output,
            buffer_capacity=self.buffer_capacity,
            flush_interval_millis=self.flush_interval_millis,
            synchronous_flush=self.synchronous,
        )

    def to_yaml_dict(self) -> dict[str, Any]:
        """Convert settings to a dictionary suitable for YAML serialization."""
        result: dict[str, Any] = {}
        for field_name in type(self).model_fields:
            value = getattr(self, field_name)
            if field_name == "log_files":
                value = [str(p) for p in value]
            result[field_name] = value
        return result


def _create_settings_with_yaml(config_path: Path | None = None) -> Settings:
    """Create Settings instance with YAML config as base.

    Environment variables are merged over the YAML values by hand, since
    init arguments would otherwise take precedence over them.
    """
    yaml_config = load_yaml_config(config_path) or {}

    env_overrides = {}
    for field_name in Settings.model_fields:
        env_name = f"{ENV_PREFIX}{field_name.upper()}"
        if env_name in os.environ:
            env_overrides[field_name] = os.environ[env_name]

    merged_config = {**yaml_config, **env_overrides}

    # Treat empty strings from env as "not set"
    merged_config = {k: v for k, v in merged_config.items() if v != ""}

    if merged_config:
        return Settings(**merged_config)

    return Settings()


# Cache for settings - can be cleared to reload
_settings_cache: Settings | None = None


def get_settings() -> Settings:
    """Get settings (cached).

    Returns:
        Settings: Settings instance.
    """
    global _settings_cache
    if _settings_cache is None:
        _settings_cache = _create_settings_with_yaml()
    return _settings_cache


def reload_settings(config_path: Path | None = None) -> Settings:
    """Force reload settings from config files and environment.

    Args:
        config_path: Optional explicit YAML file to read.

    Returns:
        Settings: Fresh settings instance.
    """
    global _settings_cache
    _settings_cache = _create_settings_with_yaml(config_path)
    return _settings_cache


def get_config_file_path() -> Path | None:
    """Get the path to the current config file, if one exists."""
    return find_config_file()
