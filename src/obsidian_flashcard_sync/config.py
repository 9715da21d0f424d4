"""Runtime configuration for the sync tool.

Synced settings (marker, deck root, AnkiConnect URL) live in the state file
next to the card cache, see ``sync.state``. This module covers everything
else: where the vault and the state file are, which note type to use and
how to log. Values come from ``FLASHCARD_SYNC_*`` environment variables,
a ``.env`` file and an optional ``config.yaml``.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError
from .obsidian.vault import vault_name as vault_folder_name
from .utils.logging import get_logger

CONFIG_ENV_VAR = "FLASHCARD_SYNC_CONFIG"
STATE_FILE_NAME = ".obsidian-flashcard-sync.json"


class Config(BaseSettings):
    """Service configuration using pydantic-settings."""

    model_config = SettingsConfigDict(
        env_prefix="FLASHCARD_SYNC_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=False,
        extra="ignore",
        validate_assignment=True,
    )

    vault_path: Path = Field(default=Path(), description="Path to the Obsidian vault")
    vault_name: str | None = Field(
        default=None, description="Vault name used in obsidian:// links"
    )
    state_path: Path | None = Field(
        default=None,
        description="Settings + card cache file (default: <vault>/.obsidian-flashcard-sync.json)",
    )

    note_type: str = Field(default="Basic", description="Anki note type")
    front_field: str = Field(default="Front", description="Note type front field")
    back_field: str = Field(default="Back", description="Note type back field")
    anki_timeout: float = Field(
        default=30.0, gt=0, description="AnkiConnect request timeout in seconds"
    )

    log_level: str = Field(default="INFO", description="Console log level")
    log_dir: Path = Field(default=Path("logs"), description="Directory for log files")

    @field_validator("vault_path", "log_dir", mode="before")
    @classmethod
    def parse_path(cls, v: Any) -> Path:
        if v is None or v == "":
            return Path()
        if isinstance(v, (str, Path)):
            return Path(v).expanduser()
        msg = f"Path field must be string or Path, got {type(v).__name__}"
        raise ValueError(msg)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "WARN", "ERROR", "CRITICAL"}:
            msg = f"Invalid log level: {v}"
            raise ValueError(msg)
        return level

    def get_vault_name(self) -> str:
        if self.vault_name:
            return self.vault_name
        return vault_folder_name(self.vault_path.expanduser())

    def get_state_path(self) -> Path:
        if self.state_path is not None:
            return self.state_path.expanduser()
        return self.vault_path / STATE_FILE_NAME


def _read_yaml(path: Path) -> dict[str, Any]:
    logger = get_logger(__name__)
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.error("config_yaml_load_error", config_path=str(path), error=str(e))
        msg = f"Failed to parse config file: {path}"
        raise ConfigurationError(
            msg,
            suggestion=f"Check YAML syntax and file encoding (UTF-8). Original error: {e}",
        ) from e

    if not isinstance(data, dict):
        msg = f"Config file must contain a mapping: {path}"
        raise ConfigurationError(msg)
    return data


def load_config(config_path: Path | None = None, **overrides: Any) -> Config:
    """Load configuration from environment, .env and an optional YAML file.

    The YAML file is ``config_path`` if given, else ``$FLASHCARD_SYNC_CONFIG``,
    else ``./config.yaml`` when it exists. Keyword overrides (CLI options)
    take precedence over the file, which takes precedence over the environment.
    """
    logger = get_logger(__name__)

    candidates: list[Path] = []
    if config_path:
        candidates.append(Path(config_path).expanduser())
    else:
        env_path = os.getenv(CONFIG_ENV_VAR)
        if env_path:
            candidates.append(Path(env_path).expanduser())
        candidates.append(Path.cwd() / "config.yaml")

    yaml_data: dict[str, Any] = {}
    for candidate in candidates:
        if candidate.exists():
            yaml_data = _read_yaml(candidate)
            logger.debug("config_file_found", config_path=str(candidate))
            break
    else:
        if config_path:
            msg = f"Config file not found: {config_path}"
            raise ConfigurationError(msg)

    kwargs = {**yaml_data, **{k: v for k, v in overrides.items() if v is not None}}
    try:
        return Config(**kwargs)
    except ValueError as e:
        msg = "Invalid configuration"
        raise ConfigurationError(msg, suggestion=str(e)) from e
