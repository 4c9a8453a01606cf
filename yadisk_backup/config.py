"""Configuration management for the yadisk-backup tool."""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, field_validator

DEFAULT_API_BASE_URL = "https://cloud-api.yandex.net/v1/disk/resources"
DEFAULT_AVATAR_URL = (
    "https://raw.githubusercontent.com/google/material-design-icons/refs/heads/master/"
    "png/action/backup/materialicons/48dp/2x/baseline_backup_black_48dp.png"
)


def _home_path(*parts: str) -> str:
    return str(Path.home().joinpath(*parts))


class AppConfig(BaseModel):
    """Main application configuration.

    Built once at program entry and handed to every component; nothing
    mutates it afterwards (overrides produce a copy).
    """

    log_level: str = Field(
        default="INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_file: str = Field(
        default="", description="Optional log file path; empty logs to console only"
    )

    webhook_url: str = Field(
        default="", description="Chat webhook URL; empty disables notifications"
    )
    notifier_username: str = Field(default="Backup System")
    notifier_avatar_url: str = Field(default=DEFAULT_AVATAR_URL)

    api_base_url: str = Field(
        default=DEFAULT_API_BASE_URL, description="Disk REST API resources endpoint"
    )
    http_timeout: float = Field(default=60.0, description="Timeout for every HTTP call")
    listing_limit: int = Field(
        default=100, ge=1, description="Page size used when searching remote listings"
    )

    local_backup_dir: str = Field(
        default_factory=lambda: _home_path("backups"),
        description="Where archives are written before upload",
    )
    source_dir: str = Field(
        default_factory=lambda: _home_path("docker"),
        description="Tree archived into the main archive",
    )
    secondary_subdir: str = Field(
        default="sillytavern",
        description="Subdirectory of source_dir archived separately",
    )
    secondary_kind: str = Field(default="silly")
    firewall_rules_path: str = Field(default="/etc/ufw/user.rules")
    remote_backup_dir: str = Field(default="/backup/")
    scratch_dir_name: str = Field(default="backup_work")

    archiver_executable: str = Field(default="7z")
    compression_method: str = Field(default="lzma2")
    compression_level: int = Field(default=9, ge=0, le=9)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"log_level must be one of: {', '.join(sorted(valid_levels))}")
        return v_upper

    @field_validator("http_timeout")
    @classmethod
    def validate_http_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("http_timeout must be positive")
        return v

    @field_validator("remote_backup_dir")
    @classmethod
    def validate_remote_backup_dir(cls, v: str) -> str:
        """Remote directories are absolute disk paths."""
        if not v.startswith("/"):
            raise ValueError("remote_backup_dir must be an absolute path")
        return v

    @field_validator("secondary_subdir")
    @classmethod
    def validate_secondary_subdir(cls, v: str) -> str:
        if not v or "/" in v.strip("/"):
            raise ValueError("secondary_subdir must be a single directory name")
        return v.strip("/")

    @property
    def secondary_dir(self) -> Path:
        """Directory archived on its own and excluded from the main archive."""
        return Path(self.source_dir) / self.secondary_subdir

    @property
    def secondary_exclude(self) -> str:
        """Exclusion pattern, relative to the archived source tree."""
        return f"{Path(self.source_dir).name}/{self.secondary_subdir}"

    @property
    def scratch_dir(self) -> Path:
        return Path(tempfile.gettempdir()) / self.scratch_dir_name


def load_config(config_path: Optional[str] = None) -> AppConfig:
    """Load and validate configuration from a YAML file.

    Without a path the built-in defaults are used.
    """
    if config_path is None:
        return AppConfig()

    config_file = Path(config_path)

    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            config_data = yaml.safe_load(f)

        if config_data is None:
            raise ValueError("Configuration file is empty")

        return AppConfig(**config_data)

    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML format in config file: {e}")
    except Exception as e:
        raise ValueError(f"Configuration validation error: {e}")
