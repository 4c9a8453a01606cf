"""Tests for configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from tests.helpers import get_test_logger
from yadisk_backup.config import DEFAULT_API_BASE_URL, AppConfig, load_config

logger = get_test_logger(__name__)
logger.info("Starting tests for config module")


def test_defaults_are_derived_from_home(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))
    config = load_config()

    assert config.local_backup_dir == str(tmp_path / "backups")
    assert config.source_dir == str(tmp_path / "docker")
    assert config.secondary_dir == tmp_path / "docker" / "sillytavern"
    assert config.secondary_exclude == "docker/sillytavern"
    assert config.firewall_rules_path == "/etc/ufw/user.rules"
    assert config.remote_backup_dir == "/backup/"
    assert config.api_base_url == DEFAULT_API_BASE_URL
    assert config.http_timeout == 60.0
    assert config.listing_limit == 100
    assert config.webhook_url == ""


def test_scratch_dir_lives_under_temp_root(temp_root: Path) -> None:
    assert AppConfig().scratch_dir == temp_root / "backup_work"


def test_load_config_from_yaml(tmp_path: Path) -> None:
    config_file = tmp_path / "config.yaml"
    config_file.write_text(
        "log_level: debug\n"
        "webhook_url: https://discord.test/hook\n"
        "source_dir: /srv/docker\n"
        "secondary_subdir: media\n",
        encoding="utf-8",
    )

    config = load_config(str(config_file))
    assert config.log_level == "DEBUG"
    assert config.webhook_url == "https://discord.test/hook"
    assert config.secondary_exclude == "docker/media"


def test_load_config_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "nope.yaml"))


@pytest.mark.parametrize(
    "content",
    [
        "",
        "log_level: LOUD\n",
        "remote_backup_dir: backup/\n",
        "compression_level: 12\n",
        "http_timeout: 0\n",
        "secondary_subdir: a/b\n",
        "log_level: [unclosed\n",
    ],
)
def test_load_config_rejects_invalid_values(tmp_path: Path, content: str) -> None:
    config_file = tmp_path / "config.yaml"
    config_file.write_text(content, encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(str(config_file))


def test_overrides_produce_a_copy() -> None:
    base = AppConfig()
    updated = base.model_copy(update={"webhook_url": "https://discord.test/hook"})
    assert base.webhook_url == ""
    assert updated.webhook_url == "https://discord.test/hook"
