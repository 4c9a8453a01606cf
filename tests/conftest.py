"""Shared pytest configuration and fixtures for yadisk-backup."""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Iterable

import pytest

from tests.helpers import FakeDiskService
from tests.helpers.logs import LOGS_ROOT
from yadisk_backup.config import AppConfig
from yadisk_backup.storage_client import DiskClient


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item: pytest.Item, call: pytest.CallInfo[None]) -> Iterable[pytest.TestReport]:
    outcome = yield
    report = outcome.get_result()
    if report.outcome != "failed":
        return
    module = getattr(item, "module", None)
    module_name = getattr(module, "__name__", "tests")
    target = LOGS_ROOT / f"{module_name.split('.')[-1]}.log"
    target.parent.mkdir(parents=True, exist_ok=True)
    with target.open("a", encoding="utf-8") as handle:
        handle.write("\n=== TEST FAILURE ===\n")
        handle.write(f"nodeid: {item.nodeid}\n")
        handle.write(f"phase: {report.when}\n")
        handle.write(str(report.longrepr))
        handle.write("\n")


@pytest.fixture
def disk_service() -> FakeDiskService:
    return FakeDiskService()


@pytest.fixture
def disk_client(disk_service: FakeDiskService) -> DiskClient:
    return DiskClient("test-token", base_url=FakeDiskService.BASE_URL, session=disk_service)


@pytest.fixture
def temp_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point ``tempfile.gettempdir()`` at a per-test directory."""
    root = tmp_path / "systmp"
    root.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(root))
    return root


@pytest.fixture
def home_tree(tmp_path: Path) -> Path:
    """A fake home directory with a docker tree and a firewall rules file."""
    home = tmp_path / "home"
    docker = home / "docker"
    (docker / "app").mkdir(parents=True)
    (docker / "app" / "compose.yml").write_text("services: {}\n", encoding="utf-8")
    (docker / "sillytavern" / "data").mkdir(parents=True)
    (docker / "sillytavern" / "data" / "chat.json").write_text("{}", encoding="utf-8")
    rules = tmp_path / "etc" / "ufw" / "user.rules"
    rules.parent.mkdir(parents=True)
    rules.write_text("*filter\nCOMMIT\n", encoding="utf-8")
    return home


@pytest.fixture
def app_config(home_tree: Path, temp_root: Path, tmp_path: Path) -> AppConfig:
    return AppConfig(
        local_backup_dir=str(home_tree / "backups"),
        source_dir=str(home_tree / "docker"),
        firewall_rules_path=str(tmp_path / "etc" / "ufw" / "user.rules"),
        api_base_url=FakeDiskService.BASE_URL,
    )
