"""Sequencing of the upload, download and full backup workflows."""

import logging
import shutil
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from .archiver import archive_name, stage_auxiliary_file
from .config import AppConfig
from .errors import BackupError, LocalFileError, UsageError

MODES = ("upload", "download", "backup")
MAIN_KIND = "main"


class BackupResult:
    """Result of a full backup run."""

    def __init__(
        self,
        archive_paths: List[Path],
        remote_paths: List[str],
        bytes_uploaded: int = 0,
        execution_time: float = 0.0,
    ):
        self.archive_paths = archive_paths
        self.remote_paths = remote_paths
        self.bytes_uploaded = bytes_uploaded
        self.execution_time = execution_time

    @property
    def archive_names(self) -> List[str]:
        return [path.name for path in self.archive_paths]


def format_backup_summary(result: BackupResult) -> str:
    """Format a backup result into a readable summary."""
    summary = ["=== Backup Summary ==="]
    for local_path, remote_path in zip(result.archive_paths, result.remote_paths):
        summary.append(f"  {local_path.name} -> {remote_path}")
    summary.append(f"Total bytes uploaded: {result.bytes_uploaded:,}")
    summary.append(f"Total execution time: {result.execution_time:.2f} seconds")
    return "\n".join(summary)


class BackupRunner:
    """Drives the storage client, archiver and notification hooks for one run.

    ``on_success`` receives the archive names after a full backup;
    ``on_failure`` receives the error message of any fatal error. Both are
    optional so the workflows can run without a notifier.
    """

    def __init__(
        self,
        config: AppConfig,
        storage,
        archiver=None,
        on_success: Optional[Callable[[Sequence[str]], object]] = None,
        on_failure: Optional[Callable[[str], object]] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.config = config
        self.storage = storage
        self.archiver = archiver
        self.on_success = on_success
        self.on_failure = on_failure
        self.clock = clock
        self.logger = logging.getLogger(__name__)

    def upload(self, file_path, remote_dir: Optional[str] = None) -> str:
        if not file_path:
            raise UsageError("No file given (-file)")
        return self.storage.upload_file(Path(file_path), remote_dir or "/")

    def download(
        self, prefix: str, remote_dir: Optional[str] = None, dest_dir: Optional[Path] = None
    ) -> Path:
        if not prefix:
            raise UsageError("No prefix given (-prefix)")
        return self.storage.download_newest(prefix, remote_dir or "/", dest_dir)

    def backup(self, password: str) -> BackupResult:
        """
        Archive the source tree in two parts and upload both archives.

        The secondary subdirectory is excluded from the main archive and
        archived on its own. The scratch directory is removed on every exit
        path once it has been created.
        """
        if not password:
            raise UsageError("No archive password given (-password)")
        if self.archiver is None:
            raise UsageError("Backup mode needs an archiver")

        start_time = self.clock()
        config = self.config
        backup_dir = Path(config.local_backup_dir)
        scratch_dir = config.scratch_dir

        main_path = backup_dir / archive_name(MAIN_KIND, start_time)
        secondary_path = backup_dir / archive_name(config.secondary_kind, start_time)

        self.logger.info("=== Starting archive process ===")

        try:
            backup_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise LocalFileError(f"Could not create backup directory {backup_dir}: {e}")

        try:
            try:
                scratch_dir.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise LocalFileError(f"Could not create scratch directory {scratch_dir}: {e}")

            staged = stage_auxiliary_file(config.firewall_rules_path, scratch_dir)

            self.logger.info("Archiving main...")
            self.archiver.produce_archive(
                main_path,
                [config.source_dir, staged],
                password,
                excludes=[config.secondary_exclude],
            )

            self.logger.info(f"Archiving {config.secondary_subdir}...")
            self.archiver.produce_archive(secondary_path, [config.secondary_dir], password)

            remote_paths = []
            bytes_uploaded = 0
            for archive_path in (main_path, secondary_path):
                remote_paths.append(
                    self.storage.upload_file(archive_path, config.remote_backup_dir)
                )
                bytes_uploaded += archive_path.stat().st_size
        finally:
            shutil.rmtree(scratch_dir, ignore_errors=True)

        result = BackupResult(
            archive_paths=[main_path, secondary_path],
            remote_paths=remote_paths,
            bytes_uploaded=bytes_uploaded,
            execution_time=(self.clock() - start_time).total_seconds(),
        )
        self.logger.info("\n" + format_backup_summary(result))

        if self.on_success is not None:
            self.on_success(result.archive_names)
        return result

    def run(
        self,
        mode: str,
        *,
        password: str = "",
        file_path: str = "",
        prefix: str = "",
        remote_dir: Optional[str] = None,
    ) -> int:
        """Run one mode. Returns 0 on success, 1 after a fatal error."""
        try:
            if mode == "upload":
                self.upload(file_path, remote_dir)
            elif mode == "download":
                self.download(prefix, remote_dir)
            elif mode == "backup":
                self.backup(password)
            else:
                raise UsageError(
                    f"Invalid mode '{mode}'. Use -mode=backup, -mode=upload or -mode=download"
                )
        except BackupError as e:
            self.fail(str(e))
            return 1
        return 0

    def fail(self, message: str) -> None:
        """Log a fatal error and hand it to the failure hook."""
        self.logger.error(f"Error: {message}")
        if self.on_failure is not None:
            self.on_failure(message)
