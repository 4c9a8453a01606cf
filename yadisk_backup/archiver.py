"""Password-protected archive creation using the 7-Zip command line tool."""

import logging
import shutil
import subprocess
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Sequence

from .errors import ArchiveError

TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"


def archive_name(kind: str, timestamp: datetime, ext: str = "7z") -> str:
    """Archive filename embedding the run timestamp, e.g. ``backup_main-20240101_120000.7z``."""
    return f"backup_{kind}-{timestamp.strftime(TIMESTAMP_FORMAT)}.{ext}"


def stage_auxiliary_file(source, scratch_dir) -> Path:
    """
    Copy ``source`` into ``scratch_dir`` so it can be archived.

    A missing or unreadable source is not fatal: a warning is logged and an
    empty placeholder with the same name is created instead.

    Returns:
        Path of the staged file
    """
    logger = logging.getLogger(__name__)
    source = Path(source)
    staged = Path(scratch_dir) / source.name

    try:
        shutil.copyfile(source, staged)
    except OSError as e:
        logger.warning(f"Could not copy {source}: {e}; archiving an empty placeholder")
        staged.touch()

    return staged


class SevenZipArchiver:
    """Runs ``7z a`` with maximum compression and header encryption."""

    def __init__(self, executable: str = "7z", method: str = "lzma2", level: int = 9):
        self.executable = executable
        self.method = method
        self.level = level
        self.logger = logging.getLogger(__name__)

    def build_command(
        self,
        archive_path,
        inputs: Sequence,
        password: str,
        excludes: Iterable[str] = (),
    ) -> List[str]:
        cmd = [
            self.executable,
            "a",
            f"-m0={self.method}",
            f"-mx={self.level}",
            f"-p{password}",
            "-mhe=on",
        ]
        cmd.extend(f"-xr!{pattern}" for pattern in excludes)
        cmd.append(str(archive_path))
        cmd.extend(str(path) for path in inputs)
        return cmd

    def produce_archive(
        self,
        archive_path,
        inputs: Sequence,
        password: str,
        excludes: Iterable[str] = (),
    ) -> Path:
        """
        Create ``archive_path`` from ``inputs``.

        Blocks until 7z exits; there is no timeout. Any non-zero exit aborts
        with ArchiveError, partial output is not inspected.
        """
        archive_path = Path(archive_path)
        cmd = self.build_command(archive_path, inputs, password, excludes)
        printable = ["-p***" if arg.startswith("-p") else arg for arg in cmd]
        self.logger.info(f"Running 7z command: {' '.join(printable)}")

        try:
            result = subprocess.run(cmd, capture_output=True, text=True)
        except OSError as e:
            raise ArchiveError(f"Could not start {self.executable} for {archive_path.name}: {e}")

        if result.returncode != 0:
            detail = (result.stderr or "").strip()
            raise ArchiveError(
                f"Failed to create archive {archive_path.name} "
                f"(exit code {result.returncode}){': ' + detail if detail else ''}"
            )

        self.logger.info(f"Archive {archive_path.name} created")
        return archive_path
