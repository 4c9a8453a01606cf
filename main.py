#!/usr/bin/env python3
"""
yadisk-backup: encrypted 7z backups stored on Yandex Disk.

Main entry point for the backup application.
"""

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path

from yadisk_backup.archiver import SevenZipArchiver
from yadisk_backup.config import AppConfig, load_config
from yadisk_backup.notifier import WebhookNotifier
from yadisk_backup.runner import MODES, BackupRunner
from yadisk_backup.storage_client import DiskClient

APP_LOGGER = "yadisk_backup"


def setup_logging(config: AppConfig) -> logging.Logger:
    """Set up console logging, plus a log file when one is configured."""
    logger = logging.getLogger(APP_LOGGER)
    logger.setLevel(config.log_level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter("%(asctime)s %(levelname)-8s %(message)s")

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if config.log_file:
        log_file_path = Path(config.log_file)
        log_file_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file_path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def parse_arguments(argv=None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Archive, upload and download backups on Yandex Disk",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py -mode backup -token TOKEN -password SECRET
  python main.py -mode upload -token TOKEN -file ./db.dump -remote /dumps/
  python main.py -mode download -token TOKEN -prefix backup_main -remote /backup/

Downloads are written to the current directory and overwrite any existing
file with the same name without asking.
        """,
    )

    parser.add_argument("-mode", "--mode", default="", help=f"One of: {', '.join(MODES)}")
    parser.add_argument("-token", "--token", default="", help="Yandex Disk OAuth token")
    parser.add_argument(
        "-password", "--password", default="", help="Archive password (mode=backup only)"
    )
    parser.add_argument("-file", "--file", default="", help="Local file to upload (mode=upload)")
    parser.add_argument(
        "-prefix", "--prefix", default="", help="Remote filename prefix to search (mode=download)"
    )
    parser.add_argument("-remote", "--remote", default="", help="Remote folder (default: /)")
    parser.add_argument(
        "-webhook",
        "--webhook",
        default="",
        help="Discord webhook URL (notifications are disabled when empty)",
    )
    parser.add_argument("-config", "--config", default=None, help="Optional YAML config file")

    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Main application entry point."""
    start_time = datetime.now()
    args = parse_arguments(argv)

    try:
        config = load_config(args.config)
    except (FileNotFoundError, ValueError) as e:
        error_msg = f"Configuration error: {e}"
        print(f"ERROR: {error_msg}", file=sys.stderr)
        WebhookNotifier(args.webhook).notify_failure(error_msg)
        return 1

    if args.webhook:
        config = config.model_copy(update={"webhook_url": args.webhook})

    logger = setup_logging(config)

    notifier = WebhookNotifier(
        config.webhook_url,
        username=config.notifier_username,
        avatar_url=config.notifier_avatar_url,
        timeout=config.http_timeout,
    )
    storage = DiskClient(
        args.token,
        base_url=config.api_base_url,
        timeout=config.http_timeout,
        listing_limit=config.listing_limit,
    )
    archiver = SevenZipArchiver(
        executable=config.archiver_executable,
        method=config.compression_method,
        level=config.compression_level,
    )
    runner = BackupRunner(
        config,
        storage,
        archiver,
        on_success=notifier.notify_backup_complete,
        on_failure=notifier.notify_failure,
    )

    try:
        if not args.token:
            runner.fail("No token given (-token)")
            return 1

        return runner.run(
            args.mode,
            password=args.password,
            file_path=args.file,
            prefix=args.prefix,
            remote_dir=args.remote or None,
        )

    except KeyboardInterrupt:
        logger.warning("Backup process interrupted by user")
        notifier.notify_failure("Backup process interrupted by user")
        return 130

    except Exception as e:
        error_msg = f"Unexpected error: {e}"
        logger.critical(error_msg, exc_info=True)
        notifier.notify_failure(error_msg)
        return 1

    finally:
        total_time = (datetime.now() - start_time).total_seconds()
        logger.info(f"Process completed in {total_time:.2f} seconds")


if __name__ == "__main__":
    sys.exit(main())
