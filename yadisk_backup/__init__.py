"""
yadisk-backup: encrypted 7z backups uploaded to Yandex Disk.

This package archives local directories with 7-Zip, uploads the archives
through the Yandex Disk REST API and can fetch the newest matching archive
back, with optional chat webhook notifications.
"""

__version__ = "0.1.0"
