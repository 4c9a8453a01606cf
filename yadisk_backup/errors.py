"""Fatal error types raised by the backup components.

Every failure in the primary workflow is fatal. Each site raises its own
subclass so the failing step can be told apart from the message or type alone.
"""


class BackupError(Exception):
    """Base class for fatal errors that abort a run."""


class UsageError(BackupError):
    """Missing or invalid command line arguments."""


class LocalFileError(BackupError):
    """A local file or directory could not be opened or created."""


class UploadLinkError(BackupError):
    """The upload handshake did not yield a transfer link."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class TransferError(BackupError):
    """The PUT to a transfer link failed at the transport level."""


class TransferRejectedError(BackupError):
    """The PUT to a transfer link completed with a non-success status."""

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


class ListingError(BackupError):
    """The remote directory listing could not be fetched or decoded."""


class RemoteNotFoundError(BackupError):
    """No remote file matched the requested prefix."""


class DownloadLinkError(BackupError):
    """The download handshake did not yield a transfer link."""


class DownloadError(BackupError):
    """Fetching bytes from a download transfer link failed."""


class LocalWriteError(BackupError):
    """Downloaded bytes could not be written locally."""


class ArchiveError(BackupError):
    """The archiver exited with an error or could not be started."""
