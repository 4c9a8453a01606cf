"""Client for the Yandex Disk resources REST API.

Both directions use the same two-phase exchange: an authenticated metadata
request returns a pre-signed transfer link, and the bytes then move through a
plain request against that link. Links are used once and never stored.
"""

import logging
import posixpath
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import requests
from pydantic import BaseModel, Field, ValidationError

from .config import DEFAULT_API_BASE_URL
from .errors import (
    DownloadError,
    DownloadLinkError,
    ListingError,
    LocalFileError,
    LocalWriteError,
    RemoteNotFoundError,
    TransferError,
    TransferRejectedError,
    UploadLinkError,
)

DOWNLOAD_CHUNK_SIZE = 1024 * 1024


class TransferLink(BaseModel):
    """Single-use pre-signed URL returned by the upload/download handshakes."""

    href: str


class ResourceItem(BaseModel):
    """One entry of a remote directory listing."""

    name: str
    path: str
    created: datetime
    type: str

    @property
    def is_file(self) -> bool:
        return self.type == "file"


class _EmbeddedItems(BaseModel):
    items: List[ResourceItem] = Field(default_factory=list)


class ResourceList(BaseModel):
    """Listing response; entries live under ``_embedded.items``."""

    embedded: _EmbeddedItems = Field(default_factory=_EmbeddedItems, alias="_embedded")


class DiskClient:
    """Moves files to and from the disk through transfer links."""

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_API_BASE_URL,
        timeout: float = 60.0,
        listing_limit: int = 100,
        session: Optional[requests.Session] = None,
    ):
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.listing_limit = listing_limit
        self.session = session or requests.Session()
        self.logger = logging.getLogger(__name__)

    @property
    def _auth_headers(self) -> dict:
        return {"Authorization": f"OAuth {self.token}"}

    @staticmethod
    def remote_path_for(local_path: Path, remote_dir: str) -> str:
        """Destination path for ``local_path`` inside ``remote_dir``."""
        return posixpath.join(remote_dir or "/", Path(local_path).name)

    def get_upload_link(self, remote_path: str) -> TransferLink:
        """Request an upload link for ``remote_path``, overwriting any existing file."""
        try:
            response = self.session.get(
                f"{self.base_url}/upload",
                params={"path": remote_path, "overwrite": "true"},
                headers=self._auth_headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise UploadLinkError(f"Connection error while requesting upload link: {e}")

        if response.status_code == 409:
            self.logger.warning(
                f"Upload link request for {remote_path} returned 409; "
                "the destination folder may not exist"
            )
        if response.status_code != 200:
            raise UploadLinkError(
                f"Could not get upload link (code: {response.status_code}) "
                f"for {posixpath.basename(remote_path)}",
                status_code=response.status_code,
            )

        try:
            return TransferLink.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise UploadLinkError(f"Invalid upload link response: {e}")

    def upload_file(self, local_path, remote_dir: str = "/") -> str:
        """
        Upload a local file into ``remote_dir``.

        Returns:
            Remote path of the uploaded file
        """
        local_path = Path(local_path)
        try:
            file_handle = open(local_path, "rb")
        except OSError as e:
            raise LocalFileError(f"Could not open file {local_path}: {e}")

        with file_handle:
            size = local_path.stat().st_size
            remote_path = self.remote_path_for(local_path, remote_dir)
            link = self.get_upload_link(remote_path)

            self.logger.info(f"Uploading {local_path.name} ({size} bytes)...")
            # requests frames an empty file object as chunked; send empty bytes instead.
            body = file_handle if size else b""
            try:
                response = self.session.put(
                    link.href,
                    data=body,
                    headers={"Content-Length": str(size)},
                    timeout=self.timeout,
                )
            except requests.RequestException as e:
                raise TransferError(f"Transfer of {local_path.name} failed: {e}")

        if response.status_code not in (200, 201):
            raise TransferRejectedError(
                f"File {local_path.name} was not accepted, code: {response.status_code}",
                status_code=response.status_code,
            )

        self.logger.info(f"File `{local_path.name}` uploaded to {remote_path}")
        return remote_path

    def list_resources(self, remote_dir: str = "/") -> List[ResourceItem]:
        """List ``remote_dir`` newest first, capped at ``listing_limit`` entries."""
        try:
            response = self.session.get(
                self.base_url,
                params={"path": remote_dir, "sort": "-created", "limit": self.listing_limit},
                headers=self._auth_headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise ListingError(f"Listing of {remote_dir} failed: {e}")

        if response.status_code != 200:
            raise ListingError(f"API error while listing {remote_dir} (code: {response.status_code})")

        try:
            listing = ResourceList.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise ListingError(f"Invalid listing JSON for {remote_dir}: {e}")

        return listing.embedded.items

    def find_newest(self, prefix: str, remote_dir: str = "/") -> ResourceItem:
        """Return the first file in listing order whose name starts with ``prefix``.

        The listing is requested sorted by creation time descending, so the
        first match is the newest. Entries sharing a timestamp keep the
        server's order.
        """
        for item in self.list_resources(remote_dir):
            if item.is_file and item.name.startswith(prefix):
                self.logger.info(
                    f"Found file: {item.name} (from {item.created.strftime('%Y-%m-%d %H:%M')})"
                )
                return item

        raise RemoteNotFoundError(f"File '{prefix}' not found in {remote_dir}")

    def get_download_link(self, remote_path: str) -> TransferLink:
        try:
            response = self.session.get(
                f"{self.base_url}/download",
                params={"path": remote_path},
                headers=self._auth_headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise DownloadLinkError(f"Download link request for {remote_path} failed: {e}")

        if response.status_code != 200:
            raise DownloadLinkError(
                f"Could not get download link (code: {response.status_code}) for {remote_path}"
            )

        try:
            return TransferLink.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise DownloadLinkError(f"Invalid download link JSON for {remote_path}: {e}")

    def download_newest(
        self, prefix: str, remote_dir: str = "/", dest_dir: Optional[Path] = None
    ) -> Path:
        """
        Download the newest remote file matching ``prefix``.

        The file is written to ``dest_dir`` (default: current directory) under
        its remote name. An existing local file of that name is overwritten.

        Returns:
            Path of the written file
        """
        item = self.find_newest(prefix, remote_dir)
        link = self.get_download_link(item.path)

        dest_dir = Path(dest_dir) if dest_dir is not None else Path.cwd()
        out_path = dest_dir / posixpath.basename(item.path)

        # Pre-signed link: no Authorization header.
        try:
            response = self.session.get(link.href, stream=True, timeout=self.timeout)
        except requests.RequestException as e:
            raise DownloadError(f"Download of {item.name} failed: {e}")

        with response:
            if response.status_code != 200:
                raise DownloadError(
                    f"Download of {item.name} failed (code: {response.status_code})"
                )
            try:
                with open(out_path, "wb") as out_file:
                    for chunk in response.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE):
                        if chunk:
                            out_file.write(chunk)
            except requests.RequestException as e:
                raise DownloadError(f"Download of {item.name} interrupted: {e}")
            except OSError as e:
                raise LocalWriteError(f"Could not write {out_path}: {e}")

        self.logger.info(f"File '{item.name}' downloaded to {out_path}")
        return out_path
