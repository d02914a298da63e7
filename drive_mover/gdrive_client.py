"""
Google Drive client implementation.

Implements the RemoteDrive interface on top of the Drive API v3 for both
team drives (addressed by drive ID) and shared folders (a folder tree
shared with the service account, addressed by its root folder ID).
"""

import logging
import threading
import time

import httplib2
from google_auth_httplib2 import AuthorizedHttp
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from .config import ConnectionConfig, DriveConfig
from .gdrive_auth import load_credentials
from .metadata_index import FOLDER_MIME

logger = logging.getLogger(__name__)

# Fields to request from the Drive API for file metadata
FILE_FIELDS = "id, name, mimeType, parents, modifiedTime"
LIST_FIELDS = f"nextPageToken, files({FILE_FIELDS})"
UPDATE_FIELDS = "id, parents"


class DriveClient:
    """
    Google Drive client implementing the RemoteDrive interface.
    """

    def __init__(self, drive_config: DriveConfig, conn_config: ConnectionConfig, service=None):
        self.drive_config = drive_config
        self.conn_config = conn_config
        self._service = service
        self._lock = threading.Lock()
        self._connected = service is not None

    @property
    def is_team_drive(self) -> bool:
        return self.drive_config.drive_kind == "team"

    def connect(self) -> None:
        """Load credentials and build the Drive API service."""
        with self._lock:
            try:
                creds = load_credentials(self.drive_config.credentials_file)
                # Requests are aborted after timeout_seconds instead of hanging the client lock
                http = AuthorizedHttp(
                    creds, http=httplib2.Http(timeout=self.conn_config.timeout_seconds)
                )
                self._service = build("drive", "v3", http=http, cache_discovery=False)
                self._connected = True
                logger.info("Connected to Google Drive (%s)", self.drive_config.drive_id)

            except FileNotFoundError:
                raise
            except Exception as e:
                logger.error("Failed to connect to Google Drive: %s", e)
                raise ConnectionError(f"Google Drive connection failed: {e}") from e

    def disconnect(self) -> None:
        with self._lock:
            self._service = None
            self._connected = False
            logger.debug("Google Drive connection closed")

    def _with_retry(self, operation: str, func, *args, **kwargs):
        """Execute with retry logic and exponential backoff for rate limits."""
        last_exception = None

        for attempt in range(self.conn_config.retry_attempts):
            try:
                with self._lock:
                    return func(*args, **kwargs)
            except FileNotFoundError:
                raise
            except PermissionError:
                raise
            except HttpError as e:
                if e.resp.status == 404:
                    raise FileNotFoundError(f"Not found: {operation}") from e
                if e.resp.status == 403:
                    raise PermissionError(f"Access denied: {operation}") from e
                if e.resp.status == 429:
                    # Rate limited -- backoff
                    delay = (2**attempt) * self.conn_config.retry_delay_seconds
                    logger.warning(
                        "%s rate limited (attempt %d/%d), waiting %ds",
                        operation,
                        attempt + 1,
                        self.conn_config.retry_attempts,
                        delay,
                    )
                    time.sleep(delay)
                    last_exception = e
                    continue

                last_exception = e
                logger.warning(
                    "%s failed (attempt %d/%d): HTTP %d %s",
                    operation,
                    attempt + 1,
                    self.conn_config.retry_attempts,
                    e.resp.status,
                    e,
                )
            except Exception as e:
                last_exception = e
                logger.warning(
                    "%s failed (attempt %d/%d): %s",
                    operation,
                    attempt + 1,
                    self.conn_config.retry_attempts,
                    e,
                )

            if attempt < self.conn_config.retry_attempts - 1:
                time.sleep(self.conn_config.retry_delay_seconds)

        logger.error("%s failed after %d attempts", operation, self.conn_config.retry_attempts)
        raise OSError(f"{operation} failed: {last_exception}") from last_exception

    def _list_query(self, query: str) -> list[dict]:
        """Run a files().list query, following nextPageToken to the end."""
        results = []
        page_token = None

        while True:
            kwargs = {
                "q": query,
                "fields": LIST_FIELDS,
                "pageSize": 1000,
            }
            if page_token:
                kwargs["pageToken"] = page_token
            if self.is_team_drive:
                kwargs["corpora"] = "drive"
                kwargs["driveId"] = self.drive_config.drive_id
                kwargs["includeItemsFromAllDrives"] = True
                kwargs["supportsAllDrives"] = True

            response = self._service.files().list(**kwargs).execute()
            results.extend(response.get("files", []))

            page_token = response.get("nextPageToken")
            if not page_token:
                break

        return results

    def list_files(self) -> list[dict]:
        """List every non-trashed file and folder in the drive."""
        logger.debug("Listing drive %s", self.drive_config.drive_id)

        def _list_team_drive() -> list[dict]:
            return self._list_query("trashed=false")

        def _list_shared_folder() -> list[dict]:
            # A shared folder has no drive-wide corpus, so walk it level by level.
            results = []
            pending = [self.drive_config.drive_id]
            seen = set(pending)
            while pending:
                folder_id = pending.pop(0)
                for meta in self._list_query(f"'{folder_id}' in parents and trashed=false"):
                    results.append(meta)
                    if meta.get("mimeType") == FOLDER_MIME and meta["id"] not in seen:
                        seen.add(meta["id"])
                        pending.append(meta["id"])
            return results

        listing = _list_team_drive if self.is_team_drive else _list_shared_folder
        files = self._with_retry("list_files", listing)
        logger.debug("Listed %d entries in drive %s", len(files), self.drive_config.drive_id)
        return files

    def get_file(self, file_id: str) -> dict:
        """Get file metadata from the Drive API."""

        def _get_file_internal() -> dict:
            kwargs = {"fileId": file_id, "fields": FILE_FIELDS}
            if self.is_team_drive:
                kwargs["supportsAllDrives"] = True
            return self._service.files().get(**kwargs).execute()

        return self._with_retry(f"get_file({file_id})", _get_file_internal)

    def update(self, options: dict) -> dict:
        """
        Change a file's parents.

        Team-drive addressing in options (corpora="teamDrive" and
        teamDriveId) maps onto supportsAllDrives for the v3 API.
        """
        file_id = options["fileId"]
        logger.debug("Updating parents of %s: %s", file_id, options)

        def _update_internal() -> dict:
            kwargs = {
                "fileId": file_id,
                "fields": UPDATE_FIELDS,
            }
            if options.get("addParents"):
                kwargs["addParents"] = options["addParents"]
            if options.get("removeParents"):
                kwargs["removeParents"] = options["removeParents"]
            if options.get("corpora") == "teamDrive" or options.get("teamDriveId"):
                kwargs["supportsAllDrives"] = True

            return self._service.files().update(**kwargs).execute()

        return self._with_retry(f"update({file_id})", _update_internal)
