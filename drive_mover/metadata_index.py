"""
In-memory metadata index for a Google Drive.

Google Drive is ID-based, not path-based. The index is built from a full
drive listing and maps every file ID to a FileRecord whose URL path is
derived by walking the parent chain up to the drive root. Paths are never
stored independently of the tree: any parent change recomputes them.
"""

import logging
import re
import threading
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)

# Google Drive folder MIME type
FOLDER_MIME = "application/vnd.google-apps.folder"

TRASH_PATH = "/trash"

_SLUG_STRIP = re.compile(r"[^a-z0-9]+")


class ResourceType(str, Enum):
    FILE = "file"
    FOLDER = "folder"


@dataclass
class FileRecord:
    id: str
    name: str
    slug: str
    path: str
    resource_type: ResourceType
    parent_id: str | None
    modified: datetime
    mime_type: str = ""

    @property
    def is_folder(self) -> bool:
        return self.resource_type is ResourceType.FOLDER


@runtime_checkable
class PathResolver(Protocol):
    """Lookup strategy used to resolve file IDs to their records."""

    def get_meta(self, file_id: str) -> FileRecord | None:
        """Return the record for file_id, or None if it is not known."""
        ...


def slugify(name: str) -> str:
    """Turn a Drive file name into a URL path segment."""
    slug = _SLUG_STRIP.sub("-", name.lower()).strip("-")
    return slug or "untitled"


def parse_modified(value: str | None) -> datetime:
    """Parse a Drive RFC 3339 timestamp ("2024-06-15T10:30:00.000Z")."""
    if not value:
        return datetime.now(timezone.utc)
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


class MetadataIndex:
    """
    Thread-safe file ID -> FileRecord index for a single drive.

    The drive root is always present as a folder record with path "/".
    """

    def __init__(self, drive_id: str, pretty_name: str = "Home"):
        self.drive_id = drive_id
        self.pretty_name = pretty_name
        self._lock = threading.Lock()
        self._records: dict[str, FileRecord] = {}
        self._reset()

    def _root_record(self) -> FileRecord:
        return FileRecord(
            id=self.drive_id,
            name=self.pretty_name,
            slug="",
            path="/",
            resource_type=ResourceType.FOLDER,
            parent_id=None,
            modified=datetime.now(timezone.utc),
            mime_type=FOLDER_MIME,
        )

    def _reset(self) -> None:
        self._records = {self.drive_id: self._root_record()}

    def rebuild(self, files: Iterable[dict]) -> None:
        """
        Replace the index with the contents of a drive listing.

        Args:
            files: Drive API file resources with id, name, mimeType,
                parents and modifiedTime.
        """
        with self._lock:
            self._reset()
            for meta in files:
                file_id = meta.get("id")
                if not file_id or file_id == self.drive_id:
                    continue

                mime = meta.get("mimeType", "")
                parents = meta.get("parents") or []
                name = meta.get("name", "")
                self._records[file_id] = FileRecord(
                    id=file_id,
                    name=name,
                    slug=slugify(name),
                    path="",
                    resource_type=ResourceType.FOLDER if mime == FOLDER_MIME else ResourceType.FILE,
                    parent_id=parents[0] if parents else None,
                    modified=parse_modified(meta.get("modifiedTime")),
                    mime_type=mime,
                )

            self._assign_paths()

        logger.info("Indexed %d records for drive %s", len(self._records), self.drive_id)

    def _assign_paths(self) -> None:
        """Recompute every record's path from the parent chain. Caller holds the lock."""
        for record in self._records.values():
            record.path = self._build_path(record)

    def _build_path(self, record: FileRecord) -> str:
        if record.id == self.drive_id:
            return "/"

        segments = []
        seen = set()
        current = record
        while current is not None and current.id != self.drive_id:
            if current.id in seen:
                logger.warning("Parent cycle detected at %s", current.id)
                break
            seen.add(current.id)
            segments.append(current.slug)
            current = self._records.get(current.parent_id) if current.parent_id else None

        return "/" + "/".join(reversed(segments))

    def get_meta(self, file_id: str) -> FileRecord | None:
        """Return the record for file_id, or None for unknown IDs."""
        with self._lock:
            return self._records.get(file_id)

    def reparent(self, file_id: str, new_parent_id: str) -> FileRecord:
        """
        Point a record at a new parent and recompute affected paths.

        Raises:
            KeyError: If file_id is not indexed.
        """
        with self._lock:
            record = self._records[file_id]
            record.parent_id = new_parent_id
            self._assign_paths()
            logger.debug("Reparented %s under %s -> %s", file_id, new_parent_id, record.path)
            return record

    def children(self, parent_id: str) -> list[FileRecord]:
        """Direct children of parent_id, ordered by name."""
        with self._lock:
            kids = [r for r in self._records.values() if r.parent_id == parent_id]
        return sorted(kids, key=lambda r: r.name.lower())

    def all_records(self) -> list[FileRecord]:
        with self._lock:
            return list(self._records.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
