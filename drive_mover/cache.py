import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum

from cachetools import TTLCache

from .errors import CacheReadError, CacheWriteError

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    path: str
    file_id: str
    html: str | None
    modified: str


class LookupKind(Enum):
    MISS = "miss"
    EMPTY_BODY = "empty_body"
    FOUND = "found"


@dataclass
class CacheLookup:
    """Result of HtmlCache.get: a miss, an entry without a body, or html."""

    kind: LookupKind
    entries: list[CacheEntry] = field(default_factory=list)

    @property
    def servable(self) -> bool:
        return self.kind is LookupKind.FOUND

    @property
    def html(self) -> str | None:
        if self.kind is not LookupKind.FOUND:
            return None
        return self.entries[0].html


def _parse_timestamp(value: str) -> datetime:
    ts = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def next_modified(previous: str | None = None) -> str:
    """
    Return a fresh ISO-8601 UTC timestamp strictly later than previous.

    Rapid successive writes can land on the same clock reading, so the
    result is bumped past previous when needed.
    """
    now = datetime.now(timezone.utc)
    if previous:
        prev = _parse_timestamp(previous)
        if now <= prev:
            now = prev + timedelta(microseconds=1)
    return now.isoformat(timespec="microseconds")


def _check_path(path: str) -> None:
    if not path or not isinstance(path, str) or not path.startswith("/"):
        raise ValueError(f"Malformed cache path: {path!r}")


class HtmlCache:
    """
    Path-keyed cache of rendered HTML.

    Thread-safe wrapper around a cachetools TTLCache. Each path maps to a
    single CacheEntry; entries expire after ttl_seconds and the least
    recently used ones are evicted once max_entries is reached.
    """

    def __init__(self, ttl_seconds: int = 3600, max_entries: int = 1024):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._cache: TTLCache = TTLCache(maxsize=max_entries, ttl=ttl_seconds)
        self._lock = threading.Lock()

    def add(self, file_id: str, modified: str, path: str, html: str | None) -> CacheEntry:
        """
        Register or overwrite the entry at path.

        A write repeating the stored entry's modified value and html is
        skipped and the stored entry is returned.

        Args:
            file_id: Drive ID of the document the html was rendered from.
            modified: Timestamp of this logical write.
            path: URL path the html is served at.
            html: Rendered body, or None when not rendered yet.

        Returns:
            The entry now stored at path.

        Raises:
            CacheWriteError: If the path is malformed or modified is missing.
        """
        try:
            _check_path(path)
        except ValueError as e:
            raise CacheWriteError(str(e)) from e
        if not modified:
            raise CacheWriteError(f"Missing modified timestamp for {path}")

        with self._lock:
            existing = self._cache.get(path)
            if (
                existing is not None
                and existing.modified == modified
                and existing.html == html
            ):
                logger.debug("Skipping cache write for %s, already at %s", path, modified)
                return existing

            entry = CacheEntry(path=path, file_id=file_id, html=html, modified=modified)
            self._cache[path] = entry

        logger.debug("Cached %s (%s) at %s", path, file_id, modified)
        return entry

    def get(self, path: str) -> CacheLookup:
        """
        Look up the entry for path.

        Returns:
            CacheLookup tagged MISS, EMPTY_BODY or FOUND.

        Raises:
            CacheReadError: If the path is malformed.
        """
        try:
            _check_path(path)
        except ValueError as e:
            raise CacheReadError(str(e)) from e

        with self._lock:
            entry = self._cache.get(path)

        if entry is None:
            return CacheLookup(LookupKind.MISS)
        if not entry.html:
            return CacheLookup(LookupKind.EMPTY_BODY, [entry])
        return CacheLookup(LookupKind.FOUND, [entry])

    def purge(self, url: str, modified: str | None = None) -> bool:
        """
        Remove the entry at url. Purging an unknown url is a no-op.

        Args:
            url: Path of the entry to remove.
            modified: Timestamp of the write that supersedes the entry.
                An entry stored with a later timestamp is kept.

        Returns:
            True if an entry was removed.
        """
        with self._lock:
            entry = self._cache.get(url)
            if entry is None:
                return False
            if modified and _parse_timestamp(entry.modified) > _parse_timestamp(modified):
                logger.debug("Keeping %s, rewritten at %s after %s", url, entry.modified, modified)
                return False
            del self._cache[url]

        logger.debug("Purged %s (modified=%s)", url, modified)
        return True

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()

    def __contains__(self, path: str) -> bool:
        with self._lock:
            return path in self._cache

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)
