"""
Move orchestration.

Moves a file to a new folder on the drive and carries its rendered HTML
over to the new URL path so the page can be served immediately, before
the next full drive listing catches up.

Every failure after validation is turned into a redirect home ("/");
only caller misuse (moving the root, or a file with no known parent) is
reported back, as a MoveValidationError value.
"""

import logging
import threading
from collections.abc import Iterator
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeoutError
from concurrent.futures import wait
from contextlib import contextmanager
from enum import Enum

from .cache import HtmlCache, next_modified
from .errors import MoveValidationError, RemoteUpdateError
from .metadata_index import TRASH_PATH, MetadataIndex, PathResolver
from .remote_client import RemoteDrive

logger = logging.getLogger(__name__)

HOME = "/"


class DriveKind(str, Enum):
    TEAM = "team"
    SHARED = "shared"

    @classmethod
    def parse(cls, value) -> "DriveKind | None":
        if value is None or isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValueError(f"Unknown drive kind: {value!r}") from None


class KeyedLocks:
    """Registry of per-key locks; entries are dropped once nobody holds them."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[str, list] = {}  # key -> [lock, holders]

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._guard:
            slot = self._locks.setdefault(key, [threading.Lock(), 0])
            slot[1] += 1
        slot[0].acquire()
        try:
            yield
        finally:
            slot[0].release()
            with self._guard:
                slot[1] -= 1
                if slot[1] == 0:
                    del self._locks[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


def join_path(base: str, leaf: str) -> str:
    """Join a folder path and a leaf segment ("/" + "a" -> "/a")."""
    return f"{base.rstrip('/')}/{leaf}"


def leaf_segment(path: str) -> str:
    return path.rstrip("/").rsplit("/", 1)[-1]


class MoveOrchestrator:
    """
    Moves files between folders and keeps the HTML cache in step.

    Args:
        drive: Remote drive used for the parent update.
        cache: Path-keyed HTML cache.
        resolver: Lookup strategy mapping file IDs to records.
        drive_id: Configured drive (root) ID.
        remote_timeout: Seconds to wait for the remote update.
        index: Index to re-parent after a successful update. Defaults to
            the resolver when it is a MetadataIndex.
    """

    def __init__(
        self,
        drive: RemoteDrive,
        cache: HtmlCache,
        resolver: PathResolver,
        drive_id: str,
        remote_timeout: float = 30.0,
        index: MetadataIndex | None = None,
    ):
        self.drive = drive
        self.cache = cache
        self.resolver = resolver
        self.drive_id = drive_id
        self.remote_timeout = remote_timeout
        if index is None and isinstance(resolver, MetadataIndex):
            index = resolver
        self.index = index
        self._locks = KeyedLocks()
        self._abandoned: dict[str, Future] = {}  # file_id -> timed-out update still running
        self._abandoned_lock = threading.Lock()

    def close(self, timeout: float | None = None) -> None:
        """Wait up to timeout seconds for abandoned updates to finish."""
        with self._abandoned_lock:
            pending = list(self._abandoned.values())
            self._abandoned.clear()
        if pending:
            logger.info("Waiting for %d abandoned update(s)", len(pending))
            wait(pending, timeout=timeout)

    def move_file(self, file_id: str, destination_id: str, drive_kind=None):
        """
        Move file_id under destination_id.

        Args:
            file_id: Drive ID of the file to move.
            destination_id: Drive ID of the destination folder.
            drive_kind: None, "team" or "shared".

        Returns:
            The file's new URL path, "/" when the move could not be
            completed end to end, or a MoveValidationError when the move
            was not attempted.
        """
        with self._locks.hold(file_id):
            # An update abandoned on timeout keeps the file locked until it ends
            with self._abandoned_lock:
                pending = self._abandoned.pop(file_id, None)
            if pending is not None:
                logger.info("Waiting for earlier update of %s to finish", file_id)
                wait([pending])
            return self._move(file_id, destination_id, drive_kind)

    def _move(self, file_id: str, destination_id: str, drive_kind):
        if file_id == self.drive_id:
            return MoveValidationError("Cannot move the drive root")

        record = self.resolver.get_meta(file_id)
        if record is None or not record.parent_id:
            return MoveValidationError(f"No parent found for {file_id}")

        try:
            kind = DriveKind.parse(drive_kind)
        except ValueError as e:
            return MoveValidationError(str(e))

        destination = self.resolver.get_meta(destination_id)
        if destination is None:
            logger.warning("Destination %s not found, redirecting home", destination_id)
            return HOME

        old_path = record.path
        if destination.path == TRASH_PATH:
            logger.info("TRASHED %s", old_path)
            return HOME

        if not destination.is_folder:
            logger.warning("Destination %s is not a folder, redirecting home", destination_id)
            return HOME

        options = self._update_options(file_id, record.parent_id, destination_id, kind)
        try:
            self._remote_update(options)
        except RemoteUpdateError as e:
            logger.warning("Failed moving %s: %s", file_id, e)
            return HOME

        if self.index is not None and self.index.get_meta(file_id) is not None:
            self.index.reparent(file_id, destination_id)

        new_path = join_path(destination.path, leaf_segment(old_path))
        logger.info("MOVED %s => %s", old_path, new_path)

        # Copy the cached page over so the new URL works before the next listing
        try:
            lookup = self.cache.get(old_path)
        except Exception as e:
            logger.warning("Error getting cached page for %s: %s", old_path, e)
            return HOME

        if not lookup.servable:
            logger.info("No cached html for %s (%s), redirecting home", old_path, lookup.kind.value)
            return HOME

        modified = next_modified(lookup.entries[0].modified)
        try:
            self.cache.add(file_id, modified, new_path, lookup.html)
        except Exception as e:
            logger.warning("Failed saving new cache data for %s: %s", new_path, e)
            return HOME

        if old_path != new_path:
            self.cache.purge(old_path, modified)

        return new_path

    def _update_options(self, file_id: str, parent_id: str, destination_id: str, kind) -> dict:
        options = {
            "fileId": file_id,
            "addParents": destination_id,
            "removeParents": parent_id,
        }
        if kind is DriveKind.TEAM:
            options["corpora"] = "teamDrive"
            options["teamDriveId"] = self.drive_id
        return options

    def _start_update(self, options: dict) -> Future:
        """Run drive.update on its own thread so a hung call never blocks other files."""
        future: Future = Future()

        def run():
            if not future.set_running_or_notify_cancel():
                return
            try:
                future.set_result(self.drive.update(options))
            except Exception as e:
                future.set_exception(e)

        threading.Thread(
            target=run, name=f"drive-update-{options['fileId']}", daemon=True
        ).start()
        return future

    def _remote_update(self, options: dict) -> None:
        """Issue the parent update, giving up after remote_timeout seconds."""
        file_id = options["fileId"]
        future = self._start_update(options)
        try:
            future.result(timeout=self.remote_timeout)
        except FutureTimeoutError as e:
            if not future.cancel():
                with self._abandoned_lock:
                    self._abandoned[file_id] = future
            raise RemoteUpdateError(
                f"update({file_id}) timed out after {self.remote_timeout}s"
            ) from e
        except Exception as e:
            raise RemoteUpdateError(f"update({file_id}) failed: {e}") from e
