"""
Remote drive protocol definition.

Defines the slice of the Drive API that the move orchestrator and the
index builder depend on, so tests and alternative backends can stand in
for DriveClient.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class RemoteDrive(Protocol):
    """Protocol for the remote store behind a drive."""

    def list_files(self) -> list[dict]:
        """List every file and folder in the drive.

        Returns:
            Drive API file resources (id, name, mimeType, parents, modifiedTime).
        """
        ...

    def get_file(self, file_id: str) -> dict:
        """Get metadata for a single file.

        Raises:
            FileNotFoundError: If the file does not exist.
        """
        ...

    def update(self, options: dict) -> dict:
        """Change a file's parents.

        Args:
            options: fileId, addParents, removeParents and, for team
                drives, corpora="teamDrive" and teamDriveId.

        Returns:
            The updated file resource.
        """
        ...
