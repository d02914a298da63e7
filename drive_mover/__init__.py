__version__ = "0.1.0"

# Public API exports
from .cache import CacheEntry, CacheLookup, HtmlCache, LookupKind, next_modified
from .config import (
    AppConfig,
    CacheConfig,
    ConnectionConfig,
    DriveConfig,
    LogConfig,
    load_config,
)
from .errors import (
    CacheError,
    CacheReadError,
    CacheWriteError,
    DriveMoverError,
    MoveValidationError,
    RemoteUpdateError,
)
from .folder_tree import FolderNode, get_folders
from .metadata_index import FileRecord, MetadataIndex, PathResolver, ResourceType
from .move import DriveKind, MoveOrchestrator
from .remote_client import RemoteDrive


def get_drive_client():
    """Lazy loader for DriveClient.

    Returns the DriveClient class, importing it on first use so that
    importing drive_mover does not require google-api-python-client.
    """
    from .gdrive_client import DriveClient

    return DriveClient


__all__ = [
    "__version__",
    # Configuration
    "AppConfig",
    "DriveConfig",
    "CacheConfig",
    "ConnectionConfig",
    "LogConfig",
    "load_config",
    # Errors
    "DriveMoverError",
    "MoveValidationError",
    "RemoteUpdateError",
    "CacheError",
    "CacheReadError",
    "CacheWriteError",
    # Index and tree
    "FileRecord",
    "MetadataIndex",
    "PathResolver",
    "ResourceType",
    "FolderNode",
    "get_folders",
    # Cache
    "CacheEntry",
    "CacheLookup",
    "HtmlCache",
    "LookupKind",
    "next_modified",
    # Move
    "DriveKind",
    "MoveOrchestrator",
    "RemoteDrive",
    "get_drive_client",
]
