"""
Error types raised and returned by drive-mover.

Validation errors are handed back to the caller of a move. Remote and cache
failures are recovered inside the move into a redirect home.
"""


class DriveMoverError(Exception):
    """Base class for drive-mover errors."""


class MoveValidationError(DriveMoverError, ValueError):
    """The requested move cannot be attempted (caller misuse)."""


class RemoteUpdateError(DriveMoverError):
    """The Drive update call failed or timed out."""


class CacheError(DriveMoverError):
    """Base class for cache store failures."""


class CacheReadError(CacheError):
    """The cache store rejected a lookup."""


class CacheWriteError(CacheError):
    """The cache store rejected a write."""
