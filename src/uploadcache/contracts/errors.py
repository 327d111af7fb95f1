# src/uploadcache/contracts/errors.py
"""Exception hierarchy for the upload cache.

Construction-time failures (StoreOpenError, FileSystemError,
UnsupportedStorageError) mean the cache cannot be used for this session.
Per-operation failures surface as StoreIOError and are never retried here;
retry policy belongs to the caller.
"""

from pathlib import Path


class UploadCacheError(Exception):
    """Base class for all upload cache errors."""

    pass


class StoreOpenError(UploadCacheError):
    """Raised when the backing store cannot be opened, even after recreating it.

    Attributes:
        path: Store location that failed to open (None for in-memory stores)
    """

    def __init__(self, message: str, *, path: Path | None = None) -> None:
        self.path = path
        super().__init__(message)


class StoreIOError(UploadCacheError):
    """Raised when a read, write or reclamation fails on an open store."""

    pass


class FileSystemError(UploadCacheError):
    """Raised when the store directory cannot be prepared.

    Attributes:
        path: Directory or file the operation targeted
    """

    def __init__(self, message: str, *, path: Path) -> None:
        self.path = path
        super().__init__(message)


class UnsupportedStorageError(UploadCacheError):
    """Raised when the configured storage mechanism is not recognised."""

    pass
