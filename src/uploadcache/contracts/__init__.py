"""Shared contracts: record model, enums, events and errors.

This package has no dependencies on the storage layer so that callers
(upload pipelines, reporters) can import the types without SQLAlchemy.
"""

from uploadcache.contracts.enums import UploadType
from uploadcache.contracts.errors import (
    FileSystemError,
    StoreIOError,
    StoreOpenError,
    UnsupportedStorageError,
    UploadCacheError,
)
from uploadcache.contracts.events import CACHE_EVICTION_EVENT, CacheEvicted
from uploadcache.contracts.records import UploadRecord

__all__ = [
    "CACHE_EVICTION_EVENT",
    "CacheEvicted",
    "FileSystemError",
    "StoreIOError",
    "StoreOpenError",
    "UnsupportedStorageError",
    "UploadCacheError",
    "UploadRecord",
    "UploadType",
]
