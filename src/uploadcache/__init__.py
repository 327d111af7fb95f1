"""
uploadcache: durable local staging cache for telemetry payloads.

Payloads wait here until an upload pipeline ships them. The store survives
restarts, bounds its own footprint by age, size and row count, and recreates
itself when the backing file is damaged.
"""

__version__ = "0.1.0"

from uploadcache.cache import UploadCache
from uploadcache.contracts import (
    CacheEvicted,
    FileSystemError,
    StoreIOError,
    StoreOpenError,
    UnsupportedStorageError,
    UploadCacheError,
    UploadRecord,
    UploadType,
)
from uploadcache.core.config import CacheSettings, InMemoryStorage, OnDiskStorage, load_settings

__all__ = [
    "CacheEvicted",
    "CacheSettings",
    "FileSystemError",
    "InMemoryStorage",
    "OnDiskStorage",
    "StoreIOError",
    "StoreOpenError",
    "UnsupportedStorageError",
    "UploadCache",
    "UploadCacheError",
    "UploadRecord",
    "UploadType",
    "load_settings",
]
