"""SQLite backing store: schema, row mapping, lifecycle and queries."""

from uploadcache.core.store.database import UploadCacheDB
from uploadcache.core.store.queries import UploadQueries
from uploadcache.core.store.repositories import UploadRecordRepository
from uploadcache.core.store.schema import metadata, uploads_table

__all__ = [
    "UploadCacheDB",
    "UploadQueries",
    "UploadRecordRepository",
    "metadata",
    "uploads_table",
]
