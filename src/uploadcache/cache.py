# src/uploadcache/cache.py
"""Public surface of the upload cache.

UploadCache owns exactly one store handle and passes every call through
to the query engine or the eviction manager. It holds no state of its own
beyond the handle and its collaborators.
"""

from typing import Self

from uploadcache.contracts.records import UploadRecord
from uploadcache.core.clock import Clock, SystemClock
from uploadcache.core.config import CacheSettings
from uploadcache.core.retention import EvictionManager, EvictionResult
from uploadcache.core.store import UploadCacheDB, UploadQueries
from uploadcache.telemetry.protocols import EvictionReporterProtocol


class UploadCache:
    """Durable staging cache for telemetry payloads awaiting upload.

    Construction opens (or recreates) the store, defines the schema and
    runs one stale-data sweep synchronously. Any failure during
    construction propagates; the caller decides whether to run without a
    cache or abort startup.

    Example:
        >>> cache = UploadCache(CacheSettings.in_memory("session"))
        >>> record = cache.save("batch-1", UploadType.SPANS, payload)
        >>> cache.update_attempt_count("batch-1", UploadType.SPANS, 1)
        >>> cache.delete("batch-1", UploadType.SPANS)
        True
    """

    def __init__(
        self,
        settings: CacheSettings,
        *,
        reporter: EvictionReporterProtocol | None = None,
        clock: Clock | None = None,
        db: UploadCacheDB | None = None,
    ) -> None:
        """Open the cache.

        Args:
            settings: Storage mechanism and eviction limits
            reporter: Receives an event per non-empty eviction sweep
            clock: Time source for record dates and the age window
            db: Pre-opened store handle to own instead of opening one from
                settings.storage

        Raises:
            UnsupportedStorageError: Storage mechanism not recognised
            FileSystemError: Store directory could not be created
            StoreOpenError: Store unreadable even after recreation
            StoreIOError: Schema definition or the initial sweep failed
        """
        self.settings = settings
        self._clock = clock if clock is not None else SystemClock()
        self._db = db if db is not None else UploadCacheDB(settings.storage)
        self._queries = UploadQueries(self._db, cache_limit=settings.cache_limit, clock=self._clock)
        self._eviction = EvictionManager(
            self._db,
            self._queries,
            cache_days_limit=settings.cache_days_limit,
            cache_size_limit=settings.cache_size_limit,
            reporter=reporter,
            clock=self._clock,
        )
        try:
            self._eviction.clear_stale_data()
        except Exception:
            self._db.close()
            raise

    @property
    def db(self) -> UploadCacheDB:
        """The store handle owned by this cache."""
        return self._db

    def fetch(self, record_id: str, record_type: int) -> UploadRecord | None:
        """Fetch the cached record for (record_id, record_type), if any."""
        return self._queries.fetch_one(record_id, record_type)

    def fetch_all(self) -> list[UploadRecord]:
        """Fetch every cached record, oldest first."""
        return self._queries.fetch_all()

    def save(self, record_id: str, record_type: int, data: bytes) -> UploadRecord:
        """Cache data under (record_id, record_type).

        A new record is dated now with attempt_count 0. If the key is
        already cached, its data and attempt count are replaced and its
        original date is kept.

        Returns:
            The record as passed to the store
        """
        record = UploadRecord(
            id=record_id,
            type=record_type,
            data=data,
            attempt_count=0,
            date=self._clock.now(),
        )
        self._queries.save(record)
        return record

    def save_record(self, record: UploadRecord) -> None:
        """Insert record as given, or update the cached row with its key."""
        self._queries.save(record)

    def delete(self, record_id: str, record_type: int) -> bool:
        """Delete the cached record for (record_id, record_type).

        Returns:
            True if a record was removed
        """
        return self._queries.delete(record_id, record_type)

    def delete_record(self, record: UploadRecord) -> bool:
        """Delete the cached record carrying record's key."""
        return self._queries.delete_record(record)

    def update_attempt_count(self, record_id: str, record_type: int, attempt_count: int) -> None:
        """Set the upload attempt count. No-op if the key is not cached."""
        self._queries.update_attempt_count(record_id, record_type, attempt_count)

    def run_maintenance(self) -> int:
        """Run the stale-data sweep now.

        Returns:
            Number of records removed
        """
        return self.clear_stale_data().removed_count

    def clear_stale_data(self) -> EvictionResult:
        """Run the stale-data sweep and return its full result."""
        return self._eviction.clear_stale_data()

    def close(self) -> None:
        self._db.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        self.close()
