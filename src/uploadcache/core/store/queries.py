# src/uploadcache/core/store/queries.py
"""Query engine for the uploads table.

Every public method is one unit of work against UploadCacheDB: reads run
in db.read(), writes in a single serialized db.write() transaction.
"""

from collections.abc import Iterable, Iterator
from datetime import UTC, datetime, time, timedelta
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import ColumnElement, and_, delete, func, select, update

from uploadcache.contracts.records import UploadRecord
from uploadcache.core.clock import Clock, SystemClock
from uploadcache.core.store.repositories import UploadRecordRepository
from uploadcache.core.store.schema import uploads_table

if TYPE_CHECKING:
    from uploadcache.core.store.database import UploadCacheDB

logger = structlog.get_logger(__name__)

# Keeps IN (...) lists well under SQLite's bound-parameter limit
_DELETE_CHUNK_SIZE = 500


def _key_clause(record_id: str, record_type: int) -> ColumnElement[bool]:
    return and_(uploads_table.c.id == record_id, uploads_table.c.type == int(record_type))


def _chunked(items: list[str], size: int) -> Iterator[list[str]]:
    for start in range(0, len(items), size):
        yield items[start : start + size]


class UploadQueries:
    """Read/write operations on cached upload records."""

    def __init__(
        self,
        db: "UploadCacheDB",
        *,
        cache_limit: int = 0,
        clock: Clock | None = None,
    ) -> None:
        """Initialize the query engine.

        Args:
            db: Open store handle
            cache_limit: Row cap enforced when inserting new records (0 disables)
            clock: Time source for the age window (defaults to SystemClock)
        """
        if cache_limit < 0:
            raise ValueError(f"cache_limit must be >= 0, got {cache_limit}")
        self._db = db
        self._cache_limit = cache_limit
        self._clock = clock if clock is not None else SystemClock()
        self._repo = UploadRecordRepository()

    # --- reads -------------------------------------------------------------

    def fetch_one(self, record_id: str, record_type: int) -> UploadRecord | None:
        """Fetch the record stored under (record_id, record_type), if any."""
        query = select(uploads_table).where(_key_clause(record_id, record_type))
        with self._db.read() as conn:
            row = conn.execute(query).first()
        return self._repo.load(row) if row is not None else None

    def fetch_all(self) -> list[UploadRecord]:
        """Fetch every record, oldest first."""
        query = select(uploads_table).order_by(
            uploads_table.c.date.asc(),
            uploads_table.c.id.asc(),
            uploads_table.c.type.asc(),
        )
        with self._db.read() as conn:
            rows = conn.execute(query).all()
        return [self._repo.load(row) for row in rows]

    def count(self) -> int:
        with self._db.read() as conn:
            return int(conn.execute(select(func.count()).select_from(uploads_table)).scalar_one())

    # --- writes ------------------------------------------------------------

    def save(self, record: UploadRecord) -> None:
        """Insert record, or update it in place if its key already exists.

        An update rewrites only data and attempt_count; the stored date is
        kept. A new row is subject to the row cap: when the store already
        holds cache_limit rows or more, the oldest rows are deleted first so
        the count after insertion equals the cap.
        """
        key = _key_clause(record.id, record.type)
        with self._db.write() as conn:
            exists = conn.execute(select(uploads_table.c.id).where(key)).first() is not None
            if exists:
                conn.execute(update(uploads_table).where(key).values(**self._repo.dump_mutable(record)))
                return

            if self._cache_limit > 0:
                current = int(conn.execute(select(func.count()).select_from(uploads_table)).scalar_one())
                if current >= self._cache_limit:
                    excess = current - self._cache_limit + 1
                    oldest = conn.execute(
                        select(uploads_table.c.id, uploads_table.c.type)
                        .order_by(
                            uploads_table.c.date.asc(),
                            uploads_table.c.id.asc(),
                            uploads_table.c.type.asc(),
                        )
                        .limit(excess)
                    ).all()
                    for row in oldest:
                        conn.execute(delete(uploads_table).where(_key_clause(row.id, row.type)))
                    logger.info(
                        "upload_cache_limit_enforced",
                        cache_limit=self._cache_limit,
                        removed=len(oldest),
                    )

            conn.execute(uploads_table.insert().values(**self._repo.dump(record)))

    def delete(self, record_id: str, record_type: int) -> bool:
        """Delete the record under (record_id, record_type).

        Returns:
            True if a row was removed, False if none matched
        """
        with self._db.write() as conn:
            result = conn.execute(delete(uploads_table).where(_key_clause(record_id, record_type)))
            return result.rowcount > 0

    def delete_record(self, record: UploadRecord) -> bool:
        """Delete the stored row carrying record's key."""
        return self.delete(record.id, record.type)

    def update_attempt_count(self, record_id: str, record_type: int, attempt_count: int) -> None:
        """Set attempt_count on the matching row. No-op if the key is absent.

        Raises:
            ValueError: If attempt_count is negative
        """
        if attempt_count < 0:
            raise ValueError(f"attempt_count must be >= 0, got {attempt_count}")
        with self._db.write() as conn:
            conn.execute(
                update(uploads_table).where(_key_clause(record_id, record_type)).values(attempt_count=attempt_count)
            )

    def delete_ids(self, record_ids: Iterable[str]) -> int:
        """Delete every row whose id is in record_ids, across all types.

        Runs as one transaction regardless of how many ids are given.

        Returns:
            Number of rows removed
        """
        unique_ids = sorted(set(record_ids))
        if not unique_ids:
            return 0
        removed = 0
        with self._db.write() as conn:
            for chunk in _chunked(unique_ids, _DELETE_CHUNK_SIZE):
                result = conn.execute(delete(uploads_table).where(uploads_table.c.id.in_(chunk)))
                removed += result.rowcount
        return removed

    # --- eviction candidate selection --------------------------------------

    def age_cutoff(self, max_days: int) -> datetime:
        """First instant that is NOT stale for a max_days age limit.

        Granularity is the calendar day (UTC): everything created on
        today - max_days or earlier falls before the returned midnight.
        """
        today = self._clock.now().astimezone(UTC).date()
        first_kept_day = today - timedelta(days=max_days) + timedelta(days=1)
        return datetime.combine(first_kept_day, time.min, tzinfo=UTC)

    def find_ids_older_than(self, max_days: int) -> list[str]:
        """Ids of records created on or before the day today - max_days.

        Args:
            max_days: Age limit in calendar days

        Returns:
            Ids of stale records, oldest first (may repeat across types)
        """
        cutoff = self.age_cutoff(max_days)
        query = (
            select(uploads_table.c.id)
            .where(uploads_table.c.date < cutoff)
            .order_by(uploads_table.c.date.asc(), uploads_table.c.id.asc())
        )
        with self._db.read() as conn:
            return [row.id for row in conn.execute(query)]

    def find_ids_over_size(self, max_bytes: int) -> list[str]:
        """Ids of the oldest records that push the store past max_bytes.

        Rows are walked newest to oldest (ties broken by id) while summing
        payload length. The row at which the running total first reaches
        max_bytes, and every row after it, is returned.

        Args:
            max_bytes: Total payload bytes to keep

        Returns:
            Ids to delete, newest first (may repeat across types)
        """
        running_total = (
            func.sum(func.length(uploads_table.c.data))
            .over(order_by=(uploads_table.c.date.desc(), uploads_table.c.id.asc()))
            .label("total_size")
        )
        windowed = select(uploads_table.c.id, uploads_table.c.date, running_total).cte("windowed")
        query = (
            select(windowed.c.id)
            .where(windowed.c.total_size >= max_bytes)
            .order_by(windowed.c.date.desc(), windowed.c.id.asc())
        )
        with self._db.read() as conn:
            return [row.id for row in conn.execute(query)]
