# src/uploadcache/core/store/repositories.py
"""Explicit mapping between uploads rows and UploadRecord.

This is the serialization contract of the store: one hand-written
function per direction, no reflection. The database is our own data, so
a row that does not fit the record model raises instead of being patched.
"""

from typing import Any

from sqlalchemy.engine import Row as SARow

from uploadcache.contracts.records import UploadRecord


class UploadRecordRepository:
    """Repository for UploadRecord rows."""

    def load(self, row: SARow[Any]) -> UploadRecord:
        """Load UploadRecord from an uploads row."""
        return UploadRecord(
            id=row.id,
            type=row.type,
            data=bytes(row.data),
            attempt_count=row.attempt_count,
            date=row.date,
        )

    def dump(self, record: UploadRecord) -> dict[str, Any]:
        """Column values for inserting record."""
        return {
            "id": record.id,
            "type": int(record.type),
            "data": record.data,
            "attempt_count": record.attempt_count,
            "date": record.date,
        }

    def dump_mutable(self, record: UploadRecord) -> dict[str, Any]:
        """Column values an in-place update may change.

        id, type and date are fixed after insert.
        """
        return {
            "data": record.data,
            "attempt_count": record.attempt_count,
        }
