# src/uploadcache/core/store/schema.py
"""SQLAlchemy table definition for the upload cache.

Uses SQLAlchemy Core (not ORM): one fixed table, mapped to UploadRecord
by hand in repositories.py.
"""

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Integer,
    LargeBinary,
    MetaData,
    PrimaryKeyConstraint,
    Table,
    Text,
)
from sqlalchemy.engine import Dialect
from sqlalchemy.types import TypeDecorator

metadata = MetaData()


class UTCDateTime(TypeDecorator[datetime]):
    """DATETIME column holding UTC instants.

    SQLite has no timezone support, so values are normalised to naive UTC
    on the way in and tagged as UTC on the way out. Stored text sorts
    chronologically, which the window queries rely on.
    """

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            raise ValueError(f"Naive datetime {value!r} cannot be stored; use a UTC-aware value")
        return value.astimezone(UTC).replace(tzinfo=None)

    def process_result_value(self, value: Any, dialect: Dialect) -> datetime | None:
        if value is None:
            return None
        result: datetime = value.replace(tzinfo=UTC)
        return result


uploads_table = Table(
    "uploads",
    metadata,
    Column("id", Text, nullable=False),
    Column("type", Integer, nullable=False),
    Column("data", LargeBinary, nullable=False),
    Column("attempt_count", Integer, nullable=False),
    # Creation time; never rewritten by updates
    Column("date", UTCDateTime, nullable=False),
    PrimaryKeyConstraint("id", "type"),
    CheckConstraint("attempt_count >= 0", name="ck_uploads_attempt_count"),
)
