# tests/helpers.py
"""Test helpers shared across the upload cache test suite."""

import uuid
from datetime import UTC, datetime, timedelta

from uploadcache.contracts.enums import UploadType
from uploadcache.contracts.events import CacheEvicted
from uploadcache.contracts.records import UploadRecord

# Fixed "now" for deterministic date arithmetic (mid-day UTC)
NOW = datetime(2024, 6, 15, 12, 0, 0, tzinfo=UTC)


def unique_store_name() -> str:
    """In-memory stores with equal names share data; keep tests isolated."""
    return f"test-{uuid.uuid4().hex}"


def make_record(
    record_id: str,
    *,
    size: int = 10,
    age: timedelta = timedelta(0),
    record_type: int = UploadType.SPANS,
    attempt_count: int = 0,
    now: datetime = NOW,
) -> UploadRecord:
    """Build an UploadRecord with a payload of size bytes created age before now."""
    return UploadRecord(
        id=record_id,
        type=record_type,
        data=b"\x03" * size,
        attempt_count=attempt_count,
        date=now - age,
    )


class RecordingReporter:
    """EvictionReporterProtocol implementation that keeps every event."""

    def __init__(self) -> None:
        self.events: list[CacheEvicted] = []

    def report(self, event: CacheEvicted) -> None:
        self.events.append(event)


class ExplodingReporter:
    """Reporter whose backend is down."""

    def report(self, event: CacheEvicted) -> None:
        raise ConnectionError("collector unreachable")
