# tests/contracts/test_records.py
"""Tests for the UploadRecord model and the eviction event."""

from dataclasses import FrozenInstanceError
from datetime import UTC, datetime, timedelta

import pytest

from tests.helpers import NOW, make_record
from uploadcache.contracts.enums import UploadType
from uploadcache.contracts.events import CACHE_EVICTION_EVENT, CacheEvicted
from uploadcache.contracts.records import UploadRecord


class TestUploadRecord:
    """UploadRecord invariants."""

    def test_key_is_id_and_type(self) -> None:
        record = make_record("abc", record_type=UploadType.LOGS)

        assert record.key == ("abc", 1)

    def test_size_is_payload_length(self) -> None:
        assert make_record("abc", size=321).size == 321

    def test_negative_attempt_count_rejected(self) -> None:
        with pytest.raises(ValueError, match="attempt_count"):
            UploadRecord(id="a", type=0, data=b"", attempt_count=-1, date=NOW)

    def test_naive_date_rejected(self) -> None:
        with pytest.raises(ValueError, match="timezone-aware"):
            UploadRecord(id="a", type=0, data=b"", attempt_count=0, date=datetime(2024, 1, 1))

    def test_frozen(self) -> None:
        record = make_record("abc")

        with pytest.raises(FrozenInstanceError):
            record.attempt_count = 3  # type: ignore[misc]

    def test_with_attempt_count_keeps_other_fields(self) -> None:
        record = make_record("abc", size=5, age=timedelta(hours=2))

        updated = record.with_attempt_count(4)

        assert updated.attempt_count == 4
        assert updated.data == record.data
        assert updated.date == record.date
        assert record.attempt_count == 0

    def test_upload_type_compares_equal_to_stored_int(self) -> None:
        assert make_record("a", record_type=UploadType.SESSION) == make_record("a", record_type=2)


class TestCacheEvicted:
    def test_defaults_to_cache_eviction_name(self) -> None:
        event = CacheEvicted(removed=2, started_at=NOW, ended_at=NOW + timedelta(milliseconds=5))

        assert event.name == CACHE_EVICTION_EVENT == "cache eviction"

    def test_attributes_carry_removed_count(self) -> None:
        event = CacheEvicted(removed=7, started_at=NOW, ended_at=NOW)

        assert event.attributes == {"removed": 7}

    def test_timestamps_are_kept(self) -> None:
        start = datetime(2024, 1, 1, tzinfo=UTC)
        end = start + timedelta(seconds=1)

        event = CacheEvicted(removed=1, started_at=start, ended_at=end)

        assert (event.started_at, event.ended_at) == (start, end)
