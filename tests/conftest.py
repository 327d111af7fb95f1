# tests/conftest.py
"""Shared test fixtures for the upload cache.

Fixtures:
- clock: MockClock pinned to NOW so record dates and age windows are exact
- memory_settings: factory for CacheSettings on a uniquely named in-memory store
- memory_db: open in-memory UploadCacheDB, closed after the test
- reporter: RecordingReporter capturing CacheEvicted events

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/property/
"""

import os
from collections.abc import Callable, Iterator
from typing import Any

import pytest
from hypothesis import Phase, Verbosity, settings

from tests.helpers import NOW, RecordingReporter, unique_store_name
from uploadcache.core.clock import MockClock
from uploadcache.core.config import CacheSettings
from uploadcache.core.store.database import UploadCacheDB


@pytest.fixture
def clock() -> MockClock:
    return MockClock(start=NOW)


@pytest.fixture
def memory_settings() -> Callable[..., CacheSettings]:
    """Factory: CacheSettings on a fresh in-memory store.

    All limits default to 0 (disabled) so tests opt into the policy they test.
    """

    def _factory(**limits: Any) -> CacheSettings:
        limits.setdefault("cache_days_limit", 0)
        limits.setdefault("cache_size_limit", 0)
        limits.setdefault("cache_limit", 0)
        return CacheSettings.in_memory(unique_store_name(), **limits)

    return _factory


@pytest.fixture
def memory_db() -> Iterator[UploadCacheDB]:
    db = UploadCacheDB.in_memory(unique_store_name())
    yield db
    db.close()


@pytest.fixture
def reporter() -> RecordingReporter:
    return RecordingReporter()


# =============================================================================
# Hypothesis Configuration
# =============================================================================

settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,  # Store setup per example makes timing vary
)

settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))
