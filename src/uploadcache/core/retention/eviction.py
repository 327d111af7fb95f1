# src/uploadcache/core/retention/eviction.py
"""Stale-data eviction for the upload cache.

Two independent policies select candidates:
- age: records created cache_days_limit calendar days ago or earlier
- size: the oldest records beyond cache_size_limit payload bytes,
  counting from the newest record backwards

A record only needs to violate one policy to be removed (union, not
intersection). A limit of 0 disables its policy.

The sweep is three serialized steps (select, bulk delete, VACUUM), not
one transaction. A record inserted mid-sweep cannot match candidates
selected before it existed; at worst it is evaluated on the next sweep.
"""

from dataclasses import dataclass
from time import perf_counter
from typing import TYPE_CHECKING

import structlog

from uploadcache.contracts.events import CacheEvicted
from uploadcache.core.clock import Clock, SystemClock

if TYPE_CHECKING:
    from uploadcache.core.store.database import UploadCacheDB
    from uploadcache.core.store.queries import UploadQueries
    from uploadcache.telemetry.protocols import EvictionReporterProtocol

logger = structlog.get_logger(__name__)


@dataclass
class EvictionResult:
    """Result of a stale-data sweep.

    age_candidates and size_candidates count distinct ids selected by each
    policy before the union; an id selected by both counts in both.
    """

    removed_count: int
    age_candidates: int
    size_candidates: int
    duration_seconds: float


class EvictionManager:
    """Runs the age and size eviction policies against one store."""

    def __init__(
        self,
        db: "UploadCacheDB",
        queries: "UploadQueries",
        *,
        cache_days_limit: int,
        cache_size_limit: int,
        reporter: "EvictionReporterProtocol | None" = None,
        clock: Clock | None = None,
    ) -> None:
        """Initialize EvictionManager.

        Args:
            db: Store handle, used for space reclamation
            queries: Query engine over the same handle
            cache_days_limit: Age limit in calendar days (0 disables)
            cache_size_limit: Payload byte budget (0 disables)
            reporter: Receives a CacheEvicted event per non-empty sweep
            clock: Time source for event timestamps
        """
        if cache_days_limit < 0 or cache_size_limit < 0:
            raise ValueError(
                f"Eviction limits must be >= 0, got days={cache_days_limit}, size={cache_size_limit}"
            )
        self._db = db
        self._queries = queries
        self._cache_days_limit = cache_days_limit
        self._cache_size_limit = cache_size_limit
        self._reporter = reporter
        self._clock = clock if clock is not None else SystemClock()

    def find_age_candidates(self) -> set[str]:
        if self._cache_days_limit == 0:
            return set()
        return set(self._queries.find_ids_older_than(self._cache_days_limit))

    def find_size_candidates(self) -> set[str]:
        if self._cache_size_limit == 0:
            return set()
        return set(self._queries.find_ids_over_size(self._cache_size_limit))

    def clear_stale_data(self) -> EvictionResult:
        """Delete every record violating either policy, then reclaim space.

        Returns:
            EvictionResult; removed_count is 0 when nothing was eligible

        Raises:
            StoreIOError: If selection, deletion or VACUUM fails
        """
        start_time = perf_counter()

        age_candidates = self.find_age_candidates()
        size_candidates = self.find_size_candidates()
        to_delete = age_candidates | size_candidates

        if not to_delete:
            return EvictionResult(
                removed_count=0,
                age_candidates=0,
                size_candidates=0,
                duration_seconds=perf_counter() - start_time,
            )

        started_at = self._clock.now()
        removed = self._queries.delete_ids(to_delete)
        self._db.vacuum()
        ended_at = self._clock.now()

        logger.info(
            "upload_cache_evicted",
            removed=removed,
            age_candidates=len(age_candidates),
            size_candidates=len(size_candidates),
        )
        self._report(CacheEvicted(removed=removed, started_at=started_at, ended_at=ended_at))

        return EvictionResult(
            removed_count=removed,
            age_candidates=len(age_candidates),
            size_candidates=len(size_candidates),
            duration_seconds=perf_counter() - start_time,
        )

    def _report(self, event: CacheEvicted) -> None:
        """Hand event to the reporter. Reporting never fails the sweep."""
        if self._reporter is None:
            return
        try:
            self._reporter.report(event)
        except Exception as e:
            logger.warning(
                "eviction_report_failed",
                removed=event.removed,
                error=str(e),
                error_type=type(e).__name__,
            )
