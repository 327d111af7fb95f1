# src/uploadcache/contracts/events.py
"""Events emitted by the upload cache to the telemetry collaborator."""

from dataclasses import dataclass, field
from datetime import datetime

CACHE_EVICTION_EVENT = "cache eviction"


@dataclass(frozen=True, slots=True)
class CacheEvicted:
    """Emitted once per non-empty stale-data sweep.

    The timestamps bracket the bulk delete and the space reclamation that
    follows it.

    Attributes:
        removed: Number of rows removed by the sweep
        started_at: When the delete began (UTC)
        ended_at: When reclamation finished (UTC)
        name: Event name reported to tracing backends
    """

    removed: int
    started_at: datetime
    ended_at: datetime
    name: str = field(default=CACHE_EVICTION_EVENT)

    @property
    def attributes(self) -> dict[str, int]:
        return {"removed": self.removed}
