# src/uploadcache/telemetry/protocols.py
"""Protocol for the eviction reporting collaborator."""

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from uploadcache.contracts.events import CacheEvicted


@runtime_checkable
class EvictionReporterProtocol(Protocol):
    """Receives eviction events from the stale-data sweep.

    Reporting is fire-and-forget. report() should not raise; if it does,
    the sweep logs the failure and carries on.
    """

    def report(self, event: "CacheEvicted") -> None:
        """Report one completed eviction sweep.

        Args:
            event: Eviction event with removed count and start/end times
        """
        ...
