"""Outbound reporting of eviction events.

The cache depends only on EvictionReporterProtocol; tracing backends are
wired in by the host through TracingEvictionReporter.
"""

from uploadcache.telemetry.protocols import EvictionReporterProtocol
from uploadcache.telemetry.reporters import LoggingEvictionReporter, TracingEvictionReporter

__all__ = [
    "EvictionReporterProtocol",
    "LoggingEvictionReporter",
    "TracingEvictionReporter",
]
