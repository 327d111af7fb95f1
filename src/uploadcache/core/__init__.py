"""Core infrastructure: configuration, clock, logging, store and retention."""

from uploadcache.core.clock import Clock, MockClock, SystemClock
from uploadcache.core.config import (
    CacheSettings,
    InMemoryStorage,
    OnDiskStorage,
    load_settings,
)
from uploadcache.core.logging import configure_logging, get_logger

__all__ = [
    "CacheSettings",
    "Clock",
    "InMemoryStorage",
    "MockClock",
    "OnDiskStorage",
    "SystemClock",
    "configure_logging",
    "get_logger",
    "load_settings",
]
