"""Retention management for cached uploads.

Provides EvictionManager for the age and size eviction policies.
"""

from uploadcache.core.retention.eviction import EvictionManager, EvictionResult

__all__ = ["EvictionManager", "EvictionResult"]
