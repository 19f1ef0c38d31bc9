"""
Cache Module

Cache-aside facade over Redis with a local in-memory fallback.
"""

from .cache_keys import CacheKeys, hash_filters
from .cache_manager import CacheManager, RemoteRouter, create_cache_manager
from .entry_store import CacheEntry, EntryStore
from .metrics import CacheMetrics, CacheMetricsCollector, CacheMetricsSnapshot
from .redis_client import RedisClient

__all__ = [
    "CacheEntry",
    "CacheKeys",
    "CacheManager",
    "CacheMetrics",
    "CacheMetricsCollector",
    "CacheMetricsSnapshot",
    "EntryStore",
    "RedisClient",
    "RemoteRouter",
    "create_cache_manager",
    "hash_filters",
]
