"""
Exception Module

Structured exception hierarchy for the cache layer.

Module Structure:
-----------------
- **base.py**: InsightsCacheError base class + ConfigurationError
- **cache.py**: Remote, codec and pattern-delete errors

Error taxonomy as seen by callers of the cache facade:

- CacheConnectionError / CacheKeyError: remote unavailable or command rejected.
  Recorded as a metric, moves the facade to degraded, never surfaced.
- CacheSerializationError: surfaced from get/set.
- PatternDeleteError: partial delete_pattern failure, absorbed into a
  best-effort count.

Usage:
------
```python
from insights_cache.core.exceptions import CacheSerializationError

try:
    await cache.set(key, value, ttl)
except CacheSerializationError:
    logger.warning("Value is not cacheable", cache_key=key)
```
"""

from insights_cache.core.exceptions.base import ConfigurationError, InsightsCacheError
from insights_cache.core.exceptions.cache import (
    CacheConnectionError,
    CacheError,
    CacheKeyError,
    CacheSerializationError,
    PatternDeleteError,
)

__all__ = [
    # Base
    "InsightsCacheError",
    "ConfigurationError",
    # Cache
    "CacheError",
    "CacheConnectionError",
    "CacheKeyError",
    "CacheSerializationError",
    "PatternDeleteError",
]
