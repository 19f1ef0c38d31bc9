"""
Application services.

- **invalidation_service.py**: maps domain events to cache invalidations
"""

from insights_cache.application.services.invalidation_service import (
    CacheInvalidationService,
    InvalidationEvent,
)

__all__ = [
    "CacheInvalidationService",
    "InvalidationEvent",
]
