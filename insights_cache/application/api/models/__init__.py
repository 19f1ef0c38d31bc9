"""API response models."""

from insights_cache.application.api.models.admin import (
    CacheClearResponse,
    CacheReconnectResponse,
    CacheStatsResponse,
    HealthResponse,
)

__all__ = [
    "CacheClearResponse",
    "CacheReconnectResponse",
    "CacheStatsResponse",
    "HealthResponse",
]
