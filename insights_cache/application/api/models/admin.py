"""
Admin API Response Models
=========================

Pydantic models for the cache administration endpoints. They define the JSON
contract of each endpoint and drive the OpenAPI schema.
"""

from typing import Any

from pydantic import BaseModel, Field

from insights_cache.core.config.constants import ConnectionState


class CacheStatsResponse(BaseModel):
    """
    Cache statistics, flattened for dashboards.

    EXAMPLE:
    --------
    {
        "remote_connected": true,
        "state": "connected",
        "local_entries": 12,
        "hits": 150,
        "misses": 50,
        "errors": 0,
        "invalidations": 8,
        "hit_rate": 0.75
    }
    """

    remote_connected: bool = Field(..., description="Whether Redis is currently used")
    state: ConnectionState = Field(..., description="Remote routing state")
    local_entries: int = Field(..., ge=0, description="Entries held by the local fallback store")
    hits: int = Field(..., ge=0, description="Lookups served from either store")
    misses: int = Field(..., ge=0, description="Lookups found in neither store")
    errors: int = Field(..., ge=0, description="Remote failures and decode errors")
    invalidations: int = Field(..., ge=0, description="Keys removed by invalidation")
    hit_rate: float = Field(..., ge=0.0, le=1.0, description="hits / (hits + misses)")

    @classmethod
    def from_stats(cls, stats: dict[str, Any]) -> "CacheStatsResponse":
        """Flatten CacheManager.stats() output."""
        return cls(
            remote_connected=stats["remote_connected"],
            state=stats["state"],
            local_entries=stats["local_entries"],
            **stats["metrics"],
        )


class CacheClearResponse(BaseModel):
    """Result of a full cache clear."""

    status: str = Field(..., description="Always 'success' when the clear ran")
    message: str = Field(..., description="Human-readable summary")
    removed: int = Field(..., ge=0, description="Keys removed across both stores")


class CacheReconnectResponse(BaseModel):
    """Result of a manual reconnect attempt."""

    remote_connected: bool
    state: ConnectionState


class HealthResponse(BaseModel):
    """Cache health summary."""

    status: str = Field(..., description="'healthy' or 'degraded'")
    state: ConnectionState
    local: dict[str, Any]
    remote: dict[str, Any] | None = None
    version: str = Field(..., description="Service version")
    environment: str = Field(..., description="Deployment environment")
