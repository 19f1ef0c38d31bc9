"""
Cache Admin Routes
==================

Operational endpoints for the cache layer. None of these responses are ever
cached themselves.

ENDPOINTS:
----------
- GET  /admin/cache/stats           Flattened statistics (JSON)
- POST /admin/cache/clear           Remove every key under the cache namespace
- POST /admin/cache/reconnect       Retry the Redis handshake now
- POST /admin/cache/metrics/reset   Zero the counters, return fresh stats
- GET  /admin/cache/metrics         Prometheus text exposition

SECURITY CONSIDERATIONS:
------------------------
In production these endpoints belong on an internal port or behind an
authenticating proxy; ``clear`` drops every cached response at once.
"""

import structlog
from fastapi import APIRouter, Response, status
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from insights_cache.application.api.dependencies import (
    CacheManagerDep,
    InvalidationServiceDep,
    MetricsRegistryDep,
)
from insights_cache.application.api.models.admin import (
    CacheClearResponse,
    CacheReconnectResponse,
    CacheStatsResponse,
)

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/admin/cache", tags=["Cache Admin"])


# ============================================================================
# STATISTICS ENDPOINTS
# ============================================================================


@router.get("/stats", response_model=CacheStatsResponse, status_code=status.HTTP_200_OK)
async def get_cache_stats(cache: CacheManagerDep):
    """
    Retrieve cache statistics.

    Returns:
        CacheStatsResponse: Routing state, local store size and counters
    """
    return CacheStatsResponse.from_stats(cache.stats())


@router.get("/metrics")
async def get_cache_metrics(registry: MetricsRegistryDep):
    """
    Expose the cache counters in Prometheus text format for scraping.

    prometheus.yml:
        scrape_configs:
          - job_name: 'insights-cache'
            metrics_path: '/api/v1/admin/cache/metrics'
    """
    return Response(content=generate_latest(registry), media_type=CONTENT_TYPE_LATEST)


# ============================================================================
# MANAGEMENT ENDPOINTS
# ============================================================================


@router.post("/clear", response_model=CacheClearResponse, status_code=status.HTTP_200_OK)
async def clear_cache(invalidation: InvalidationServiceDep):
    """
    Clear every cached entry in both stores.

    Returns:
        CacheClearResponse: Number of keys removed
    """
    removed = await invalidation.invalidate_all()
    logger.warning("cache_cleared_by_admin", removed=removed)
    return CacheClearResponse(status="success", message="Cache cleared successfully", removed=removed)


@router.post("/reconnect", response_model=CacheReconnectResponse, status_code=status.HTTP_200_OK)
async def reconnect_cache(cache: CacheManagerDep):
    """
    Retry the Redis handshake immediately instead of waiting for the next
    cache call to probe it.
    """
    connected = await cache.reconnect()
    logger.info("cache_reconnect_requested", remote_connected=connected, state=cache.state.value)
    return CacheReconnectResponse(remote_connected=connected, state=cache.state)


@router.post("/metrics/reset", response_model=CacheStatsResponse, status_code=status.HTTP_200_OK)
async def reset_cache_metrics(cache: CacheManagerDep):
    """Zero hits, misses, errors and invalidations."""
    cache.reset_metrics()
    return CacheStatsResponse.from_stats(cache.stats())
