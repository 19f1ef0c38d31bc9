"""
Health Check Routes
===================

The cache layer is never "down": without Redis it keeps serving from the
local store. The health endpoint therefore always answers 200 and reports
"healthy" or "degraded" in the body.
"""

from fastapi import APIRouter

from insights_cache.application.api.dependencies import CacheManagerDep, SettingsDep
from insights_cache.application.api.models.admin import HealthResponse

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("", response_model=HealthResponse)
async def health_check(cache: CacheManagerDep, settings: SettingsDep):
    """
    Report cache health.

    Probes Redis (when configured) and reports local store occupancy, tagged
    with the service version and environment.
    """
    health = await cache.health_check()
    return HealthResponse(
        **health,
        version=settings.app.APP_VERSION,
        environment=settings.app.ENVIRONMENT,
    )
