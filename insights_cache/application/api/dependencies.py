"""
FastAPI Dependency Injection
============================

Route handlers receive the cache components through FastAPI's DI system.
The components live on ``app.state`` and are created once by ``create_app``:

- app.state.settings: Settings
- app.state.cache_manager: CacheManager
- app.state.invalidation_service: CacheInvalidationService
- app.state.metrics_registry: CollectorRegistry holding the cache collector

Keeping them on the app instance (instead of module globals) means every test
can build its own app around its own CacheManager.

Example:
    @router.get("/stats")
    async def stats(cache: CacheManagerDep):
        return cache.stats()
"""

from typing import Annotated

from fastapi import Depends, Request
from prometheus_client import CollectorRegistry

from insights_cache.application.services.invalidation_service import CacheInvalidationService
from insights_cache.core.config.settings import Settings
from insights_cache.infrastructure.cache.cache_manager import CacheManager

# ============================================================================
# DEPENDENCY FUNCTIONS
# ============================================================================


def get_cache_manager(request: Request) -> CacheManager:
    """Retrieve the CacheManager stored on the application."""
    return request.app.state.cache_manager


def get_invalidation_service(request: Request) -> CacheInvalidationService:
    """Retrieve the CacheInvalidationService stored on the application."""
    return request.app.state.invalidation_service


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_metrics_registry(request: Request) -> CollectorRegistry:
    return request.app.state.metrics_registry


# ============================================================================
# TYPE ALIASES FOR DEPENDENCY INJECTION
# ============================================================================
# Annotated[Type, Depends(fn)] keeps route signatures short and typed.

CacheManagerDep = Annotated[CacheManager, Depends(get_cache_manager)]
InvalidationServiceDep = Annotated[CacheInvalidationService, Depends(get_invalidation_service)]
SettingsDep = Annotated[Settings, Depends(get_app_settings)]
MetricsRegistryDep = Annotated[CollectorRegistry, Depends(get_metrics_registry)]
