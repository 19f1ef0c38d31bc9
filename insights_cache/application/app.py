"""
FastAPI Application Factory

Builds the administrative HTTP surface of the cache layer and owns the
lifecycle of the shared CacheManager: initialize on startup, shutdown on exit.

Run with:
    uvicorn --factory insights_cache.application.app:create_app
"""

import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from prometheus_client import CollectorRegistry

from insights_cache.application.api.routes.admin import router as admin_router
from insights_cache.application.api.routes.health import router as health_router
from insights_cache.application.services.invalidation_service import CacheInvalidationService
from insights_cache.core.config.constants import HEADER_REQUEST_ID
from insights_cache.core.config.settings import Settings, get_settings
from insights_cache.core.exceptions import InsightsCacheError
from insights_cache.core.logging.logger import clear_request_id, get_logger, set_request_id, setup_logging
from insights_cache.infrastructure.cache.cache_manager import CacheManager, create_cache_manager
from insights_cache.infrastructure.cache.metrics import CacheMetricsCollector

logger = get_logger(__name__)


# ============================================================================
# Application Lifespan
# ============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifecycle (startup and shutdown).
    """
    settings: Settings = app.state.settings
    cache_manager: CacheManager = app.state.cache_manager

    logger.info(
        "Starting Insights Cache",
        environment=settings.app.ENVIRONMENT,
        version=settings.app.APP_VERSION,
    )

    try:
        # Never raises: an unreachable Redis leaves the cache degraded
        await cache_manager.initialize()
        logger.info("Cache initialized", state=cache_manager.state.value)

        logger.info("Application startup complete")
        yield

    finally:
        logger.info("Shutting down application")
        await cache_manager.shutdown()
        logger.info("Application shutdown complete")


# ============================================================================
# Application Factory
# ============================================================================


def create_app(cache_manager: CacheManager | None = None, settings: Settings | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        cache_manager: Cache facade to serve; built from settings when omitted
        settings: Settings to use; the global settings when omitted

    Returns:
        FastAPI: Configured application instance
    """
    settings = settings or get_settings()
    setup_logging(log_level=settings.logging.LOG_LEVEL, log_format=settings.logging.LOG_FORMAT)

    cache_manager = cache_manager or create_cache_manager(settings)

    app = FastAPI(
        title=settings.app.APP_NAME,
        version=settings.app.APP_VERSION,
        description="Cache-aside layer with Redis and local fallback",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Components shared by every request, see api/dependencies.py
    metrics_registry = CollectorRegistry()
    metrics_registry.register(
        CacheMetricsCollector(cache_manager.metrics, lambda: cache_manager.is_remote_connected)
    )

    app.state.settings = settings
    app.state.cache_manager = cache_manager
    app.state.invalidation_service = CacheInvalidationService(cache_manager)
    app.state.metrics_registry = metrics_registry

    # ========================================================================
    # ROUTER REGISTRATION
    # ========================================================================
    # Example URLs:
    # - GET  /api/v1/health
    # - GET  /api/v1/admin/cache/stats
    # - POST /api/v1/admin/cache/clear

    base_path = settings.app.API_BASE_PATH

    app.include_router(health_router, prefix=base_path)
    app.include_router(admin_router, prefix=base_path)

    # ========================================================================
    # MIDDLEWARE
    # ========================================================================

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        """
        Inject request ID into all requests for log correlation.
        """
        request_id = request.headers.get(HEADER_REQUEST_ID) or str(uuid.uuid4())
        set_request_id(request_id)

        try:
            response = await call_next(request)
            response.headers[HEADER_REQUEST_ID] = request_id
            return response

        finally:
            clear_request_id()

    # ========================================================================
    # EXCEPTION HANDLERS
    # ========================================================================

    @app.exception_handler(InsightsCacheError)
    async def cache_exception_handler(request: Request, exc: InsightsCacheError):
        """Handle cache layer exceptions."""
        request_id = exc.request_id or request.headers.get(HEADER_REQUEST_ID)
        logger.error(
            f"Cache exception: {exc.message}", error_type=type(exc).__name__, request_id=request_id
        )

        body = exc.to_dict()
        body["request_id"] = request_id
        return JSONResponse(status_code=500, content=body, headers={HEADER_REQUEST_ID: request_id or ""})

    @app.get("/", tags=["Root"])
    async def root():
        """
        Root endpoint with API information.
        """
        return {
            "name": settings.app.APP_NAME,
            "version": settings.app.APP_VERSION,
            "environment": settings.app.ENVIRONMENT,
            "docs": "/docs",
            "health": f"{base_path}/health",
        }

    return app
