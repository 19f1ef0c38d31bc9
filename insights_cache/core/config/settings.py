"""
Centralized Configuration Module using Pydantic Settings

This module provides type-safe, environment-based configuration for the cache
layer. Configuration is only read here; the cache components receive plain
values or the nested settings objects through their constructors.

Architectural Decision: Pydantic Settings for type safety and validation
- Environment variable loading with .env support
- Type validation at startup (fail fast on misconfiguration)
- Easy testing with reload_settings()
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from insights_cache.core.config.constants import (
    ANCHOR_TTL,
    CORRIDOR_TTL,
    DASHBOARD_TTL,
    DEFAULT_TTL,
    LOCAL_CACHE_MAX_ENTRIES,
    LOCAL_CACHE_SWEEP_INTERVAL,
    REDIS_SCAN_COUNT,
    CacheKind,
)


class RedisSettings(BaseSettings):
    """
    Remote cache (Redis) configuration.

    An absent REDIS_URL means the cache runs local-only for the whole process
    lifetime.

    Every remote command is bounded by REDIS_OPERATION_TIMEOUT, which must stay
    well below the request deadline of the calling handler.
    """

    REDIS_URL: str | None = Field(default=None, description="Redis URL, e.g. redis://localhost:6379/0")
    REDIS_MAX_CONNECTIONS: int = Field(default=50, description="Maximum pooled connections")
    REDIS_SOCKET_TIMEOUT: float = Field(default=1.0, description="Socket read/write timeout in seconds")
    REDIS_SOCKET_CONNECT_TIMEOUT: float = Field(default=1.0, description="Connection timeout in seconds")
    REDIS_OPERATION_TIMEOUT: float = Field(default=0.5, description="Upper bound for one remote command")
    REDIS_HEALTH_CHECK_INTERVAL: int = Field(default=30, description="Pool health check interval in seconds")
    REDIS_SCAN_COUNT: int = Field(default=REDIS_SCAN_COUNT, description="SCAN COUNT hint for pattern deletes")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class CacheSettings(BaseSettings):
    """
    Cache behaviour and per-kind TTLs.

    TTLs come from the original API handlers: corridors 5 minutes, anchors
    10 minutes, dashboard 1 minute.
    """

    CACHE_DEFAULT_TTL: int = Field(default=DEFAULT_TTL, description="TTL used when set() gets no TTL")
    CACHE_CORRIDOR_TTL: int = Field(default=CORRIDOR_TTL, description="Corridor data TTL")
    CACHE_ANCHOR_TTL: int = Field(default=ANCHOR_TTL, description="Anchor data TTL")
    CACHE_DASHBOARD_TTL: int = Field(default=DASHBOARD_TTL, description="Dashboard aggregate TTL")
    CACHE_LOCAL_MAX_ENTRIES: int = Field(
        default=LOCAL_CACHE_MAX_ENTRIES, description="Maximum entries held by the local fallback store"
    )
    CACHE_LOCAL_SWEEP_INTERVAL: float = Field(
        default=LOCAL_CACHE_SWEEP_INTERVAL, description="Seconds between expired-entry sweeps (0 disables)"
    )
    CACHE_REMOTE_RETRY_INTERVAL: float = Field(
        default=0.0, description="Seconds to wait after a remote failure before probing again (0 = next call)"
    )
    CACHE_WRITE_THROUGH_ON_FALLBACK_HIT: bool = Field(
        default=False, description="Re-populate the remote cache when the local store serves a hit"
    )
    CACHE_KEY_NAMESPACE: str | None = Field(default=None, description="Optional prefix for every key")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)

    def ttl_for(self, kind: CacheKind | str) -> int:
        """
        Get the configured TTL for a cache kind.

        Unknown kinds get CACHE_DEFAULT_TTL.
        """
        ttls = {
            CacheKind.CORRIDOR.value: self.CACHE_CORRIDOR_TTL,
            CacheKind.ANCHOR.value: self.CACHE_ANCHOR_TTL,
            CacheKind.DASHBOARD.value: self.CACHE_DASHBOARD_TTL,
        }
        token = kind.value if isinstance(kind, CacheKind) else str(kind)
        return ttls.get(token, self.CACHE_DEFAULT_TTL)


class LoggingSettings(BaseSettings):
    """
    Logging configuration for structured logging.

    Architectural Decision: structlog for production-grade logging
    """

    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: Literal["json", "console"] = Field(default="json", description="Log output format")

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class ApplicationSettings(BaseSettings):
    """General application settings."""

    ENVIRONMENT: Literal["development", "test", "staging", "production"] = Field(
        default="development",
        description="Application environment"
    )
    APP_NAME: str = Field(default="Insights Cache", description="Application name")
    APP_VERSION: str = Field(default="1.0.0", description="Application version")
    API_BASE_PATH: str = Field(default="/api/v1", description="Prefix for all routes")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class Settings(BaseSettings):
    """
    Main settings class that aggregates all configuration sections.

    Usage:
        from insights_cache.core.config.settings import get_settings

        settings = get_settings()
        redis_url = settings.redis.REDIS_URL
        anchor_ttl = settings.cache.ttl_for(CacheKind.ANCHOR)
    """

    # Redis settings
    REDIS_URL: str | None = Field(default=None, description="Redis URL, e.g. redis://localhost:6379/0")
    REDIS_MAX_CONNECTIONS: int = Field(default=50, description="Maximum pooled connections")
    REDIS_SOCKET_TIMEOUT: float = Field(default=1.0, description="Socket read/write timeout in seconds")
    REDIS_SOCKET_CONNECT_TIMEOUT: float = Field(default=1.0, description="Connection timeout in seconds")
    REDIS_OPERATION_TIMEOUT: float = Field(default=0.5, description="Upper bound for one remote command")
    REDIS_HEALTH_CHECK_INTERVAL: int = Field(default=30, description="Pool health check interval in seconds")
    REDIS_SCAN_COUNT: int = Field(default=REDIS_SCAN_COUNT, description="SCAN COUNT hint for pattern deletes")

    # Cache settings
    CACHE_DEFAULT_TTL: int = Field(default=DEFAULT_TTL, description="TTL used when set() gets no TTL")
    CACHE_CORRIDOR_TTL: int = Field(default=CORRIDOR_TTL, description="Corridor data TTL")
    CACHE_ANCHOR_TTL: int = Field(default=ANCHOR_TTL, description="Anchor data TTL")
    CACHE_DASHBOARD_TTL: int = Field(default=DASHBOARD_TTL, description="Dashboard aggregate TTL")
    CACHE_LOCAL_MAX_ENTRIES: int = Field(default=LOCAL_CACHE_MAX_ENTRIES, description="Local store capacity")
    CACHE_LOCAL_SWEEP_INTERVAL: float = Field(default=LOCAL_CACHE_SWEEP_INTERVAL, description="Sweep interval")
    CACHE_REMOTE_RETRY_INTERVAL: float = Field(default=0.0, description="Remote probe interval after failure")
    CACHE_WRITE_THROUGH_ON_FALLBACK_HIT: bool = Field(default=False, description="Write-through on local hit")
    CACHE_KEY_NAMESPACE: str | None = Field(default=None, description="Optional prefix for every key")

    # Logging settings
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: Literal["json", "console"] = Field(default="json", description="Log output format")

    # Application settings
    ENVIRONMENT: Literal["development", "test", "staging", "production"] = Field(
        default="development",
        description="Application environment"
    )
    APP_NAME: str = Field(default="Insights Cache", description="Application name")
    APP_VERSION: str = Field(default="1.0.0", description="Application version")
    API_BASE_PATH: str = Field(default="/api/v1", description="Prefix for all routes")

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    @field_validator("REDIS_URL", "CACHE_KEY_NAMESPACE", mode="before")
    @classmethod
    def blank_as_none(cls, v):
        """Treat an empty environment value as unset."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def redis(self) -> 'RedisSettings':
        """Get Redis settings."""
        return RedisSettings(
            REDIS_URL=self.REDIS_URL,
            REDIS_MAX_CONNECTIONS=self.REDIS_MAX_CONNECTIONS,
            REDIS_SOCKET_TIMEOUT=self.REDIS_SOCKET_TIMEOUT,
            REDIS_SOCKET_CONNECT_TIMEOUT=self.REDIS_SOCKET_CONNECT_TIMEOUT,
            REDIS_OPERATION_TIMEOUT=self.REDIS_OPERATION_TIMEOUT,
            REDIS_HEALTH_CHECK_INTERVAL=self.REDIS_HEALTH_CHECK_INTERVAL,
            REDIS_SCAN_COUNT=self.REDIS_SCAN_COUNT,
        )

    @property
    def cache(self) -> 'CacheSettings':
        """Get cache settings."""
        return CacheSettings(
            CACHE_DEFAULT_TTL=self.CACHE_DEFAULT_TTL,
            CACHE_CORRIDOR_TTL=self.CACHE_CORRIDOR_TTL,
            CACHE_ANCHOR_TTL=self.CACHE_ANCHOR_TTL,
            CACHE_DASHBOARD_TTL=self.CACHE_DASHBOARD_TTL,
            CACHE_LOCAL_MAX_ENTRIES=self.CACHE_LOCAL_MAX_ENTRIES,
            CACHE_LOCAL_SWEEP_INTERVAL=self.CACHE_LOCAL_SWEEP_INTERVAL,
            CACHE_REMOTE_RETRY_INTERVAL=self.CACHE_REMOTE_RETRY_INTERVAL,
            CACHE_WRITE_THROUGH_ON_FALLBACK_HIT=self.CACHE_WRITE_THROUGH_ON_FALLBACK_HIT,
            CACHE_KEY_NAMESPACE=self.CACHE_KEY_NAMESPACE,
        )

    @property
    def logging(self) -> 'LoggingSettings':
        """Get logging settings."""
        return LoggingSettings(
            LOG_LEVEL=self.LOG_LEVEL,
            LOG_FORMAT=self.LOG_FORMAT,
        )

    @property
    def app(self) -> 'ApplicationSettings':
        """Get application settings."""
        return ApplicationSettings(
            ENVIRONMENT=self.ENVIRONMENT,
            APP_NAME=self.APP_NAME,
            APP_VERSION=self.APP_VERSION,
            API_BASE_PATH=self.API_BASE_PATH,
        )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"  # Ignore extra environment variables
    )


# Global settings instance (lazy)
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get the global settings instance.

    Returns:
        Settings: Global settings instance
    """
    global _settings

    if _settings is None:
        _settings = Settings()

    return _settings


def reload_settings() -> Settings:
    """
    Reload settings (useful for testing).

    Returns:
        Settings: New settings instance
    """
    global _settings
    _settings = Settings()
    return _settings
