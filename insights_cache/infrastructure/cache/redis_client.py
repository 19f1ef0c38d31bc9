"""
Redis Remote Cache Backend with Connection Pooling

Architecture:
    RedisClient (Public API, implements RemoteCacheBackend)
        ├── ConnectionManager (Connection lifecycle)
        ├── OperationExecutor (Bounded command execution with error mapping)
        └── HealthMonitor (Health checks and pool metrics)

Failure contract:
    - Unreachable server, socket errors and commands exceeding
      REDIS_OPERATION_TIMEOUT raise CacheConnectionError
    - Commands rejected by the server raise CacheKeyError
    - A pattern delete that fails part-way raises PatternDeleteError carrying
      the number of keys already removed
    - Replies are raw bytes; payload decoding belongs to the caller, so an
      undecodable value surfaces as a serialization error, not a Redis one
"""

import asyncio
import time
from collections.abc import Awaitable
from typing import Any, TypeVar

import redis.asyncio as redis
from redis.asyncio.connection import ConnectionPool
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError
from redis.exceptions import TimeoutError as RedisTimeoutError

from insights_cache.core.config.constants import Stage
from insights_cache.core.config.settings import RedisSettings
from insights_cache.core.exceptions import (
    CacheConnectionError,
    CacheError,
    CacheKeyError,
    ConfigurationError,
    PatternDeleteError,
)
from insights_cache.core.logging.logger import get_logger, log_stage

logger = get_logger(__name__)

T = TypeVar("T")

# Errors meaning "the server could not be reached in time"
_UNREACHABLE_ERRORS = (RedisConnectionError, RedisTimeoutError, asyncio.TimeoutError, OSError)


# =============================================================================
# LAYER 1: CONNECTION MANAGEMENT
# Handles connection lifecycle and pooling
# =============================================================================


class ConnectionManager:
    """
    Manages Redis connection lifecycle and pooling.

    Responsibility: Pool creation, handshake and cleanup.

    The client object is kept after a failed handshake: the pool opens fresh
    connections on demand, so a later command succeeds as soon as the server
    is back, without rebuilding anything.
    """

    def __init__(self, settings: RedisSettings):
        """
        Initialize connection manager.

        Args:
            settings: Redis settings section
        """
        self._settings = settings
        self._pool: ConnectionPool | None = None
        self._client: redis.Redis | None = None
        self._is_connected = False

    def _build_client(self) -> redis.Redis:
        """Create the pool and client from REDIS_URL."""
        url = self._settings.REDIS_URL
        if not url:
            raise ConfigurationError(
                "REDIS_URL is not set", details={"setting": "REDIS_URL"}
            ).with_suggestion("Leave the remote cache unconfigured instead of creating a RedisClient")

        try:
            self._pool = ConnectionPool.from_url(
                url,
                max_connections=self._settings.REDIS_MAX_CONNECTIONS,
                socket_connect_timeout=self._settings.REDIS_SOCKET_CONNECT_TIMEOUT,
                socket_timeout=self._settings.REDIS_SOCKET_TIMEOUT,
                health_check_interval=self._settings.REDIS_HEALTH_CHECK_INTERVAL,
            )
        except ValueError as e:
            raise CacheConnectionError.from_exception(e, message=f"Invalid REDIS_URL: {e}")

        self._client = redis.Redis(connection_pool=self._pool)
        return self._client

    async def connect(self) -> redis.Redis:
        """
        Establish the pool (once) and verify the server answers a PING.

        Returns:
            redis.Redis: Client bound to the pool

        Raises:
            ConfigurationError: If REDIS_URL is missing
            CacheConnectionError: If the URL is invalid or the handshake fails
        """
        client = self._client or self._build_client()

        try:
            await asyncio.wait_for(client.ping(), timeout=self._settings.REDIS_OPERATION_TIMEOUT)
        except _UNREACHABLE_ERRORS as e:
            self._is_connected = False
            log_stage(
                logger,
                Stage.REMOTE_CONNECT,
                "Redis handshake failed",
                level="warning",
                error=str(e) or e.__class__.__name__,
                **self.endpoint(),
            )
            raise CacheConnectionError.from_exception(
                e, message=f"Failed to connect to Redis: {e or e.__class__.__name__}", **self.endpoint()
            )
        except RedisError as e:
            self._is_connected = False
            raise CacheConnectionError.from_exception(e, message=f"Redis rejected handshake: {e}")

        self._is_connected = True

        log_stage(
            logger,
            Stage.REMOTE_CONNECT,
            "Redis connected successfully",
            max_connections=self._settings.REDIS_MAX_CONNECTIONS,
            **self.endpoint(),
        )

        return client

    async def disconnect(self) -> None:
        """Close the client and every pooled connection."""
        if self._client:
            await self._client.aclose()

        if self._pool:
            await self._pool.disconnect()

        self._client = None
        self._pool = None
        self._is_connected = False

        log_stage(logger, Stage.REMOTE_CONNECT, "Redis disconnected")

    def endpoint(self) -> dict[str, Any]:
        """Host, port and db of the pool, without credentials."""
        if not self._pool:
            return {}
        kwargs = self._pool.connection_kwargs
        return {"host": kwargs.get("host"), "port": kwargs.get("port"), "db": kwargs.get("db")}

    def get_client(self) -> redis.Redis | None:
        return self._client

    def get_pool(self) -> ConnectionPool | None:
        return self._pool

    def is_connected(self) -> bool:
        return self._is_connected

    def mark(self, connected: bool) -> None:
        """Record the outcome of the latest command."""
        self._is_connected = connected


# =============================================================================
# LAYER 2: OPERATION EXECUTOR
# Executes Redis commands with a hard timeout and consistent error mapping
# =============================================================================


class OperationExecutor:
    """
    Executes Redis operations with consistent error handling.

    Responsibility: Bound every command by REDIS_OPERATION_TIMEOUT and map
    redis-py errors onto the cache exception hierarchy.

    Error Mapping:
    - ConnectionError / TimeoutError / asyncio timeout -> CacheConnectionError
    - any other RedisError -> CacheKeyError
    """

    def __init__(self, connection_manager: ConnectionManager, settings: RedisSettings):
        self._conn_mgr = connection_manager
        self._timeout = settings.REDIS_OPERATION_TIMEOUT
        self._scan_count = settings.REDIS_SCAN_COUNT

    def _client(self) -> redis.Redis:
        client = self._conn_mgr.get_client()
        if client is None:
            raise CacheConnectionError("Redis client is not connected")
        return client

    async def _run(self, command: str, awaitable: Awaitable[T], **context) -> T:
        try:
            result = await asyncio.wait_for(awaitable, timeout=self._timeout)
        except _UNREACHABLE_ERRORS as e:
            self._conn_mgr.mark(False)
            error = str(e) or e.__class__.__name__
            log_stage(
                logger, Stage.REMOTE_COMMAND, f"Redis {command} failed", level="warning", error=error, **context
            )
            raise CacheConnectionError.from_exception(
                e, message=f"Redis {command} failed: {error}", command=command, **context
            )
        except RedisError as e:
            log_stage(
                logger, Stage.REMOTE_COMMAND, f"Redis {command} rejected", level="warning", error=str(e), **context
            )
            raise CacheKeyError.from_exception(
                e, message=f"Redis {command} failed: {e}", command=command, **context
            )

        self._conn_mgr.mark(True)
        return result

    async def get(self, key: str) -> bytes | None:
        """Redis GET. The raw payload is returned undecoded."""
        client = self._client()
        return await self._run("GET", client.get(key), key=key)

    async def set(self, key: str, value: str, ttl: int) -> bool:
        """Redis SET with EX."""
        client = self._client()
        result = await self._run("SET", client.set(key, value, ex=ttl), key=key)
        return bool(result)

    async def delete(self, *keys: str) -> int:
        """Redis DEL."""
        if not keys:
            return 0
        client = self._client()
        return int(await self._run("DEL", client.delete(*keys), keys=len(keys)))

    async def delete_pattern(self, pattern: str) -> int:
        """
        Delete matching keys with SCAN MATCH COUNT + DEL, one batch at a time.

        SCAN never blocks the server the way KEYS or FLUSHDB would, and keys
        deleted during the iteration do not disturb the cursor.

        Raises:
            PatternDeleteError: On failure part-way; already deleted keys stay
                deleted and are reported in ``deleted``
        """
        client = self._client()
        cursor = 0
        deleted = 0

        try:
            while True:
                cursor, keys = await self._run(
                    "SCAN", client.scan(cursor=cursor, match=pattern, count=self._scan_count), pattern=pattern
                )
                if keys:
                    deleted += int(await self._run("DEL", client.delete(*keys), pattern=pattern))
                if int(cursor) == 0:
                    break
        except CacheError as e:
            raise PatternDeleteError(
                f"Pattern delete interrupted after {deleted} keys: {e.message}",
                deleted=deleted,
                details={"pattern": pattern, "original_error": e.__class__.__name__},
            ) from e

        return deleted


# =============================================================================
# LAYER 3: HEALTH MONITORING
# Health checks and connection pool metrics
# =============================================================================


class HealthMonitor:
    """
    Monitors Redis health and connection pool metrics.

    Metrics Tracked:
    - Connection status
    - Ping latency
    - Pool size and utilization
    - Pool exhaustion warnings (>80% utilized)
    """

    def __init__(self, connection_manager: ConnectionManager, settings: RedisSettings):
        self._conn_mgr = connection_manager
        self._settings = settings

    async def health_check(self) -> dict[str, Any]:
        """
        Perform health check on Redis connection.

        Never raises; failures are reported in the returned dict.
        """
        health = {
            "status": "healthy",
            "connected": self._conn_mgr.is_connected(),
            **self._conn_mgr.endpoint(),
            "pool_size": 0,
            "pool_in_use": 0,
            "pool_utilization_pct": 0.0,
            "pool_warning": False,
            "ping_latency_ms": None,
        }

        client = self._conn_mgr.get_client()
        if not client:
            health["status"] = "unhealthy"
            health["error"] = "Client not initialized"
            return health

        try:
            start = time.perf_counter()
            await asyncio.wait_for(client.ping(), timeout=self._settings.REDIS_OPERATION_TIMEOUT)
            health["ping_latency_ms"] = round((time.perf_counter() - start) * 1000, 2)
            self._conn_mgr.mark(True)
            health["connected"] = True
        except (*_UNREACHABLE_ERRORS, RedisError) as e:
            self._conn_mgr.mark(False)
            health["status"] = "unhealthy"
            health["connected"] = False
            health["error"] = str(e) or e.__class__.__name__
            return health

        pool = self._conn_mgr.get_pool()
        if pool:
            health["pool_size"] = pool.max_connections
            in_use = len(getattr(pool, "_in_use_connections", ()))
            health["pool_in_use"] = in_use

            utilization = 100.0 * in_use / pool.max_connections if pool.max_connections else 0.0
            health["pool_utilization_pct"] = round(utilization, 1)

            if utilization > 80:
                health["pool_warning"] = True
                logger.warning(
                    "Redis pool utilization high",
                    pool_utilization=utilization,
                    max_connections=pool.max_connections,
                )

        return health


# =============================================================================
# LAYER 4: PUBLIC API
# Clean interface that coordinates all layers
# =============================================================================


class RedisClient:
    """
    Async Redis remote cache backend.

    Usage:
        client = RedisClient(settings.redis)
        await client.connect()

        await client.set("anchor:detail:42", payload, ttl=600)
        payload = await client.get("anchor:detail:42")
        removed = await client.delete_pattern("anchor:*")

        await client.disconnect()

    Architecture:
        RedisClient (this class)
            ├── ConnectionManager (connection lifecycle)
            ├── OperationExecutor (command execution)
            └── HealthMonitor (health checks)
    """

    def __init__(self, settings: RedisSettings):
        """
        Initialize Redis client. No I/O happens until connect().

        Args:
            settings: Redis settings section
        """
        self._settings = settings

        # Build layers
        self._conn_mgr = ConnectionManager(settings)
        self._executor = OperationExecutor(self._conn_mgr, settings)
        self._health_monitor = HealthMonitor(self._conn_mgr, settings)

    async def connect(self) -> None:
        """
        Establish connection to Redis.

        Raises:
            CacheConnectionError: If connection fails
        """
        await self._conn_mgr.connect()

    async def disconnect(self) -> None:
        await self._conn_mgr.disconnect()

    async def ping(self) -> bool:
        """Check that Redis answers. Never raises."""
        health = await self._health_monitor.health_check()
        return health["status"] == "healthy"

    def is_connected(self) -> bool:
        return self._conn_mgr.is_connected()

    # -------------------------------------------------------------------------
    # Delegate to OperationExecutor
    # -------------------------------------------------------------------------

    async def get(self, key: str) -> bytes | None:
        """Get the raw payload from Redis."""
        return await self._executor.get(key)

    async def set(self, key: str, value: str, ttl: int) -> bool:
        """Set value in Redis with an expiry in seconds."""
        return await self._executor.set(key, value, ttl)

    async def delete(self, *keys: str) -> int:
        """Delete keys from Redis."""
        return await self._executor.delete(*keys)

    async def delete_pattern(self, pattern: str) -> int:
        """Delete every key matching a glob pattern."""
        return await self._executor.delete_pattern(pattern)

    async def health_check(self) -> dict[str, Any]:
        """Perform health check on Redis connection."""
        return await self._health_monitor.health_check()
