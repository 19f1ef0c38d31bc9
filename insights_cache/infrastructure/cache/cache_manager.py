"""
Cache-Aside Manager with Remote-First, Local-Fallback Routing

Architecture:
    CacheManager (Public API)
        ├── RemoteRouter (connection state machine + remote calls)
        │   └── RemoteCacheBackend (Redis)
        ├── EntryStore (local fallback)
        ├── CacheMetrics (hits, misses, errors, invalidations)
        └── LocalSweeper (periodic purge of expired local entries)

Connection states:
    UNCONFIGURED  No remote endpoint; local store only, forever
    CONNECTED     Remote used first for every operation
    DEGRADED      Last remote call failed; local store serves requests and
                  the remote is probed again on the next call (or after
                  CACHE_REMOTE_RETRY_INTERVAL seconds, when set)

No remote failure ever reaches the caller: it is logged, counted as an error
and moves the manager to DEGRADED. Only value (de)serialization errors are
raised.
"""

import asyncio
import inspect
import time
from collections.abc import Callable
from typing import Any

from insights_cache.core.config.constants import DEFAULT_TTL, ConnectionState, Stage
from insights_cache.core.config.settings import Settings
from insights_cache.core.exceptions import CacheError, CacheSerializationError, PatternDeleteError
from insights_cache.core.interfaces.cache import RemoteCacheBackend
from insights_cache.core.logging.logger import get_logger, log_stage
from insights_cache.infrastructure.cache.cache_keys import CacheKeys
from insights_cache.infrastructure.cache.entry_store import EntryStore
from insights_cache.infrastructure.cache.metrics import CacheMetrics
from insights_cache.infrastructure.cache.redis_client import RedisClient
from insights_cache.infrastructure.cache.serialization import decode_value, encode_value

logger = get_logger(__name__)


# =============================================================================
# LAYER 1: REMOTE ROUTING
# Owns the connection state and decides whether to attempt the remote
# =============================================================================


class RemoteRouter:
    """
    Connection state machine around the remote backend.

    Responsibility: Decide whether an operation may attempt the remote cache,
    and record the outcome of every attempt.

    The state is advisory and last-writer-wins: concurrent operations may
    observe a stale state and attempt (or skip) the remote once more, which is
    harmless for a cache.
    """

    def __init__(
        self,
        remote: RemoteCacheBackend | None,
        retry_interval: float = 0.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._remote = remote
        self._retry_interval = retry_interval
        self._clock = clock
        self._state = ConnectionState.UNCONFIGURED if remote is None else ConnectionState.DEGRADED
        self._last_failure_at: float | None = None

    @property
    def remote(self) -> RemoteCacheBackend | None:
        return self._remote

    @property
    def state(self) -> ConnectionState:
        return self._state

    def should_attempt(self) -> bool:
        """Whether the next operation may call the remote backend."""
        if self._state is ConnectionState.UNCONFIGURED:
            return False
        if self._state is ConnectionState.CONNECTED:
            return True
        if self._retry_interval <= 0 or self._last_failure_at is None:
            return True
        return self._clock() - self._last_failure_at >= self._retry_interval

    def mark_success(self) -> None:
        if self._state is ConnectionState.DEGRADED and self._last_failure_at is not None:
            log_stage(logger, Stage.REMOTE_STATE, "Remote cache recovered", state=ConnectionState.CONNECTED.value)
        if self._remote is not None:
            self._state = ConnectionState.CONNECTED
            self._last_failure_at = None

    def mark_failure(self, operation: str, error: Exception) -> None:
        if self._state is ConnectionState.CONNECTED:
            log_stage(
                logger,
                Stage.REMOTE_STATE,
                "Remote cache degraded, serving from local store",
                level="warning",
                operation=operation,
                error=str(error),
                state=ConnectionState.DEGRADED.value,
            )
        if self._remote is not None:
            self._state = ConnectionState.DEGRADED
            self._last_failure_at = self._clock()


# =============================================================================
# LAYER 2: PUBLIC API
# =============================================================================


class CacheManager:
    """
    Cache facade used by request handlers.

    Usage:
        cache = create_cache_manager(settings)
        await cache.initialize()

        value = await cache.get(keys.anchor_detail(42))
        if value is None:
            value = await load_anchor(42)
            await cache.set(keys.anchor_detail(42), value, ttl_seconds=600)

        # or, equivalently
        value = await cache.get_or_compute(keys.anchor_detail(42), lambda: load_anchor(42), 600)

        await cache.shutdown()

    Values are any JSON-serializable object. None means "absent" and is never
    stored.
    """

    def __init__(
        self,
        remote: RemoteCacheBackend | None,
        local: EntryStore | None = None,
        metrics: CacheMetrics | None = None,
        *,
        default_ttl: int = DEFAULT_TTL,
        retry_interval: float = 0.0,
        write_through_on_fallback_hit: bool = False,
        sweep_interval: float = 0.0,
        keys: CacheKeys | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize cache manager. No I/O happens until initialize().

        Args:
            remote: Remote backend, or None for local-only operation
            local: Local fallback store
            metrics: Metrics recorder shared with the admin surface
            default_ttl: TTL used when set() gets none
            retry_interval: Seconds between remote probes while degraded
                (0 probes on every call)
            write_through_on_fallback_hit: Re-populate the remote when a local
                entry serves a hit while the remote is connected
            sweep_interval: Seconds between local expiry sweeps (0 disables)
            keys: Key namespace; its clear pattern bounds clear()
            clock: Monotonic seconds source for the retry interval
        """
        self._router = RemoteRouter(remote, retry_interval=retry_interval, clock=clock)
        self._local = local or EntryStore()
        self._metrics = metrics or CacheMetrics()
        self._keys = keys or CacheKeys()
        self._default_ttl = default_ttl
        self._write_through = write_through_on_fallback_hit
        self._sweep_interval = sweep_interval
        self._sweep_task: asyncio.Task | None = None
        self._initialized = False

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def state(self) -> ConnectionState:
        return self._router.state

    @property
    def is_remote_connected(self) -> bool:
        return self._router.state is ConnectionState.CONNECTED

    @property
    def metrics(self) -> CacheMetrics:
        return self._metrics

    @property
    def local(self) -> EntryStore:
        return self._local

    @property
    def keys(self) -> CacheKeys:
        return self._keys

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def initialize(self) -> None:
        """
        Perform the initial remote handshake and start the local sweeper.

        A failed handshake leaves the manager DEGRADED; it never raises.
        """
        if self._initialized:
            return

        await self._handshake()

        if self._sweep_interval > 0:
            self._sweep_task = asyncio.create_task(self._sweep_loop())

        self._initialized = True

        log_stage(
            logger,
            Stage.INITIALIZATION,
            "Cache manager initialized",
            state=self.state.value,
            local_max_entries=self._local.max_entries,
            default_ttl=self._default_ttl,
        )

    async def shutdown(self) -> None:
        """Stop the sweeper and disconnect from the remote."""
        if self._sweep_task is not None:
            self._sweep_task.cancel()
            try:
                await self._sweep_task
            except asyncio.CancelledError:
                pass
            self._sweep_task = None

        remote = self._router.remote
        if remote is not None:
            try:
                await remote.disconnect()
            except CacheError as e:
                log_stage(logger, Stage.REMOTE_CONNECT, "Remote disconnect failed", level="warning", error=str(e))

        self._initialized = False
        log_stage(logger, Stage.INITIALIZATION, "Cache manager shutdown")

    async def reconnect(self) -> bool:
        """
        Retry the remote handshake now.

        Returns:
            bool: True if the remote cache is connected afterwards
        """
        await self._handshake()
        return self.is_remote_connected

    async def _handshake(self) -> None:
        remote = self._router.remote
        if remote is None:
            return
        try:
            await remote.connect()
        except CacheError as e:
            self._metrics.record_error()
            self._router.mark_failure("connect", e)
            log_stage(
                logger,
                Stage.REMOTE_CONNECT,
                "Remote cache unavailable, continuing with local store",
                level="warning",
                error=e.message,
            )
            return
        self._router.mark_success()

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self._sweep_interval)
            purged = await self._local.purge_expired()
            if purged:
                log_stage(logger, Stage.CACHE_SWEEP, "Expired local entries purged", level="debug", purged=purged)

    # -------------------------------------------------------------------------
    # Core Cache Operations
    # -------------------------------------------------------------------------

    async def get(self, key: str) -> Any:
        """
        Get a value: remote first, then the local store.

        Algorithm:
        1. Remote allowed: GET. A payload is a hit. An empty reply falls
           through without counting. An error degrades and is counted.
        2. Local store: a live entry is a hit.
        3. Otherwise a miss; returns None.

        Raises:
            CacheSerializationError: If a stored payload cannot be decoded
        """
        if self._router.should_attempt():
            remote = self._router.remote
            try:
                payload = await remote.get(key)
            except CacheError as e:
                self._metrics.record_error()
                self._router.mark_failure("get", e)
            else:
                self._router.mark_success()
                if payload is not None:
                    value = self._decode(payload, key)
                    self._metrics.record_hit()
                    log_stage(logger, Stage.CACHE_GET, "Cache hit (remote)", level="debug", cache_key=key)
                    return value

        entry = await self._local.get_entry(key)
        if entry is not None:
            value = self._decode(entry.value, key)
            self._metrics.record_hit()
            log_stage(logger, Stage.CACHE_GET, "Cache hit (local)", level="debug", cache_key=key)

            if self._write_through and self.is_remote_connected:
                await self._write_back(key, entry.value, entry.remaining_ttl(self._local.now()))

            return value

        self._metrics.record_miss()
        log_stage(logger, Stage.CACHE_GET, "Cache miss", level="debug", cache_key=key)
        return None

    async def set(self, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        """
        Store a value in both stores.

        Args:
            key: Cache key
            value: JSON-serializable value; None is ignored
            ttl_seconds: Expiry in seconds (default: CACHE_DEFAULT_TTL);
                a non-positive TTL means "do not cache"

        Raises:
            CacheSerializationError: If the value is not serializable
        """
        if value is None:
            return

        payload = encode_value(value, key)
        ttl = self._default_ttl if ttl_seconds is None else ttl_seconds
        if ttl <= 0:
            return

        if self._router.should_attempt():
            try:
                await self._router.remote.set(key, payload, ttl)
            except CacheError as e:
                self._metrics.record_error()
                self._router.mark_failure("set", e)
            else:
                self._router.mark_success()

        # Written even when the remote succeeded, so an outage right after
        # still finds the value locally
        await self._local.set(key, payload, ttl)
        log_stage(logger, Stage.CACHE_SET, "Cache set", level="debug", cache_key=key, ttl=ttl)

    async def delete(self, key: str) -> int:
        """
        Remove a key from both stores.

        Returns:
            int: Number of keys removed across both stores (0-2)
        """
        removed = 0

        if self._router.should_attempt():
            try:
                removed += await self._router.remote.delete(key)
            except CacheError as e:
                self._metrics.record_error()
                self._router.mark_failure("delete", e)
            else:
                self._router.mark_success()

        if await self._local.delete(key):
            removed += 1

        self._metrics.record_invalidation(removed)
        log_stage(logger, Stage.CACHE_DELETE, "Cache key invalidated", level="debug", cache_key=key, removed=removed)
        return removed

    async def delete_pattern(self, pattern: str) -> int:
        """
        Remove every key matching a glob pattern from both stores.

        A remote scan that fails part-way keeps what it already deleted; the
        failure is counted and the actual number removed is returned.

        Returns:
            int: Number of keys removed across both stores
        """
        removed = await self._delete_remote_pattern(pattern)
        removed += await self._local.delete_matching(pattern)

        self._metrics.record_invalidation(removed)
        log_stage(logger, Stage.CACHE_DELETE_PATTERN, "Cache pattern invalidated", pattern=pattern, removed=removed)
        return removed

    async def clear(self) -> int:
        """
        Remove every key owned by this cache.

        Administrative only. On the remote this is a pattern delete of the
        namespace, never FLUSHDB, so other data in the same database survives.

        Returns:
            int: Number of keys removed across both stores
        """
        removed = await self._delete_remote_pattern(self._keys.clear_pattern())
        removed += await self._local.clear()

        self._metrics.record_invalidation(removed)
        log_stage(logger, Stage.CACHE_CLEAR, "Cache cleared", level="warning", removed=removed)
        return removed

    async def _delete_remote_pattern(self, pattern: str) -> int:
        if not self._router.should_attempt():
            return 0

        try:
            removed = await self._router.remote.delete_pattern(pattern)
        except PatternDeleteError as e:
            self._metrics.record_error()
            self._router.mark_failure("delete_pattern", e)
            return e.deleted
        except CacheError as e:
            self._metrics.record_error()
            self._router.mark_failure("delete_pattern", e)
            return 0

        self._router.mark_success()
        return removed

    async def _write_back(self, key: str, payload: str, remaining_ttl: float) -> None:
        ttl = int(remaining_ttl)
        if ttl <= 0:
            return
        try:
            await self._router.remote.set(key, payload, ttl)
        except CacheError as e:
            self._metrics.record_error()
            self._router.mark_failure("write_through", e)
        else:
            self._router.mark_success()

    def _decode(self, payload: str | bytes, key: str) -> Any:
        try:
            return decode_value(payload, key)
        except CacheSerializationError:
            self._metrics.record_error()
            raise

    # -------------------------------------------------------------------------
    # Advanced Patterns
    # -------------------------------------------------------------------------

    async def get_or_compute(
        self,
        key: str,
        compute_fn: Callable[[], Any],
        ttl_seconds: int | None = None,
    ) -> Any:
        """
        Get from cache or compute and cache the result (cache-aside pattern).

        Args:
            key: Cache key
            compute_fn: Sync or async callable producing the value on a miss
            ttl_seconds: Time-to-live in seconds

        Returns:
            Cached or computed value
        """
        cached = await self.get(key)
        if cached is not None:
            return cached

        log_stage(logger, Stage.CACHE_COMPUTE, "Computing uncached value", level="debug", cache_key=key)
        value = compute_fn()
        if inspect.isawaitable(value):
            value = await value

        await self.set(key, value, ttl_seconds)
        return value

    # -------------------------------------------------------------------------
    # Monitoring
    # -------------------------------------------------------------------------

    def reset_metrics(self) -> None:
        self._metrics.reset()
        log_stage(logger, Stage.ADMIN, "Cache metrics reset")

    def stats(self) -> dict[str, Any]:
        """
        Get cache statistics.

        Returns:
            Dict with remote_connected, state, local_entries and metrics
        """
        return {
            "remote_connected": self.is_remote_connected,
            "state": self.state.value,
            "local_entries": self._local.size(),
            "metrics": self._metrics.snapshot().to_dict(),
        }

    async def health_check(self) -> dict[str, Any]:
        """
        Perform health check on the cache system.

        The cache is "healthy" with a connected remote, "degraded" when it is
        serving from the local store only. It is never unhealthy.
        """
        health = {
            "status": "healthy",
            "state": self.state.value,
            "local": {
                "status": "healthy",
                "entries": self._local.size(),
                "max_entries": self._local.max_entries,
            },
            "remote": None,
        }

        remote = self._router.remote
        if remote is None:
            health["status"] = "degraded"
            health["remote"] = {"status": "not_configured"}
            return health

        remote_health = await remote.health_check()
        health["remote"] = remote_health

        if remote_health.get("status") == "healthy":
            self._router.mark_success()
        else:
            health["status"] = "degraded"
            self._router.mark_failure("health_check", CacheError(str(remote_health.get("error", "unhealthy"))))

        health["state"] = self.state.value
        return health


# =============================================================================
# FACTORY
# =============================================================================


def create_cache_manager(
    settings: Settings,
    remote: RemoteCacheBackend | None = None,
    metrics: CacheMetrics | None = None,
    clock: Callable[[], float] = time.monotonic,
) -> CacheManager:
    """
    Build a cache manager from settings.

    Without REDIS_URL (and without an explicit ``remote``) the manager runs
    local-only for the whole process lifetime.

    Args:
        settings: Application settings
        remote: Remote backend overriding the one built from REDIS_URL
        metrics: Metrics recorder to share
        clock: Monotonic seconds source for the local store and retry interval

    Returns:
        CacheManager: Not yet initialized
    """
    cache_settings = settings.cache
    redis_settings = settings.redis

    if remote is None and redis_settings.REDIS_URL:
        remote = RedisClient(redis_settings)

    return CacheManager(
        remote,
        EntryStore(max_entries=cache_settings.CACHE_LOCAL_MAX_ENTRIES, clock=clock),
        metrics or CacheMetrics(),
        default_ttl=cache_settings.CACHE_DEFAULT_TTL,
        retry_interval=cache_settings.CACHE_REMOTE_RETRY_INTERVAL,
        write_through_on_fallback_hit=cache_settings.CACHE_WRITE_THROUGH_ON_FALLBACK_HIT,
        sweep_interval=cache_settings.CACHE_LOCAL_SWEEP_INTERVAL,
        keys=CacheKeys(cache_settings.CACHE_KEY_NAMESPACE),
        clock=clock,
    )
