"""
Integration Tests against a real Redis

Skipped unless USE_REAL_REDIS=1. REDIS_URL selects the server
(default redis://localhost:6379/15); keys are namespaced per test run.
"""

import os
import uuid

import pytest

from insights_cache.core.config.constants import ConnectionState
from insights_cache.core.config.settings import Settings
from insights_cache.infrastructure.cache.cache_manager import create_cache_manager


@pytest.fixture
async def redis_cache(use_real_redis):
    if not use_real_redis:
        pytest.skip("USE_REAL_REDIS is not set")

    settings = Settings(
        _env_file=None,
        REDIS_URL=os.getenv("REDIS_URL", "redis://localhost:6379/15"),
        CACHE_KEY_NAMESPACE=f"itest-{uuid.uuid4().hex[:8]}",
        CACHE_LOCAL_SWEEP_INTERVAL=0,
    )
    manager = create_cache_manager(settings)
    await manager.initialize()
    yield manager
    await manager.clear()
    await manager.shutdown()


@pytest.mark.integration
class TestRedisCache:
    """Round trips through a live server."""

    @pytest.mark.asyncio
    async def test_round_trip(self, redis_cache):
        key = redis_cache.keys.anchor_detail(42)

        await redis_cache.set(key, {"id": 42}, ttl_seconds=60)
        await redis_cache.local.clear()

        assert redis_cache.state is ConnectionState.CONNECTED
        assert await redis_cache.get(key) == {"id": 42}

    @pytest.mark.asyncio
    async def test_pattern_delete_spans_scan_batches(self, redis_cache):
        keys = redis_cache.keys
        for anchor_id in range(1200):
            await redis_cache.set(keys.anchor_data(anchor_id), {"id": anchor_id}, ttl_seconds=60)
        await redis_cache.set(keys.dashboard_stats(), {"total": 1200}, ttl_seconds=60)

        removed = await redis_cache.delete_pattern(keys.anchor_pattern())

        assert removed == 2400
        assert await redis_cache.get(keys.anchor_data(0)) is None
        assert await redis_cache.get(keys.dashboard_stats()) == {"total": 1200}
