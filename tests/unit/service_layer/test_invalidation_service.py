"""
Unit Tests for CacheInvalidationService

Each domain event must remove exactly its documented scope and leave every
other cached key in place.
"""

import pytest

from insights_cache.application.services.invalidation_service import (
    CacheInvalidationService,
    InvalidationEvent,
)
from insights_cache.core.config.constants import CacheKind


@pytest.fixture
async def populated_cache(cache_manager):
    """Cache holding keys of every kind."""
    keys = cache_manager.keys
    for key in (
        keys.corridor_metrics("USDC-EURT"),
        keys.corridor_list(50, 0, {"asset": "USDC"}),
        keys.corridor_detail("USDC-EURT"),
        keys.anchor_data(42),
        keys.anchor_detail(42),
        keys.anchor_assets(42),
        keys.anchor_detail(7),
        keys.anchor_list(10, 0),
        keys.dashboard_stats(),
        keys.dashboard_overview(),
    ):
        await cache_manager.set(key, {"key": key}, ttl_seconds=300)
    return cache_manager


@pytest.fixture
def invalidation(populated_cache):
    return CacheInvalidationService(populated_cache)


async def cached(cache, key) -> bool:
    return await cache.get(key) is not None


@pytest.mark.unit
class TestDomainEvents:
    """Test the event to scope mapping."""

    @pytest.mark.asyncio
    async def test_metrics_ingestion_clears_corridors_and_dashboard(self, invalidation, populated_cache):
        keys = populated_cache.keys

        removed = await invalidation.on_metrics_ingestion_complete()

        assert removed == 10  # 5 keys, both stores
        assert not await cached(populated_cache, keys.corridor_metrics("USDC-EURT"))
        assert not await cached(populated_cache, keys.dashboard_stats())
        assert await cached(populated_cache, keys.anchor_detail(42))

    @pytest.mark.asyncio
    async def test_anchor_created_clears_anchors_only(self, invalidation, populated_cache):
        keys = populated_cache.keys

        await invalidation.on_anchor_created()

        assert not await cached(populated_cache, keys.anchor_list(10, 0))
        assert not await cached(populated_cache, keys.anchor_detail(7))
        assert await cached(populated_cache, keys.dashboard_overview())
        assert await cached(populated_cache, keys.corridor_detail("USDC-EURT"))

    @pytest.mark.asyncio
    async def test_anchor_metrics_updated_clears_anchors_and_dashboard(self, invalidation, populated_cache):
        keys = populated_cache.keys

        await invalidation.on_anchor_metrics_updated(42)

        assert not await cached(populated_cache, keys.anchor_detail(7))
        assert not await cached(populated_cache, keys.dashboard_stats())
        assert await cached(populated_cache, keys.corridor_metrics("USDC-EURT"))

    @pytest.mark.asyncio
    async def test_anchor_asset_created_is_targeted(self, invalidation, populated_cache):
        keys = populated_cache.keys

        removed = await invalidation.on_anchor_asset_created(42)

        assert removed == 4
        assert not await cached(populated_cache, keys.anchor_assets(42))
        assert not await cached(populated_cache, keys.anchor_detail(42))
        assert await cached(populated_cache, keys.anchor_data(42))
        assert await cached(populated_cache, keys.anchor_detail(7))

    @pytest.mark.asyncio
    async def test_corridor_created_clears_corridors_only(self, invalidation, populated_cache):
        keys = populated_cache.keys

        await invalidation.on_corridor_created()

        assert not await cached(populated_cache, keys.corridor_list(50, 0, {"asset": "USDC"}))
        assert await cached(populated_cache, keys.dashboard_stats())

    @pytest.mark.asyncio
    async def test_corridor_metrics_updated(self, invalidation, populated_cache):
        keys = populated_cache.keys

        await invalidation.on_corridor_metrics_updated("USDC-EURT")

        assert not await cached(populated_cache, keys.corridor_detail("USDC-EURT"))
        assert not await cached(populated_cache, keys.dashboard_overview())
        assert await cached(populated_cache, keys.anchor_data(42))

    @pytest.mark.asyncio
    @pytest.mark.parametrize("kind", [CacheKind.DASHBOARD, "dashboard"])
    async def test_entity_updated(self, invalidation, populated_cache, kind):
        keys = populated_cache.keys

        assert await invalidation.on_entity_updated(kind) == 4
        assert not await cached(populated_cache, keys.dashboard_stats())
        assert await cached(populated_cache, keys.anchor_data(42))

    @pytest.mark.asyncio
    async def test_entity_updated_accepts_kinds_outside_the_enum(self, invalidation, populated_cache):
        await populated_cache.set("wallet:detail:1", {"id": 1}, ttl_seconds=60)

        assert await invalidation.on_entity_updated("wallet") == 2
        assert await populated_cache.get("wallet:detail:1") is None
        assert await cached(populated_cache, populated_cache.keys.anchor_data(42))


@pytest.mark.unit
class TestScopeHelpers:
    """Test the single-scope helpers."""

    @pytest.mark.asyncio
    async def test_invalidate_anchor(self, invalidation, populated_cache):
        keys = populated_cache.keys

        assert await invalidation.invalidate_anchor(42) == 6
        assert await cached(populated_cache, keys.anchor_detail(7))

    @pytest.mark.asyncio
    async def test_invalidate_corridor_metrics(self, invalidation, populated_cache):
        keys = populated_cache.keys

        assert await invalidation.invalidate_corridor_metrics("USDC-EURT") == 2
        assert await cached(populated_cache, keys.corridor_detail("USDC-EURT"))

    @pytest.mark.asyncio
    async def test_invalidate_all(self, invalidation, populated_cache):
        assert await invalidation.invalidate_all() == 20
        assert populated_cache.local.size() == 0

    @pytest.mark.asyncio
    async def test_repeated_invalidation_is_idempotent(self, invalidation):
        await invalidation.on_metrics_ingestion_complete()

        assert await invalidation.on_metrics_ingestion_complete() == 0


@pytest.mark.unit
class TestEventDispatch:
    """Test handle() dispatching."""

    @pytest.mark.asyncio
    async def test_dispatch_by_enum(self, invalidation, populated_cache):
        removed = await invalidation.handle(InvalidationEvent.ANCHOR_ASSET_CREATED, anchor_id=42)

        assert removed == 4
        assert not await cached(populated_cache, populated_cache.keys.anchor_assets(42))

    @pytest.mark.asyncio
    async def test_dispatch_by_name(self, invalidation):
        assert await invalidation.handle("corridor_created") == 6

    @pytest.mark.asyncio
    async def test_unknown_event(self, invalidation):
        with pytest.raises(ValueError):
            await invalidation.handle("wallet_created")

    @pytest.mark.asyncio
    async def test_missing_parameter(self, invalidation):
        with pytest.raises(TypeError):
            await invalidation.handle(InvalidationEvent.CORRIDOR_METRICS_UPDATED)

    @pytest.mark.asyncio
    async def test_invalidation_survives_remote_outage(self, invalidation, populated_cache, fake_remote):
        fake_remote.available = False

        removed = await invalidation.on_anchor_created()

        assert removed == 5
        assert populated_cache.metrics.snapshot().errors == 1
