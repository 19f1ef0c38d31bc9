"""
Cache Invalidation Service
==========================

Maps domain mutation events onto cache deletions.

Call these methods AFTER the triggering write has committed. Invalidating
before the commit lets a concurrent reader re-populate the cache from the
old data.

EVENT MAP
---------
| Event                      | Invalidated scope                          |
|----------------------------|--------------------------------------------|
| metrics_ingested           | corridor:*, dashboard:*                    |
| entity_updated(kind)       | <kind>:*                                   |
| anchor_created             | anchor:*                                   |
| anchor_metrics_updated     | anchor:*, dashboard:*                      |
| anchor_asset_created(id)   | anchor:assets:<id>, anchor:detail:<id>     |
| corridor_created           | corridor:*                                 |
| corridor_metrics_updated   | corridor:*, dashboard:*                    |
| invalidate_all             | every key under the cache namespace        |

Every operation is idempotent: running it twice, or in any order relative to
other invalidations, leaves the cache in the same state. Failures of the
remote cache are absorbed by the CacheManager, so these methods never raise
on an outage.
"""

from enum import Enum
from typing import Any

from insights_cache.core.config.constants import CacheKind, Stage
from insights_cache.core.logging.logger import get_logger, log_stage
from insights_cache.infrastructure.cache.cache_manager import CacheManager

logger = get_logger(__name__)


class InvalidationEvent(str, Enum):
    """Domain events that make cached data stale."""

    METRICS_INGESTED = "metrics_ingested"
    ENTITY_UPDATED = "entity_updated"
    ANCHOR_CREATED = "anchor_created"
    ANCHOR_METRICS_UPDATED = "anchor_metrics_updated"
    ANCHOR_ASSET_CREATED = "anchor_asset_created"
    CORRIDOR_CREATED = "corridor_created"
    CORRIDOR_METRICS_UPDATED = "corridor_metrics_updated"
    INVALIDATE_ALL = "invalidate_all"


class CacheInvalidationService:
    """
    Invalidation orchestrator.

    Usage:
        invalidation = CacheInvalidationService(cache)

        await repository.save(anchor)
        await invalidation.on_anchor_created()

        # or via the generic dispatcher
        await invalidation.handle(InvalidationEvent.ANCHOR_ASSET_CREATED, anchor_id=42)

    Every method returns the number of keys removed across both stores.
    """

    def __init__(self, cache: CacheManager):
        self._cache = cache
        self._keys = cache.keys

    # =========================================================================
    # Scope helpers
    # =========================================================================

    async def invalidate_kind(self, kind: CacheKind | str) -> int:
        """Invalidate every key of one kind."""
        return await self._cache.delete_pattern(self._keys.pattern(kind))

    async def invalidate_corridors(self) -> int:
        return await self.invalidate_kind(CacheKind.CORRIDOR)

    async def invalidate_anchors(self) -> int:
        return await self.invalidate_kind(CacheKind.ANCHOR)

    async def invalidate_dashboard(self) -> int:
        return await self.invalidate_kind(CacheKind.DASHBOARD)

    async def invalidate_corridor_metrics(self, corridor_key: str) -> int:
        """Invalidate the cached metrics of one corridor."""
        return await self._cache.delete(self._keys.corridor_metrics(corridor_key))

    async def invalidate_anchor(self, anchor_id: Any) -> int:
        """Invalidate the data, detail and assets keys of one anchor."""
        removed = 0
        for key in (
            self._keys.anchor_data(anchor_id),
            self._keys.anchor_detail(anchor_id),
            self._keys.anchor_assets(anchor_id),
        ):
            removed += await self._cache.delete(key)
        return removed

    async def invalidate_all(self) -> int:
        """Full refresh: clear everything under the cache namespace."""
        removed = await self._cache.clear()
        self._log(InvalidationEvent.INVALIDATE_ALL, removed)
        return removed

    # =========================================================================
    # Domain events
    # =========================================================================

    async def on_metrics_ingestion_complete(self) -> int:
        removed = await self.invalidate_corridors()
        removed += await self.invalidate_dashboard()
        self._log(InvalidationEvent.METRICS_INGESTED, removed)
        return removed

    async def on_entity_updated(self, kind: CacheKind | str) -> int:
        """Invalidate one kind. Any kind token is accepted, not only CacheKind members."""
        removed = await self.invalidate_kind(kind)
        self._log(InvalidationEvent.ENTITY_UPDATED, removed, kind=str(getattr(kind, "value", kind)))
        return removed

    async def on_anchor_created(self) -> int:
        removed = await self.invalidate_anchors()
        self._log(InvalidationEvent.ANCHOR_CREATED, removed)
        return removed

    async def on_anchor_metrics_updated(self, anchor_id: Any) -> int:
        removed = await self.invalidate_anchors()
        removed += await self.invalidate_dashboard()
        self._log(InvalidationEvent.ANCHOR_METRICS_UPDATED, removed, anchor_id=str(anchor_id))
        return removed

    async def on_anchor_asset_created(self, anchor_id: Any) -> int:
        removed = await self._cache.delete(self._keys.anchor_assets(anchor_id))
        removed += await self._cache.delete(self._keys.anchor_detail(anchor_id))
        self._log(InvalidationEvent.ANCHOR_ASSET_CREATED, removed, anchor_id=str(anchor_id))
        return removed

    async def on_corridor_created(self) -> int:
        removed = await self.invalidate_corridors()
        self._log(InvalidationEvent.CORRIDOR_CREATED, removed)
        return removed

    async def on_corridor_metrics_updated(self, corridor_key: str) -> int:
        removed = await self.invalidate_corridors()
        removed += await self.invalidate_dashboard()
        self._log(InvalidationEvent.CORRIDOR_METRICS_UPDATED, removed, corridor_key=corridor_key)
        return removed

    async def handle(self, event: InvalidationEvent | str, **params: Any) -> int:
        """
        Dispatch a domain event by name.

        Args:
            event: Event to handle
            **params: Event parameters (kind, anchor_id, corridor_key)

        Returns:
            int: Number of keys removed

        Raises:
            ValueError: If the event is unknown
            TypeError: If a required parameter is missing
        """
        event = InvalidationEvent(event)
        handlers = {
            InvalidationEvent.METRICS_INGESTED: self.on_metrics_ingestion_complete,
            InvalidationEvent.ENTITY_UPDATED: self.on_entity_updated,
            InvalidationEvent.ANCHOR_CREATED: self.on_anchor_created,
            InvalidationEvent.ANCHOR_METRICS_UPDATED: self.on_anchor_metrics_updated,
            InvalidationEvent.ANCHOR_ASSET_CREATED: self.on_anchor_asset_created,
            InvalidationEvent.CORRIDOR_CREATED: self.on_corridor_created,
            InvalidationEvent.CORRIDOR_METRICS_UPDATED: self.on_corridor_metrics_updated,
            InvalidationEvent.INVALIDATE_ALL: self.invalidate_all,
        }
        return await handlers[event](**params)

    def _log(self, event: InvalidationEvent, removed: int, **context) -> None:
        log_stage(logger, Stage.INVALIDATION, "Cache invalidated", invalidation_event=event.value, removed=removed, **context)
