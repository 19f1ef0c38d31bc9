"""
Cache Metrics Recorder with Prometheus Export

This module provides the process-wide cache counters:
- Hits, misses, errors and invalidations
- Point-in-time snapshots with a derived hit rate
- Explicit reset for administration
- A Prometheus custom collector that exports snapshots on scrape

Architectural Decision: plain counters behind one lock, exported lazily
- Recording is a few integer additions under a threading.Lock
- Prometheus reads a snapshot at scrape time, so reset() is reflected
  immediately and no prometheus objects sit on the hot path
"""

import threading
from collections.abc import Callable, Iterator
from dataclasses import asdict, dataclass
from typing import Any

from prometheus_client.core import CounterMetricFamily, GaugeMetricFamily
from prometheus_client.registry import Collector


@dataclass(frozen=True)
class CacheMetricsSnapshot:
    """
    Point-in-time copy of the cache counters.

    ``hit_rate`` is derived from this snapshot's own hits and misses, so it is
    always consistent with the counters next to it.
    """

    hits: int
    misses: int
    errors: int
    invalidations: int

    @property
    def hit_rate(self) -> float:
        """Fraction of lookups served from cache, 0.0 when there were none."""
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["hit_rate"] = self.hit_rate
        return data


class CacheMetrics:
    """
    Thread-safe cache counters.

    Usage:
        metrics = CacheMetrics()
        metrics.record_hit()
        metrics.record_invalidation(count=12)

        snapshot = metrics.snapshot()
        print(snapshot.hit_rate)

    Counters only grow until reset(); a concurrent reset may interleave with
    increments but never tears a single counter.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        self._errors = 0
        self._invalidations = 0

    def record_hit(self) -> None:
        with self._lock:
            self._hits += 1

    def record_miss(self) -> None:
        with self._lock:
            self._misses += 1

    def record_error(self) -> None:
        with self._lock:
            self._errors += 1

    def record_invalidation(self, count: int = 1) -> None:
        """Add ``count`` removed keys to the invalidation counter."""
        if count <= 0:
            return
        with self._lock:
            self._invalidations += count

    def snapshot(self) -> CacheMetricsSnapshot:
        """Copy all counters under one lock acquisition."""
        with self._lock:
            return CacheMetricsSnapshot(
                hits=self._hits,
                misses=self._misses,
                errors=self._errors,
                invalidations=self._invalidations,
            )

    def reset(self) -> None:
        """Zero all counters."""
        with self._lock:
            self._hits = 0
            self._misses = 0
            self._errors = 0
            self._invalidations = 0


# =============================================================================
# PROMETHEUS EXPORT
# =============================================================================


class CacheMetricsCollector(Collector):
    """
    Prometheus custom collector over a CacheMetrics instance.

    Register it on a CollectorRegistry; every scrape reads a fresh snapshot.

    Exported metrics:
    - insights_cache_hits_total
    - insights_cache_misses_total
    - insights_cache_errors_total
    - insights_cache_invalidations_total
    - insights_cache_hit_ratio
    - insights_cache_remote_connected (1 when the remote cache is in use)

    Usage:
        registry = CollectorRegistry()
        registry.register(CacheMetricsCollector(metrics, lambda: cache.is_remote_connected))
        output = generate_latest(registry)
    """

    def __init__(self, metrics: CacheMetrics, remote_connected: Callable[[], bool] | None = None):
        self._metrics = metrics
        self._remote_connected = remote_connected

    def collect(self) -> Iterator:
        snapshot = self._metrics.snapshot()

        yield CounterMetricFamily(
            "insights_cache_hits", "Cache lookups served from either store", value=snapshot.hits
        )
        yield CounterMetricFamily(
            "insights_cache_misses", "Cache lookups found in neither store", value=snapshot.misses
        )
        yield CounterMetricFamily(
            "insights_cache_errors", "Remote cache failures and decode errors", value=snapshot.errors
        )
        yield CounterMetricFamily(
            "insights_cache_invalidations", "Keys removed by invalidation", value=snapshot.invalidations
        )
        yield GaugeMetricFamily(
            "insights_cache_hit_ratio", "Hits over hits plus misses", value=snapshot.hit_rate
        )

        if self._remote_connected is not None:
            yield GaugeMetricFamily(
                "insights_cache_remote_connected",
                "Whether the remote cache is currently in use",
                value=1.0 if self._remote_connected() else 0.0,
            )
