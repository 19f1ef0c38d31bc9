"""
Unit Tests for the Cache Metrics Recorder

Tests counter arithmetic, snapshot consistency, thread safety and the
Prometheus export.
"""

import threading

import pytest
from prometheus_client import CollectorRegistry, generate_latest

from insights_cache.infrastructure.cache.metrics import (
    CacheMetrics,
    CacheMetricsCollector,
    CacheMetricsSnapshot,
)


@pytest.mark.unit
class TestCacheMetrics:
    """Test counter recording."""

    def test_starts_at_zero(self):
        snapshot = CacheMetrics().snapshot()

        assert snapshot == CacheMetricsSnapshot(hits=0, misses=0, errors=0, invalidations=0)
        assert snapshot.hit_rate == 0.0

    def test_records_each_counter(self):
        metrics = CacheMetrics()
        metrics.record_hit()
        metrics.record_hit()
        metrics.record_miss()
        metrics.record_error()
        metrics.record_invalidation(5)

        snapshot = metrics.snapshot()

        assert snapshot.hits == 2
        assert snapshot.misses == 1
        assert snapshot.errors == 1
        assert snapshot.invalidations == 5

    def test_invalidation_ignores_non_positive_counts(self):
        metrics = CacheMetrics()
        metrics.record_invalidation(0)
        metrics.record_invalidation(-3)

        assert metrics.snapshot().invalidations == 0

    def test_hit_rate_is_a_fraction(self):
        metrics = CacheMetrics()
        for _ in range(3):
            metrics.record_hit()
        metrics.record_miss()

        assert metrics.snapshot().hit_rate == 0.75

    def test_reset_zeroes_all_counters(self):
        metrics = CacheMetrics()
        metrics.record_hit()
        metrics.record_error()
        metrics.record_invalidation(2)

        metrics.reset()

        assert metrics.snapshot().to_dict() == {
            "hits": 0,
            "misses": 0,
            "errors": 0,
            "invalidations": 0,
            "hit_rate": 0.0,
        }

    def test_snapshot_is_immutable_copy(self):
        metrics = CacheMetrics()
        snapshot = metrics.snapshot()
        metrics.record_hit()

        assert snapshot.hits == 0


@pytest.mark.unit
class TestCacheMetricsConcurrency:
    """Counters stay exact under concurrent recording."""

    def test_concurrent_recording_is_lossless(self):
        metrics = CacheMetrics()
        threads_count = 8
        per_thread = 2000

        def worker():
            for _ in range(per_thread):
                metrics.record_hit()
                metrics.record_miss()
                metrics.record_invalidation(2)

        threads = [threading.Thread(target=worker) for _ in range(threads_count)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        snapshot = metrics.snapshot()
        assert snapshot.hits == threads_count * per_thread
        assert snapshot.misses == threads_count * per_thread
        assert snapshot.invalidations == 2 * threads_count * per_thread
        assert snapshot.hit_rate == 0.5


@pytest.mark.unit
class TestCacheMetricsCollector:
    """Test the Prometheus export."""

    def test_exports_counters_and_gauges(self):
        metrics = CacheMetrics()
        metrics.record_hit()
        metrics.record_miss()
        metrics.record_invalidation(4)

        registry = CollectorRegistry()
        registry.register(CacheMetricsCollector(metrics, lambda: True))
        output = generate_latest(registry).decode("utf-8")

        assert "insights_cache_hits_total 1.0" in output
        assert "insights_cache_misses_total 1.0" in output
        assert "insights_cache_errors_total 0.0" in output
        assert "insights_cache_invalidations_total 4.0" in output
        assert "insights_cache_hit_ratio 0.5" in output
        assert "insights_cache_remote_connected 1.0" in output

    def test_reset_is_reflected_on_next_scrape(self):
        metrics = CacheMetrics()
        metrics.record_hit()

        registry = CollectorRegistry()
        registry.register(CacheMetricsCollector(metrics))
        metrics.reset()

        output = generate_latest(registry).decode("utf-8")
        assert "insights_cache_hits_total 0.0" in output
        assert "insights_cache_remote_connected" not in output
