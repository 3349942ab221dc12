# =============================================================================
# Unit Tests — Metrics Collector
# =============================================================================

import threading

from docai.services.metrics import MetricsCollector, MetricsSnapshot
from docai.services.operations import Tier


class TestMetricsCollector:
    def test_starts_at_zero(self):
        snapshot = MetricsCollector().snapshot()
        assert snapshot.total_requests == 0
        assert snapshot.total_cost == 0
        assert snapshot.tier_counts == {t.value: 0 for t in Tier}
        assert snapshot.cache_hit_rate == 0.0

    def test_records_successes_and_errors(self):
        metrics = MetricsCollector()
        metrics.record_success(Tier.COMPLEX, 0.002)
        metrics.record_success(Tier.SIMPLE, 0.0)
        metrics.record_error(Tier.COMPLEX)

        snapshot = metrics.snapshot()
        assert snapshot.total_requests == 2
        assert snapshot.total_cost == 0.002
        assert snapshot.tier_counts["complex"] == 1
        assert snapshot.tier_counts["simple"] == 1
        assert snapshot.tier_errors["complex"] == 1

    def test_hit_rate(self):
        metrics = MetricsCollector()
        metrics.record_cache_hit()
        metrics.record_cache_miss()
        metrics.record_cache_miss()
        metrics.record_cache_miss()
        assert metrics.snapshot().cache_hit_rate == 0.25

    def test_snapshot_is_a_copy(self):
        metrics = MetricsCollector()
        snapshot = metrics.snapshot()
        metrics.record_success(Tier.MEDIUM, 1.0)
        assert snapshot.tier_counts["medium"] == 0

    def test_reset_is_explicit(self):
        metrics = MetricsCollector()
        metrics.record_success(Tier.MEDIUM, 1.0)
        metrics.record_cache_hit()
        metrics.reset()
        assert metrics.snapshot() == MetricsSnapshot(
            tier_counts={t.value: 0 for t in Tier},
            tier_errors={t.value: 0 for t in Tier},
        )

    def test_concurrent_updates(self):
        metrics = MetricsCollector()

        def worker():
            for _ in range(1000):
                metrics.record_success(Tier.SIMPLE, 0.0)
                metrics.record_cache_miss()

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        snapshot = metrics.snapshot()
        assert snapshot.total_requests == 8000
        assert snapshot.cache_misses == 8000
