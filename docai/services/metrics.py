# =============================================================================
# Metrics Collector — Per-Service Counters
# =============================================================================
#
# Counters: requests served by a provider, total cost, per-tier successes,
# per-tier failed attempts, cache hits and misses (hit rate is derived).
#
# DESIGN DECISION: One collector per DocumentAIService instance, not a
# module-level global. Counters are per-process and never aggregated across
# instances; they reset only through reset().
#
# Thread safety: a threading.Lock guards every mutation. Sections are short
# in-memory updates, so the lock is never held across an await.
# =============================================================================

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field

from docai.services.operations import Tier

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MetricsSnapshot:
    """Read-only copy of the counters at one point in time."""

    total_requests: int = 0
    total_cost: float = 0.0
    tier_counts: dict[str, int] = field(default_factory=dict)
    tier_errors: dict[str, int] = field(default_factory=dict)
    cache_hits: int = 0
    cache_misses: int = 0

    @property
    def cache_hit_rate(self) -> float:
        lookups = self.cache_hits + self.cache_misses
        return self.cache_hits / lookups if lookups else 0.0


class MetricsCollector:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._reset_counters()

    def _reset_counters(self) -> None:
        self._total_requests = 0
        self._total_cost = 0.0
        self._tier_counts = {tier.value: 0 for tier in Tier}
        self._tier_errors = {tier.value: 0 for tier in Tier}
        self._cache_hits = 0
        self._cache_misses = 0

    # --- Recording ---

    def record_success(self, tier: Tier, cost: float) -> None:
        """A provider on ``tier`` produced the response."""
        with self._lock:
            self._total_requests += 1
            self._total_cost += cost
            self._tier_counts[tier.value] += 1

    def record_error(self, tier: Tier) -> None:
        """One attempt on ``tier`` failed."""
        with self._lock:
            self._tier_errors[tier.value] += 1

    def record_cache_hit(self) -> None:
        with self._lock:
            self._cache_hits += 1

    def record_cache_miss(self) -> None:
        with self._lock:
            self._cache_misses += 1

    # --- Reading ---

    def snapshot(self) -> MetricsSnapshot:
        with self._lock:
            return MetricsSnapshot(
                total_requests=self._total_requests,
                total_cost=round(self._total_cost, 6),
                tier_counts=dict(self._tier_counts),
                tier_errors=dict(self._tier_errors),
                cache_hits=self._cache_hits,
                cache_misses=self._cache_misses,
            )

    def reset(self) -> None:
        with self._lock:
            self._reset_counters()
        logger.info("Metrics counters reset")
