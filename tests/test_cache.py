# =============================================================================
# Unit Tests — Result Cache
# =============================================================================
#
# In-memory backend with a fake clock; Redis backend against an in-process
# async fake of the few redis-py calls it makes.
# =============================================================================

from __future__ import annotations

import asyncio
import fnmatch

from redis.exceptions import ConnectionError as RedisConnectionError

from docai.models.options import FlashcardOptions, QuizOptions
from docai.models.responses import ExecutionResponse, TokenUsage
from docai.models.results import LegalScanResult
from docai.services.cache import (
    DEFAULT_TTL_SECONDS,
    InMemoryResultCache,
    RedisResultCache,
    build_cache_key,
)
from docai.services.operations import Tier
from helpers import FakeClock, run


def _response(**overrides) -> ExecutionResponse:
    fields = dict(
        content="result text",
        provider="anthropic",
        model="claude-haiku-4-5",
        tier=Tier.COMPLEX,
        tokens_used=TokenUsage(input=100, output=50, total=150),
        cost=0.00028,
        processing_time_ms=1200,
        cache_key="CONTRACT_LAW_SCAN:abc",
    )
    fields.update(overrides)
    return ExecutionResponse(**fields)


# ---------------------------------------------------------------------------
# Test: Cache Keys
# ---------------------------------------------------------------------------


class TestBuildCacheKey:
    def test_deterministic(self):
        a = build_cache_key("FLASHCARDS", "text", FlashcardOptions(card_count=5), False)
        b = build_cache_key("FLASHCARDS", "text", FlashcardOptions(card_count=5), False)
        assert a == b
        assert a.startswith("FLASHCARDS:")

    def test_each_component_changes_key(self):
        base = build_cache_key("FLASHCARDS", "text", FlashcardOptions(), False)
        assert build_cache_key("SUMMARY_SHORT", "text", FlashcardOptions(), False) != base
        assert build_cache_key("FLASHCARDS", "other", FlashcardOptions(), False) != base
        assert build_cache_key("FLASHCARDS", "text", FlashcardOptions(card_count=9), False) != base
        assert build_cache_key("FLASHCARDS", "text", FlashcardOptions(), True) != base
        assert build_cache_key("FLASHCARDS", "text", FlashcardOptions(), False, 2) != base

    def test_explicit_default_option_shares_key(self):
        implicit = build_cache_key("TEST_GENERATOR", "text", QuizOptions(), True)
        explicit = build_cache_key(
            "TEST_GENERATOR", "text", QuizOptions(include_answer_key=True), True,
        )
        assert implicit == explicit

    def test_content_is_not_embedded(self):
        key = build_cache_key("SUMMARY_SHORT", "secret contract text", None, False)
        assert "secret" not in key


# ---------------------------------------------------------------------------
# Test: In-Memory Backend
# ---------------------------------------------------------------------------


class TestInMemoryResultCache:
    def test_miss_on_absent_key(self):
        cache = InMemoryResultCache()
        assert run(cache.get("nope")) is None

    def test_hit_reports_cached_and_zero_cost(self):
        cache = InMemoryResultCache()
        run(cache.set("k", _response()))
        hit = run(cache.get("k"))
        assert hit.cached is True
        assert hit.cost == 0
        assert hit.content == "result text"

    def test_hits_do_not_share_structured_content(self):
        cache = InMemoryResultCache()
        structured = LegalScanResult(overall_risk="high", risks=[{"clause": "7.2"}])
        run(cache.set("k", _response(structured_content=structured)))
        structured.risks.append({"clause": "9.1"})

        first = run(cache.get("k"))
        first.structured_content.risks.clear()
        second = run(cache.get("k"))

        assert second.structured_content.risks == [{"clause": "7.2"}]

    def test_hit_count_increments(self):
        cache = InMemoryResultCache()
        run(cache.set("k", _response()))
        run(cache.get("k"))
        run(cache.get("k"))
        assert cache._entries["k"].hit_count == 2

    def test_entry_timestamps(self):
        clock = FakeClock()
        cache = InMemoryResultCache(clock=clock)
        run(cache.set("k", _response()))
        entry = cache._entries["k"]
        assert entry.created_at == clock.now
        assert entry.expires_at == clock.now + DEFAULT_TTL_SECONDS
        assert entry.hit_count == 0

    def test_expired_entry_is_a_miss_and_deleted(self):
        clock = FakeClock()
        cache = InMemoryResultCache(clock=clock)
        run(cache.set("k", _response()))
        clock.advance(DEFAULT_TTL_SECONDS)  # now == expires_at
        assert run(cache.get("k")) is None
        assert "k" not in cache._entries

    def test_entry_valid_just_before_expiry(self):
        clock = FakeClock()
        cache = InMemoryResultCache(clock=clock)
        run(cache.set("k", _response()))
        clock.advance(DEFAULT_TTL_SECONDS - 1)
        assert run(cache.get("k")) is not None

    def test_stored_response_is_not_mutated_by_hits(self):
        cache = InMemoryResultCache()
        run(cache.set("k", _response()))
        run(cache.get("k"))
        assert cache._entries["k"].response.cost == 0.00028
        assert cache._entries["k"].response.cached is False

    def test_sweep_removes_only_expired(self):
        clock = FakeClock()
        cache = InMemoryResultCache(clock=clock)
        run(cache.set("old", _response()))
        clock.advance(DEFAULT_TTL_SECONDS // 2)
        run(cache.set("new", _response()))
        clock.advance(DEFAULT_TTL_SECONDS // 2)
        assert run(cache.sweep()) == 1
        assert set(cache._entries) == {"new"}

    def test_clear_and_size(self):
        cache = InMemoryResultCache()
        run(cache.set("a", _response()))
        run(cache.set("b", _response()))
        assert run(cache.size()) == 2
        assert run(cache.clear()) == 2
        assert run(cache.size()) == 0

    def test_background_sweeper(self):
        clock = FakeClock()
        cache = InMemoryResultCache(ttl_seconds=10, clock=clock)

        async def scenario():
            await cache.set("k", _response())
            clock.advance(11)
            cache.start_sweeper(0.01)
            await asyncio.sleep(0.05)
            await cache.stop_sweeper()

        run(scenario())
        assert cache._entries == {}
        assert cache._sweeper is None

    def test_stop_sweeper_without_start(self):
        run(InMemoryResultCache().stop_sweeper())


# ---------------------------------------------------------------------------
# Test: Redis Backend
# ---------------------------------------------------------------------------


class FakeRedis:
    """In-process stand-in for the redis.asyncio calls the cache makes."""

    def __init__(self, fail: bool = False) -> None:
        self.store: dict[str, str] = {}
        self.ttls: dict[str, int] = {}
        self.fail = fail

    def _check(self):
        if self.fail:
            raise RedisConnectionError("connection refused")

    async def get(self, key):
        self._check()
        return self.store.get(key)

    async def set(self, key, value, ex=None, keepttl=False, xx=False):
        self._check()
        if xx and key not in self.store:
            return None
        self.store[key] = value
        if ex is not None:
            self.ttls[key] = ex
        elif not keepttl:
            self.ttls.pop(key, None)

    async def delete(self, key):
        self._check()
        self.ttls.pop(key, None)
        return 1 if self.store.pop(key, None) is not None else 0

    async def scan_iter(self, match="*", count=None):
        self._check()
        for key in list(self.store):
            if fnmatch.fnmatch(key, match):
                yield key

    async def aclose(self):
        pass


class TestRedisResultCache:
    def test_round_trip_preserves_structured_content(self):
        fake = FakeRedis()
        cache = RedisResultCache(client=fake)
        structured = LegalScanResult(overall_risk="high", risks=[{"clause": "7.2"}])
        run(cache.set("k", _response(structured_content=structured)))

        hit = run(cache.get("k"))
        assert hit.cached is True
        assert hit.cost == 0
        assert hit.structured_content.type == "legal_scan"
        assert hit.structured_content.overall_risk == "high"

    def test_set_uses_ttl_and_prefix(self):
        fake = FakeRedis()
        run(RedisResultCache(client=fake, ttl_seconds=60).set("k", _response()))
        assert fake.ttls == {"docai:result:k": 60}

    def test_hit_keeps_ttl(self):
        fake = FakeRedis()
        cache = RedisResultCache(client=fake)
        run(cache.set("k", _response()))
        run(cache.get("k"))
        assert fake.ttls["docai:result:k"] == DEFAULT_TTL_SECONDS
        assert '"hit_count": 1' in fake.store["docai:result:k"]

    def test_hit_does_not_recreate_a_key_deleted_after_read(self):
        class ClearedAfterRead(FakeRedis):
            async def get(self, key):
                raw = await super().get(key)
                await self.delete(key)
                return raw

        fake = ClearedAfterRead()
        cache = RedisResultCache(client=fake)
        run(cache.set("k", _response()))

        run(cache.get("k"))

        assert "docai:result:k" not in fake.store
        assert "docai:result:k" not in fake.ttls

    def test_expired_document_is_a_miss(self):
        fake = FakeRedis()
        clock = FakeClock()
        cache = RedisResultCache(client=fake, clock=clock)
        run(cache.set("k", _response()))
        clock.advance(DEFAULT_TTL_SECONDS)
        assert run(cache.get("k")) is None
        assert fake.store == {}

    def test_outage_degrades_to_miss(self):
        cache = RedisResultCache(client=FakeRedis(fail=True))
        run(cache.set("k", _response()))
        assert run(cache.get("k")) is None
        assert run(cache.size()) is None
        assert run(cache.clear()) == 0

    def test_clear_only_touches_own_keys(self):
        fake = FakeRedis()
        fake.store["other:key"] = "x"
        cache = RedisResultCache(client=fake)
        run(cache.set("a", _response()))
        run(cache.set("b", _response()))
        assert run(cache.size()) == 2
        assert run(cache.clear()) == 2
        assert fake.store == {"other:key": "x"}
