# =============================================================================
# Result Cache — Content-Fingerprint Keyed Responses With TTL
# =============================================================================
#
# Key = sha256 over (operation, sha256(content), non-default options,
# is_paid_user[, part_number]). Identical requests inside the TTL window
# are served from the cache: no provider call, cost reported as 0.
#
# Backends (selected by DOCAI_CACHE_BACKEND):
#   - InMemoryResultCache (default) — dict guarded by a threading.Lock.
#     Expired entries are deleted lazily on get() and by an hourly sweep
#     task. Per-process: lost on restart, not shared between instances.
#   - RedisResultCache — entries stored with SET ... EX ttl, so every
#     instance behind a load balancer shares hits. A Redis outage degrades
#     to cache misses with a warning, never to failed requests.
#
# No LRU cap: capacity is bounded only by TTL.
# =============================================================================

from __future__ import annotations

import asyncio
import hashlib
import json
import logging
import threading
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from docai.models.options import BaseOptions
from docai.models.responses import ExecutionResponse

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 24 * 60 * 60


# ---------------------------------------------------------------------------
# Cache Keys
# ---------------------------------------------------------------------------


def build_cache_key(
    operation: str,
    content: str,
    options: BaseOptions | None,
    is_paid_user: bool,
    part_number: int | None = None,
) -> str:
    """
    Deterministic cache key for a request.

    Options are compared by their non-default values, so an omitted option
    and the same option spelled out with its default share a key.
    """
    payload: dict[str, Any] = {
        "operation": operation,
        "content": hashlib.sha256(content.encode("utf-8")).hexdigest(),
        "options": (
            options.model_dump(mode="json", exclude_defaults=True)
            if options is not None else {}
        ),
        "is_paid": is_paid_user,
    }
    if part_number is not None:
        payload["part"] = part_number

    digest = hashlib.sha256(
        json.dumps(payload, sort_keys=True, separators=(",", ":")).encode("utf-8")
    ).hexdigest()
    return f"{operation}:{digest}"


# ---------------------------------------------------------------------------
# Interface
# ---------------------------------------------------------------------------


@dataclass
class CacheEntry:
    response: ExecutionResponse
    created_at: float
    expires_at: float
    hit_count: int = 0


class ResultCache(ABC):
    """Interface every cache backend implements."""

    @abstractmethod
    async def get(self, key: str) -> ExecutionResponse | None:
        """
        Return the cached response (cached=True, cost=0), or None when the
        key is absent or expired.
        """

    @abstractmethod
    async def set(self, key: str, response: ExecutionResponse) -> None:
        """Store ``response`` under ``key`` for the configured TTL."""

    @abstractmethod
    async def clear(self) -> int:
        """Delete every entry. Returns the number deleted."""

    @abstractmethod
    async def size(self) -> int | None:
        """Number of live entries, or None if the backend cannot tell."""

    async def sweep(self) -> int:
        """Delete expired entries. Returns the number deleted."""
        return 0

    def start_sweeper(self, interval: float) -> None:
        """Start periodic sweeping. Backends with native expiry ignore this."""

    async def stop_sweeper(self) -> None:
        pass

    async def close(self) -> None:
        pass


def _as_cache_hit(response: ExecutionResponse) -> ExecutionResponse:
    return response.model_copy(update={"cached": True, "cost": 0.0}, deep=True)


# ---------------------------------------------------------------------------
# In-Memory Backend
# ---------------------------------------------------------------------------


class InMemoryResultCache(ResultCache):
    """
    Process-local cache.

    ``clock`` returns seconds and is injectable so tests can move time
    forward without sleeping.
    """

    def __init__(
        self,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._sweeper: asyncio.Task | None = None

    async def get(self, key: str) -> ExecutionResponse | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() >= entry.expires_at:
                del self._entries[key]
                logger.debug("Cache entry expired on read: %s", key)
                return None
            entry.hit_count += 1
            response = entry.response
        return _as_cache_hit(response)

    async def set(self, key: str, response: ExecutionResponse) -> None:
        now = self._clock()
        entry = CacheEntry(
            response=response.model_copy(deep=True),
            created_at=now,
            expires_at=now + self._ttl,
        )
        with self._lock:
            self._entries[key] = entry

    async def clear(self) -> int:
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        logger.info("Cleared %d cache entries", count)
        return count

    async def size(self) -> int:
        with self._lock:
            return len(self._entries)

    async def sweep(self) -> int:
        now = self._clock()
        with self._lock:
            expired = [k for k, e in self._entries.items() if now >= e.expires_at]
            for key in expired:
                del self._entries[key]
            remaining = len(self._entries)
        if expired:
            logger.info(
                "Cache sweep removed %d expired entries (%d remaining)",
                len(expired), remaining,
            )
        return len(expired)

    def start_sweeper(self, interval: float) -> None:
        """Run sweep() every ``interval`` seconds on the running event loop."""
        if self._sweeper is not None and not self._sweeper.done():
            return
        self._sweeper = asyncio.create_task(self._sweep_forever(interval))
        logger.info("Cache sweeper started (interval=%ss)", interval)

    async def stop_sweeper(self) -> None:
        task, self._sweeper = self._sweeper, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Cache sweeper stopped")

    async def _sweep_forever(self, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            await self.sweep()


# ---------------------------------------------------------------------------
# Redis Backend
# ---------------------------------------------------------------------------


class RedisResultCache(ResultCache):
    """
    Cache shared between instances through Redis.

    Entries are JSON documents under ``docai:result:<key>``. Redis expires
    them natively, so there is nothing to sweep.
    """

    KEY_PREFIX = "docai:result:"

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379/2",
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        client: Any = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._redis_url = redis_url
        self._ttl = ttl_seconds
        self._client = client
        self._clock = clock

    def _get_client(self) -> Any:
        if self._client is None:
            self._client = aioredis.from_url(
                self._redis_url, encoding="utf-8", decode_responses=True,
            )
        return self._client

    async def get(self, key: str) -> ExecutionResponse | None:
        redis_key = self.KEY_PREFIX + key
        try:
            client = self._get_client()
            raw = await client.get(redis_key)
            if raw is None:
                return None
            data = json.loads(raw)
            if self._clock() >= data["expires_at"]:
                await client.delete(redis_key)
                return None
            # XX: never recreate a key deleted or expired since the GET.
            # Concurrent hits may each write the same count.
            data["hit_count"] += 1
            await client.set(redis_key, json.dumps(data), keepttl=True, xx=True)
            response = ExecutionResponse.model_validate(data["response"])
        except (RedisError, OSError, ValueError, KeyError) as e:
            logger.warning("Redis cache get failed for %s: %s", key, e)
            return None
        return _as_cache_hit(response)

    async def set(self, key: str, response: ExecutionResponse) -> None:
        now = self._clock()
        payload = json.dumps({
            "response": response.model_dump(mode="json"),
            "created_at": now,
            "expires_at": now + self._ttl,
            "hit_count": 0,
        })
        try:
            await self._get_client().set(self.KEY_PREFIX + key, payload, ex=self._ttl)
        except (RedisError, OSError) as e:
            logger.warning("Redis cache set failed for %s: %s", key, e)

    async def clear(self) -> int:
        deleted = 0
        try:
            client = self._get_client()
            async for redis_key in client.scan_iter(match=self.KEY_PREFIX + "*", count=100):
                deleted += await client.delete(redis_key)
        except (RedisError, OSError) as e:
            logger.warning("Redis cache clear failed: %s", e)
        logger.info("Cleared %d cache entries", deleted)
        return deleted

    async def size(self) -> int | None:
        try:
            count = 0
            async for _ in self._get_client().scan_iter(
                match=self.KEY_PREFIX + "*", count=100,
            ):
                count += 1
            return count
        except (RedisError, OSError) as e:
            logger.warning("Redis cache size failed: %s", e)
            return None

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


def create_result_cache(settings) -> ResultCache:
    """Build the backend named by ``settings.cache_backend``."""
    if settings.cache_backend == "redis":
        logger.info("Using Redis result cache at %s", settings.redis_url)
        return RedisResultCache(
            redis_url=settings.redis_url,
            ttl_seconds=settings.cache_ttl_seconds,
        )
    return InMemoryResultCache(ttl_seconds=settings.cache_ttl_seconds)
