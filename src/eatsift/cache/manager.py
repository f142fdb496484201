"""Result cache — Short-lived storage for successful search pages.

Keys are built by the engine from the backend name and ``Query.cache_key()``,
so the same filters in a different order hit the same entry. Values are
stored as JSON in either Redis or a process-local dict; both expire entries
after a TTL. Cache trouble is never fatal: failed reads are misses and
failed writes are dropped.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from eatsift.config.settings import CacheSettings

logger = logging.getLogger(__name__)


class MemoryStore:
    """Process-local store mirroring the subset of the Redis API the cache uses.

    Expired entries are swept on every write, and once ``max_entries`` is
    reached the oldest write is evicted.
    """

    def __init__(self, clock: Any = time.monotonic, max_entries: int = 10_000) -> None:
        self._clock = clock
        self._max_entries = max_entries
        self._entries: dict[str, tuple[float | None, str]] = {}

    async def get(self, key: str) -> str | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, payload = entry
        if expires_at is not None and expires_at <= self._clock():
            del self._entries[key]
            return None
        return payload

    async def set(self, key: str, value: str, ex: int | None = None) -> None:
        now = self._clock()
        self._prune(now)
        self._entries.pop(key, None)
        while len(self._entries) >= self._max_entries:
            del self._entries[next(iter(self._entries))]
        self._entries[key] = (now + ex if ex else None, value)

    def _prune(self, now: float) -> None:
        expired = [k for k, (expires_at, _) in self._entries.items() if expires_at is not None and expires_at <= now]
        for key in expired:
            del self._entries[key]

    async def flushdb(self) -> None:
        self._entries.clear()

    async def aclose(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class CacheManager:
    """JSON cache over Redis, falling back to memory when Redis is unreachable.

    Attributes:
        settings: Cache configuration.
    """

    def __init__(self, settings: CacheSettings, store: Any = None) -> None:
        self.settings = settings
        self._backend = "custom" if store is not None else "memory"
        self._store: Any = store if store is not None else MemoryStore(max_entries=settings.max_entries)

    @property
    def backend(self) -> str:
        """Backend actually in use (``redis`` falls back to ``memory``)."""
        return self._backend

    async def initialize(self) -> None:
        """Connect to Redis when configured; otherwise keep the memory store."""
        if self.settings.backend != "redis" or self._backend == "custom":
            logger.info("Using in-memory cache backend")
            return

        client = aioredis.from_url(self.settings.redis_url, decode_responses=True)
        try:
            await client.ping()
        except (RedisError, OSError):
            logger.warning(
                "Redis at %s unreachable, falling back to memory cache",
                self.settings.redis_url,
                exc_info=True,
            )
            await client.aclose()
            return

        self._store = client
        self._backend = "redis"
        logger.info("Connected to Redis cache at %s", self.settings.redis_url)

    async def shutdown(self) -> None:
        """Close the store's connection."""
        await self._store.aclose()

    async def get(self, key: str) -> Any | None:
        """Decoded value for ``key``, or None on a miss or any cache error."""
        try:
            payload = await self._store.get(key)
            return json.loads(payload) if payload else None
        except (RedisError, OSError, ValueError):
            logger.debug("Cache get failed for key: %s", key, exc_info=True)
            return None

    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        """Store ``value`` as JSON for ``ttl`` seconds (default ``settings.ttl_seconds``)."""
        try:
            payload = json.dumps(value, default=str)
            await self._store.set(key, payload, ex=ttl or self.settings.ttl_seconds)
        except (RedisError, OSError, TypeError, ValueError):
            logger.debug("Cache set failed for key: %s", key, exc_info=True)

    async def clear(self) -> None:
        """Drop every cached entry."""
        try:
            await self._store.flushdb()
        except (RedisError, OSError):
            logger.debug("Cache clear failed", exc_info=True)
