import json
import logging

import redis.asyncio as redis
from redis.exceptions import RedisError

from app.config import settings

logger = logging.getLogger(__name__)

LIST_KEY_PATTERN = "products:list:*"

# Session.info slot holding product ids whose cache entries must be dropped
# once the session commits.  None stands for "listing pages only".
PENDING_INVALIDATIONS = "pending_cache_invalidations"


def list_key(limit: int, offset: int) -> str:
    return f"products:list:{limit}:{offset}"


def detail_key(product_id: int) -> str:
    return f"products:detail:{product_id}"


class CacheManager:
    """
    Cache-aside manager backed by Redis.

    All public methods are safe to call even when Redis is unavailable:
    reads return None and writes are skipped, so the service keeps
    answering from the database without raising to callers.
    """

    def __init__(self) -> None:
        self._redis: redis.Redis | None = None
        self._hits: int = 0
        self._misses: int = 0

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def connect(self) -> None:
        """Open the connection pool.  Called once at application startup."""
        self._redis = redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=2,
            socket_timeout=2,
        )
        try:
            await self._redis.ping()
            logger.info("Redis connected: %s", settings.REDIS_URL)
        except RedisError as exc:  # pragma: no cover
            logger.warning("Redis ping failed, cache disabled: %s", exc)
            await self._redis.aclose()
            self._redis = None

    async def disconnect(self) -> None:
        """Close the connection pool.  Called once at application shutdown."""
        if self._redis:
            await self._redis.aclose()
            self._redis = None

    @property
    def enabled(self) -> bool:
        return self._redis is not None

    # ------------------------------------------------------------------
    # Core cache operations
    # ------------------------------------------------------------------

    async def get(self, key: str) -> dict | list | None:
        """Return the cached value for *key*, or None on a miss / error."""
        if not self._redis:
            self._misses += 1
            return None
        try:
            data = await self._redis.get(key)
        except RedisError as exc:
            logger.debug("Cache GET error for key=%r: %s", key, exc)
            self._misses += 1
            return None
        if data is None:
            self._misses += 1
            return None
        self._hits += 1
        return json.loads(data)

    async def set(self, key: str, value: dict | list, ttl: int | None = None) -> None:
        """
        Persist *value* under *key* with an optional TTL (seconds).

        Redis failures are logged at DEBUG; a failed cache write never
        fails the request.
        """
        if not self._redis:
            return
        try:
            await self._redis.set(key, json.dumps(value), ex=ttl)
        except RedisError as exc:
            logger.debug("Cache SET error for key=%r: %s", key, exc)

    async def delete(self, key: str) -> None:
        """Delete a single exact *key*."""
        if not self._redis:
            return
        try:
            await self._redis.delete(key)
        except RedisError as exc:
            logger.debug("Cache DELETE error for key=%r: %s", key, exc)

    async def delete_pattern(self, pattern: str) -> None:
        """Delete all keys matching *pattern* using SCAN (avoids blocking KEYS)."""
        if not self._redis:
            return
        try:
            keys: list[str] = []
            async for key in self._redis.scan_iter(match=pattern):
                keys.append(key)
            if keys:
                await self._redis.delete(*keys)
                logger.debug("Cache invalidated %d key(s) matching %r", len(keys), pattern)
        except RedisError as exc:
            logger.debug("Cache DELETE_PATTERN error for pattern=%r: %s", pattern, exc)

    # ------------------------------------------------------------------
    # Domain-level invalidation
    # ------------------------------------------------------------------

    async def invalidate_product(self, product_id: int | None = None) -> None:
        """
        Drop every cached listing page, plus the detail entry for
        *product_id* when given.
        """
        await self.delete_pattern(LIST_KEY_PATTERN)
        if product_id is not None:
            await self.delete(detail_key(product_id))

    async def invalidate_committed(self, session_info: dict) -> None:
        """
        Apply the invalidations queued by ``defer_invalidation`` on a
        session that has just committed.  Listing pages are dropped once,
        however many writes the transaction made.
        """
        pending = session_info.pop(PENDING_INVALIDATIONS, None)
        if not pending:
            return
        await self.delete_pattern(LIST_KEY_PATTERN)
        for product_id in pending - {None}:
            await self.delete(detail_key(product_id))

    # ------------------------------------------------------------------
    # Observability
    # ------------------------------------------------------------------

    @property
    def stats(self) -> dict:
        """Return a snapshot of hit/miss counters for the metrics endpoint."""
        total = self._hits + self._misses
        return {
            "enabled": self.enabled,
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round(self._hits / total * 100, 1) if total > 0 else 0.0,
        }


def defer_invalidation(session_info: dict, product_id: int | None = None) -> None:
    """Queue an invalidation to run after the owning session commits."""
    session_info.setdefault(PENDING_INVALIDATIONS, set()).add(product_id)


def discard_invalidations(session_info: dict) -> None:
    """Forget queued invalidations of a session that rolled back."""
    session_info.pop(PENDING_INVALIDATIONS, None)


# Module-level singleton shared across all request handlers.
cache = CacheManager()
