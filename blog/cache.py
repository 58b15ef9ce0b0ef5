import json
import logging

import redis.asyncio as redis

from blog.config import settings

logger = logging.getLogger(__name__)

# Key layout (every key starts with settings.CACHE_KEY_PREFIX):
#   <prefix>:articles:list:<category value | all>   JSON list of article dicts
#   <prefix>:articles:detail:<id>                    JSON article dict
LIST_SCOPE = "articles:list"
DETAIL_SCOPE = "articles:detail"


class CacheManager:
    """
    Redis cache-aside store for article reads.

    A missing or failing Redis never surfaces to callers: lookups count as
    misses and writes or deletes are skipped with a debug log line.
    """

    def __init__(self, prefix: str | None = None) -> None:
        self._redis: redis.Redis | None = None
        self._prefix = prefix or settings.CACHE_KEY_PREFIX
        self._hits = 0
        self._misses = 0

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def connect(self) -> None:
        client = redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=2,
            socket_timeout=2,
        )
        try:
            await client.ping()
        except Exception as exc:  # pragma: no cover
            logger.warning("Redis unavailable at %s, article cache off: %s", settings.REDIS_URL, exc)
            await client.aclose()
            return
        self._redis = client
        logger.info("Article cache using Redis at %s", settings.REDIS_URL)

    async def disconnect(self) -> None:
        client, self._redis = self._redis, None
        if client is not None:
            await client.aclose()

    # ------------------------------------------------------------------
    # Keys
    # ------------------------------------------------------------------

    def _key(self, scope: str, name: object) -> str:
        return f"{self._prefix}:{scope}:{name}"

    def article_list_key(self, category: str | None) -> str:
        return self._key(LIST_SCOPE, category or "all")

    def article_detail_key(self, article_id: int) -> str:
        return self._key(DETAIL_SCOPE, article_id)

    # ------------------------------------------------------------------
    # Reads and writes
    # ------------------------------------------------------------------

    async def get(self, key: str) -> dict | list | None:
        """Cached JSON value for *key*, or None."""
        raw = None
        if self._redis is not None:
            try:
                raw = await self._redis.get(key)
            except Exception as exc:
                logger.debug("Cache read failed for %r: %s", key, exc)
        if raw is None:
            self._misses += 1
            return None
        self._hits += 1
        return json.loads(raw)

    async def set(self, key: str, value: dict | list, ttl: int | None = None) -> None:
        if self._redis is None:
            return
        try:
            await self._redis.set(key, json.dumps(value, default=str), ex=ttl)
        except Exception as exc:
            logger.debug("Cache write failed for %r: %s", key, exc)

    async def delete(self, *keys: str) -> None:
        if self._redis is None or not keys:
            return
        try:
            await self._redis.delete(*keys)
        except Exception as exc:
            logger.debug("Cache delete failed for %r: %s", keys, exc)

    async def delete_scope(self, scope: str) -> None:
        """Delete every key under *scope*, walking the keyspace with SCAN."""
        if self._redis is None:
            return
        pattern = self._key(scope, "*")
        try:
            keys = [key async for key in self._redis.scan_iter(match=pattern)]
        except Exception as exc:
            logger.debug("Cache scan failed for %r: %s", pattern, exc)
            return
        await self.delete(*keys)
        if keys:
            logger.debug("Dropped %d cached key(s) under %s", len(keys), pattern)

    async def invalidate_article(self, article_id: int | None = None) -> None:
        """
        Forget every cached article list, plus the detail entry of
        *article_id* when one is given.  Lists are keyed by category, and a
        write can move an article between categories, so all of them go.
        """
        await self.delete_scope(LIST_SCOPE)
        if article_id is not None:
            await self.delete(self.article_detail_key(article_id))

    # ------------------------------------------------------------------
    # Stats
    # ------------------------------------------------------------------

    @property
    def stats(self) -> dict:
        lookups = self._hits + self._misses
        return {
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round(100 * self._hits / lookups, 1) if lookups else 0.0,
        }


cache = CacheManager()
