"""
Redis Match Cache

Caches the scored match listing returned by ``get_gig_matches`` once the
gig's latest matching job has completed.

Cache Key Patterns:
    - matches:{gig_id} - completed match listing (list of profile dicts)

The cache is advisory. When Redis is unavailable every read is a miss and
every write is a no-op; nothing here raises.

Usage:
    cache = MatchCache(settings.redis_url)

    listing = await cache.get_matches(gig_id)
    if listing is None:
        listing = await build_listing(gig_id)
        await cache.set_matches(gig_id, listing)

    # New or finished matching job for the gig
    await cache.invalidate_matches(gig_id)
"""

import json
import logging
from typing import Any, Dict, List, Optional

import redis.asyncio as redis

from pulsehustle.middleware.metrics import record_cache_hit, record_cache_miss

logger = logging.getLogger(__name__)

MATCHES_TTL = 3600  # 1 hour
KEY_PREFIX = "matches"


class MatchCache:
    """
    Attributes:
        redis: Async Redis client, created on first use
        stats: hit/miss counters for this process
    """

    def __init__(self, redis_url: str, ttl: int = MATCHES_TTL):
        self.redis_url = redis_url
        self.ttl = ttl
        self.redis: Optional[redis.Redis] = None
        self.stats: Dict[str, int] = {"hits": 0, "misses": 0}

    @staticmethod
    def key(gig_id: str) -> str:
        return f"{KEY_PREFIX}:{gig_id}"

    def _client(self) -> Optional[redis.Redis]:
        if self.redis is None:
            try:
                self.redis = redis.from_url(self.redis_url, encoding="utf-8", decode_responses=True)
            except Exception as e:
                logger.warning(f"Match cache unavailable ({self.redis_url}): {e}")
        return self.redis

    def _count(self, hit: bool) -> None:
        if hit:
            self.stats["hits"] += 1
            record_cache_hit()
        else:
            self.stats["misses"] += 1
            record_cache_miss()

    async def get_matches(self, gig_id: str) -> Optional[List[Dict[str, Any]]]:
        """Cached listing for the gig, or None on a miss or any Redis error."""
        listing = None
        client = self._client()
        if client is not None:
            try:
                raw = await client.get(self.key(gig_id))
                if raw:
                    listing = json.loads(raw)
            except Exception as e:
                logger.warning(f"Match cache read failed for gig {gig_id}: {e}")

        self._count(listing is not None)
        return listing

    async def set_matches(self, gig_id: str, matches: List[Dict[str, Any]]) -> bool:
        client = self._client()
        if client is None:
            return False
        try:
            await client.setex(self.key(gig_id), self.ttl, json.dumps(matches, default=str))
        except Exception as e:
            logger.warning(f"Match cache write failed for gig {gig_id}: {e}")
            return False
        return True

    async def invalidate_matches(self, gig_id: str) -> bool:
        """True if a cached listing was dropped."""
        client = self._client()
        if client is None:
            return False
        try:
            return await client.delete(self.key(gig_id)) > 0
        except Exception as e:
            logger.warning(f"Match cache invalidation failed for gig {gig_id}: {e}")
            return False

    async def health_check(self) -> bool:
        client = self._client()
        if client is None:
            return False
        try:
            await client.ping()
        except Exception as e:
            logger.warning(f"Match cache health check failed: {e}")
            return False
        return True

    def get_stats(self) -> Dict[str, Any]:
        hits, misses = self.stats["hits"], self.stats["misses"]
        total = hits + misses
        return {
            "hits": hits,
            "misses": misses,
            "total": total,
            "hit_rate": hits / total if total else 0.0,
        }

    async def close(self) -> None:
        if self.redis is not None:
            await self.redis.close()
            self.redis = None
