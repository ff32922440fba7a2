"""
Redis caching service for listing pages.

What we cache:
  - Listing pages per kind (stays, events, transport, flights), JSON-serialized
  - Key pattern: "listings:{kind}:{query string of the filters}"

Invalidation:
  - A booking or cancellation changes a counter (or blocks dates), so every
    cached page of that kind is dropped with a prefix SCAN
  - TTL (REDIS_CACHE_TTL) as safety net

Single listings are never cached: the booking workflow needs live counters.
Every cache failure degrades to a miss; Redis is never on the critical path.
"""

import json
from typing import Optional

import redis.asyncio as redis

from wayfare.core.config import get_settings
from wayfare.core.logging import get_logger
from wayfare.core.metrics import record_cache_operation, redis_connection_errors

logger = get_logger(__name__)

_redis_client: Optional[redis.Redis] = None


async def get_redis() -> Optional[redis.Redis]:
    """Get or create Redis connection. Returns None if Redis is disabled."""
    global _redis_client
    settings = get_settings()

    if not settings.REDIS_ENABLED:
        return None

    if _redis_client is None:
        try:
            _redis_client = redis.from_url(
                settings.REDIS_URL,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
                retry_on_timeout=True,
            )
            await _redis_client.ping()
            logger.info("redis_connected", url=settings.REDIS_URL)
        except redis.RedisError as e:
            redis_connection_errors.inc()
            logger.error("redis_connection_failed", error=str(e))
            _redis_client = None
            return None

    return _redis_client


async def close_redis() -> None:
    global _redis_client
    if _redis_client:
        await _redis_client.aclose()
        _redis_client = None


def make_listing_key(kind: str, params: dict) -> str:
    query = "&".join(f"{name}={params[name]}" for name in sorted(params) if params[name] is not None)
    return f"listings:{kind}:{query}"


async def get_cached_listings(kind: str, params: dict) -> Optional[dict]:
    client = await get_redis()
    if not client:
        return None

    key = make_listing_key(kind, params)
    try:
        data = await client.get(key)
    except redis.RedisError as e:
        logger.error("cache_get_error", key=key, error=str(e))
        return None

    record_cache_operation("get", hit=data is not None)
    if data:
        logger.debug("cache_hit", key=key)
        return json.loads(data)
    logger.debug("cache_miss", key=key)
    return None


async def set_cached_listings(kind: str, params: dict, data: dict) -> None:
    client = await get_redis()
    if not client:
        return

    settings = get_settings()
    key = make_listing_key(kind, params)
    try:
        await client.setex(key, settings.REDIS_CACHE_TTL, json.dumps(data, default=str))
        logger.debug("cache_set", key=key, ttl=settings.REDIS_CACHE_TTL)
    except redis.RedisError as e:
        logger.error("cache_set_error", key=key, error=str(e))


async def invalidate_listing_cache(kind: str) -> None:
    """Drop every cached page of one listing kind."""
    client = await get_redis()
    if not client:
        return

    try:
        deleted = 0
        async for key in client.scan_iter(match=f"listings:{kind}:*", count=100):
            await client.delete(key)
            deleted += 1
        logger.info("cache_invalidated", kind=kind, keys_deleted=deleted)
    except redis.RedisError as e:
        logger.error("cache_invalidation_error", kind=kind, error=str(e))


async def get_cache_stats() -> dict:
    """Get Redis cache statistics for monitoring."""
    client = await get_redis()
    if not client:
        return {"status": "disabled"}

    try:
        info = await client.info("stats")
        keyspace = await client.info("keyspace")
    except redis.RedisError as e:
        return {"status": "error", "error": str(e)}

    hits = info.get("keyspace_hits", 0)
    misses = info.get("keyspace_misses", 0)
    return {
        "status": "connected",
        "hits": hits,
        "misses": misses,
        "hit_rate": round(hits / max(hits + misses, 1) * 100, 2),
        "keys": keyspace,
    }
