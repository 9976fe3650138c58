"""
Redis caching service for event listings.

CACHING STRATEGY
================

What we cache:
  - Event listing responses (paginated, JSON-serialized)
  - Cache key pattern: "events:list:v{generation}:page={page}&size={size}&upcoming={upcoming}"

Invalidation:
  - Bumping "events:list:generation" orphans every cached page in one INCR;
    orphaned pages age out through their TTL
  - Bumped on ticket issuance, event creation and event deletion

Never cached:
  - Single events and anything on the issuance or check-in path. Capacity is
    decided by the database guard; a stale count in a listing is cosmetic,
    a stale count used for admission would oversell.

Redis is optional. Every operation fails open: when Redis is disabled or
unreachable the API serves straight from the database, and reconnects are
attempted at most once per REDIS_RETRY_SECONDS.
"""

import json
import time
from typing import Optional

import redis.asyncio as redis
from ticketing.core.config import get_settings
from ticketing.core.logging import get_logger
from ticketing.core.metrics import record_cache_operation

logger = get_logger(__name__)
settings = get_settings()

EVENT_LIST_PREFIX = "events:list:"
GENERATION_KEY = f"{EVENT_LIST_PREFIX}generation"
REDIS_RETRY_SECONDS = 30.0

_redis_client: Optional[redis.Redis] = None
_retry_after = 0.0


async def get_redis() -> Optional[redis.Redis]:
    """Get or create the Redis connection; None when disabled or unreachable."""
    global _redis_client, _retry_after

    if not settings.REDIS_ENABLED:
        return None
    if _redis_client is not None:
        return _redis_client
    if time.monotonic() < _retry_after:
        return None

    client = redis.from_url(
        settings.REDIS_URL,
        encoding="utf-8",
        decode_responses=True,
        socket_connect_timeout=5,
        socket_timeout=5,
        retry_on_timeout=True,
    )
    try:
        await client.ping()
    except redis.RedisError as e:
        logger.error("redis_connection_failed", error=str(e), retry_in=REDIS_RETRY_SECONDS)
        _retry_after = time.monotonic() + REDIS_RETRY_SECONDS
        await client.aclose()
        return None

    logger.info("redis_connected", url=settings.REDIS_URL)
    _redis_client = client
    return _redis_client


async def close_redis() -> None:
    """Close Redis connection on shutdown."""
    global _redis_client
    if _redis_client:
        await _redis_client.aclose()
        _redis_client = None


def make_event_list_key(generation: int, page: int, page_size: int, upcoming_only: bool) -> str:
    return f"{EVENT_LIST_PREFIX}v{generation}:page={page}&size={page_size}&upcoming={upcoming_only}"


async def _generation(client: redis.Redis) -> int:
    return int(await client.get(GENERATION_KEY) or 0)


async def get_cached_events(page: int, page_size: int, upcoming_only: bool) -> Optional[dict]:
    """Cached listing page for the current generation, if any."""
    client = await get_redis()
    if not client:
        return None

    try:
        key = make_event_list_key(await _generation(client), page, page_size, upcoming_only)
        data = await client.get(key)
    except redis.RedisError as e:
        logger.error("cache_get_error", page=page, error=str(e))
        return None

    record_cache_operation("get", hit=bool(data))
    return json.loads(data) if data else None


async def set_cached_events(page: int, page_size: int, upcoming_only: bool, data: dict) -> None:
    client = await get_redis()
    if not client:
        return

    try:
        key = make_event_list_key(await _generation(client), page, page_size, upcoming_only)
        await client.setex(key, settings.REDIS_CACHE_TTL, json.dumps(data, default=str))
    except redis.RedisError as e:
        logger.error("cache_set_error", page=page, error=str(e))
        return
    record_cache_operation("set", hit=False)


async def invalidate_event_cache() -> None:
    """Start a new listing generation; pages cached under the old one are never read again."""
    client = await get_redis()
    if not client:
        return

    try:
        generation = await client.incr(GENERATION_KEY)
    except redis.RedisError as e:
        logger.error("cache_invalidation_error", error=str(e))
        return
    logger.debug("cache_invalidated", generation=generation)


async def get_cache_stats() -> dict:
    """Redis statistics for the health endpoint."""
    client = await get_redis()
    if not client:
        return {"status": "disabled"}

    try:
        info = await client.info("stats")
        generation = await _generation(client)
    except redis.RedisError as e:
        return {"status": "error", "error": str(e)}

    hits = info.get("keyspace_hits", 0)
    misses = info.get("keyspace_misses", 0)
    return {
        "status": "connected",
        "generation": generation,
        "hits": hits,
        "misses": misses,
        "hit_rate": round(hits / max(hits + misses, 1) * 100, 2),
    }
