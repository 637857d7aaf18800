"""
Redis client for AI request rate limiting with async support
"""
import logging
import time
from typing import Optional

import redis.asyncio as aioredis
from redis.asyncio import Redis
from redis.exceptions import RedisError

from adwise.core.config import REDIS_KEY_PREFIX, REDIS_URL

logger = logging.getLogger(__name__)

# Global Redis client instance
_redis_client: Optional[Redis] = None


async def get_redis() -> Redis:
    """
    Dependency to get Redis client instance.
    Returns singleton async Redis connection.
    """
    global _redis_client

    if _redis_client is None:
        client = aioredis.from_url(
            REDIS_URL,
            encoding="utf-8",
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=2,
            retry_on_timeout=True,
            health_check_interval=30,
            max_connections=20,
        )
        try:
            await client.ping()
        except RedisError as e:
            logger.error(f"✗ Redis connection failed: {e}")
            await client.aclose()
            raise
        _redis_client = client
        logger.info(f"✓ Redis connected: {_safe_url(REDIS_URL)}")

    return _redis_client


async def get_optional_redis() -> Optional[Redis]:
    """Like get_redis, but None when Redis is unreachable so callers can fail open."""
    try:
        return await get_redis()
    except RedisError as e:
        logger.warning(f"⚠ Redis unavailable, rate limiting disabled: {e}")
        return None


async def close_redis():
    """Close Redis connection on shutdown"""
    global _redis_client
    if _redis_client:
        await _redis_client.aclose()
        _redis_client = None
        logger.info("✓ Redis connection closed")


def _safe_url(url: str) -> str:
    return url.split("@")[-1] if "@" in url else url


def rate_limit_key(subject: str, now: Optional[float] = None) -> str:
    minute = int((now if now is not None else time.time()) // 60)
    return f"{REDIS_KEY_PREFIX}:ai_rpm:{subject}:{minute}"


async def check_rate_limit(redis: Optional[Redis], subject: str, limit: int, now: Optional[float] = None) -> bool:
    """
    Fixed one-minute window counter.

    Returns True when the request is allowed. Without a working Redis the
    limiter fails open.
    """
    if redis is None or limit <= 0:
        return True

    key = rate_limit_key(subject, now)
    try:
        count = await redis.incr(key)
        if count == 1:
            await redis.expire(key, 60)
    except RedisError as e:
        logger.warning(f"Rate limit check failed, allowing request: {e}")
        return True

    if count > limit:
        logger.info(f"Rate limit exceeded for {subject}: {count}/{limit} per minute")
        return False
    return True


async def health_check_redis() -> dict:
    """
    Health check endpoint for Redis
    Returns connection status and latency
    """
    try:
        redis = await get_redis()
        start = time.time()
        await redis.ping()
        latency_ms = (time.time() - start) * 1000
        return {
            "status": "healthy",
            "latency_ms": round(latency_ms, 2),
            "url": _safe_url(REDIS_URL),
        }
    except RedisError as e:
        return {
            "status": "unhealthy",
            "error": str(e),
        }
