"""
Tests for the Redis fixed-window rate limiter used by AI recommendations.
"""
import asyncio
from unittest.mock import AsyncMock

from redis.exceptions import ConnectionError as RedisConnectionError

from adwise.core.redis import check_rate_limit, rate_limit_key


def _redis(counts):
    redis = AsyncMock()
    redis.incr.side_effect = counts
    return redis


def test_key_is_per_subject_and_minute():
    assert rate_limit_key("7", now=120.0) == "adwise:ai_rpm:7:2"
    assert rate_limit_key("7", now=179.9) == rate_limit_key("7", now=120.0)
    assert rate_limit_key("7", now=180.0) != rate_limit_key("7", now=120.0)


def test_allows_up_to_limit_then_blocks():
    redis = _redis([1, 2, 3, 4])
    results = [asyncio.run(check_rate_limit(redis, "7", limit=3, now=60.0)) for _ in range(4)]
    assert results == [True, True, True, False]
    redis.expire.assert_awaited_once_with("adwise:ai_rpm:7:1", 60)


def test_no_redis_fails_open():
    assert asyncio.run(check_rate_limit(None, "7", limit=1))


def test_redis_error_fails_open():
    redis = AsyncMock()
    redis.incr.side_effect = RedisConnectionError("connection refused")
    assert asyncio.run(check_rate_limit(redis, "7", limit=1))


def test_zero_limit_disables_limiter():
    redis = _redis([100])
    assert asyncio.run(check_rate_limit(redis, "7", limit=0))
    redis.incr.assert_not_called()
