"""
Redis Connection Pool Module
============================
Shared async Redis connection pool used by the rate limiter.
"""

import logging
from typing import Optional

import redis.asyncio as redis
from redis.asyncio.retry import Retry
from redis.backoff import ExponentialBackoff
from redis.exceptions import (
    BusyLoadingError,
    ConnectionError,
    TimeoutError,
)

from ideahub.core.config import settings

log = logging.getLogger(__name__)

_redis_pool: Optional[redis.ConnectionPool] = None

POOL_MAX_CONNECTIONS = 20
SOCKET_TIMEOUT = 2.0
SOCKET_CONNECT_TIMEOUT = 2.0
HEALTH_CHECK_INTERVAL = 30
RETRY_ATTEMPTS = 2


def _create_pool() -> redis.ConnectionPool:
    return redis.ConnectionPool.from_url(
        settings.REDIS_URL,
        max_connections=POOL_MAX_CONNECTIONS,
        socket_timeout=SOCKET_TIMEOUT,
        socket_connect_timeout=SOCKET_CONNECT_TIMEOUT,
        health_check_interval=HEALTH_CHECK_INTERVAL,
        decode_responses=True,
    )


def _create_retry() -> Retry:
    return Retry(
        retries=RETRY_ATTEMPTS,
        backoff=ExponentialBackoff(cap=0.5, base=0.1),
        supported_errors=(ConnectionError, TimeoutError, BusyLoadingError),
    )


async def get_redis() -> redis.Redis:
    """
    Returns a Redis client backed by the shared connection pool.

    The pool is created lazily on first call.
    """
    global _redis_pool
    if _redis_pool is None:
        _redis_pool = _create_pool()
        log.info(
            "Redis connection pool initialized (max_connections=%d)",
            POOL_MAX_CONNECTIONS,
        )
    
    return redis.Redis(
        connection_pool=_redis_pool,
        retry=_create_retry(),
        retry_on_error=[ConnectionError, TimeoutError, BusyLoadingError],
    )


async def close_redis():
    """Shuts down the pool. Called from the app lifespan on shutdown."""
    global _redis_pool
    if _redis_pool:
        await _redis_pool.disconnect()
        _redis_pool = None
        log.info("Redis connection pool closed")
