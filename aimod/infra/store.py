from __future__ import annotations

import logging

import redis.asyncio as redis

log = logging.getLogger(__name__)


def create_redis(url: str, timeout: float = 5.0) -> redis.Redis:
    """Build the Redis client shared by every update handler.

    Connections are opened lazily by the pool; both connect and socket
    operations are bounded by ``timeout`` seconds.
    """
    client = redis.from_url(
        url,
        decode_responses=True,
        socket_timeout=timeout,
        socket_connect_timeout=timeout,
    )
    log.info("Redis client configured (timeout=%ss)", timeout)
    return client


async def close_redis(client: redis.Redis) -> None:
    await client.aclose()
