"""Redis client factory — carries the document store change feed only.

Writers publish "<prefix>:<collection>" after each commit; subscriptions
listen on the same channel and re-run their query. Redis holds no
reference data itself; the TTL cache is process-local.
"""

import redis.asyncio as aioredis

from config.settings import settings

_redis_pool: aioredis.Redis | None = None


async def get_redis() -> aioredis.Redis:
    """Get or create the Redis connection pool."""
    global _redis_pool  # noqa: PLW0603
    if _redis_pool is None:
        _redis_pool = aioredis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
        )
    return _redis_pool


async def close_redis() -> None:
    """Close the Redis connection pool."""
    global _redis_pool  # noqa: PLW0603
    if _redis_pool is not None:
        await _redis_pool.aclose()
        _redis_pool = None


def change_channel(collection: str) -> str:
    return f"{settings.STORE_CHANGE_CHANNEL}:{collection}"
