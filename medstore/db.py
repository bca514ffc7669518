"""
Redis Client - Upstash Redis for durable carts

Provides a singleton sync Upstash Redis client. The cart store runs
synchronously, so only the sync client is exposed.
"""

import os
from typing import Optional

from upstash_redis import Redis

from medstore.config import DEFAULT_CART_TTL


_sync_redis_client: Optional[Redis] = None


def get_redis_sync() -> Redis:
    """
    Get sync Upstash Redis client (singleton).

    Uses standard Upstash env var names:
    - UPSTASH_REDIS_REST_URL
    - UPSTASH_REDIS_REST_TOKEN
    """
    global _sync_redis_client

    if _sync_redis_client is None:
        url = os.environ.get("UPSTASH_REDIS_REST_URL", "")
        token = os.environ.get("UPSTASH_REDIS_REST_TOKEN", "")
        if not url or not token:
            raise ValueError("UPSTASH_REDIS_REST_URL and UPSTASH_REDIS_REST_TOKEN must be set")
        _sync_redis_client = Redis(url=url, token=token)

    return _sync_redis_client


class RedisKeys:
    """Redis key prefixes for different data types."""

    CART = "cart:"  # cart:{storage_key}

    @staticmethod
    def cart_key(storage_key: str) -> str:
        return f"{RedisKeys.CART}{storage_key}"


class TTL:
    """Time-to-live constants for Redis keys."""

    CART = DEFAULT_CART_TTL  # 24 hours
