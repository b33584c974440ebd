"""Redis cache service implementation."""

import redis.asyncio as redis
from lifewrapped_common.infrastructure.interfaces import CacheService
from lifewrapped_common.logging import setup_logging
from redis.exceptions import RedisError

from session_summarizer.exceptions import CacheServiceError

logger = setup_logging()


class RedisCacheService(CacheService):
    """Cache service implementation using Redis."""

    def __init__(self, client: redis.Redis, ttl_seconds: int | None = None):
        self._client = client
        self._ttl_seconds = ttl_seconds

    async def get(self, key: str) -> str | None:
        """
        Retrieves a value from Redis cache.

        Raises:
            CacheServiceError: If the Redis operation fails.
        """
        try:
            value = await self._client.get(key)
            if value:
                logger.info("Cache hit", extra={"key": key})
            return value
        except RedisError as e:
            logger.exception("Redis get failed", extra={"key": key})
            raise CacheServiceError(key, "get", cause=e) from e

    async def set(self, key: str, value: str) -> None:
        """
        Stores a value in Redis cache. Without a TTL the value never expires.

        Raises:
            CacheServiceError: If the Redis operation fails.
        """
        try:
            await self._client.set(key, value, ex=self._ttl_seconds)
            logger.info("Cache set", extra={"key": key, "ttl": self._ttl_seconds})
        except RedisError as e:
            logger.exception("Redis set failed", extra={"key": key})
            raise CacheServiceError(key, "set", cause=e) from e

    async def delete(self, key: str) -> None:
        try:
            await self._client.delete(key)
        except RedisError as e:
            logger.exception("Redis delete failed", extra={"key": key})
            raise CacheServiceError(key, "delete", cause=e) from e
