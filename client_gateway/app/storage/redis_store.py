"""
Redis credential storage for the ZEDLY client.
"""

from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from shared.errors import StorageError
from shared.logging import get_logger

from .base import CredentialStorage, StorageKeys


class RedisStorage(CredentialStorage):
    """Credential storage kept in Redis under a key prefix."""

    def __init__(self, redis_url: str, key_prefix: str = "zedly:session:", keys: Optional[StorageKeys] = None):
        super().__init__(keys)
        self.redis_url = redis_url
        self.key_prefix = key_prefix
        self.logger = get_logger("client.storage.redis")
        self.redis: Optional[redis.Redis] = None

    async def start(self):
        """Connect to Redis."""
        try:
            self.redis = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
                retry_on_timeout=True,
                health_check_interval=30
            )

            # Test connection
            await self.redis.ping()

            self.logger.info("Redis credential storage started")

        except Exception as e:
            self.logger.error("Failed to start Redis credential storage", error=str(e))
            raise StorageError("Failed to connect to Redis", details={"error": str(e)})

    async def stop(self):
        """Close the Redis connection."""
        if self.redis:
            await self.redis.aclose()
            self.redis = None
            self.logger.info("Redis credential storage stopped")

    def _key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    def _client(self) -> redis.Redis:
        if self.redis is None:
            raise StorageError("Redis credential storage is not started")
        return self.redis

    async def get(self, key: str) -> Optional[str]:
        client = self._client()
        try:
            return await client.get(self._key(key))
        except RedisError as e:
            self.logger.error("Redis get failed", key=key, error=str(e))
            raise StorageError("Redis get failed", details={"key": key, "error": str(e)})

    async def set(self, key: str, value: str) -> None:
        client = self._client()
        try:
            await client.set(self._key(key), value)
        except RedisError as e:
            self.logger.error("Redis set failed", key=key, error=str(e))
            raise StorageError("Redis set failed", details={"key": key, "error": str(e)})

    async def remove(self, key: str) -> None:
        client = self._client()
        try:
            await client.delete(self._key(key))
        except RedisError as e:
            self.logger.error("Redis delete failed", key=key, error=str(e))
            raise StorageError("Redis delete failed", details={"key": key, "error": str(e)})
