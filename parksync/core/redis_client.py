from typing import Optional
import redis.asyncio as redis
from redis.asyncio import ConnectionPool
import logging

from parksync.core.config import settings

logger = logging.getLogger(__name__)


class RedisClient:
    """
    Redis client holding named storage slots as plain string values.
    """

    def __init__(self, url: str = None, max_connections: int = None):
        self.pool = ConnectionPool.from_url(
            url or settings.REDIS_URL,
            max_connections=max_connections or settings.REDIS_MAX_CONNECTIONS,
            decode_responses=True
        )
        self.client: Optional[redis.Redis] = None

    async def connect(self):
        """Initialize Redis connection."""
        try:
            self.client = redis.Redis(connection_pool=self.pool)
            # Test connection
            await self.client.ping()
            logger.info("Redis connection established")
        except Exception as e:
            logger.error(f"Failed to connect to Redis: {e}")
            raise

    async def disconnect(self):
        """Close Redis connection."""
        if self.client:
            await self.client.aclose()
            self.client = None
            logger.info("Redis connection closed")

    async def get(self, key: str) -> Optional[str]:
        """Read a slot."""
        try:
            return await self.client.get(key)
        except Exception as e:
            logger.error(f"Failed to read {key}: {e}")
            raise

    async def set(self, key: str, value: str):
        """Overwrite a slot."""
        try:
            await self.client.set(key, value)
            logger.debug(f"Slot {key} written ({len(value)} bytes)")
        except Exception as e:
            logger.error(f"Failed to write {key}: {e}")
            raise

    async def delete(self, key: str) -> int:
        """Delete a slot."""
        try:
            return await self.client.delete(key)
        except Exception as e:
            logger.error(f"Failed to delete {key}: {e}")
            raise


# Global Redis client instance
redis_client = RedisClient()
