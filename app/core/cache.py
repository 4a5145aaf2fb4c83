import json
from typing import Any, Optional
import redis.asyncio as redis

KEY_PREFIX = "tripbook"


class RedisCache:
    """JSON values in Redis under the ``tripbook:`` key prefix."""

    def __init__(self, redis_client: redis.Redis, prefix: str = KEY_PREFIX):
        self.redis = redis_client
        self.prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self.prefix}:{key}"

    async def get(self, key: str) -> Optional[Any]:
        """Get value from cache"""
        data = await self.redis.get(self._key(key))
        if data:
            return json.loads(data)
        return None

    async def set(self, key: str, value: Any, expire: int = 3600) -> None:
        """Set value in cache with expiration in seconds"""
        await self.redis.set(
            self._key(key),
            json.dumps(value, default=str),
            ex=expire
        )

    async def delete(self, key: str) -> None:
        await self.redis.delete(self._key(key))
