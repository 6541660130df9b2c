import json
import logging
from datetime import timedelta
from typing import Any, Optional, Union

import redis.asyncio as redis
from fastapi import Request
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)


class RedisCache:
    """
    Thin JSON cache over an optional Redis client.

    Every call is a no-op when no client is configured, and Redis failures are
    logged and treated as cache misses so the database stays the source of truth.
    """

    def __init__(self, client: Optional[redis.Redis] = None, prefix: str = "money_marathon:"):
        self.client = client
        self.prefix = prefix

    @property
    def enabled(self) -> bool:
        return self.client is not None

    def _make_key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    async def get(self, key: str) -> Any:
        if not self.client:
            return None
        try:
            data = await self.client.get(self._make_key(key))
        except RedisError as e:
            logger.warning(f"Cache get failed for {key}: {e}")
            return None
        if data is None:
            return None
        try:
            return json.loads(data)
        except ValueError:
            logger.warning(f"Discarding non-JSON cache entry {key}")
            return None

    async def set(self, key: str, value: Any, expire: Union[int, timedelta, None] = None) -> bool:
        if not self.client:
            return False
        try:
            return bool(await self.client.set(self._make_key(key), json.dumps(value), ex=expire))
        except RedisError as e:
            logger.warning(f"Cache set failed for {key}: {e}")
            return False

    async def delete_prefix(self, key_prefix: str) -> int:
        """Delete every key starting with ``key_prefix`` (under this cache's prefix)."""
        if not self.client:
            return 0
        deleted = 0
        try:
            async for full_key in self.client.scan_iter(match=f"{self._make_key(key_prefix)}*"):
                deleted += await self.client.delete(full_key)
        except RedisError as e:
            logger.warning(f"Cache invalidation failed for {key_prefix}: {e}")
        return deleted

    async def close(self) -> None:
        if self.client:
            await self.client.aclose()


def get_cache(request: Request) -> RedisCache:
    return request.app.state.cache
