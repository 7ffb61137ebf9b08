"""
Redis Key-Value Store.

SET NX PX для атомарного захвата, Lua-скрипт для удаления
только своей записи.
"""

import logging
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from editorial.domain.ports.key_value_store import IKeyValueStore
from editorial.shared.exceptions.infrastructure_exceptions import CacheError

logger = logging.getLogger(__name__)

_COMPARE_AND_DELETE = """
local current = redis.call('GET', KEYS[1])
if current and current == ARGV[1] then
    return redis.call('DEL', KEYS[1])
end
return 0
"""


class RedisKeyValueStore(IKeyValueStore):
    """Хранилище ключ-значение поверх Redis."""

    def __init__(self, url: str, prefix: str = "editorial:", client: Optional[redis.Redis] = None):
        self._url = url
        self._prefix = prefix
        self._redis = client

    async def _client(self) -> redis.Redis:
        if self._redis is None:
            self._redis = redis.from_url(self._url, decode_responses=True)
        return self._redis

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    @staticmethod
    def _px(ttl_seconds: Optional[float]) -> Optional[int]:
        return int(ttl_seconds * 1000) if ttl_seconds is not None else None

    async def get(self, key: str) -> Optional[str]:
        try:
            r = await self._client()
            return await r.get(self._key(key))
        except RedisError as e:
            raise CacheError(f"Redis GET failed: {e}") from e

    async def set(self, key: str, value: str, ttl_seconds: Optional[float] = None) -> None:
        try:
            r = await self._client()
            await r.set(self._key(key), value, px=self._px(ttl_seconds))
        except RedisError as e:
            raise CacheError(f"Redis SET failed: {e}") from e

    async def set_if_absent(self, key: str, value: str, ttl_seconds: Optional[float] = None) -> bool:
        try:
            r = await self._client()
            acquired = await r.set(self._key(key), value, nx=True, px=self._px(ttl_seconds))
        except RedisError as e:
            raise CacheError(f"Redis SET NX failed: {e}") from e
        return bool(acquired)

    async def delete(self, key: str) -> bool:
        try:
            r = await self._client()
            return await r.delete(self._key(key)) > 0
        except RedisError as e:
            raise CacheError(f"Redis DEL failed: {e}") from e

    async def compare_and_delete(self, key: str, expected: str) -> bool:
        try:
            r = await self._client()
            result = await r.eval(_COMPARE_AND_DELETE, 1, self._key(key), expected)
        except RedisError as e:
            raise CacheError(f"Redis compare-and-delete failed: {e}") from e
        return result == 1

    async def close(self) -> None:
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None
