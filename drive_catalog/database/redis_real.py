"""
Real Redis-backed cache for production when REDIS_URL is set.
Implements the same interface as drive_catalog.database.redis (in-memory stub).
"""

from __future__ import annotations

import json
from typing import Any, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from drive_catalog.integrations.contracts.errors import CacheBackendError
from drive_catalog.integrations.contracts.interfaces import KeyValueCache


class RedisCache(KeyValueCache):
    """
    Redis-backed key-value cache. Values are stored as JSON with SET ... EX.
    """

    def __init__(self, url: Optional[str] = None, client: Optional[redis.Redis] = None) -> None:
        if client is None and not url:
            raise ValueError("RedisCache needs either a url or a client")
        self._client = client or redis.from_url(url, decode_responses=True)

    async def get(self, key: str) -> Optional[Any]:
        try:
            raw = await self._client.get(key)
        except RedisError as e:
            raise CacheBackendError(f"Redis GET {key} failed: {e}", payload={"key": key}) from e
        if not raw:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            return None

    async def set(self, key: str, value: Any, ttl: int) -> None:
        payload = json.dumps(value, default=str)
        try:
            await self._client.set(key, payload, ex=ttl)
        except RedisError as e:
            raise CacheBackendError(f"Redis SET {key} failed: {e}", payload={"key": key}) from e

    async def ping(self) -> bool:
        try:
            return bool(await self._client.ping())
        except RedisError:
            return False

    async def aclose(self) -> None:
        await self._client.aclose()
