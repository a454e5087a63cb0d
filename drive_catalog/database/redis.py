"""
Lightweight in-memory RedisCache replacement for local development.

Implements the same async interface as drive_catalog.database.redis_real
so the FastAPI app runs without a Redis instance. Values are stored
JSON-encoded and entries expire after their TTL against an injectable
clock, which lets tests move time forward.
"""

from __future__ import annotations

import json
import time
from typing import Any, Callable, Dict, Optional, Tuple

from drive_catalog.integrations.contracts.interfaces import KeyValueCache


class RedisCache(KeyValueCache):
    def __init__(self, clock: Optional[Callable[[], float]] = None) -> None:
        self._clock = clock or time.monotonic
        # key -> (expires_at, json payload)
        self._entries: Dict[str, Tuple[float, str]] = {}

    async def get(self, key: str) -> Optional[Any]:
        item = self._entries.get(key)
        if item is None:
            return None
        expires_at, payload = item
        if self._clock() >= expires_at:
            self._entries.pop(key, None)
            return None
        return json.loads(payload)

    async def set(self, key: str, value: Any, ttl: int) -> None:
        self._entries[key] = (self._clock() + ttl, json.dumps(value, default=str))

    async def ping(self) -> bool:
        """
        Health check calls this; always True so the API reports the cache
        as connected in local/dev mode.
        """
        return True
