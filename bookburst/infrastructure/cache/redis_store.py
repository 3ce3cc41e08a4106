"""Redis-backed stores.

One client per request, yielded by :func:`get_redis`.  Two stores sit on it:

- :class:`RedisKeyValueStore`: JSON values under ``bookburst:`` keys with an
  optional expiry; the client-local cache for behaviour profiles.
- :class:`TokenRevocationList`: JWT IDs of signed-out tokens, each kept
  until the token would have expired anyway.
"""

import json
import logging
from typing import Any, AsyncGenerator, Optional

import redis.asyncio as aioredis

from bookburst.core.config import settings
from bookburst.domain.repositories import IKeyValueStore, ITokenRevocationList

logger = logging.getLogger(__name__)

KEY_PREFIX = "bookburst:"
REVOKED_TOKEN_PREFIX = "revoked:"


async def get_redis() -> AsyncGenerator[aioredis.Redis, None]:
    """FastAPI dependency: yield a connected Redis client, close on teardown."""
    client: aioredis.Redis = aioredis.from_url(settings.redis_url, decode_responses=True)
    try:
        yield client
    finally:
        await client.aclose()


class RedisKeyValueStore(IKeyValueStore):

    def __init__(self, client: aioredis.Redis):
        self.client = client

    async def get_json(self, key: str) -> Optional[Any]:
        raw = await self.client.get(f"{KEY_PREFIX}{key}")
        if raw is None:
            return None
        logger.debug("Cache hit for %s", key)
        return json.loads(raw)

    async def set_json(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> None:
        payload = json.dumps(value)
        if ttl_seconds:
            await self.client.setex(f"{KEY_PREFIX}{key}", ttl_seconds, payload)
        else:
            await self.client.set(f"{KEY_PREFIX}{key}", payload)


class TokenRevocationList(ITokenRevocationList):

    def __init__(self, client: aioredis.Redis):
        self.client = client

    async def revoke(self, jti: str, ttl_seconds: int) -> None:
        await self.client.setex(f"{REVOKED_TOKEN_PREFIX}{jti}", max(ttl_seconds, 1), "1")

    async def is_revoked(self, jti: str) -> bool:
        return await self.client.exists(f"{REVOKED_TOKEN_PREFIX}{jti}") == 1
