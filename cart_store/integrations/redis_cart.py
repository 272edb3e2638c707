"""Redis adapter used as the primary (tier 1) cart storage."""
from __future__ import annotations

import asyncio
import logging
from typing import Any

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from cart_store.core.constants import REDIS_SOCKET_TIMEOUT_SECONDS
from cart_store.core.exceptions import CartDecodeError, CartTierError

logger = logging.getLogger(__name__)

# Everything the network can throw at us; all of it means "tier unavailable"
_TIER_ERRORS = (RedisError, OSError, asyncio.TimeoutError)


def _as_text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)


class RedisCartTier:
    """Thin async wrapper over a Redis client with uniform failure semantics.

    Each call either returns a value or raises :class:`CartTierError`; the
    caller decides how to degrade. Keys are passed through verbatim.
    """

    def __init__(self, client: Any):
        self._client = client

    @classmethod
    def from_url(
        cls, redis_url: str, socket_timeout: float = REDIS_SOCKET_TIMEOUT_SECONDS
    ) -> RedisCartTier:
        client = aioredis.from_url(
            redis_url,
            decode_responses=True,
            socket_connect_timeout=socket_timeout,
            socket_timeout=socket_timeout,
        )
        logger.info("Redis cart tier configured")
        return cls(client)

    async def get(self, key: str) -> str | None:
        """Raises CartDecodeError when the stored bytes are not UTF-8."""
        try:
            return _as_text(await self._client.get(key))
        except UnicodeDecodeError as exc:
            raise CartDecodeError(f"Value under {key} is not valid UTF-8: {exc}") from exc
        except _TIER_ERRORS as exc:
            raise CartTierError("get", key, exc) from exc

    async def set(self, key: str, value: str, ttl: int) -> None:
        try:
            await self._client.set(key, value, ex=ttl)
        except _TIER_ERRORS as exc:
            raise CartTierError("set", key, exc) from exc

    async def delete(self, key: str) -> bool:
        try:
            return bool(await self._client.delete(key))
        except _TIER_ERRORS as exc:
            raise CartTierError("delete", key, exc) from exc

    async def scan_keys(self, prefix: str) -> list[str]:
        """Collect keys starting with ``prefix`` using SCAN, never KEYS."""
        try:
            keys = []
            async for key in self._client.scan_iter(match=f"{prefix}*"):
                keys.append(_as_text(key))
            return keys
        except _TIER_ERRORS as exc:
            raise CartTierError("scan", f"{prefix}*", exc) from exc

    async def close(self) -> None:
        try:
            await self._client.aclose()
        except _TIER_ERRORS as exc:
            logger.warning("Failed to close Redis cart tier: %s", exc)
