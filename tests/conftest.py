"""Shared pytest fixtures: in-memory stand-ins for the async Redis client."""
from __future__ import annotations

import asyncio
import fnmatch
from dataclasses import dataclass, field

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from cart_store.core.cart_store import CartStore
from cart_store.core.memory_tier import MemoryFallbackTier
from cart_store.integrations.redis_cart import RedisCartTier

TEST_TTL = 600


@dataclass
class FakeRedisClient:
    """Async Redis double; flip ``down`` to simulate an outage."""

    data: dict[str, str] = field(default_factory=dict)
    expiry: dict[str, int] = field(default_factory=dict)
    set_calls: list[tuple[str, int | None]] = field(default_factory=list)
    down: bool = False
    yield_control: bool = False
    closed: bool = False

    async def _io(self, op: str) -> None:
        if self.yield_control:
            await asyncio.sleep(0)
        if self.down:
            raise RedisConnectionError(f"redis down during {op}")

    async def get(self, key: str):
        await self._io("get")
        return self.data.get(key)

    async def set(self, key: str, value: str, ex: int | None = None) -> bool:
        await self._io("set")
        self.data[key] = value
        if ex is not None:
            self.expiry[key] = ex
        self.set_calls.append((key, ex))
        return True

    async def delete(self, key: str) -> int:
        await self._io("delete")
        existed = 1 if key in self.data else 0
        self.data.pop(key, None)
        self.expiry.pop(key, None)
        return existed

    async def scan_iter(self, match: str | None = None):
        await self._io("scan")
        for key in list(self.data):
            if match is None or fnmatch.fnmatchcase(key, match):
                yield key

    async def aclose(self) -> None:
        self.closed = True


@dataclass
class HangingRedisClient(FakeRedisClient):
    """Accepts connections but never answers."""

    async def _io(self, op: str) -> None:
        await asyncio.sleep(3600)


@pytest.fixture
def fake_redis() -> FakeRedisClient:
    return FakeRedisClient()


@pytest.fixture
def memory() -> MemoryFallbackTier:
    return MemoryFallbackTier()


@pytest.fixture
def store(fake_redis: FakeRedisClient, memory: MemoryFallbackTier) -> CartStore:
    return CartStore(
        RedisCartTier(fake_redis),
        memory,
        ttl_seconds=TEST_TTL,
        probe_timeout=0.5,
    )


@pytest.fixture
def down_store(memory: MemoryFallbackTier) -> CartStore:
    return CartStore(
        RedisCartTier(FakeRedisClient(down=True)),
        memory,
        ttl_seconds=TEST_TTL,
        probe_timeout=0.5,
    )


@pytest.fixture
def hanging_redis() -> HangingRedisClient:
    return HangingRedisClient()


@pytest.fixture
def make_store(memory: MemoryFallbackTier):
    """Build a store over ``client`` (None means no primary tier)."""

    def _make(client=None, **kwargs) -> CartStore:
        tier = RedisCartTier(client) if client is not None else None
        kwargs.setdefault("ttl_seconds", TEST_TTL)
        kwargs.setdefault("probe_timeout", 0.5)
        return CartStore(tier, memory, **kwargs)

    return _make
