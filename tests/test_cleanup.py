"""Tests for the memory fallback sweeper and its periodic worker."""
from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from cart_store.core.cart_codec import encode
from cart_store.core.cleanup import CleanupSweeper
from cart_store.core.constants import SECONDS_PER_DAY
from cart_store.domain.cart import Cart
from cart_store.tasks.cart_cleanup_worker import start_cart_cleanup_worker

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def _aged(cart_id: str, hours: float) -> Cart:
    return Cart(id=cart_id, created_at=NOW - timedelta(hours=hours))


class TestCleanupSweeper:
    def test_evicts_only_carts_past_max_age(self, memory) -> None:
        memory.set(_aged("fresh", 1))
        memory.set(_aged("stale", 25))
        sweeper = CleanupSweeper(memory, max_age_seconds=SECONDS_PER_DAY, clock=lambda: NOW)

        result = sweeper.sweep()

        assert result.cleaned == 1
        assert result.errors == []
        assert memory.ids() == ["fresh"]

    def test_unreadable_created_at_is_evicted_and_reported(self, memory) -> None:
        broken = Cart(id="broken")
        broken.created_at = "sometime"
        memory.set(broken)
        memory.set(_aged("fresh", 1))
        sweeper = CleanupSweeper(memory, clock=lambda: NOW)

        result = sweeper.sweep()

        assert result.cleaned == 1
        assert len(result.errors) == 1
        assert "broken" in result.errors[0]
        assert "broken" not in memory

    def test_iso_string_timestamps_are_understood(self, memory) -> None:
        cart = Cart(id="text")
        cart.created_at = (NOW - timedelta(hours=2)).isoformat()
        memory.set(cart)
        sweeper = CleanupSweeper(memory, clock=lambda: NOW)

        assert sweeper.sweep().cleaned == 0
        assert "text" in memory

    def test_empty_tier(self, memory) -> None:
        result = CleanupSweeper(memory).sweep()

        assert result.cleaned == 0
        assert result.errors == []

    def test_store_sweep_leaves_primary_alone(self, store, fake_redis, memory) -> None:
        old = Cart(id="old", created_at=datetime.now(timezone.utc) - timedelta(days=3))
        memory.set(old)
        fake_redis.data["cart:old"] = encode(old)

        result = store.sweep()

        assert result.cleaned == 1
        assert "old" not in memory
        assert "cart:old" in fake_redis.data


class TestCleanupWorker:
    @pytest.mark.asyncio
    async def test_worker_sweeps_until_cancelled(self, store, memory) -> None:
        memory.set(Cart(id="old", created_at=datetime.now(timezone.utc) - timedelta(days=2)))

        task = asyncio.create_task(start_cart_cleanup_worker(store, interval_seconds=0.01))
        await asyncio.sleep(0.05)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert len(memory) == 0

    @pytest.mark.asyncio
    async def test_worker_survives_sweep_failure(self, store, monkeypatch) -> None:
        calls = []

        def failing_sweep():
            calls.append(1)
            raise RuntimeError("boom")

        monkeypatch.setattr(store, "sweep", failing_sweep)

        task = asyncio.create_task(start_cart_cleanup_worker(store, interval_seconds=0.01))
        await asyncio.sleep(0.05)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert len(calls) > 1
