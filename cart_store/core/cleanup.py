"""Eviction of stale carts from the in-process fallback tier."""
from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from cart_store.core.cart_codec import parse_timestamp
from cart_store.core.constants import CART_MAX_AGE_SECONDS
from cart_store.core.memory_tier import MemoryFallbackTier
from cart_store.domain.cart import utcnow

logger = logging.getLogger(__name__)


@dataclass
class SweepResult:
    cleaned: int = 0
    errors: list[str] = field(default_factory=list)


class CleanupSweeper:
    """Drops fallback carts older than ``max_age_seconds``.

    Only tier 2 is swept; Redis entries expire through their own TTL. A cart
    whose ``created_at`` cannot be read is evicted too and reported as an
    error.
    """

    def __init__(
        self,
        memory: MemoryFallbackTier,
        max_age_seconds: int = CART_MAX_AGE_SECONDS,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._memory = memory
        self._max_age = timedelta(seconds=max_age_seconds)
        self._clock = clock

    def sweep(self) -> SweepResult:
        result = SweepResult()
        now = self._clock()

        for cart_id in self._memory.ids():
            cart = self._memory.peek(cart_id)
            if cart is None:
                continue
            created_at = parse_timestamp(cart.created_at)
            if created_at is None:
                result.errors.append(
                    f"Cart {cart_id} has unreadable created_at {cart.created_at!r}; evicted"
                )
            elif now - created_at <= self._max_age:
                continue
            if self._memory.delete(cart_id):
                result.cleaned += 1

        if result.cleaned:
            logger.info("Swept %s stale carts from memory fallback", result.cleaned)
        for error in result.errors:
            logger.warning(error)
        return result
