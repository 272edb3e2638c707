"""Bounded health check for the primary cart tier."""
from __future__ import annotations

import asyncio
import logging

from cart_store.core.constants import PROBE_KEY, PROBE_TIMEOUT_SECONDS
from cart_store.core.exceptions import CartDecodeError, CartProbeTimeout, CartTierError
from cart_store.integrations.redis_cart import RedisCartTier

logger = logging.getLogger(__name__)


class AvailabilityProbe:
    """Answers "is tier 1 usable right now?" without ever hanging or raising.

    A ``get`` on a throwaway key races ``timeout``; whichever settles first
    decides. The answer is never cached: the tier may recover or fail between
    two store operations, so each one probes afresh.
    """

    def __init__(
        self,
        tier: RedisCartTier | None,
        timeout: float = PROBE_TIMEOUT_SECONDS,
        probe_key: str = PROBE_KEY,
    ):
        self._tier = tier
        self._timeout = timeout
        self._probe_key = probe_key
        self.last_error: str | None = None

    async def is_available(self) -> bool:
        if self._tier is None:
            self.last_error = "primary tier not configured"
            return False

        try:
            await asyncio.wait_for(self._tier.get(self._probe_key), timeout=self._timeout)
        except asyncio.TimeoutError:
            error = CartProbeTimeout(self._timeout)
            logger.warning("Cart tier probe: %s", error.message)
            self.last_error = error.message
            return False
        except CartTierError as exc:
            logger.warning("Cart tier probe failed: %s", exc.message)
            self.last_error = exc.message
            return False
        except CartDecodeError:
            # Tier answered; an unreadable probe value does not make it unavailable
            pass

        self.last_error = None
        return True
