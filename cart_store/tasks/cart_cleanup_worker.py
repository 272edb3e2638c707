import asyncio
import logging

from cart_store.core.cart_store import CartStore
from cart_store.core.constants import CART_CLEANUP_INTERVAL_SECONDS

logger = logging.getLogger(__name__)


async def start_cart_cleanup_worker(
    store: CartStore, interval_seconds: float = CART_CLEANUP_INTERVAL_SECONDS
) -> None:
    """Periodic worker that evicts stale carts from the memory fallback.

    Redis entries expire on their own TTL, so only tier 2 is swept. Runs
    until cancelled.
    """
    logger.info("Cart cleanup worker started (every %ss)", interval_seconds)

    while True:
        try:
            result = store.sweep()
            if result.errors:
                logger.warning(
                    "Cart cleanup evicted %s carts with %s unreadable entries",
                    result.cleaned,
                    len(result.errors),
                )
        except Exception as e:
            logger.error(f"Cart cleanup sweep failed: {e}")

        await asyncio.sleep(interval_seconds)
