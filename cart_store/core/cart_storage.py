"""Shared cart store singleton used by request handlers and workers."""
from __future__ import annotations

from cart_store.core.cart_store import CartStore
from cart_store.core.config import load_settings
from cart_store.core.logging_config import setup_logging
from cart_store.core.sentry_integration import init_sentry

_cart_store: CartStore | None = None


def get_cart_store() -> CartStore:
    """Get CartStore singleton built from environment settings.

    The first call also configures logging and Sentry for the process.
    """
    global _cart_store
    if _cart_store is None:
        settings = load_settings()
        setup_logging(settings.log_level)
        init_sentry(environment=settings.environment)
        _cart_store = CartStore.from_settings(settings)
    return _cart_store


async def reset_cart_store() -> None:
    """Close and drop the singleton (shutdown hooks, tests)."""
    global _cart_store
    if _cart_store is not None:
        await _cart_store.close()
        _cart_store = None


__all__ = ["get_cart_store", "reset_cart_store"]
