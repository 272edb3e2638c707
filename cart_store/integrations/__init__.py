"""Integrations package - adapters for external storage services."""

from cart_store.integrations.redis_cart import RedisCartTier

__all__ = ["RedisCartTier"]
