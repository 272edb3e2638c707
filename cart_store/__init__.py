"""Resilient two-tier shopping cart storage (Redis + in-process fallback)."""
from __future__ import annotations

from cart_store.core.cart_store import CartStore, MutationResult, StoreResult
from cart_store.domain.cart import Cart, CartItem

__all__ = ["Cart", "CartItem", "CartStore", "MutationResult", "StoreResult"]
