"""In-place mutations on a loaded cart.

Every operation keeps ``cart.total`` equal to the sum of ``price * quantity``
over ``cart.items`` and never leaves an item with a quantity below one.

Two removal flavours exist on purpose:

* :func:`remove_item` matches the strict ``(product_id, variant_id)`` key, the
  same key :func:`add_item` and :func:`set_quantity` use.
* :func:`remove_product` matches ``product_id`` alone and drops every variant.
"""
from __future__ import annotations

import math
import numbers
from dataclasses import replace

from cart_store.core.constants import DEFAULT_ITEM_QUANTITY
from cart_store.domain.cart import Cart, CartItem, CartSummary


def _as_number(value: object) -> float:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return 0
    if isinstance(value, float) and not math.isfinite(value):
        return 0
    return value


def _valid_quantity(value: object) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value if value >= 1 else None


def recompute_total(cart: Cart) -> float:
    """Recompute and store the cart total.

    A corrupt price or quantity on one line counts as zero for that line
    instead of poisoning the whole total.
    """
    if not isinstance(cart.items, list):
        cart.items = []
    cart.total = sum(
        (_as_number(item.price) * _as_number(item.quantity) for item in cart.items), 0
    )
    return cart.total


def add_item(cart: Cart, item: CartItem) -> Cart:
    """Add ``item``, merging into an existing line with the same key."""
    quantity = _valid_quantity(item.quantity) or DEFAULT_ITEM_QUANTITY
    if not isinstance(cart.items, list):
        cart.items = []

    existing = cart.find_item(item.product_id, item.variant_id)
    if existing is not None:
        existing.quantity = (_valid_quantity(existing.quantity) or 0) + quantity
    else:
        cart.items.append(replace(item, quantity=quantity))

    recompute_total(cart)
    return cart


def set_quantity(cart: Cart, product_id: int, variant_id: int | None, quantity: int) -> bool:
    """Set the quantity of one line; ``quantity <= 0`` removes it.

    Returns False (and leaves the cart alone) when no line matches or when
    ``quantity`` is not an integer.
    """
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        return False
    existing = cart.find_item(product_id, variant_id)
    if existing is None:
        return False

    if quantity <= 0:
        cart.items = [
            item
            for item in cart.items
            if not (item.product_id == product_id and item.variant_id == variant_id)
        ]
    else:
        existing.quantity = quantity

    recompute_total(cart)
    return True


def remove_item(cart: Cart, product_id: int, variant_id: int | None) -> bool:
    """Remove the line with exactly this ``(product_id, variant_id)`` key."""
    before = len(cart.items)
    cart.items = [
        item
        for item in cart.items
        if not (item.product_id == product_id and item.variant_id == variant_id)
    ]
    if len(cart.items) == before:
        return False
    recompute_total(cart)
    return True


def remove_product(cart: Cart, product_id: int) -> bool:
    """Remove every line for ``product_id``, whatever its variant."""
    before = len(cart.items)
    cart.items = [item for item in cart.items if item.product_id != product_id]
    if len(cart.items) == before:
        return False
    recompute_total(cart)
    return True


def clear(cart: Cart) -> Cart:
    cart.items = []
    recompute_total(cart)
    return cart


def cart_summary(cart: Cart) -> CartSummary:
    items = cart.items if isinstance(cart.items, list) else []
    return CartSummary(
        item_count=sum(int(_as_number(item.quantity)) for item in items),
        total=_as_number(cart.total),
    )
