"""Domain package."""

from .cart import Cart, CartItem, CartSummary
from .cart_ops import (
    add_item,
    cart_summary,
    clear,
    recompute_total,
    remove_item,
    remove_product,
    set_quantity,
)

__all__ = [
    # Aggregate
    "Cart",
    "CartItem",
    "CartSummary",
    # Mutations
    "add_item",
    "set_quantity",
    "remove_item",
    "remove_product",
    "clear",
    "recompute_total",
    "cart_summary",
]
