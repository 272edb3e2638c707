"""In-process fallback (tier 2) cart storage."""
from __future__ import annotations

import copy
from collections.abc import Iterator

from cart_store.domain.cart import Cart


class MemoryFallbackTier:
    """Per-process map of cart id to Cart.

    Carts are deep-copied in and out so a caller mutating a loaded cart does
    not change the fallback until it saves. Not shared between processes.
    """

    def __init__(self) -> None:
        self._carts: dict[str, Cart] = {}

    def get(self, cart_id: str) -> Cart | None:
        cart = self._carts.get(cart_id)
        return copy.deepcopy(cart) if cart is not None else None

    def set(self, cart: Cart) -> None:
        self._carts[cart.id] = copy.deepcopy(cart)

    def delete(self, cart_id: str) -> bool:
        return self._carts.pop(cart_id, None) is not None

    def __contains__(self, cart_id: object) -> bool:
        return cart_id in self._carts

    def __len__(self) -> int:
        return len(self._carts)

    def ids(self) -> list[str]:
        return list(self._carts)

    def values(self) -> Iterator[Cart]:
        for cart in list(self._carts.values()):
            yield copy.deepcopy(cart)

    def peek(self, cart_id: str) -> Cart | None:
        """Stored object without copying; for sweeps and stats only."""
        return self._carts.get(cart_id)
