"""Cart aggregate and its line items."""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_cart_id() -> str:
    return str(uuid.uuid4())


@dataclass
class CartItem:
    """Single line in a cart.

    ``(product_id, variant_id)`` identifies the line; ``variant_id=None`` is the
    base product. Descriptive fields are carried through untouched.
    """

    product_id: int
    variant_id: int | None = None
    name: str = ""
    price: float = 0
    quantity: int = 1
    image_url: str | None = None
    sku: str | None = None

    @property
    def key(self) -> tuple[int, int | None]:
        return (self.product_id, self.variant_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "productId": self.product_id,
            "variantId": self.variant_id,
            "name": self.name,
            "price": self.price,
            "quantity": self.quantity,
            "imageUrl": self.image_url,
            "sku": self.sku,
        }


@dataclass
class Cart:
    """Shopping cart aggregate root."""

    id: str = field(default_factory=new_cart_id)
    items: list[CartItem] = field(default_factory=list)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    total: float = 0

    def find_item(self, product_id: int, variant_id: int | None) -> CartItem | None:
        for item in self.items:
            if item.product_id == product_id and item.variant_id == variant_id:
                return item
        return None

    def touch(self) -> None:
        self.updated_at = utcnow()


@dataclass
class CartSummary:
    item_count: int
    total: float

    def to_dict(self) -> dict[str, Any]:
        return {"item_count": self.item_count, "total": self.total}
