"""JSON wire format for carts stored in the primary tier.

Wire shape::

    {"id": str,
     "items": [{"productId", "variantId", "name", "price", "quantity",
                "imageUrl", "sku"}],
     "createdAt": ISO-8601, "updatedAt": ISO-8601, "total": number}

Decoding fails only when the payload is not a JSON object. Everything else
is repaired field by field using the default rules below, so a partially
corrupted entry still yields a usable cart.
"""
from __future__ import annotations

import json
import logging
import math
import numbers
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from cart_store.core.exceptions import CartDecodeError
from cart_store.domain.cart import Cart, CartItem, new_cart_id, utcnow

logger = logging.getLogger(__name__)


def _int_or_none(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _number_or_zero(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return 0
    if isinstance(value, float) and not math.isfinite(value):
        return 0
    return value


def _quantity_or_one(value: Any) -> int:
    quantity = _int_or_none(value)
    return quantity if quantity is not None and quantity >= 1 else 1


def _str_or_empty(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _str_or_none(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _id_or_new(value: Any) -> str:
    if isinstance(value, bool) or value is None:
        return new_cart_id()
    if isinstance(value, (str, int)):
        text = str(value).strip()
        if text:
            return text
    return new_cart_id()


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp into an aware UTC datetime, or None."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _timestamp_or_now(value: Any) -> datetime:
    return parse_timestamp(value) or utcnow()


def format_timestamp(value: Any) -> str:
    moment = _timestamp_or_now(value)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


ITEM_DEFAULT_RULES: dict[str, Callable[[Any], Any]] = {
    "variantId": _int_or_none,
    "name": _str_or_empty,
    "price": _number_or_zero,
    "quantity": _quantity_or_one,
    "imageUrl": _str_or_none,
    "sku": _str_or_none,
}


def _decode_items(value: Any) -> list[CartItem]:
    if not isinstance(value, list):
        return []

    items: list[CartItem] = []
    for raw in value:
        if not isinstance(raw, dict):
            logger.warning("Dropping non-object cart item: %r", raw)
            continue
        product_id = _int_or_none(raw.get("productId"))
        if product_id is None:
            logger.warning("Dropping cart item without productId: %r", raw)
            continue
        fields = {name: rule(raw.get(name)) for name, rule in ITEM_DEFAULT_RULES.items()}
        items.append(
            CartItem(
                product_id=product_id,
                variant_id=fields["variantId"],
                name=fields["name"],
                price=fields["price"],
                quantity=fields["quantity"],
                image_url=fields["imageUrl"],
                sku=fields["sku"],
            )
        )
    return items


CART_DEFAULT_RULES: dict[str, Callable[[Any], Any]] = {
    "id": _id_or_new,
    "items": _decode_items,
    "total": _number_or_zero,
    "createdAt": _timestamp_or_now,
    "updatedAt": _timestamp_or_now,
}


def encode(cart: Cart) -> str:
    """Serialize a cart to its JSON wire form."""
    items = cart.items if isinstance(cart.items, list) else []
    payload = {
        "id": cart.id,
        "items": [item.to_dict() for item in items],
        "createdAt": format_timestamp(cart.created_at),
        "updatedAt": format_timestamp(cart.updated_at),
        "total": _number_or_zero(cart.total),
    }
    return json.dumps(payload, ensure_ascii=False)


def decode(data: str | bytes) -> Cart:
    """Rebuild a cart from untrusted wire data.

    Raises:
        CartDecodeError: payload is not JSON, not a JSON object, or holds a
            value the default rules cannot repair
    """
    try:
        payload = json.loads(data)
    except (TypeError, ValueError) as exc:
        raise CartDecodeError(f"Cart payload is not valid JSON: {exc}") from exc

    if not isinstance(payload, dict):
        raise CartDecodeError(
            f"Cart payload must be a JSON object, got {type(payload).__name__}"
        )

    try:
        fields = {name: rule(payload.get(name)) for name, rule in CART_DEFAULT_RULES.items()}
    except (TypeError, ValueError) as exc:
        raise CartDecodeError(f"Cart payload could not be repaired: {exc}") from exc

    raw_id = payload.get("id")
    if raw_id is None or isinstance(raw_id, bool) or fields["id"] != str(raw_id).strip():
        logger.warning("Cart payload had no usable id; assigned %s", fields["id"])

    return Cart(
        id=fields["id"],
        items=fields["items"],
        created_at=fields["createdAt"],
        updated_at=fields["updatedAt"],
        total=fields["total"],
    )
