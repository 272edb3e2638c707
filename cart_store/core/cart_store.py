"""Two-tier cart store: Redis first, in-process memory as the safety net.

Routing rules, per logical operation:

* the availability probe runs once;
* reads try Redis when it is up and copy a hit into memory (read repair),
  otherwise they fall back to memory;
* writes always land in memory and also in Redis when it is up; a write
  succeeds when either tier kept it.

Tier failures never escape: they are logged and returned in ``errors``.
Only :class:`CartValidationError` from :meth:`CartStore.save` propagates.

Mutations on the same cart id are serialized inside this process with an
``asyncio.Lock``. Nothing coordinates separate processes, so two workers
updating one cart concurrently can still lose an update (last write wins).
"""
from __future__ import annotations

import asyncio
import logging
import weakref
from collections.abc import Callable
from dataclasses import dataclass, field

from cart_store.core.availability import AvailabilityProbe
from cart_store.core.cart_codec import decode, encode
from cart_store.core.cleanup import CleanupSweeper, SweepResult
from cart_store.core.config import CartStoreSettings
from cart_store.core.constants import (
    CART_KEY_PREFIX,
    CART_MAX_AGE_SECONDS,
    CART_TTL_SECONDS,
    PROBE_TIMEOUT_SECONDS,
)
from cart_store.core.exceptions import CartDecodeError, CartTierError, CartValidationError
from cart_store.core.memory_tier import MemoryFallbackTier
from cart_store.core.sentry_integration import capture_exception
from cart_store.domain import cart_ops
from cart_store.domain.cart import Cart, CartItem, new_cart_id
from cart_store.integrations.redis_cart import RedisCartTier
from cart_store.services.storage_stats import StorageStats, StorageStatsReport

logger = logging.getLogger(__name__)


@dataclass
class StoreResult:
    success: bool
    errors: list[str] = field(default_factory=list)
    found: bool = False


@dataclass
class MutationResult(StoreResult):
    cart: Cart | None = None


class CartStore:
    """Cart persistence across an unreliable Redis and a per-process map.

    Usage:
        store = CartStore.from_settings(load_settings())
        result = await store.add_item(cart_id, CartItem(product_id=1, price=10))
        cart = await store.get(result.cart.id)
    """

    def __init__(
        self,
        tier: RedisCartTier | None,
        memory: MemoryFallbackTier | None = None,
        *,
        key_prefix: str = CART_KEY_PREFIX,
        ttl_seconds: int = CART_TTL_SECONDS,
        probe_timeout: float = PROBE_TIMEOUT_SECONDS,
        max_age_seconds: int = CART_MAX_AGE_SECONDS,
    ):
        self._tier = tier
        self._memory = memory if memory is not None else MemoryFallbackTier()
        self._key_prefix = key_prefix
        self._ttl_seconds = ttl_seconds
        self._probe = AvailabilityProbe(tier, timeout=probe_timeout)
        self._sweeper = CleanupSweeper(self._memory, max_age_seconds=max_age_seconds)
        self._stats = StorageStats(tier, self._memory, self._probe, key_prefix)
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    @classmethod
    def from_settings(cls, settings: CartStoreSettings) -> CartStore:
        tier = None
        if settings.primary_tier_enabled:
            tier = RedisCartTier.from_url(
                settings.redis_url, socket_timeout=settings.redis_socket_timeout
            )
        else:
            logger.warning("REDIS_URL is not set; carts live in process memory only")

        return cls(
            tier,
            key_prefix=settings.key_prefix,
            ttl_seconds=settings.ttl_seconds,
            probe_timeout=settings.probe_timeout,
            max_age_seconds=settings.max_age_seconds,
        )

    @property
    def memory(self) -> MemoryFallbackTier:
        return self._memory

    def _cart_key(self, cart_id: str) -> str:
        return f"{self._key_prefix}{cart_id}"

    def _lock_for(self, cart_id: str) -> asyncio.Lock:
        lock = self._locks.get(cart_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[cart_id] = lock
        return lock

    def _unavailable_error(self) -> str:
        return f"Primary tier unavailable: {self._probe.last_error or 'probe failed'}"

    # =====================================================
    # TIER ROUTING
    # =====================================================
    async def _read_primary(self, cart_id: str) -> Cart | None:
        key = self._cart_key(cart_id)
        try:
            raw = await self._tier.get(key)
            if not raw:
                return None
            cart = decode(raw)
        except CartTierError as exc:
            logger.warning("Cart %s read from Redis failed: %s", cart_id, exc.message)
            return None
        except CartDecodeError as exc:
            logger.warning("Corrupted cart %s in Redis ignored: %s", cart_id, exc.message)
            return None

        if cart.id != cart_id:
            logger.warning("Cart stored under %s carried id %s; using key id", key, cart.id)
            cart.id = cart_id
        return cart

    async def _load(self, cart_id: str, available: bool) -> Cart | None:
        if available:
            cart = await self._read_primary(cart_id)
            if cart is not None:
                cart.touch()
                self._memory.set(cart)
                return cart
        return self._memory.get(cart_id)

    def _validate(self, cart: Cart) -> None:
        if not isinstance(cart, Cart):
            raise CartValidationError(f"Expected Cart, got {type(cart).__name__}")
        if cart.items is None:
            cart.items = []
        if not isinstance(cart.items, list):
            raise CartValidationError(
                f"Cart {cart.id!r} items must be a list, got {type(cart.items).__name__}"
            )
        for item in cart.items:
            if not isinstance(item, CartItem):
                raise CartValidationError(
                    f"Cart {cart.id!r} contains a non-item entry: {item!r}"
                )
        if not isinstance(cart.id, str) or not cart.id.strip():
            if cart.id not in (None, ""):
                raise CartValidationError(f"Cart id must be a string, got {cart.id!r}")
            cart.id = new_cart_id()
            logger.warning("Saving cart without id; assigned %s", cart.id)

    async def _persist(self, cart: Cart, available: bool) -> StoreResult:
        self._validate(cart)
        cart.touch()
        errors: list[str] = []

        memory_ok = False
        try:
            self._memory.set(cart)
            memory_ok = True
        except Exception as exc:
            logger.error("Failed to save cart %s to memory: %s", cart.id, exc)
            errors.append(f"Memory tier set failed for {cart.id}: {exc}")

        primary_ok = False
        if available:
            try:
                await self._tier.set(self._cart_key(cart.id), encode(cart), self._ttl_seconds)
                primary_ok = True
            except CartTierError as exc:
                logger.warning("Cart %s kept in memory only: %s", cart.id, exc.message)
                errors.append(exc.message)
        else:
            errors.append(self._unavailable_error())

        return StoreResult(success=memory_ok or primary_ok, errors=errors, found=True)

    # =====================================================
    # QUERIES
    # =====================================================
    async def get(self, cart_id: str) -> Cart | None:
        available = await self._probe.is_available()
        return await self._load(cart_id, available)

    async def has_cart(self, cart_id: str) -> bool:
        return await self.get(cart_id) is not None

    async def get_all(self) -> list[Cart]:
        """Every live cart from both tiers; Redis wins on duplicate ids.

        Scans the whole keyspace prefix, so keep it off request hot paths.
        """
        carts: dict[str, Cart] = {}

        if await self._probe.is_available():
            try:
                keys = await self._tier.scan_keys(self._key_prefix)
            except CartTierError as exc:
                logger.warning("Listing carts from Redis failed: %s", exc.message)
                keys = []
            for key in keys:
                cart = await self._read_primary(key[len(self._key_prefix):])
                if cart is not None:
                    carts[cart.id] = cart

        for cart in self._memory.values():
            carts.setdefault(cart.id, cart)

        return list(carts.values())

    async def stats(self) -> StorageStatsReport:
        return await self._stats.stats()

    def sweep(self) -> SweepResult:
        return self._sweeper.sweep()

    # =====================================================
    # COMMANDS
    # =====================================================
    async def get_or_create(self, cart_id: str | None = None) -> Cart:
        """Return the stored cart or a freshly saved one; never raises."""
        try:
            available = await self._probe.is_available()
            if cart_id:
                cart = await self._load(cart_id, available)
                if cart is not None:
                    return cart

            cart = Cart()
            result = await self._persist(cart, available)
            if result.errors:
                logger.info("New cart %s saved with degraded durability", cart.id)
            return cart
        except Exception as exc:
            logger.error("get_or_create failed for %s, using memory-only cart: %s", cart_id, exc)
            capture_exception(exc, cart={"cart_id": cart_id})
            cart = Cart()
            self._memory.set(cart)
            return cart

    async def save(self, cart: Cart) -> StoreResult:
        available = await self._probe.is_available()
        return await self._persist(cart, available)

    async def delete(self, cart_id: str) -> StoreResult:
        available = await self._probe.is_available()
        errors: list[str] = []

        primary_deleted = False
        if available:
            try:
                primary_deleted = await self._tier.delete(self._cart_key(cart_id))
            except CartTierError as exc:
                logger.warning("Cart %s delete from Redis failed: %s", cart_id, exc.message)
                errors.append(exc.message)
        else:
            errors.append(self._unavailable_error())

        memory_deleted = self._memory.delete(cart_id)
        found = primary_deleted or memory_deleted
        return StoreResult(success=found or not errors, errors=errors, found=found)

    async def _mutate(
        self, cart_id: str, mutation: Callable[[Cart], bool], create: bool = False
    ) -> MutationResult:
        async with self._lock_for(cart_id):
            try:
                available = await self._probe.is_available()
                cart = await self._load(cart_id, available)
                if cart is None:
                    if not create:
                        return MutationResult(
                            success=False, errors=[f"Cart {cart_id} not found"]
                        )
                    cart = Cart()
                    logger.info("Cart %s not found; started new cart %s", cart_id, cart.id)

                if not mutation(cart):
                    return MutationResult(success=False, found=False, cart=cart)

                saved = await self._persist(cart, available)
                return MutationResult(
                    success=saved.success, errors=saved.errors, found=True, cart=cart
                )
            except CartValidationError:
                raise
            except Exception as exc:
                logger.error("Cart %s mutation failed: %s", cart_id, exc)
                capture_exception(exc, cart={"cart_id": cart_id})
                return MutationResult(success=False, errors=[f"Cart {cart_id} mutation failed: {exc}"])

    async def add_item(self, cart_id: str | None, item: CartItem) -> MutationResult:
        """Add ``item`` to the cart, creating the cart when it does not exist.

        A missing or unknown ``cart_id`` mints a new cart with a fresh id;
        read ``result.cart.id`` to hand it back to the client.
        """

        def mutation(cart: Cart) -> bool:
            cart_ops.add_item(cart, item)
            return True

        if not cart_id:
            cart_id = new_cart_id()
        return await self._mutate(cart_id, mutation, create=True)

    async def set_quantity(
        self, cart_id: str, product_id: int, variant_id: int | None, quantity: int
    ) -> MutationResult:
        return await self._mutate(
            cart_id,
            lambda cart: cart_ops.set_quantity(cart, product_id, variant_id, quantity),
        )

    async def remove_item(
        self, cart_id: str, product_id: int, variant_id: int | None
    ) -> MutationResult:
        """Remove the single line keyed by ``(product_id, variant_id)``."""
        return await self._mutate(
            cart_id, lambda cart: cart_ops.remove_item(cart, product_id, variant_id)
        )

    async def remove_product(self, cart_id: str, product_id: int) -> MutationResult:
        """Remove every line of ``product_id``, including all its variants."""
        return await self._mutate(
            cart_id, lambda cart: cart_ops.remove_product(cart, product_id)
        )

    async def clear(self, cart_id: str) -> MutationResult:
        def mutation(cart: Cart) -> bool:
            cart_ops.clear(cart)
            return True

        return await self._mutate(cart_id, mutation)

    async def close(self) -> None:
        if self._tier is not None:
            await self._tier.close()
