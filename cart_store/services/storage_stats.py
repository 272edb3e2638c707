from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from cart_store.core.availability import AvailabilityProbe
from cart_store.core.exceptions import CartTierError
from cart_store.core.memory_tier import MemoryFallbackTier
from cart_store.integrations.redis_cart import RedisCartTier

logger = logging.getLogger(__name__)


@dataclass
class StorageStatsReport:
    cache_available: bool
    tier1_count: int = 0
    tier2_count: int = 0
    # Approximate: max of both tiers, not a de-duplicated union
    total_carts: int = 0
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "cache_available": self.cache_available,
            "tier1_count": self.tier1_count,
            "tier2_count": self.tier2_count,
            "total_carts": self.total_carts,
            "errors": list(self.errors),
        }


class StorageStats:
    """Read-only counts for both tiers."""

    def __init__(
        self,
        tier: RedisCartTier | None,
        memory: MemoryFallbackTier,
        probe: AvailabilityProbe,
        key_prefix: str,
    ):
        self._tier = tier
        self._memory = memory
        self._probe = probe
        self._key_prefix = key_prefix

    async def stats(self) -> StorageStatsReport:
        report = StorageStatsReport(cache_available=await self._probe.is_available())
        if not report.cache_available and self._probe.last_error:
            report.errors.append(self._probe.last_error)

        if report.cache_available and self._tier is not None:
            try:
                report.tier1_count = len(await self._tier.scan_keys(self._key_prefix))
            except CartTierError as exc:
                logger.warning("Cart stats scan failed: %s", exc.message)
                report.errors.append(exc.message)

        report.tier2_count = len(self._memory)
        report.total_carts = max(report.tier1_count, report.tier2_count)
        return report
