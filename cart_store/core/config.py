"""Environment-driven configuration for the cart store."""
from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from cart_store.core.constants import (
    CART_CLEANUP_INTERVAL_SECONDS,
    CART_KEY_PREFIX,
    CART_MAX_AGE_SECONDS,
    CART_TTL_SECONDS,
    PROBE_TIMEOUT_SECONDS,
    REDIS_SOCKET_TIMEOUT_SECONDS,
)


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


@dataclass(slots=True)
class CartStoreSettings:
    redis_url: str | None = None
    key_prefix: str = CART_KEY_PREFIX
    ttl_seconds: int = CART_TTL_SECONDS
    max_age_seconds: int = CART_MAX_AGE_SECONDS
    probe_timeout: float = PROBE_TIMEOUT_SECONDS
    cleanup_interval_seconds: int = CART_CLEANUP_INTERVAL_SECONDS
    redis_socket_timeout: float = REDIS_SOCKET_TIMEOUT_SECONDS
    log_level: str = "INFO"
    environment: str = "production"

    @property
    def primary_tier_enabled(self) -> bool:
        return bool(self.redis_url)


def load_settings() -> CartStoreSettings:
    """Load environment variables once and expose typed settings."""
    load_dotenv()

    settings = CartStoreSettings(
        redis_url=os.getenv("REDIS_URL") or None,
        key_prefix=os.getenv("CART_KEY_PREFIX", CART_KEY_PREFIX),
        ttl_seconds=_env_int("CART_TTL_SECONDS", CART_TTL_SECONDS),
        max_age_seconds=_env_int("CART_MAX_AGE_SECONDS", CART_MAX_AGE_SECONDS),
        probe_timeout=_env_float("CART_PROBE_TIMEOUT", PROBE_TIMEOUT_SECONDS),
        cleanup_interval_seconds=_env_int(
            "CART_CLEANUP_INTERVAL_SECONDS", CART_CLEANUP_INTERVAL_SECONDS
        ),
        redis_socket_timeout=_env_float("REDIS_SOCKET_TIMEOUT", REDIS_SOCKET_TIMEOUT_SECONDS),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        environment=os.getenv("ENVIRONMENT", "production"),
    )

    if settings.ttl_seconds <= 0:
        raise ValueError("CART_TTL_SECONDS must be positive")
    if settings.max_age_seconds <= 0:
        raise ValueError("CART_MAX_AGE_SECONDS must be positive")
    if settings.probe_timeout <= 0:
        raise ValueError("CART_PROBE_TIMEOUT must be positive")

    return settings
