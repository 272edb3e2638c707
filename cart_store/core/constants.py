"""Storage-wide constants and default configuration values.

Centralizes magic numbers so settings and tests share one source.
"""

# ============== TIME CONSTANTS (seconds) ==============
SECONDS_PER_HOUR = 3600
SECONDS_PER_DAY = 86400

# ============== CART STORAGE ==============
CART_KEY_PREFIX = "cart:"
CART_TTL_SECONDS = 7 * SECONDS_PER_DAY  # tier 1 native expiry
CART_MAX_AGE_SECONDS = SECONDS_PER_DAY  # tier 2 sweep threshold
CART_CLEANUP_INTERVAL_SECONDS = SECONDS_PER_HOUR

# ============== PRIMARY TIER ==============
PROBE_TIMEOUT_SECONDS = 5.0
PROBE_KEY = "cart_probe:healthcheck"  # outside CART_KEY_PREFIX so scans skip it
REDIS_SOCKET_TIMEOUT_SECONDS = 5.0

# ============== ITEMS ==============
DEFAULT_ITEM_QUANTITY = 1
