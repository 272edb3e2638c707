"""Tests for environment-driven settings."""
from __future__ import annotations

import pytest

import cart_store.core.config as config_module
from cart_store.core.config import load_settings
from cart_store.core.constants import CART_MAX_AGE_SECONDS, CART_TTL_SECONDS, PROBE_TIMEOUT_SECONDS

ENV_VARS = (
    "REDIS_URL",
    "CART_KEY_PREFIX",
    "CART_TTL_SECONDS",
    "CART_MAX_AGE_SECONDS",
    "CART_PROBE_TIMEOUT",
    "CART_CLEANUP_INTERVAL_SECONDS",
    "REDIS_SOCKET_TIMEOUT",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.setattr(config_module, "load_dotenv", lambda: False)
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    settings = load_settings()

    assert settings.redis_url is None
    assert settings.primary_tier_enabled is False
    assert settings.key_prefix == "cart:"
    assert settings.ttl_seconds == CART_TTL_SECONDS == 7 * 24 * 3600
    assert settings.max_age_seconds == CART_MAX_AGE_SECONDS == 24 * 3600
    assert settings.probe_timeout == PROBE_TIMEOUT_SECONDS == 5.0


def test_overrides(monkeypatch) -> None:
    monkeypatch.setenv("REDIS_URL", "redis://cache:6379/1")
    monkeypatch.setenv("CART_TTL_SECONDS", "60")
    monkeypatch.setenv("CART_PROBE_TIMEOUT", "0.25")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = load_settings()

    assert settings.primary_tier_enabled is True
    assert settings.ttl_seconds == 60
    assert settings.probe_timeout == 0.25
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize(
    "name,value",
    [("CART_TTL_SECONDS", "week"), ("CART_TTL_SECONDS", "0"), ("CART_PROBE_TIMEOUT", "-1")],
)
def test_invalid_values_raise(monkeypatch, name, value) -> None:
    monkeypatch.setenv(name, value)

    with pytest.raises(ValueError):
        load_settings()
