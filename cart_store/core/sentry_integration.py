"""Sentry integration for cart store error tracking."""
from __future__ import annotations

import logging
import os
from typing import Any

import sentry_sdk
from sentry_sdk.integrations.logging import LoggingIntegration

logger = logging.getLogger(__name__)


def init_sentry(
    environment: str = "production",
    enable_logging: bool = True,
    sample_rate: float = 1.0,
    traces_sample_rate: float = 0.0,
) -> bool:
    """Initialize Sentry error tracking.

    Args:
        environment: Environment name (production, staging, development)
        enable_logging: Enable automatic logging integration
        sample_rate: Error sampling rate (1.0 = 100%)
        traces_sample_rate: Performance tracing rate

    Returns:
        True if Sentry was initialized successfully
    """
    sentry_dsn = os.getenv("SENTRY_DSN")
    if not sentry_dsn:
        logger.info("SENTRY_DSN not set - error tracking disabled")
        return False

    try:
        integrations = []
        if enable_logging:
            # Degraded-tier warnings become breadcrumbs, errors become events
            integrations.append(
                LoggingIntegration(level=logging.WARNING, event_level=logging.ERROR)
            )

        sentry_sdk.init(
            dsn=sentry_dsn,
            environment=environment,
            integrations=integrations,
            sample_rate=sample_rate,
            traces_sample_rate=traces_sample_rate,
            send_default_pii=False,
            release=os.getenv("GIT_COMMIT_SHA", "unknown"),
        )
        logger.info("Sentry initialized for %s environment", environment)
        return True
    except Exception as e:
        logger.error("Failed to initialize Sentry: %s", e)
        return False


def capture_exception(error: BaseException, **extra: Any) -> None:
    """Capture exception and send to Sentry with additional context.

    Args:
        error: Exception to capture
        **extra: Additional context data, one Sentry context per keyword
    """
    try:
        with sentry_sdk.new_scope() as scope:
            for key, value in extra.items():
                scope.set_context(key, value if isinstance(value, dict) else {"value": value})
            sentry_sdk.capture_exception(error)
    except Exception as e:
        logger.error("Failed to capture exception in Sentry: %s", e)
