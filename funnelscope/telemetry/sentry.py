"""
Sentry Error Tracking
=====================

Error tracking for per-source diagnostic failures.

Related files:
- funnelscope/orchestrator/runner.py: reports isolated per-source failures
- funnelscope/config.py: SENTRY_DSN / ENVIRONMENT settings

Environment Variables:
- SENTRY_DSN: Sentry project DSN (Sentry stays disabled when unset)
- ENVIRONMENT: Environment name (production, staging, development)
"""

from __future__ import annotations

import logging
from typing import Optional

import sentry_sdk
from sentry_sdk.integrations.logging import LoggingIntegration

from funnelscope.config import get_settings

logger = logging.getLogger(__name__)


def init_sentry(dsn: Optional[str] = None) -> bool:
    """
    Initialize Sentry SDK.

    Should be called once by the embedding process before running diagnostics.

    Returns:
        True if Sentry was initialized, False when no DSN is configured.
    """
    settings = get_settings()
    dsn = dsn or settings.SENTRY_DSN
    if not dsn:
        return False

    try:
        sentry_sdk.init(
            dsn=dsn,
            environment=settings.ENVIRONMENT,
            integrations=[
                LoggingIntegration(
                    level=logging.INFO,        # INFO+ as breadcrumbs
                    event_level=logging.ERROR,  # ERROR+ as events
                ),
            ],
            traces_sample_rate=0.1,
            send_default_pii=False,
        )
        logger.debug("[SENTRY] Initialized for %s environment", settings.ENVIRONMENT)
        return True
    except Exception as e:
        logger.error("[SENTRY] Failed to initialize: %s", e)
        return False


def capture_exception(exception: BaseException, extra: Optional[dict] = None) -> None:
    """
    Manually capture an exception to Sentry.

    Use this for exceptions that are caught and handled but should still
    be tracked, e.g. a single platform failing inside a portfolio run.

    Example:
        try:
            snapshots = await client.fetch_comparison_snapshots(...)
        except Exception as e:
            capture_exception(e, extra={"platform": "meta"})
            return error_record
    """
    if not sentry_sdk.is_initialized():
        logger.debug("Exception (Sentry disabled): %s", exception)
        return

    try:
        with sentry_sdk.new_scope() as scope:
            if extra:
                for key, value in extra.items():
                    scope.set_extra(key, value)
            sentry_sdk.capture_exception(exception)
    except Exception as e:
        logger.error("[SENTRY] Failed to capture exception: %s", e)
