# =============================================================================
# Sentry Error Tracking Integration
# =============================================================================
#
# Setup:
#   Copy the project DSN to .env: SENTRY_DSN=https://...@sentry.io/...
#
# Usage:
#   init_sentry() runs in the API lifespan. Translation failures are
#   reported with capture_exception(); they never reach the page.
#
# =============================================================================

import logging

from phishaware.config import get_settings

logger = logging.getLogger(__name__)

# Sentry SDK is optional - gracefully degrade if not installed
try:
    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.logging import LoggingIntegration
    SENTRY_AVAILABLE = True
except ImportError:
    SENTRY_AVAILABLE = False
    sentry_sdk = None


def init_sentry() -> bool:
    """
    Initialize Sentry error tracking.

    Returns True if initialized, False if skipped.
    """
    if not SENTRY_AVAILABLE:
        logger.info("Sentry SDK not installed - error tracking disabled")
        return False

    settings = get_settings()

    if not settings.sentry_dsn:
        logger.info("SENTRY_DSN not set - error tracking disabled")
        return False

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.environment,
        traces_sample_rate=0.1 if settings.is_production else 1.0,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            LoggingIntegration(
                level=logging.INFO,
                event_level=logging.ERROR,
            ),
        ],
        send_default_pii=False,
        before_send_transaction=_filter_transactions,
    )

    logger.info(f"Sentry initialized for {settings.environment}")
    return True


def _filter_transactions(event: dict, hint: dict) -> dict | None:
    """Drop health checks."""
    if event.get("transaction", "") in ("/health", "/healthz"):
        return None
    return event


def is_enabled() -> bool:
    return SENTRY_AVAILABLE and sentry_sdk.get_client().is_active()


def capture_exception(error: Exception, **context) -> str | None:
    """
    Capture an exception to Sentry.

    Returns the event ID if captured, None otherwise. Callers log the
    error themselves; nothing is logged here when Sentry is off.
    """
    if not is_enabled():
        return None

    with sentry_sdk.new_scope() as scope:
        for key, value in context.items():
            scope.set_extra(key, value)
        return sentry_sdk.capture_exception(error)


def set_tag(key: str, value: str) -> None:
    """Add a tag for filtering in Sentry."""
    if is_enabled():
        sentry_sdk.set_tag(key, value)
