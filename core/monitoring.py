"""
Monitoring and Observability Configuration

Integrates Sentry for error tracking and performance monitoring.
"""

import logging
import os
from typing import Optional, Dict, Any

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration

from config.settings import settings

logger = logging.getLogger(__name__)

# Client errors that should never page anyone
EXPECTED_EXCEPTIONS = [
    'InvalidFileFormatException',
    'InvalidImageException',
    'HairTemplateNotFoundException',
    'ScanNotFoundException',
    'UserAlreadyExistsException',
]


def init_sentry(
    dsn: Optional[str] = None,
    environment: Optional[str] = None,
    traces_sample_rate: float = 0.1
) -> bool:
    """
    Initialize Sentry error tracking and performance monitoring

    Args:
        dsn: Sentry DSN (from env var SENTRY_DSN if not provided)
        environment: Environment name (production, staging, development)
        traces_sample_rate: Percentage of transactions to trace (0.0-1.0)

    Returns:
        True if Sentry initialized successfully, False otherwise
    """
    sentry_dsn = dsn or os.getenv('SENTRY_DSN')

    if not sentry_dsn:
        logger.info("ℹ️  SENTRY_DSN not configured - Sentry disabled")
        return False

    sentry_env = os.getenv('SENTRY_ENVIRONMENT') or environment or settings.ENVIRONMENT
    traces_rate = float(os.getenv('SENTRY_TRACES_SAMPLE_RATE', traces_sample_rate))

    try:
        sentry_sdk.init(
            dsn=sentry_dsn,
            environment=sentry_env,
            release=f"glammefy-backend@{settings.APP_VERSION}",
            traces_sample_rate=traces_rate,
            integrations=[
                FastApiIntegration(
                    transaction_style="endpoint",
                    failed_request_status_codes=[500, 501, 502, 503, 504, 505]
                ),
                LoggingIntegration(
                    level=logging.INFO,
                    event_level=logging.ERROR
                ),
            ],
            before_send=before_send_filter,
            attach_stacktrace=True,
            send_default_pii=False,  # uploaded faces are PII
            max_breadcrumbs=50,
            debug=settings.DEBUG,
        )

        logger.info(f"✅ Sentry initialized (env={sentry_env}, traces={traces_rate * 100}%)")
        return True

    except Exception as e:
        logger.error(f"❌ Failed to initialize Sentry: {str(e)}")
        return False


def before_send_filter(event: Dict[str, Any], hint: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Filter events before sending to Sentry

    Args:
        event: Sentry event dict
        hint: Additional context

    Returns:
        Modified event or None to drop the event
    """
    if event.get('transaction') == 'GET /api/health':
        return None

    if 'exception' in event:
        values = event['exception'].get('values') or [{}]
        exc_type = values[0].get('type', '')

        if exc_type in EXPECTED_EXCEPTIONS:
            return None

    return event


def add_breadcrumb(
    message: str,
    category: str = "pipeline",
    level: str = "info",
    data: Optional[Dict[str, Any]] = None
) -> None:
    """
    Add breadcrumb for Sentry debugging

    Example:
        add_breadcrumb("Masking view 2/3", data={"model": "fal-ai/evf-sam"})
    """
    sentry_sdk.add_breadcrumb(
        message=message,
        category=category,
        level=level,
        data=data or {}
    )
