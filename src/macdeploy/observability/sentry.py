"""Sentry SDK initialization with structlog-sentry bridge.

Provides:
- ``init_sentry(dsn, hostname, environment)``: Initialize Sentry SDK and tag
  events with the device hostname.  No-op when *dsn* is empty.
- ``get_sentry_processor()``: Return a structlog processor that forwards
  ERROR-level log events to Sentry.
"""

from __future__ import annotations

import logging

import sentry_sdk
import structlog
from sentry_sdk.integrations.logging import LoggingIntegration
from structlog_sentry import SentryProcessor


def init_sentry(dsn: str, hostname: str = "", environment: str = "development") -> bool:
    """Initialize Sentry SDK for a one-shot device run.

    Args:
        dsn: Sentry DSN string.  Empty string disables Sentry.
        hostname: Device hostname, attached as the ``device`` tag.
        environment: ``production`` or ``development``.

    Returns:
        True if the SDK was initialized.
    """
    if not dsn:
        return False

    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        send_default_pii=False,
        traces_sample_rate=0.0,
        integrations=[
            # structlog-sentry does the capturing; stdlib logging capture
            # would report every event twice.
            LoggingIntegration(event_level=None, level=None),
        ],
    )
    if hostname:
        sentry_sdk.set_tag("device", hostname)
    return True


def get_sentry_processor() -> structlog.types.Processor:
    """Return a structlog processor that forwards ERROR events to Sentry.

    Insert it after ``add_log_level`` and before the renderer.
    """
    return SentryProcessor(event_level=logging.ERROR)
