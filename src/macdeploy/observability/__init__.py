"""Observability: structlog configuration and optional Sentry error reporting."""

from macdeploy.observability.logging import configure_logging
from macdeploy.observability.sentry import get_sentry_processor, init_sentry

__all__ = ["configure_logging", "get_sentry_processor", "init_sentry"]
