"""structlog configuration for device runs.

Every run appends its events to a fixed log file (``/var/log/...``) so the
MDM's script output stays clean and admins can read the history on the
device.
"""

from __future__ import annotations

import contextlib
import logging
import sys
from pathlib import Path
from typing import TextIO

import structlog

from macdeploy.observability.sentry import get_sentry_processor


def _open_log_file(log_file: Path) -> TextIO:
    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handle = log_file.open("a", encoding="utf-8")
    except OSError as exc:
        print(f"Cannot open log file {log_file}: {exc}; logging to stderr", file=sys.stderr)
        return sys.stderr
    with contextlib.suppress(OSError):
        log_file.chmod(0o644)
    return handle


def configure_logging(
    log_file: Path | None = None,
    production: bool = False,
    sentry: bool = False,
    **context: str,
) -> None:
    """Configure structlog for production (JSON) or development (console).

    Production mode (*production=True*): JSON rendering at INFO level.
    Development mode: plain console rendering at DEBUG level.

    Args:
        log_file: File the events are appended to; ``None`` writes to stderr.
        production: Enable production mode if ``True``.
        sentry: Forward ERROR events to Sentry.
        **context: Key-value pairs bound to every event (e.g. ``hostname``).
    """
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if sentry:
        shared_processors.insert(2, get_sentry_processor())

    if production:
        shared_processors.append(structlog.processors.format_exc_info)
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
        log_level = logging.INFO
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)
        log_level = logging.DEBUG

    output = _open_log_file(log_file) if log_file is not None else sys.stderr

    structlog.configure(
        processors=[*shared_processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.WriteLoggerFactory(file=output),
        cache_logger_on_first_use=True,
    )

    structlog.contextvars.bind_contextvars(service="macdeploy", **context)
