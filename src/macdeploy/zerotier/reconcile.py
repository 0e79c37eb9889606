"""Decide whether the ZeroTier client needs installing or updating.

Versions are compared by literal string equality, not semantic ordering:
any difference from the latest release (including a newer local build)
triggers an update.
"""

from __future__ import annotations

import httpx
import structlog

from macdeploy.domain.types import ReconcileStatus

logger = structlog.get_logger()


def normalize_version(version: str) -> str:
    """Strip whitespace and a leading ``v`` from a release tag."""
    version = version.strip()
    return version[1:] if version.startswith("v") else version


def reconcile(current_version: str | None, latest_version: str | None) -> ReconcileStatus:
    """Classify the installed client against the latest release.

    Args:
        current_version: Installed version, or ``None`` if no executable
            client is present.
        latest_version: Latest released version, or ``None`` if the release
            source could not be reached.

    Returns:
        ``VERSION_CHECK_FAILED`` when the latest version is unknown (the
        caller proceeds with whatever is installed), ``NEEDS_INSTALL`` when
        no client is present, ``UP_TO_DATE`` on equal strings, otherwise
        ``NEEDS_UPDATE``.
    """
    if latest_version is None:
        return ReconcileStatus.VERSION_CHECK_FAILED
    if current_version is None:
        return ReconcileStatus.NEEDS_INSTALL
    if current_version == latest_version:
        return ReconcileStatus.UP_TO_DATE
    return ReconcileStatus.NEEDS_UPDATE


def fetch_latest_version(client: httpx.Client, releases_url: str, timeout: float) -> str | None:
    """Return the latest ZeroTier release version from the GitHub releases API.

    Returns:
        The ``tag_name`` without its ``v`` prefix, or ``None`` if the API is
        unreachable or the payload carries no tag.
    """
    try:
        response = client.get(releases_url, timeout=timeout)
        response.raise_for_status()
        tag = response.json().get("tag_name")
    except (httpx.HTTPError, ValueError, AttributeError) as exc:
        logger.warning("Unable to fetch latest ZeroTier version", error=str(exc))
        return None

    if not isinstance(tag, str) or not tag.strip():
        logger.warning("Release payload has no tag_name", url=releases_url)
        return None

    version = normalize_version(tag)
    logger.info("Latest ZeroTier version", version=version)
    return version
