"""Centralized, typed configuration using pydantic-settings.

Provides a single ``Settings`` class backed by ``.env`` file and environment
variables (``MACDEPLOY_`` prefix), a cached ``get_settings()`` accessor, and a
``validate_settings()`` gate that refuses to start a ZeroTier deployment when
required values are missing.

IMPORTANT: This module imports only ``macdeploy.domain.errors`` from the
``macdeploy`` package to prevent circular imports.
"""

from __future__ import annotations

import sys
from functools import lru_cache
from pathlib import Path

import structlog
from pydantic import SecretStr, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from macdeploy.domain.errors import PermanentConfigurationError

logger = structlog.get_logger()


class Settings(BaseSettings):
    """Deployment settings loaded from environment variables and ``.env`` file.

    ``SecretStr`` fields keep the Central API token and the Slack webhook URL
    out of logs and error output.
    """

    model_config = SettingsConfigDict(
        env_prefix="MACDEPLOY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # -- General ---------------------------------------------------------------
    production: bool = False
    sentry_dsn: str = ""

    # -- ZeroTier Central ------------------------------------------------------
    zerotier_api_token: SecretStr = SecretStr("")
    zerotier_network_id: str = ""
    zerotier_api_base_url: str = "https://api.zerotier.com/api/v1"
    zerotier_console_url: str = "https://my.zerotier.com/network"

    # -- ZeroTier client -------------------------------------------------------
    zerotier_cli: Path = Path("/usr/local/bin/zerotier-cli")
    zerotier_uninstaller: Path = Path("/Library/Application Support/ZeroTier/One/uninstall.sh")
    zerotier_package_path: Path = Path("/tmp/ZeroTier One.pkg")
    zerotier_download_url: str = "https://download.zerotier.com/dist/ZeroTier%20One.pkg"
    zerotier_releases_url: str = (
        "https://api.github.com/repos/zerotier/ZeroTierOne/releases/latest"
    )
    zerotier_log_file: Path = Path("/var/log/deployZeroTier.log")

    # -- Retry -----------------------------------------------------------------
    retry_max_attempts: int = 5
    request_timeout: float = 10.0

    # -- Slack (secret) --------------------------------------------------------
    slack_webhook_url: SecretStr = SecretStr("")

    # -- Dock ------------------------------------------------------------------
    dockutil_path: Path = Path("/usr/local/bin/dockutil")
    # None selects the layout shipped with the package
    dock_layout_path: Path | None = None
    dock_log_file: Path = Path("/var/log/dockUtil.log")
    dock_app_wait_limit: float | None = 3600.0

    @property
    def slack_enabled(self) -> bool:
        """Return True when a Slack webhook URL is configured."""
        return bool(self.slack_webhook_url.get_secret_value())


@lru_cache
def get_settings() -> Settings:
    """Return a cached ``Settings`` instance.

    Call ``get_settings.cache_clear()`` in tests to reset.

    Returns:
        The application ``Settings``.
    """
    try:
        return Settings()
    except ValidationError as exc:
        # Log only the structured errors list, never the raw exception which
        # may contain SecretStr values.
        logger.error("settings_validation_failed", errors=exc.errors())
        sys.exit(1)


def validate_settings(settings: Settings) -> None:
    """Enforce presence of the values a ZeroTier deployment cannot run without.

    Args:
        settings: The loaded application settings.

    Raises:
        PermanentConfigurationError: If the API token or network ID is missing,
            or the retry policy is unusable.
    """
    errors: list[str] = []

    if not settings.zerotier_api_token.get_secret_value():
        errors.append("MACDEPLOY_ZEROTIER_API_TOKEN is empty or not set")

    if not settings.zerotier_network_id:
        errors.append("MACDEPLOY_ZEROTIER_NETWORK_ID is empty or not set")

    if settings.retry_max_attempts < 1:
        errors.append("MACDEPLOY_RETRY_MAX_ATTEMPTS must be at least 1")

    if not errors:
        logger.info("settings_validation_passed")
        return

    for err in errors:
        logger.error("setting_missing", detail=err)
    raise PermanentConfigurationError("; ".join(errors))
