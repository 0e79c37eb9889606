"""Wiring for the device tasks run by the MDM agent.

Each ``run_*`` function configures logging for its own log file, builds the
collaborators from :class:`Settings`, runs the task, and returns the
process exit code (0 on success, 1 on any failure).

Configures:
- **structlog** with JSON rendering (production) or console (development),
  appended to the task's log file
- **Sentry** error forwarding when a DSN is configured
- **SIGINT/SIGTERM** handling routed to a cancellation token
"""

from __future__ import annotations

from pathlib import Path

import httpx
import structlog
import yaml
from pydantic import ValidationError

from macdeploy.config import Settings, get_settings, validate_settings
from macdeploy.deploy.cancellation import CancellationToken
from macdeploy.deploy.sequencer import DeploymentSequencer
from macdeploy.dock.configure import DockConfigurator
from macdeploy.dock.layout import load_dock_layout
from macdeploy.domain.errors import DeploymentError, PermanentConfigurationError
from macdeploy.inventory.compatibility import compatibility_attribute, hardware_model
from macdeploy.observability.logging import configure_logging
from macdeploy.observability.sentry import init_sentry
from macdeploy.slack.client import SlackWebhookNotifier
from macdeploy.system.identity import local_hostname
from macdeploy.zerotier.central import CentralClient
from macdeploy.zerotier.cli import ZeroTierCli
from macdeploy.zerotier.installer import ZeroTierInstaller
from macdeploy.zerotier.reconcile import fetch_latest_version

logger = structlog.get_logger()


def _setup_observability(settings: Settings, log_file: Path) -> None:
    hostname = local_hostname()
    environment = "production" if settings.production else "development"
    sentry_enabled = init_sentry(settings.sentry_dsn, hostname=hostname, environment=environment)
    configure_logging(
        log_file,
        production=settings.production,
        sentry=sentry_enabled,
        hostname=hostname,
    )


def build_sequencer(
    settings: Settings,
    http: httpx.Client,
    central: CentralClient,
    token: CancellationToken,
) -> DeploymentSequencer:
    """Assemble a :class:`DeploymentSequencer` from settings and shared clients."""
    installer = ZeroTierInstaller(
        client=http,
        package_path=settings.zerotier_package_path,
        download_url=settings.zerotier_download_url,
        uninstaller=settings.zerotier_uninstaller,
    )
    notifier = SlackWebhookNotifier(settings.slack_webhook_url.get_secret_value())

    return DeploymentSequencer(
        network_id=settings.zerotier_network_id,
        zerotier=ZeroTierCli(settings.zerotier_cli),
        installer=installer,
        central=central,
        notifier=notifier,
        latest_version=lambda: fetch_latest_version(
            http, settings.zerotier_releases_url, settings.request_timeout
        ),
        token=token,
        console_url=settings.zerotier_console_url,
    )


def run_zerotier_deployment(settings: Settings | None = None) -> int:
    """Install, join, authorize, and name this device on the ZeroTier network.

    Returns:
        0 if every stage succeeded, otherwise 1.
    """
    if settings is None:
        settings = get_settings()
    _setup_observability(settings, settings.zerotier_log_file)

    try:
        validate_settings(settings)
    except PermanentConfigurationError:
        logger.error("ZeroTier deployment not started: configuration incomplete")
        return 1

    token = CancellationToken()
    restore_signals = token.install_signal_handlers()
    central = CentralClient.create(
        settings.zerotier_api_base_url,
        settings.zerotier_api_token.get_secret_value(),
        max_attempts=settings.retry_max_attempts,
        timeout=settings.request_timeout,
        sleep=token.sleep,
    )
    try:
        with httpx.Client() as http:
            outcome = build_sequencer(settings, http, central, token).run()
    finally:
        central.close()
        restore_signals()

    return 0 if outcome.success else 1


def run_dock_configuration(settings: Settings | None = None) -> int:
    """Rebuild the console user's Dock from the configured layout.

    Returns:
        0 on success, 1 if the layout could not be read or parsed, a
        prerequisite timed out, or ``dockutil`` failed.
    """
    if settings is None:
        settings = get_settings()
    _setup_observability(settings, settings.dock_log_file)

    token = CancellationToken()
    restore_signals = token.install_signal_handlers()
    try:
        layout = load_dock_layout(settings.dock_layout_path)
        configurator = DockConfigurator(
            layout,
            settings.dockutil_path,
            app_wait_limit=settings.dock_app_wait_limit,
            sleep=token.sleep,
        )
        configurator.apply()
    except (FileNotFoundError, yaml.YAMLError, ValidationError, DeploymentError) as exc:
        logger.error("Dock configuration failed", error=str(exc))
        return 1
    finally:
        restore_signals()
    return 0


def run_compatibility_check(model_identifier: str | None = None) -> str:
    """Return ``YES`` or ``NO`` for the Sonoma-compatibility custom attribute.

    Raises:
        CommandError: If the model has to be read and ``sysctl`` fails.
    """
    model = model_identifier if model_identifier is not None else hardware_model()
    return compatibility_attribute(model)
