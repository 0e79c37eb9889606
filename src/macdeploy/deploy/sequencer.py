"""Ordered, short-circuiting ZeroTier deployment pipeline.

Stages run strictly in order: reconcile -> install/update (if needed) ->
join (skipped when already a member) -> authorize -> rename. A stage only
runs when every earlier required stage succeeded. Already-satisfied states
count as success without calling the mutating operation. The status
notification is attempted whatever the stages did.

Cancellation is cooperative: the token is checked between stages and
inside retry sleeps. On interruption the rollback plan runs, an
``Interrupted`` notification is sent, and the outcome reports failure.
"""

from __future__ import annotations

from collections.abc import Callable

import httpx
import structlog

from macdeploy.deploy.cancellation import CancellationToken, RollbackPlan
from macdeploy.domain.errors import (
    CommandError,
    InterruptedByUserError,
    RemoteRejectionError,
    TransientNetworkError,
)
from macdeploy.domain.models import DeploymentOutcome
from macdeploy.domain.types import DeploymentStage, ReconcileStatus, Severity, severity_for
from macdeploy.slack.blocks import DEFAULT_CONSOLE_URL, build_deployment_message
from macdeploy.slack.client import SlackWebhookNotifier
from macdeploy.system.identity import local_hostname
from macdeploy.zerotier.central import CentralClient
from macdeploy.zerotier.cli import JOIN_OK, ZeroTierCli
from macdeploy.zerotier.installer import ZeroTierInstaller
from macdeploy.zerotier.reconcile import reconcile

logger = structlog.get_logger()

UNKNOWN_NETWORK_NAME = "Unknown"

# Rollback action names, in the order they are registered during a run
ROLLBACK_REMOVE_PACKAGE = "remove installer package"
ROLLBACK_UNINSTALL = "uninstall partial client"
ROLLBACK_LEAVE = "leave network"


class DeploymentSequencer:
    """Drives one ZeroTier deployment and reports its outcome.

    Usage::

        sequencer = DeploymentSequencer(
            network_id="8056c2e21c000001",
            zerotier=ZeroTierCli(settings.zerotier_cli),
            installer=installer,
            central=central,
            notifier=SlackWebhookNotifier(webhook_url),
            latest_version=lambda: fetch_latest_version(http, url, 10.0),
            token=token,
        )
        outcome = sequencer.run()
    """

    def __init__(
        self,
        *,
        network_id: str,
        zerotier: ZeroTierCli,
        installer: ZeroTierInstaller,
        central: CentralClient,
        notifier: SlackWebhookNotifier,
        latest_version: Callable[[], str | None],
        hostname: Callable[[], str] = local_hostname,
        token: CancellationToken | None = None,
        rollback: RollbackPlan | None = None,
        console_url: str = DEFAULT_CONSOLE_URL,
    ) -> None:
        self._network_id = network_id
        self._zerotier = zerotier
        self._installer = installer
        self._central = central
        self._notifier = notifier
        self._latest_version = latest_version
        self._hostname = hostname
        self._token = token or CancellationToken()
        self._rollback = rollback or RollbackPlan()
        self._console_url = console_url

    @property
    def rollback(self) -> RollbackPlan:
        return self._rollback

    def run(self) -> DeploymentOutcome:
        """Execute every stage, notify, and return the finalized outcome."""
        outcome = DeploymentOutcome(network_id=self._network_id, hostname=self._hostname())
        structlog.contextvars.bind_contextvars(network_id=self._network_id)

        try:
            self._run_stages(outcome)
        except InterruptedByUserError as exc:
            return self._handle_interruption(outcome, exc)

        if outcome.success:
            outcome.completed = True
            self._rollback.commit()
            logger.info("ZeroTier deployment completed successfully")
        else:
            logger.error("ZeroTier deployment encountered errors", errors=outcome.errors)

        self._report(outcome, severity_for(outcome.success))
        return outcome.finalize()

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    def _checkpoint(self, outcome: DeploymentOutcome, stage: DeploymentStage) -> None:
        self._token.raise_if_cancelled()
        outcome.mark_stage(stage)
        logger.info("Starting stage", stage=str(stage))

    def _run_stages(self, outcome: DeploymentOutcome) -> None:
        self._checkpoint(outcome, DeploymentStage.RECONCILE)
        latest = self._latest_version()
        status = reconcile(self._current_version(), latest)
        logger.info("ZeroTier check returned status", status=str(status))

        if status in (ReconcileStatus.NEEDS_INSTALL, ReconcileStatus.NEEDS_UPDATE):
            self._checkpoint(outcome, DeploymentStage.INSTALL)
            self._install(outcome, latest, update=status is ReconcileStatus.NEEDS_UPDATE)
        elif status is ReconcileStatus.VERSION_CHECK_FAILED:
            logger.warning("Error fetching ZeroTier version, proceeding with existing installation")
        if not outcome.success:
            return

        self._checkpoint(outcome, DeploymentStage.JOIN)
        self._join(outcome)
        if not outcome.success:
            return

        try:
            outcome.member_id = self._zerotier.member_id()
        except CommandError as exc:
            outcome.record_error(f"Failed to read device member ID: {exc}")
            return
        logger.info("Device member ID", member_id=outcome.member_id)

        self._checkpoint(outcome, DeploymentStage.AUTHORIZE)
        self._authorize(outcome)
        if not outcome.success:
            return

        self._checkpoint(outcome, DeploymentStage.RENAME)
        self._rename(outcome)

    def _current_version(self) -> str | None:
        try:
            version = self._zerotier.version()
        except CommandError:
            logger.warning("ZeroTier client present but version check failed", exc_info=True)
            return None
        logger.info("Current ZeroTier version", version=version)
        return version

    def _install(self, outcome: DeploymentOutcome, latest: str | None, *, update: bool) -> None:
        if update:
            try:
                self._installer.uninstall()
            except CommandError as exc:
                outcome.record_error(f"Failed to uninstall existing ZeroTier: {exc}")
                return

        self._rollback.register(ROLLBACK_REMOVE_PACKAGE, self._remove_package)
        try:
            self._installer.remove_package()
            self._installer.download()
            self._token.raise_if_cancelled()
            self._rollback.register(ROLLBACK_UNINSTALL, self._uninstall_partial)
            self._installer.install()
        except (httpx.HTTPError, OSError, CommandError) as exc:
            outcome.record_error(f"ZeroTier installation failed: {exc}")
            return
        finally:
            self._remove_package()
            self._rollback.discard(ROLLBACK_REMOVE_PACKAGE)

        installed = self._current_version()
        if installed is None or (latest is not None and installed != latest):
            outcome.record_error(
                f"ZeroTier installation/update failed: installed version {installed!r}, "
                f"expected {latest!r}"
            )
            return

        self._rollback.discard(ROLLBACK_UNINSTALL)
        logger.info("ZeroTier installed/updated successfully", version=installed)

    def _join(self, outcome: DeploymentOutcome) -> None:
        if self._zerotier.is_member(self._network_id):
            logger.info("Already a member of ZeroTier network")
            return

        logger.info("Joining ZeroTier network")
        self._rollback.register(ROLLBACK_LEAVE, self._leave_network)
        try:
            response = self._zerotier.join(self._network_id)
        except CommandError as exc:
            outcome.record_error(f"Failed to join ZeroTier network: {exc}")
            return

        logger.info("Join response", response=response)
        if JOIN_OK not in response:
            outcome.record_error(f"Failed to join ZeroTier network: {response}")
            return
        logger.info("Successfully joined ZeroTier network")

    def _authorize(self, outcome: DeploymentOutcome) -> None:
        member = self._central.get_member(self._network_id, outcome.member_id)
        config = member.get("config") if member else None
        if isinstance(config, dict) and config.get("authorized") is True:
            logger.info("Device already authorized on the network")
            return

        try:
            self._central.authorize_member(self._network_id, outcome.member_id)
        except TransientNetworkError as exc:
            outcome.record_error(f"Failed to authorize device: {exc}")
            return
        except RemoteRejectionError as exc:
            outcome.record_error(f"Authorization failed: {exc}")
            return
        logger.info("Device successfully authorized on the network")

    def _rename(self, outcome: DeploymentOutcome) -> None:
        member = self._central.get_member(self._network_id, outcome.member_id)
        if member and member.get("name") == outcome.hostname:
            logger.info("Device name already set in ZeroTier Central")
            return

        try:
            self._central.rename_member(self._network_id, outcome.member_id, outcome.hostname)
        except (TransientNetworkError, RemoteRejectionError) as exc:
            outcome.record_error(f"Failed to update device name: {exc}")
            return
        logger.info("Device name successfully updated in ZeroTier Central")

    # ------------------------------------------------------------------
    # Rollback actions
    # ------------------------------------------------------------------

    def _remove_package(self) -> None:
        try:
            self._installer.remove_package()
        except OSError:
            logger.warning("Failed to remove temporary ZeroTier package", exc_info=True)

    def _uninstall_partial(self) -> None:
        logger.info("Removing partial ZeroTier installation")
        self._installer.uninstall()

    def _leave_network(self) -> None:
        if self._zerotier.is_member(self._network_id):
            logger.info("Leaving partially joined ZeroTier network")
            self._zerotier.leave(self._network_id)

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def _handle_interruption(
        self, outcome: DeploymentOutcome, exc: InterruptedByUserError
    ) -> DeploymentOutcome:
        stage = outcome.stages[-1] if outcome.stages else None
        logger.warning(
            "Deployment interrupted, performing cleanup",
            signal=exc.signal_name,
            stage=str(stage) if stage else None,
        )
        outcome.interrupted = True
        outcome.record_error(f"Deployment interrupted by {exc.signal_name} during execution")
        for failure in self._rollback.run():
            outcome.record_error(failure)

        self._report(outcome, Severity.INTERRUPTED)
        logger.info("Cleanup completed")
        return outcome.finalize()

    def _report(self, outcome: DeploymentOutcome, severity: Severity) -> None:
        if not self._notifier.enabled:
            logger.info("Slack webhook not configured, skipping network name and notification")
            return

        if severity is not Severity.INTERRUPTED:
            try:
                name = self._central.get_network_name(self._network_id)
            except InterruptedByUserError:
                name = None
            outcome.network_name = name or UNKNOWN_NETWORK_NAME

        message = build_deployment_message(outcome, severity, self._console_url)
        self._notifier.send(message)
