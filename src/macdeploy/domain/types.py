"""Domain enumerations for deployments, remote calls, and notifications."""

from enum import StrEnum


class CallStatus(StrEnum):
    """Final classification of a retried remote call."""

    OK = "ok"
    FAILED = "failed"


class ReconcileStatus(StrEnum):
    """Result of comparing the installed client version to the latest release."""

    UP_TO_DATE = "up_to_date"
    NEEDS_INSTALL = "needs_install"
    NEEDS_UPDATE = "needs_update"
    VERSION_CHECK_FAILED = "version_check_failed"


class DeploymentStage(StrEnum):
    """Ordered stages of the ZeroTier deployment pipeline."""

    RECONCILE = "reconcile"
    INSTALL = "install"
    JOIN = "join"
    AUTHORIZE = "authorize"
    RENAME = "rename"


class Severity(StrEnum):
    """Severity tier of a deployment status notification."""

    SUCCESS = "Success"
    FAILURE = "Failure"
    INTERRUPTED = "Interrupted"
    UNKNOWN = "Unknown"


# Stages in the order the sequencer runs them
STAGE_ORDER: tuple[DeploymentStage, ...] = (
    DeploymentStage.RECONCILE,
    DeploymentStage.INSTALL,
    DeploymentStage.JOIN,
    DeploymentStage.AUTHORIZE,
    DeploymentStage.RENAME,
)

# Color and icon pairs used when rendering a notification
SEVERITY_STYLES: dict[Severity, tuple[str, str]] = {
    Severity.SUCCESS: ("#36a64f", ":large_green_circle:"),
    Severity.FAILURE: ("#ff0000", ":red_circle:"),
    Severity.INTERRUPTED: ("#FFA500", ":large_orange_circle:"),
    Severity.UNKNOWN: ("#808080", ":white_circle:"),
}


def severity_for(success: bool, interrupted: bool = False) -> Severity:
    """Map a deployment's final flags to a notification severity.

    Args:
        success: Whether every required step succeeded.
        interrupted: Whether the run was cancelled by a signal.

    Returns:
        ``INTERRUPTED`` when interrupted, otherwise ``SUCCESS`` or ``FAILURE``.
    """
    if interrupted:
        return Severity.INTERRUPTED
    return Severity.SUCCESS if success else Severity.FAILURE
