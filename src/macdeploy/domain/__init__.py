"""Domain models, enumerations, and errors for macdeploy."""

from macdeploy.domain.errors import (
    CommandError,
    DeploymentError,
    InterruptedByUserError,
    PermanentConfigurationError,
    PrerequisiteTimeoutError,
    RemoteRejectionError,
    TransientNetworkError,
)
from macdeploy.domain.models import (
    CallAttempt,
    CallResult,
    DeploymentOutcome,
    NotificationAction,
    NotificationField,
    NotificationMessage,
)
from macdeploy.domain.types import (
    CallStatus,
    DeploymentStage,
    ReconcileStatus,
    Severity,
    severity_for,
)

__all__ = [
    "CallAttempt",
    "CallResult",
    "CallStatus",
    "CommandError",
    "DeploymentError",
    "DeploymentOutcome",
    "DeploymentStage",
    "InterruptedByUserError",
    "NotificationAction",
    "NotificationField",
    "NotificationMessage",
    "PermanentConfigurationError",
    "PrerequisiteTimeoutError",
    "ReconcileStatus",
    "RemoteRejectionError",
    "Severity",
    "TransientNetworkError",
    "severity_for",
]
