"""Message builders for deployment status notifications.

Pure functions that turn a :class:`DeploymentOutcome` into a
:class:`NotificationMessage` and render it as a Slack attachment payload.
They have no side effects and are easy to test.
"""

from typing import Any

from macdeploy.domain.models import (
    DeploymentOutcome,
    NotificationAction,
    NotificationField,
    NotificationMessage,
)
from macdeploy.domain.types import SEVERITY_STYLES, Severity

NO_ERRORS = "None"
DEFAULT_CONSOLE_URL = "https://my.zerotier.com/network"


def build_deployment_message(
    outcome: DeploymentOutcome,
    severity: Severity,
    console_url: str = DEFAULT_CONSOLE_URL,
) -> NotificationMessage:
    """Build the status report for a ZeroTier deployment.

    Args:
        outcome: The deployment outcome to report.
        severity: Severity tier; selects the color and icon.
        console_url: Base URL of the network pages in ZeroTier Central.

    Returns:
        A frozen ``NotificationMessage`` with device and network fields, the
        collected errors (or ``"None"``), and a link to the network.
    """
    color, icon = SEVERITY_STYLES.get(severity, SEVERITY_STYLES[Severity.UNKNOWN])
    errors = "\n".join(outcome.errors) if outcome.errors else NO_ERRORS

    action = None
    if outcome.network_id:
        action = NotificationAction(
            text="View in ZeroTier Central",
            url=f"{console_url.rstrip('/')}/{outcome.network_id}",
        )

    return NotificationMessage(
        severity=severity,
        title=f"*ZeroTier Deployment: {severity}* {icon}",
        color=color,
        icon=icon,
        field_list=[
            NotificationField(title="Device Name:", value=outcome.hostname),
            NotificationField(title="Network Name:", value=outcome.network_name),
            NotificationField(title="Device ID:", value=outcome.member_id),
            NotificationField(title="Network ID:", value=outcome.network_id),
            NotificationField(title="Errors:", value=errors, short=False),
        ],
        action=action,
    )


def to_attachment_payload(message: NotificationMessage) -> dict[str, Any]:
    """Render *message* as a Slack legacy attachment.

    Returns:
        A dict with ``color``, ``pretext``, ``fields``, ``fallback`` and, when
        the message has a link, a primary button under ``actions``.
    """
    attachment: dict[str, Any] = {
        "color": message.color,
        "pretext": message.title,
        "fallback": f"ZeroTier Deployment: {message.severity}",
        "fields": [
            {"title": field.title, "value": field.value, "short": field.short}
            for field in message.field_list
        ],
    }

    if message.action is not None:
        attachment["actions"] = [
            {
                "type": "button",
                "text": message.action.text,
                "url": message.action.url,
                "style": message.action.style,
            }
        ]

    return attachment
