"""Slack incoming-webhook notifier for deployment status reports.

Wraps slack_sdk.webhook.WebhookClient. Delivery is fire-and-forget: a
failure is logged and never changes the deployment's own result.
"""

from __future__ import annotations

import structlog
from slack_sdk.webhook import WebhookClient

from macdeploy.domain.models import NotificationMessage
from macdeploy.slack.blocks import to_attachment_payload

logger = structlog.get_logger()


class SlackWebhookNotifier:
    """Posts one status attachment per run to a Slack incoming webhook.

    An empty webhook URL disables the notifier; ``send`` then returns
    ``False`` without logging an error.
    """

    def __init__(self, webhook_url: str, timeout: int = 10) -> None:
        """Initialize the SlackWebhookNotifier.

        Args:
            webhook_url: Slack incoming webhook URL, empty to disable.
            timeout: Request timeout in seconds.
        """
        self._client = WebhookClient(url=webhook_url, timeout=timeout) if webhook_url else None
        self._sent = False

    @property
    def enabled(self) -> bool:
        return self._client is not None

    @property
    def sent(self) -> bool:
        return self._sent

    def send(self, message: NotificationMessage) -> bool:
        """Deliver *message* unless one was already sent by this notifier.

        Args:
            message: The formatted status report.

        Returns:
            True if Slack acknowledged the message, False otherwise.
        """
        if self._client is None:
            logger.info("Slack webhook not configured, skipping notification")
            return False
        if self._sent:
            logger.warning("Notification already sent, skipping", severity=str(message.severity))
            return False
        self._sent = True

        logger.info("Sending Slack notification", severity=str(message.severity))
        try:
            response = self._client.send(
                text=f"ZeroTier Deployment: {message.severity}",
                attachments=[to_attachment_payload(message)],
            )
        except Exception:
            logger.exception("Failed to send Slack notification")
            return False

        if response.status_code == 200 and response.body == "ok":
            logger.info("Slack notification sent successfully")
            return True

        logger.error(
            "Error sending Slack notification",
            status_code=response.status_code,
            body=response.body,
        )
        return False
