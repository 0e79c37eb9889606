"""Slack integration: deployment status message builders and webhook notifier."""

from macdeploy.slack.blocks import NO_ERRORS, build_deployment_message, to_attachment_payload
from macdeploy.slack.client import SlackWebhookNotifier

__all__ = [
    "NO_ERRORS",
    "SlackWebhookNotifier",
    "build_deployment_message",
    "to_attachment_payload",
]
