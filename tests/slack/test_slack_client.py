"""Tests for SlackWebhookNotifier. WebhookClient.send is patched out."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from macdeploy.domain.types import Severity
from macdeploy.slack.blocks import build_deployment_message
from macdeploy.slack.client import SlackWebhookNotifier

WEBHOOK_URL = "https://hooks.slack.com/services/T000/B000/XXXX"


@pytest.fixture
def message(sample_outcome):
    return build_deployment_message(sample_outcome, Severity.SUCCESS)


def slack_response(status_code: int = 200, body: str = "ok") -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.body = body
    return response


class TestSlackWebhookNotifier:
    def test_disabled_without_url(self, message) -> None:
        notifier = SlackWebhookNotifier("")

        assert notifier.enabled is False
        assert notifier.send(message) is False
        assert notifier.sent is False

    def test_sends_attachment(self, message) -> None:
        notifier = SlackWebhookNotifier(WEBHOOK_URL)
        with patch(
            "slack_sdk.webhook.WebhookClient.send", return_value=slack_response()
        ) as send:
            assert notifier.send(message) is True

        kwargs = send.call_args.kwargs
        assert kwargs["text"] == "ZeroTier Deployment: Success"
        assert kwargs["attachments"][0]["color"] == "#36a64f"
        assert notifier.sent is True

    def test_sends_at_most_once(self, message) -> None:
        notifier = SlackWebhookNotifier(WEBHOOK_URL)
        with patch(
            "slack_sdk.webhook.WebhookClient.send", return_value=slack_response()
        ) as send:
            notifier.send(message)
            assert notifier.send(message) is False

        send.assert_called_once()

    def test_error_response_returns_false(self, message) -> None:
        notifier = SlackWebhookNotifier(WEBHOOK_URL)
        with patch(
            "slack_sdk.webhook.WebhookClient.send",
            return_value=slack_response(404, "no_service"),
        ):
            assert notifier.send(message) is False

    def test_exception_is_logged_not_raised(self, message) -> None:
        notifier = SlackWebhookNotifier(WEBHOOK_URL)
        with patch(
            "slack_sdk.webhook.WebhookClient.send", side_effect=OSError("unreachable")
        ):
            assert notifier.send(message) is False

        assert notifier.sent is True
