"""Tests for version reconciliation and latest-release lookup."""

from __future__ import annotations

import httpx
import pytest

from macdeploy.domain.types import ReconcileStatus
from macdeploy.zerotier.reconcile import fetch_latest_version, normalize_version, reconcile

RELEASES_URL = "https://api.github.com/repos/zerotier/ZeroTierOne/releases/latest"


class TestReconcile:
    """reconcile classifies the installed client against the latest release."""

    @pytest.mark.parametrize(
        ("current", "latest", "expected"),
        [
            ("1.14.0", "1.14.0", ReconcileStatus.UP_TO_DATE),
            ("1.12.2", "1.14.0", ReconcileStatus.NEEDS_UPDATE),
            (None, "1.14.0", ReconcileStatus.NEEDS_INSTALL),
            ("1.14.0", None, ReconcileStatus.VERSION_CHECK_FAILED),
            (None, None, ReconcileStatus.VERSION_CHECK_FAILED),
        ],
    )
    def test_classification(self, current, latest, expected) -> None:
        assert reconcile(current, latest) is expected

    def test_newer_local_build_still_needs_update(self) -> None:
        # Literal comparison: any difference triggers a reinstall of the release
        assert reconcile("1.15.0", "1.14.0") is ReconcileStatus.NEEDS_UPDATE


class TestNormalizeVersion:
    def test_strips_prefix_and_whitespace(self) -> None:
        assert normalize_version(" v1.14.0\n") == "1.14.0"

    def test_plain_version_unchanged(self) -> None:
        assert normalize_version("1.14.0") == "1.14.0"


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


class TestFetchLatestVersion:
    """fetch_latest_version reads tag_name and degrades to None."""

    def test_returns_tag_without_prefix(self) -> None:
        client = _client(lambda request: httpx.Response(200, json={"tag_name": "v1.14.0"}))

        assert fetch_latest_version(client, RELEASES_URL, 10.0) == "1.14.0"

    def test_http_error_returns_none(self) -> None:
        client = _client(lambda request: httpx.Response(503, text="unavailable"))

        assert fetch_latest_version(client, RELEASES_URL, 10.0) is None

    def test_transport_error_returns_none(self) -> None:
        def _handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("offline", request=request)

        assert fetch_latest_version(_client(_handler), RELEASES_URL, 10.0) is None

    def test_missing_tag_returns_none(self) -> None:
        client = _client(lambda request: httpx.Response(200, json={"name": "latest"}))

        assert fetch_latest_version(client, RELEASES_URL, 10.0) is None

    def test_invalid_json_returns_none(self) -> None:
        client = _client(lambda request: httpx.Response(200, text="<html>"))

        assert fetch_latest_version(client, RELEASES_URL, 10.0) is None
