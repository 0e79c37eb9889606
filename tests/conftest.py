"""Shared pytest fixtures for the macdeploy test suite."""

from __future__ import annotations

import pytest

from macdeploy.domain.models import DeploymentOutcome


class SleepRecorder:
    """Stand-in for ``time.sleep`` that records requested delays."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def sleeps() -> SleepRecorder:
    """A sleep function that returns immediately and records its arguments."""
    return SleepRecorder()


@pytest.fixture
def sample_outcome() -> DeploymentOutcome:
    """A representative successful deployment outcome."""
    return DeploymentOutcome(
        network_id="8056c2e21c000001",
        hostname="studio-mac-07",
        member_id="a1b2c3d4e5",
        network_name="Office LAN",
    )
