"""Tests for the macdeploy command-line entry point."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from macdeploy.cli import build_parser, main
from macdeploy.config import Settings
from macdeploy.domain.errors import CommandError


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)  # type: ignore[call-arg]


class TestParser:
    def test_command_required(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_dock_options(self) -> None:
        args = build_parser().parse_args(["dock", "--layout", "dock.yaml", "--no-wait-limit"])

        assert args.layout == Path("dock.yaml")
        assert args.no_wait_limit is True


class TestMain:
    def test_compat_prints_attribute(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["compat", "--model", "MacBookPro18,3"]) == 0
        assert capsys.readouterr().out.strip() == "YES"

    def test_compat_unsupported(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(["compat", "--model", "MacBookPro14,1"])
        assert capsys.readouterr().out.strip() == "NO"

    def test_compat_sysctl_failure_exits_1(self, capsys: pytest.CaptureFixture[str]) -> None:
        failure = CommandError(["sysctl", "-n", "hw.model"], 1, "unknown oid")
        with (
            patch("macdeploy.app.hardware_model", side_effect=failure),
            patch("macdeploy.cli.logger") as mock_logger,
        ):
            assert main(["compat"]) == 1

        assert capsys.readouterr().out == ""
        mock_logger.error.assert_called_once()

    def test_zerotier_returns_task_exit_code(self, settings: Settings) -> None:
        with (
            patch("macdeploy.cli.get_settings", return_value=settings),
            patch("macdeploy.cli.run_zerotier_deployment", return_value=1) as run,
        ):
            assert main(["zerotier"]) == 1

        run.assert_called_once_with(settings)

    def test_dock_applies_overrides(self, settings: Settings) -> None:
        with (
            patch("macdeploy.cli.get_settings", return_value=settings),
            patch("macdeploy.cli.run_dock_configuration", return_value=0) as run,
        ):
            assert main(["dock", "--layout", "custom.yaml", "--no-wait-limit"]) == 0

        passed = run.call_args.args[0]
        assert passed.dock_layout_path == Path("custom.yaml")
        assert passed.dock_app_wait_limit is None
        assert settings.dock_app_wait_limit == 3600.0
