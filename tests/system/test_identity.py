"""Tests for local system lookups. subprocess.run is patched out."""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from macdeploy.domain.errors import CommandError
from macdeploy.system.identity import console_user, run, user_home

SCUTIL_OUTPUT = """<dictionary> {
  GID : 20
  Name : alex
  UID : 501
}
"""


def completed(stdout: str = "", returncode: int = 0, stderr: str = ""):
    return subprocess.CompletedProcess([], returncode, stdout=stdout, stderr=stderr)


class TestRun:
    def test_non_zero_exit_raises(self) -> None:
        with patch("subprocess.run", return_value=completed("", 2, "denied")):
            with pytest.raises(CommandError) as exc_info:
                run(["installer", "-pkg", "x.pkg"])

        assert exc_info.value.returncode == 2
        assert "denied" in exc_info.value.output

    def test_check_false_returns_result(self) -> None:
        with patch("subprocess.run", return_value=completed("", 1)):
            assert run(["killall", "Dock"], check=False).returncode == 1

    def test_missing_executable(self) -> None:
        with patch("subprocess.run", side_effect=FileNotFoundError("no such file")):
            with pytest.raises(CommandError) as exc_info:
                run(["dockutil"])

        assert exc_info.value.returncode == 127

    def test_timeout(self) -> None:
        with patch("subprocess.run", side_effect=subprocess.TimeoutExpired(["x"], 5)):
            with pytest.raises(CommandError):
                run(["x"], timeout=5)

    def test_runs_as_user(self) -> None:
        with patch("subprocess.run", return_value=completed()) as mock_run:
            run(["dockutil", "--remove", "all"], user="alex")

        assert mock_run.call_args.args[0] == ["sudo", "-u", "alex", "dockutil", "--remove", "all"]


class TestLookups:
    def test_console_user(self) -> None:
        with patch("subprocess.run", return_value=completed(SCUTIL_OUTPUT)) as mock_run:
            assert console_user() == "alex"

        assert mock_run.call_args.kwargs["input"] == "show State:/Users/ConsoleUser\n"

    def test_console_user_missing(self) -> None:
        with patch("subprocess.run", return_value=completed("<dictionary> {\n}\n")):
            with pytest.raises(CommandError):
                console_user()

    def test_user_home(self) -> None:
        output = "NFSHomeDirectory: /Users/alex\n"
        with patch("subprocess.run", return_value=completed(output)):
            assert user_home("alex") == Path("/Users/alex")
