"""Local system lookups: command runner, console user, home directory, hostname."""

from __future__ import annotations

import socket
import subprocess
from pathlib import Path

import structlog

from macdeploy.domain.errors import CommandError

logger = structlog.get_logger()


def run(
    command: list[str],
    *,
    check: bool = True,
    input_text: str | None = None,
    timeout: float | None = None,
    user: str | None = None,
) -> subprocess.CompletedProcess[str]:
    """Run a local utility and capture its output as text.

    Args:
        command: The argv to execute.
        check: Raise ``CommandError`` on a non-zero exit status.
        input_text: Text written to the process's stdin.
        timeout: Seconds before the process is killed.
        user: Run the command as this user through ``sudo -u``.

    Returns:
        The completed process with ``stdout`` and ``stderr`` as text.

    Raises:
        CommandError: If the executable is missing, times out, or exits
            non-zero while *check* is set.
    """
    argv = ["sudo", "-u", user, *command] if user else list(command)
    logger.debug("Running command", command=argv)
    try:
        result = subprocess.run(
            argv,
            input=input_text,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except FileNotFoundError as exc:
        raise CommandError(argv, 127, str(exc)) from exc
    except subprocess.TimeoutExpired as exc:
        raise CommandError(argv, -1, f"timed out after {timeout}s") from exc

    if check and result.returncode != 0:
        raise CommandError(argv, result.returncode, result.stdout + result.stderr)
    return result


def console_user() -> str:
    """Return the short name of the user logged in at the console.

    Raises:
        CommandError: If ``scutil`` fails or reports no console user.
    """
    command = ["scutil"]
    result = run(command, input_text="show State:/Users/ConsoleUser\n")
    for line in result.stdout.splitlines():
        key, _, value = line.strip().partition(" : ")
        if key == "Name" and value:
            return value.strip()
    raise CommandError(command, 0, "no console user reported")


def user_home(user: str) -> Path:
    """Return the home directory of *user* from Directory Services.

    Raises:
        CommandError: If ``dscl`` fails or prints no home directory.
    """
    command = ["dscl", ".", "-read", f"/Users/{user}", "NFSHomeDirectory"]
    result = run(command)
    _, _, value = result.stdout.strip().partition(" ")
    if not value:
        raise CommandError(command, 0, "no NFSHomeDirectory reported")
    return Path(value.strip())


def local_hostname() -> str:
    """Return this computer's hostname."""
    return socket.gethostname()
