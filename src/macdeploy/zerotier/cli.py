"""Thin wrapper around the local ``zerotier-cli`` binary."""

from __future__ import annotations

import os
from pathlib import Path

import structlog

from macdeploy.domain.errors import CommandError
from macdeploy.system.identity import run

logger = structlog.get_logger()

JOIN_OK = "200 join OK"


class ZeroTierCli:
    """Invokes ``zerotier-cli`` subcommands and parses their text output.

    Args:
        path: Full path to the ``zerotier-cli`` executable.
    """

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def is_installed(self) -> bool:
        """Return True if the client binary exists and is executable."""
        return self._path.is_file() and os.access(self._path, os.X_OK)

    def version(self) -> str | None:
        """Return the installed client version, or ``None`` if not installed.

        Raises:
            CommandError: If the binary exists but ``-v`` fails.
        """
        if not self.is_installed():
            return None
        output = run([str(self._path), "-v"]).stdout.strip()
        return output.split()[-1] if output else None

    def list_networks(self) -> str:
        return run([str(self._path), "listnetworks"]).stdout

    def is_member(self, network_id: str) -> bool:
        """Return True if *network_id* appears in ``listnetworks`` output."""
        if not self.is_installed():
            return False
        try:
            return network_id in self.list_networks()
        except CommandError:
            logger.warning("Could not list ZeroTier networks", exc_info=True)
            return False

    def join(self, network_id: str) -> str:
        """Join *network_id* and return the raw CLI response.

        The caller checks the response for ``200 join OK``.
        """
        result = run([str(self._path), "join", network_id], check=False)
        return (result.stdout + result.stderr).strip()

    def leave(self, network_id: str) -> None:
        run([str(self._path), "leave", network_id])

    def member_id(self) -> str:
        """Return this device's member (node) ID from ``zerotier-cli info``.

        Output looks like ``200 info 1a2b3c4d5e 1.14.0 ONLINE``.

        Raises:
            CommandError: If the command fails or the output has no ID field.
        """
        command = [str(self._path), "info"]
        parts = run(command).stdout.split()
        if len(parts) < 3:
            raise CommandError(command, 0, "unexpected info output: " + " ".join(parts))
        return parts[2]
