"""Rebuild the console user's Dock by shelling out to ``dockutil``.

Nothing about the Dock's preference format is handled here beyond checking
whether the plist still mentions the reset marker; all edits go through
``dockutil`` run as the console user.
"""

from __future__ import annotations

import os
import time
from collections.abc import Callable
from pathlib import Path

import structlog

from macdeploy.dock.layout import DockLayout
from macdeploy.domain.errors import PermanentConfigurationError, PrerequisiteTimeoutError
from macdeploy.resilience.polling import poll_until, random_delay
from macdeploy.system.identity import console_user, run, user_home

logger = structlog.get_logger()

DOCK_PLIST = Path("Library/Preferences/com.apple.dock.plist")


class DockConfigurator:
    """Applies a :class:`DockLayout` for whoever is logged in at the console.

    Args:
        layout: The validated layout to apply.
        dockutil: Full path to the ``dockutil`` executable.
        app_wait_limit: Seconds to wait for the required apps; ``None``
            waits indefinitely.
        sleep: Sleep function used for all pauses.
        user_lookup: Returns the console user's short name.
        home_lookup: Returns a user's home directory.
    """

    def __init__(
        self,
        layout: DockLayout,
        dockutil: Path,
        *,
        app_wait_limit: float | None = 3600.0,
        sleep: Callable[[float], None] = time.sleep,
        user_lookup: Callable[[], str] = console_user,
        home_lookup: Callable[[str], Path] = user_home,
    ) -> None:
        self._layout = layout
        self._dockutil = dockutil
        self._app_wait_limit = app_wait_limit
        self._sleep = sleep
        self._user_lookup = user_lookup
        self._home_lookup = home_lookup

    def missing_apps(self) -> list[Path]:
        return [app for app in self._layout.required_apps if not app.exists()]

    def wait_for_required_apps(self) -> bool:
        """Poll until every required app exists, with a random 10-59s delay."""
        return poll_until(
            lambda: not self.missing_apps(),
            delay=random_delay(10, 59),
            max_wait=self._app_wait_limit,
            sleep=self._sleep,
            description="required apps",
        )

    def apply(self) -> None:
        """Wait for prerequisites, clear the Dock, and add the configured items.

        Raises:
            PrerequisiteTimeoutError: If the required apps never appear or the
                Dock does not clear.
            PermanentConfigurationError: If ``dockutil`` is not installed.
            CommandError: If a lookup or ``dockutil`` call fails.
        """
        if not self.wait_for_required_apps():
            missing = ", ".join(str(app) for app in self.missing_apps())
            raise PrerequisiteTimeoutError(f"required apps: {missing}")
        logger.info("Apps are here, lets carry on")

        user = self._user_lookup()
        home = self._home_lookup(user)
        plist = home / DOCK_PLIST
        logger.info("Configuring Dock", user=user, home=str(home))

        if not (self._dockutil.is_file() and os.access(self._dockutil, os.X_OK)):
            raise PermanentConfigurationError(f"{self._dockutil} not installed, exiting")

        self.reset(user, plist)

        self.restart_dock()
        logger.info("Pausing", seconds=self._layout.restart_pause_seconds)
        self._sleep(self._layout.restart_pause_seconds)

        for item in self._layout.items:
            command = [str(self._dockutil), *item.dockutil_args(home), "--no-restart", str(home)]
            run(command, user=user)
            logger.info("Added Dock item", path=item.resolve_path(home))

        self._sleep(self._layout.restart_pause_seconds)
        self.restart_dock()
        logger.info("Dock configuration complete")

    def reset(self, user: str, plist: Path) -> None:
        """Remove every Dock item until the plist no longer holds the reset marker.

        Raises:
            PrerequisiteTimeoutError: If the marker is still present after
                ``max_reset_attempts`` removals.
        """
        settle = self._layout.settle_seconds
        for attempt in range(1, self._layout.max_reset_attempts + 1):
            if not self._contains_marker(plist):
                logger.info("Dock reset", attempts=attempt - 1)
                return
            logger.info("Removing all Dock items", attempt=attempt)
            run([str(self._dockutil), "--remove", "all", "--no-restart", str(plist)], user=user)
            self._sleep(settle)
            self.restart_dock()
            self._sleep(settle)

        if self._contains_marker(plist):
            marker = self._layout.reset_marker
            raise PrerequisiteTimeoutError(f"Dock reset ({marker} still present)")
        logger.info("Dock reset", attempts=self._layout.max_reset_attempts)

    def restart_dock(self) -> None:
        # killall exits non-zero when a process is not running
        run(["killall", "cfprefsd", "Dock"], check=False)

    def _contains_marker(self, plist: Path) -> bool:
        if not plist.exists():
            return False
        return self._layout.reset_marker.encode() in plist.read_bytes()
