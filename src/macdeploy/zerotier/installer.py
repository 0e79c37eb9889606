"""Download, install, and remove the ZeroTier One macOS package.

Every step is safe to repeat: a stale package is removed before downloading
and an existing install is removed through its own uninstaller before an
update.
"""

from __future__ import annotations

from pathlib import Path

import httpx
import structlog

from macdeploy.system.identity import run

logger = structlog.get_logger()

DOWNLOAD_TIMEOUT = 300.0


class ZeroTierInstaller:
    """Manages the installer package artifact and the installed client.

    Args:
        client: HTTP client used to download the package.
        package_path: Where the downloaded ``.pkg`` is written.
        download_url: URL of the latest ZeroTier One package.
        uninstaller: Path to the uninstall script shipped with the client.
        download_timeout: Seconds allowed for the package download.
    """

    def __init__(
        self,
        client: httpx.Client,
        package_path: Path,
        download_url: str,
        uninstaller: Path,
        download_timeout: float = DOWNLOAD_TIMEOUT,
    ) -> None:
        self._client = client
        self._package_path = package_path
        self._download_url = download_url
        self._uninstaller = uninstaller
        self._download_timeout = download_timeout

    @property
    def package_path(self) -> Path:
        return self._package_path

    def remove_package(self) -> bool:
        """Delete the installer package if present.

        Returns:
            True if a file was removed.
        """
        if not self._package_path.exists():
            return False
        logger.info("Removing ZeroTier package", path=str(self._package_path))
        self._package_path.unlink()
        return True

    def download(self) -> Path:
        """Stream the latest package to ``package_path``.

        Raises:
            httpx.HTTPError: If the download fails or returns a non-2xx status.
            OSError: If the package cannot be written.
        """
        logger.info("Downloading ZeroTier package", url=self._download_url)
        with self._client.stream(
            "GET", self._download_url, timeout=self._download_timeout, follow_redirects=True
        ) as response:
            response.raise_for_status()
            with self._package_path.open("wb") as f:
                for chunk in response.iter_bytes():
                    f.write(chunk)
        return self._package_path

    def install(self) -> None:
        """Run the macOS ``installer`` against the downloaded package.

        Raises:
            CommandError: If ``installer`` exits non-zero.
        """
        logger.info("Installing ZeroTier package", path=str(self._package_path))
        run(["installer", "-pkg", str(self._package_path), "-target", "/"])

    def has_uninstaller(self) -> bool:
        return self._uninstaller.is_file()

    def uninstall(self) -> bool:
        """Remove an existing client through its uninstaller.

        Returns:
            True if the uninstaller ran, False if none was found.

        Raises:
            CommandError: If the uninstaller exits non-zero.
        """
        if not self.has_uninstaller():
            logger.info("ZeroTier uninstaller not found", path=str(self._uninstaller))
            return False
        logger.info("Removing existing ZeroTier installation")
        run([str(self._uninstaller)])
        return True
