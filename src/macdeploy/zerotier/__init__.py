"""ZeroTier client integration: local CLI, installer, version checks, Central API."""

from macdeploy.zerotier.central import CentralClient
from macdeploy.zerotier.cli import JOIN_OK, ZeroTierCli
from macdeploy.zerotier.installer import ZeroTierInstaller
from macdeploy.zerotier.reconcile import fetch_latest_version, normalize_version, reconcile

__all__ = [
    "JOIN_OK",
    "CentralClient",
    "ZeroTierCli",
    "ZeroTierInstaller",
    "fetch_latest_version",
    "normalize_version",
    "reconcile",
]
