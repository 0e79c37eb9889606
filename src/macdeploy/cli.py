"""Command-line entry point invoked by the MDM agent.

Usage::

    macdeploy zerotier
    macdeploy dock
    macdeploy dock --layout /Library/Management/dock_layout.yaml
    macdeploy compat
    macdeploy compat --model MacBookPro18,3

Configuration comes from ``MACDEPLOY_*`` environment variables or a
``.env`` file; see :class:`macdeploy.config.Settings`.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

import structlog

from macdeploy.app import run_compatibility_check, run_dock_configuration, run_zerotier_deployment
from macdeploy.config import get_settings
from macdeploy.domain.errors import CommandError

logger = structlog.get_logger()


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the device tasks.

    Returns:
        A configured :class:`argparse.ArgumentParser`.
    """
    parser = argparse.ArgumentParser(
        prog="macdeploy",
        description="macOS device tasks for MDM-managed computers",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser(
        "zerotier",
        help="Install ZeroTier, join and authorize this device, and report to Slack",
    )

    dock = subparsers.add_parser("dock", help="Rebuild the console user's Dock")
    dock.add_argument(
        "--layout",
        type=Path,
        help="Dock layout YAML (default: MACDEPLOY_DOCK_LAYOUT_PATH, else the bundled layout)",
    )
    dock.add_argument(
        "--no-wait-limit",
        action="store_true",
        help="Wait for required apps without a time limit",
    )

    compat = subparsers.add_parser(
        "compat",
        help="Print YES if this Mac can run macOS Sonoma, otherwise NO",
    )
    compat.add_argument(
        "--model",
        type=str,
        help="Model identifier to check instead of this Mac's (e.g. MacBookPro18,3)",
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    """Parse arguments, run the selected task, and return its exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "compat":
        try:
            attribute = run_compatibility_check(args.model)
        except CommandError as exc:
            logger.error("Unable to read the hardware model", error=str(exc))
            return 1
        print(attribute)
        return 0

    settings = get_settings()
    if args.command == "zerotier":
        return run_zerotier_deployment(settings)

    overrides: dict[str, object] = {}
    if args.layout is not None:
        overrides["dock_layout_path"] = args.layout
    if args.no_wait_limit:
        overrides["dock_app_wait_limit"] = None
    return run_dock_configuration(settings.model_copy(update=overrides))


if __name__ == "__main__":
    sys.exit(main())
