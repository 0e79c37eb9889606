"""Hardware eligibility check for macOS Sonoma, reported as an MDM custom attribute.

The allow-list encodes each supported hardware family and the lowest
supported generation number per family. See the community-maintained list at
https://gist.github.com/talkingmoose/1b852e5d4fc8e76b4400ca2e4b3f3ad0
"""

from __future__ import annotations

import re

from macdeploy.system.identity import run

SONOMA_COMPATIBLE_PATTERN = re.compile(
    r"^(Mac(1[3-9]|BookPro1[5-8]|BookAir([89]|10)|Pro[7-9]|Book[0-9]{2,})"
    r"|iMac(Pro[0-9]+|1[89]|[2-9][0-9])"
    r"|Macmini[89]"
    r"|VirtualMac[0-9]*),[0-9]+$"
)


def is_supported(model_identifier: str) -> bool:
    """Return True if *model_identifier* (e.g. ``MacBookPro18,3``) is on the allow-list."""
    return SONOMA_COMPATIBLE_PATTERN.match(model_identifier) is not None


def hardware_model() -> str:
    """Return the hardware model identifier reported by ``sysctl -n hw.model``."""
    return run(["sysctl", "-n", "hw.model"]).stdout.strip()


def compatibility_attribute(model_identifier: str) -> str:
    """Render the custom attribute value: ``YES`` when supported, otherwise ``NO``."""
    return "YES" if is_supported(model_identifier) else "NO"
