"""macOS device tasks for MDM-managed computers.

ZeroTier deployment with Slack status reporting, Dock layout through
``dockutil``, and a macOS Sonoma hardware compatibility attribute.
"""

__version__ = "3.2.0"
