"""Dock layout configuration loaded from YAML and validated by Pydantic.

The layout lists the applications that must be installed before the Dock is
rebuilt and the items to add, in order, through ``dockutil``.
"""

from __future__ import annotations

from pathlib import Path

import yaml  # type: ignore[import-untyped]
from pydantic import BaseModel, Field, field_validator

# Shipped inside the package so installed copies find it without a checkout
DEFAULT_LAYOUT_PATH = Path(__file__).resolve().with_name("dock_layout.yaml")


class DockItem(BaseModel):
    """One Dock entry and its optional ``dockutil`` display options.

    ``path`` may contain ``{home}``, replaced with the console user's home
    directory (e.g. ``{home}/Downloads/``).
    """

    path: str
    view: str | None = None
    display: str | None = None
    sort: str | None = None
    section: str | None = None

    @field_validator("path")
    @classmethod
    def path_must_not_be_empty(cls, v: str) -> str:
        """Ensure the item path is not empty or whitespace-only."""
        if not v.strip():
            raise ValueError("dock item path must not be empty")
        return v

    def resolve_path(self, home: Path) -> str:
        return self.path.replace("{home}", str(home))

    def dockutil_args(self, home: Path) -> list[str]:
        """Return the ``--add`` arguments for this item."""
        args = ["--add", self.resolve_path(home)]
        for option in ("view", "display", "sort", "section"):
            value = getattr(self, option)
            if value:
                args.extend([f"--{option}", value])
        return args


class DockLayout(BaseModel):
    """Root configuration for a Dock layout."""

    required_apps: list[Path] = Field(default_factory=list)
    items: list[DockItem] = Field(default_factory=list)
    # Present in the plist until the Dock has really been emptied
    reset_marker: str = "Messages.app"
    settle_seconds: float = 7.0
    restart_pause_seconds: float = 10.0
    max_reset_attempts: int = 10

    @field_validator("max_reset_attempts")
    @classmethod
    def attempts_must_be_positive(cls, v: int) -> int:
        """Ensure at least one reset attempt is allowed."""
        if v < 1:
            raise ValueError("max_reset_attempts must be at least 1")
        return v


def load_dock_layout(config_path: Path | None = None) -> DockLayout:
    """Load and validate a Dock layout from YAML.

    Args:
        config_path: Path to the YAML file. Defaults to the layout shipped
            with the package (``macdeploy/dock/dock_layout.yaml``).

    Returns:
        The validated ``DockLayout``.

    Raises:
        FileNotFoundError: If the config file does not exist.
        pydantic.ValidationError: If the YAML does not match the schema.
    """
    path = config_path or DEFAULT_LAYOUT_PATH
    if not path.exists():
        raise FileNotFoundError(f"Dock layout config not found: {path}")

    with path.open() as f:
        raw = yaml.safe_load(f) or {}

    return DockLayout.model_validate(raw)
