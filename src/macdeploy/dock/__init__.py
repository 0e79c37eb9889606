"""Dock layout configuration applied through ``dockutil``."""

from macdeploy.dock.configure import DockConfigurator
from macdeploy.dock.layout import DockItem, DockLayout, load_dock_layout

__all__ = ["DockConfigurator", "DockItem", "DockLayout", "load_dock_layout"]
