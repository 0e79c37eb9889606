"""Tests for the Dock layout model and YAML loader."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from macdeploy.dock.layout import DEFAULT_LAYOUT_PATH, DockItem, DockLayout, load_dock_layout


class TestDockItem:
    def test_plain_app(self) -> None:
        item = DockItem(path="/Applications/Slack.app")

        assert item.dockutil_args(Path("/Users/alex")) == ["--add", "/Applications/Slack.app"]

    def test_stack_options_and_home(self) -> None:
        item = DockItem(
            path="{home}/Downloads/",
            view="auto",
            display="stack",
            sort="dateadded",
            section="others",
        )

        assert item.dockutil_args(Path("/Users/alex")) == [
            "--add",
            "/Users/alex/Downloads/",
            "--view",
            "auto",
            "--display",
            "stack",
            "--sort",
            "dateadded",
            "--section",
            "others",
        ]

    def test_empty_path_rejected(self) -> None:
        with pytest.raises(ValidationError):
            DockItem(path="  ")


class TestDockLayout:
    def test_defaults(self) -> None:
        layout = DockLayout()

        assert layout.reset_marker == "Messages.app"
        assert layout.max_reset_attempts == 10

    def test_reset_attempts_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            DockLayout(max_reset_attempts=0)


class TestLoadDockLayout:
    def test_loads_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "dock.yaml"
        path.write_text(
            "required_apps:\n"
            "  - /Applications/Slack.app\n"
            "items:\n"
            "  - path: /Applications/Slack.app\n"
            "settle_seconds: 1\n"
        )

        layout = load_dock_layout(path)

        assert layout.required_apps == [Path("/Applications/Slack.app")]
        assert layout.items[0].path == "/Applications/Slack.app"
        assert layout.settle_seconds == 1.0

    def test_empty_file_gives_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "dock.yaml"
        path.write_text("")

        assert load_dock_layout(path) == DockLayout()

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_dock_layout(tmp_path / "absent.yaml")

    def test_invalid_schema(self, tmp_path: Path) -> None:
        path = tmp_path / "dock.yaml"
        path.write_text("items:\n  - view: list\n")

        with pytest.raises(ValidationError):
            load_dock_layout(path)

    def test_bundled_layout_ships_inside_the_package(self) -> None:
        assert DEFAULT_LAYOUT_PATH.is_file()
        assert DEFAULT_LAYOUT_PATH.parent.name == "dock"
        assert DEFAULT_LAYOUT_PATH.parent.parent.name == "macdeploy"

    def test_default_is_the_bundled_layout(self) -> None:
        layout = load_dock_layout()

        assert layout.items[-1].display == "stack"
        assert Path("/Applications/zoom.us.app") in layout.required_apps
