"""Configuration schema dataclasses for SessionHost.

Defines the structure of configuration at all levels (system, user, project).
All fields have defaults so partial configs merge together cleanly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str | None = None  # TRACE, DEBUG, VERBOSE, INFO, WARNING, ERROR
    file: str | None = None  # Log file path


@dataclass
class ViewConfig:
    """Identifiers and presentation of the assistant's UI surfaces.

    Example config.yaml:
        view:
          panel_title: "Assistant"
          retain_context_when_hidden: true
    """

    sidebar_id: str = "sessionhost.SidebarProvider"
    panel_id: str = "sessionhost.TabPanelProvider"
    panel_title: str = "SessionHost"
    retain_context_when_hidden: bool = True
    # Relative to the extension root
    icon_light: str = "assets/icons/robot_panel_light.png"
    icon_dark: str = "assets/icons/robot_panel_dark.png"


@dataclass
class CommandConfig:
    """Command registration settings."""

    prefix: str = "sessionhost"  # Commands register as "<prefix>.<name>"


@dataclass
class PlacementConfig:
    """Detached panel placement.

    lock_delay gives the host time to settle its layout before the editor
    group holding a new panel is locked.
    """

    lock_delay: float = 0.1  # Seconds
    lock_group: bool = True


@dataclass
class ContentConfig:
    """Virtual document settings."""

    scheme: str = "sessionhost-diff"


@dataclass
class Config:
    """Root configuration object."""

    logging: LoggingConfig = field(default_factory=LoggingConfig)
    view: ViewConfig = field(default_factory=ViewConfig)
    commands: CommandConfig = field(default_factory=CommandConfig)
    placement: PlacementConfig = field(default_factory=PlacementConfig)
    content: ContentConfig = field(default_factory=ContentConfig)

    # Unknown top-level sections, kept for collaborators
    extra: dict[str, Any] = field(default_factory=dict)
