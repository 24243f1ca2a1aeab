"""Configuration management for SessionHost.

Hierarchical YAML configuration:
- System-level config (/etc/sessionhost/ or %PROGRAMDATA%)
- User-level config (~/.config/sessionhost/, ~/.sessionhost/ or %APPDATA%)
- Project-level config ($project_root/.sessionhost/)
- Environment variable overrides (highest priority)

Example usage:
    from sessionhost.config import load_config

    config = load_config(project_root="/path/to/project")
    print(config.placement.lock_delay)
"""

from sessionhost.config.loader import (
    deep_merge,
    get_config,
    load_config,
    reset_config,
)
from sessionhost.config.paths import (
    get_config_paths,
    get_project_config_path,
    get_system_config_path,
    get_user_config_path,
)
from sessionhost.config.schema import (
    CommandConfig,
    Config,
    ContentConfig,
    LoggingConfig,
    PlacementConfig,
    ViewConfig,
)

__all__ = [
    # Main API
    "Config",
    "load_config",
    "get_config",
    "reset_config",
    "deep_merge",
    # Schema types
    "CommandConfig",
    "ContentConfig",
    "LoggingConfig",
    "PlacementConfig",
    "ViewConfig",
    # Path utilities
    "get_config_paths",
    "get_system_config_path",
    "get_user_config_path",
    "get_project_config_path",
]
