"""Configuration file loading and caching.

Handles:
- YAML file parsing
- Layered deep merge (system -> user -> project -> environment)
- Environment variable overrides
- Conversion from dict to typed Config dataclasses
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from sessionhost.config.paths import get_config_paths
from sessionhost.config.schema import (
    CommandConfig,
    Config,
    ContentConfig,
    LoggingConfig,
    PlacementConfig,
    ViewConfig,
)

# May not be configured yet at import time
_log = logging.getLogger("sessionhost.config")

_cached_config: Config | None = None

_KNOWN_SECTIONS = {"logging", "view", "commands", "placement", "content"}


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a YAML file, returning an empty dict if missing or invalid."""
    if not path.exists():
        return {}

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        _log.warning("Invalid YAML in %s: %s", path, e)
        return {}
    except OSError as e:
        _log.warning("Error reading %s: %s", path, e)
        return {}
    return data if isinstance(data, dict) else {}


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return base updated with override.

    Nested dicts merge recursively, lists and scalars are replaced, and None
    in override leaves the base value alone.
    """
    merged = dict(base)
    for key, value in override.items():
        if value is None:
            continue
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def env_overrides() -> dict[str, Any]:
    """Build a config layer from SESSIONHOST_* environment variables."""
    logging_section: dict[str, Any] = {}
    if log_path := os.environ.get("SESSIONHOST_LOG"):
        logging_section["file"] = log_path
    if log_level := os.environ.get("SESSIONHOST_LOG_LEVEL"):
        logging_section["level"] = log_level
    return {"logging": logging_section} if logging_section else {}


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    value = data.get(name)
    return value if isinstance(value, dict) else {}


def dict_to_config(data: dict[str, Any]) -> Config:
    """Convert a merged dict to a typed Config."""
    log_data = _section(data, "logging")
    view_data = _section(data, "view")
    cmd_data = _section(data, "commands")
    place_data = _section(data, "placement")
    content_data = _section(data, "content")

    view_defaults = ViewConfig()
    view = ViewConfig(
        sidebar_id=view_data.get("sidebar_id", view_defaults.sidebar_id),
        panel_id=view_data.get("panel_id", view_defaults.panel_id),
        panel_title=view_data.get("panel_title", view_defaults.panel_title),
        retain_context_when_hidden=bool(
            view_data.get("retain_context_when_hidden", view_defaults.retain_context_when_hidden)
        ),
        icon_light=view_data.get("icon_light", view_defaults.icon_light),
        icon_dark=view_data.get("icon_dark", view_defaults.icon_dark),
    )

    placement_defaults = PlacementConfig()
    lock_delay = place_data.get("lock_delay", placement_defaults.lock_delay)
    try:
        lock_delay = max(float(lock_delay), 0.0)
    except (TypeError, ValueError):
        _log.warning("Ignoring invalid placement.lock_delay: %r", lock_delay)
        lock_delay = placement_defaults.lock_delay

    return Config(
        logging=LoggingConfig(level=log_data.get("level"), file=log_data.get("file")),
        view=view,
        commands=CommandConfig(prefix=cmd_data.get("prefix", CommandConfig().prefix)),
        placement=PlacementConfig(
            lock_delay=lock_delay,
            lock_group=bool(place_data.get("lock_group", placement_defaults.lock_group)),
        ),
        content=ContentConfig(scheme=content_data.get("scheme", ContentConfig().scheme)),
        extra={k: v for k, v in data.items() if k not in _KNOWN_SECTIONS},
    )


def load_config(
    project_root: str | Path | None = None,
    reload: bool = False,
    config_file: Path | None = None,
) -> Config:
    """Load and merge config from all sources.

    Priority order (highest to lowest):
    1. Environment variables
    2. Explicit config_file (e.g. from --config)
    3. Project config ($project_root/.sessionhost/config.yaml)
    4. User config
    5. System config

    Only the global config (no project_root, no config_file) is cached.
    """
    global _cached_config

    is_global = project_root is None and config_file is None
    if is_global and _cached_config is not None and not reload:
        return _cached_config

    paths = get_config_paths(project_root)
    if config_file is not None:
        paths.append(config_file)

    merged: dict[str, Any] = {}
    for path in paths:
        layer = load_yaml_file(path)
        if layer:
            _log.debug("Loaded config from %s", path)
            merged = deep_merge(merged, layer)
    merged = deep_merge(merged, env_overrides())

    config = dict_to_config(merged)
    if is_global:
        _cached_config = config
    return config


def get_config() -> Config:
    """Get the cached global config, loading it on first use."""
    if _cached_config is None:
        return load_config()
    return _cached_config


def reset_config() -> None:
    """Drop the cached config (tests, forced reload)."""
    global _cached_config
    _cached_config = None
