"""Root pytest configuration for all tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from sessionhost.config import Config, reset_config
from sessionhost.config.schema import PlacementConfig
from sessionhost.host.memory import InMemoryHost
from sessionhost.host.protocol import ExtensionContext
from sessionhost.lifecycle import LifecycleCoordinator
from sessionhost.output import OutputSink, ProcessScope
from sessionhost.session import RecordingController, SessionRegistry

# Redundant with pyproject.toml but ensures the plugin is loaded
pytest_plugins = ("pytest_asyncio",)


@pytest.fixture(autouse=True)
def _fresh_config():
    """Never let a cached config leak between tests."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def config() -> Config:
    """Default config without the panel lock delay."""
    return Config(placement=PlacementConfig(lock_delay=0.0))


@pytest.fixture
def host(tmp_path: Path) -> InMemoryHost:
    return InMemoryHost(extension_path=tmp_path)


@pytest.fixture
def context(host: InMemoryHost) -> ExtensionContext:
    return host.create_context()


@pytest.fixture
def scope() -> ProcessScope:
    return ProcessScope()


@pytest.fixture
def sink(host: InMemoryHost, scope: ProcessScope) -> OutputSink:
    return scope.open_sink(host, "Test")


@pytest.fixture
def registry(context: ExtensionContext) -> SessionRegistry:
    return SessionRegistry(context, RecordingController)


@pytest.fixture
def controllers() -> list[RecordingController]:
    """Controllers created by the coordinator fixture, sidebar first."""
    return []


@pytest.fixture
def coordinator(
    host: InMemoryHost,
    scope: ProcessScope,
    controllers: list[RecordingController],
    config: Config,
) -> LifecycleCoordinator:
    return LifecycleCoordinator(host, scope, RecordingController.factory(controllers), config)
