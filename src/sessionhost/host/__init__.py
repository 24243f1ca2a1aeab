"""Host environment interfaces and the in-process reference host."""

from sessionhost.host.memory import InMemoryHost, MemoryOutputChannel, MemorySurface
from sessionhost.host.protocol import (
    CommandCallback,
    ContentProvider,
    Disposable,
    ExtensionContext,
    Host,
    IconPath,
    OutputChannel,
    PanelOptions,
    Surface,
    SupportsDispose,
    Uri,
    UriHandler,
    ViewColumn,
    ViewProvider,
)

__all__ = [
    # Protocols
    "Host",
    "Surface",
    "OutputChannel",
    "ViewProvider",
    "UriHandler",
    "ContentProvider",
    "SupportsDispose",
    "CommandCallback",
    # Values
    "Disposable",
    "ExtensionContext",
    "IconPath",
    "PanelOptions",
    "Uri",
    "ViewColumn",
    # Reference host
    "InMemoryHost",
    "MemoryOutputChannel",
    "MemorySurface",
]
