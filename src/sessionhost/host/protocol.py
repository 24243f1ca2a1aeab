"""Host environment protocols.

The editor host (the process that loads SessionHost, shows its views and
delivers commands) is only reached through the protocols below. A real
adapter wraps the editor's extension API; InMemoryHost in
sessionhost.host.memory implements them in-process for tests and replay.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import Any, Protocol
from urllib.parse import quote, unquote, urlsplit, urlunsplit

from sessionhost.logging import get_logger

log = get_logger("host")


class SupportsDispose(Protocol):
    """Anything that releases a host resource."""

    def dispose(self) -> None: ...


class Disposable:
    """Releases a resource once, however many times dispose() is called.

    Example:
        >>> d = Disposable(lambda: print("released"))
        >>> d.dispose()
        released
        >>> d.dispose()  # no-op
    """

    def __init__(self, on_dispose: Callable[[], None] | None = None) -> None:
        self._on_dispose = on_dispose
        self.disposed = False

    def dispose(self) -> None:
        if self.disposed:
            return
        self.disposed = True
        if self._on_dispose is not None:
            self._on_dispose()


@dataclass
class ExtensionContext:
    """Host-provided resources for one activation.

    Everything registered during activation goes into subscriptions; the host
    disposes them (newest first) when it tears the extension down.
    """

    extension_path: Path
    subscriptions: list[SupportsDispose] = field(default_factory=list)

    def dispose_all(self) -> None:
        while self.subscriptions:
            item = self.subscriptions.pop()
            try:
                item.dispose()
            except Exception:
                log.exception("Error disposing %r", item)


class ViewColumn(IntEnum):
    """Editor column positions; ONE is the leftmost group."""

    BESIDE = -2
    ACTIVE = -1
    ONE = 1
    TWO = 2
    THREE = 3


@dataclass(frozen=True)
class Uri:
    """A parsed URI as delivered by the host.

    Supports both authority form (scheme://authority/path?query) and opaque
    form (scheme:path?query), which is what virtual document URIs use.
    The path is held unescaped; __str__ percent-encodes it.
    """

    scheme: str
    authority: str = ""
    path: str = ""
    query: str = ""
    fragment: str = ""

    @classmethod
    def parse(cls, value: str) -> Uri:
        parts = urlsplit(value)
        return cls(
            scheme=parts.scheme,
            authority=parts.netloc,
            path=unquote(parts.path),
            query=parts.query,
            fragment=parts.fragment,
        )

    def __str__(self) -> str:
        path = quote(self.path, safe="/")
        if self.authority:
            return urlunsplit((self.scheme, self.authority, path, self.query, self.fragment))
        # urlunsplit would drop the query of an opaque URI with an empty path
        text = f"{self.scheme}:{path}"
        if self.query:
            text += f"?{self.query}"
        if self.fragment:
            text += f"#{self.fragment}"
        return text


@dataclass(frozen=True)
class IconPath:
    """Theme-dependent icon pair for a panel tab."""

    light: Path
    dark: Path


@dataclass
class PanelOptions:
    """Options for a detached panel."""

    enable_scripts: bool = True
    retain_context_when_hidden: bool = True
    local_resource_roots: list[Path] = field(default_factory=list)


class Surface(Protocol):
    """A host UI surface: the sidebar view or a detached panel."""

    id: str
    title: str
    icon_path: IconPath | None

    @property
    def visible(self) -> bool: ...

    def on_did_change_visibility(self, callback: Callable[[bool], None]) -> SupportsDispose: ...

    def on_did_dispose(self, callback: Callable[[], None]) -> SupportsDispose: ...

    def dispose(self) -> None: ...


class OutputChannel(Protocol):
    """A named, append-only text channel shown by the host."""

    def append_line(self, line: str) -> None: ...

    def dispose(self) -> None: ...


class ViewProvider(Protocol):
    """Fills a host view with content when the host first shows it."""

    async def resolve_view(self, surface: Surface) -> None: ...


class UriHandler(Protocol):
    """Receives deep-link URIs addressed to this extension."""

    async def handle_uri(self, uri: Uri) -> None: ...


class ContentProvider(Protocol):
    """Supplies read-only text for a virtual document scheme."""

    def provide_content(self, uri: Uri) -> str: ...


CommandCallback = Callable[[], Awaitable[None]]


class Host(Protocol):
    """The editor host's extension API, as used by SessionHost."""

    def register_view_provider(
        self,
        view_id: str,
        provider: ViewProvider,
        *,
        retain_context_when_hidden: bool = False,
    ) -> SupportsDispose: ...

    def register_command(self, name: str, callback: CommandCallback) -> SupportsDispose: ...

    def register_uri_handler(self, handler: UriHandler) -> SupportsDispose: ...

    def register_content_provider(
        self, scheme: str, provider: ContentProvider
    ) -> SupportsDispose: ...

    async def execute_command(self, name: str, *args: Any) -> Any: ...

    def visible_editor_columns(self) -> list[int | None]:
        """View columns of the visible text editors (None when unknown)."""
        ...

    def create_panel(
        self,
        view_type: str,
        title: str,
        column: int,
        options: PanelOptions,
    ) -> Surface: ...

    def create_output_channel(self, name: str) -> OutputChannel: ...
