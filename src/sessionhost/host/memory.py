"""In-process host implementation.

InMemoryHost plays the editor's role without an editor: it stores
registrations, creates surfaces, tracks which surface is focused and lets a
test (or the replay CLI) fire host events. It enforces the same registration
rules a real editor host does: a command name, view id or document scheme can
only be claimed once.
"""

from __future__ import annotations

import itertools
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from sessionhost.errors import DuplicateRegistrationError
from sessionhost.host.protocol import (
    CommandCallback,
    ContentProvider,
    Disposable,
    ExtensionContext,
    IconPath,
    PanelOptions,
    SupportsDispose,
    Uri,
    UriHandler,
    ViewProvider,
)
from sessionhost.logging import get_logger

log = get_logger("host.memory")

NEW_GROUP_RIGHT = "workbench.action.newGroupRight"


class MemorySurface:
    """A sidebar view or panel living in an InMemoryHost."""

    def __init__(
        self,
        surface_id: str,
        kind: str,
        title: str,
        column: int | None = None,
        options: PanelOptions | None = None,
    ) -> None:
        self.id = surface_id
        self.kind = kind  # "view" or "panel"
        self.title = title
        self.column = column
        self.options = options
        self.icon_path: IconPath | None = None
        self.disposed = False
        self._visible = False
        self._visibility_listeners: list[Callable[[bool], None]] = []
        self._dispose_listeners: list[Callable[[], None]] = []

    @property
    def visible(self) -> bool:
        return self._visible

    def on_did_change_visibility(self, callback: Callable[[bool], None]) -> SupportsDispose:
        self._visibility_listeners.append(callback)
        return Disposable(lambda: _discard(self._visibility_listeners, callback))

    def on_did_dispose(self, callback: Callable[[], None]) -> SupportsDispose:
        self._dispose_listeners.append(callback)
        return Disposable(lambda: _discard(self._dispose_listeners, callback))

    def set_visible(self, visible: bool) -> None:
        if self.disposed or visible == self._visible:
            return
        self._visible = visible
        for callback in list(self._visibility_listeners):
            callback(visible)

    def dispose(self) -> None:
        if self.disposed:
            return
        self.set_visible(False)
        self.disposed = True
        for callback in list(self._dispose_listeners):
            callback()
        self._dispose_listeners.clear()
        self._visibility_listeners.clear()

    def __repr__(self) -> str:
        return f"MemorySurface({self.id!r}, kind={self.kind!r}, visible={self._visible})"


def _discard(items: list[Any], item: Any) -> None:
    if item in items:
        items.remove(item)


@dataclass
class MemoryOutputChannel:
    """Output channel that keeps its lines in memory."""

    name: str
    lines: list[str] = field(default_factory=list)
    disposed: bool = False

    def append_line(self, line: str) -> None:
        if not self.disposed:
            self.lines.append(line)

    def dispose(self) -> None:
        self.disposed = True


class InMemoryHost:
    """Reference Host implementation.

    Example:
        >>> host = InMemoryHost()
        >>> context = host.create_context()
        >>> api = coordinator.activate(context)
        >>> await host.show_view("sessionhost.SidebarProvider")
        >>> await host.invoke_command("sessionhost.plusButtonClicked")
    """

    def __init__(self, extension_path: Path | str = ".") -> None:
        self.extension_path = Path(extension_path)
        self.commands: dict[str, CommandCallback] = {}
        self.view_providers: dict[str, ViewProvider] = {}
        self.view_options: dict[str, dict[str, Any]] = {}
        self.content_providers: dict[str, ContentProvider] = {}
        self.uri_handlers: list[UriHandler] = []
        self.output_channels: list[MemoryOutputChannel] = []
        self.views: dict[str, MemorySurface] = {}
        self.panels: list[MemorySurface] = []
        self.editor_columns: list[int | None] = []
        self.executed_commands: list[str] = []
        self._ids = itertools.count(1)

    # === Host protocol ===

    def register_view_provider(
        self,
        view_id: str,
        provider: ViewProvider,
        *,
        retain_context_when_hidden: bool = False,
    ) -> SupportsDispose:
        if view_id in self.view_providers:
            raise DuplicateRegistrationError("view provider", view_id)
        self.view_providers[view_id] = provider
        self.view_options[view_id] = {"retain_context_when_hidden": retain_context_when_hidden}
        return Disposable(lambda: self._unregister_view(view_id))

    def register_command(self, name: str, callback: CommandCallback) -> SupportsDispose:
        if name in self.commands:
            raise DuplicateRegistrationError("command", name)
        self.commands[name] = callback
        return Disposable(lambda: self.commands.pop(name, None))

    def register_uri_handler(self, handler: UriHandler) -> SupportsDispose:
        self.uri_handlers.append(handler)
        return Disposable(lambda: _discard(self.uri_handlers, handler))

    def register_content_provider(self, scheme: str, provider: ContentProvider) -> SupportsDispose:
        if scheme in self.content_providers:
            raise DuplicateRegistrationError("content provider scheme", scheme)
        self.content_providers[scheme] = provider
        return Disposable(lambda: self.content_providers.pop(scheme, None))

    async def execute_command(self, name: str, *args: Any) -> Any:
        self.executed_commands.append(name)
        if name in self.commands:
            return await self.commands[name]()
        if name == NEW_GROUP_RIGHT:
            # The new group is empty; it has no visible editor until one opens
            log.debug("Opened new editor group to the right")
        return None

    def visible_editor_columns(self) -> list[int | None]:
        return list(self.editor_columns)

    def create_panel(
        self,
        view_type: str,
        title: str,
        column: int,
        options: PanelOptions,
    ) -> MemorySurface:
        panel = MemorySurface(
            f"{view_type}#{next(self._ids)}",
            kind="panel",
            title=title,
            column=column,
            options=options,
        )
        panel.on_did_dispose(lambda: _discard(self.panels, panel))
        self.panels.append(panel)
        return panel

    def create_output_channel(self, name: str) -> MemoryOutputChannel:
        channel = MemoryOutputChannel(name)
        self.output_channels.append(channel)
        return channel

    # === Simulated host events ===

    def create_context(self) -> ExtensionContext:
        return ExtensionContext(extension_path=self.extension_path)

    def surfaces(self) -> list[MemorySurface]:
        return [*self.views.values(), *self.panels]

    def focus(self, surface: MemorySurface) -> None:
        """Make surface the single visible surface."""
        for other in self.surfaces():
            if other is not surface:
                other.set_visible(False)
        surface.set_visible(True)

    async def show_view(self, view_id: str) -> MemorySurface:
        """Show a registered view, resolving it on first display."""
        surface = self.views.get(view_id)
        if surface is None or surface.disposed:
            provider = self.view_providers[view_id]
            surface = MemorySurface(view_id, kind="view", title=view_id)
            self.views[view_id] = surface
            await provider.resolve_view(surface)
        self.focus(surface)
        return surface

    def hide_view(self, view_id: str) -> None:
        surface = self.views.get(view_id)
        if surface is None:
            return
        if self.view_options.get(view_id, {}).get("retain_context_when_hidden"):
            surface.set_visible(False)
        else:
            surface.dispose()

    async def reveal_panel(self, panel: MemorySurface) -> None:
        self.focus(panel)

    async def invoke_command(self, name: str) -> Any:
        """Deliver a command the way the editor does when a button is clicked."""
        return await self.execute_command(name)

    async def open_uri(self, uri: Uri | str) -> None:
        if isinstance(uri, str):
            uri = Uri.parse(uri)
        for handler in list(self.uri_handlers):
            await handler.handle_uri(uri)

    def open_document(self, uri: Uri | str) -> str:
        """Read a virtual document through its scheme's provider."""
        if isinstance(uri, str):
            uri = Uri.parse(uri)
        provider = self.content_providers.get(uri.scheme)
        if provider is None:
            raise KeyError(f"No content provider for scheme {uri.scheme!r}")
        return provider.provide_content(uri)

    def shutdown(self, context: ExtensionContext) -> None:
        """Tear down: dispose panels, views and every subscription."""
        for panel in list(self.panels):
            panel.dispose()
        for view in list(self.views.values()):
            view.dispose()
        context.dispose_all()

    def _unregister_view(self, view_id: str) -> None:
        self.view_providers.pop(view_id, None)
        self.view_options.pop(view_id, None)
