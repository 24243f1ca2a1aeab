"""Host command routing.

Each toolbar button of the assistant view is a host command. Simple buttons
post an action to the sidebar instance; the pop-out buttons open a new
detached panel. Every invocation runs on its own: a failing handler is
logged to the output sink and the router stays usable.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from functools import partial
from typing import TYPE_CHECKING

from sessionhost.errors import RoutingMiss
from sessionhost.host.protocol import IconPath, PanelOptions
from sessionhost.logging import get_logger
from sessionhost.session.instance import SessionInstance, SessionKind

if TYPE_CHECKING:
    from sessionhost.config.schema import Config
    from sessionhost.host.protocol import (
        CommandCallback,
        ExtensionContext,
        Host,
        Surface,
        SupportsDispose,
    )
    from sessionhost.output import OutputSink
    from sessionhost.placement import PanelPlacement
    from sessionhost.session.registry import SessionRegistry

log = get_logger("commands")

PLUS_BUTTON = "plusButtonClicked"
MCP_BUTTON = "mcpButtonClicked"
POPOUT_BUTTON = "popoutButtonClicked"
OPEN_IN_NEW_TAB = "openInNewTab"
SETTINGS_BUTTON = "settingsButtonClicked"
HISTORY_BUTTON = "historyButtonClicked"

COMMAND_NAMES = (
    PLUS_BUTTON,
    MCP_BUTTON,
    POPOUT_BUTTON,
    OPEN_IN_NEW_TAB,
    SETTINGS_BUTTON,
    HISTORY_BUTTON,
)


class CommandRouter:
    """Maps host commands to actions on session instances.

    Example:
        >>> router = CommandRouter(host, registry, sidebar, placement, sink, config)
        >>> router.register(context)
        >>> await router.dispatch("plusButtonClicked")
        True
    """

    def __init__(
        self,
        host: Host,
        registry: SessionRegistry,
        sidebar: SessionInstance,
        placement: PanelPlacement,
        sink: OutputSink,
        config: Config,
    ) -> None:
        self._host = host
        self._registry = registry
        self._sidebar = sidebar
        self._placement = placement
        self._sink = sink
        self._config = config
        self._handlers: dict[str, Callable[[], Awaitable[object]]] = {
            PLUS_BUTTON: self.new_task,
            MCP_BUTTON: partial(self._post_sidebar_action, MCP_BUTTON),
            POPOUT_BUTTON: self.open_in_new_tab,
            OPEN_IN_NEW_TAB: self.open_in_new_tab,
            SETTINGS_BUTTON: partial(self._post_sidebar_action, SETTINGS_BUTTON),
            HISTORY_BUTTON: partial(self._post_sidebar_action, HISTORY_BUTTON),
        }

    @property
    def command_names(self) -> list[str]:
        return list(self._handlers)

    def qualified_name(self, name: str) -> str:
        return f"{self._config.commands.prefix}.{name}"

    def register(self, context: ExtensionContext) -> list[SupportsDispose]:
        """Register every command with the host under its qualified name."""
        registrations = []
        for name in self._handlers:
            registration = self._host.register_command(
                self.qualified_name(name), self._isolated(name)
            )
            context.subscriptions.append(registration)
            registrations.append(registration)
        log.debug("Registered %d commands", len(registrations))
        return registrations

    def _isolated(self, name: str) -> CommandCallback:
        async def invoke() -> None:
            await self.dispatch(name)

        return invoke

    async def dispatch(self, name: str) -> bool:
        """Run one command by its short name.

        Returns:
            True if the handler completed, False if the name is unknown or
            the handler failed. Failures never propagate to the host.
        """
        handler = self._handlers.get(name)
        if handler is None:
            miss = RoutingMiss("command", name)
            log.info("%s", miss)
            self._append(str(miss))
            return False
        try:
            await handler()
        except Exception as e:
            log.exception("Command %s failed", name)
            self._append(f"Command {name} failed: {e}")
            return False
        return True

    async def new_task(self) -> None:
        """Clear the sidebar's task, resync its state and focus the chat."""
        self._append("Plus button clicked")
        await self._sidebar.start_new_task()

    async def _post_sidebar_action(self, action: str) -> None:
        await self._sidebar.post_action(action)

    async def open_in_new_tab(self) -> SessionInstance | None:
        """Open the assistant in a new detached panel.

        Returns:
            The panel's session instance, or None if the panel was closed
            before setup finished.
        """
        self._append("Opening in new tab")
        view = self._config.view
        extension_path = self._sidebar.context.extension_path

        instance = self._registry.get_or_create(SessionKind.PANEL)
        panel: Surface | None = None
        try:
            column = await self._placement.compute_target_column()
            panel = self._host.create_panel(
                view.panel_id,
                view.panel_title,
                column,
                PanelOptions(
                    enable_scripts=True,
                    retain_context_when_hidden=True,
                    local_resource_roots=[extension_path],
                ),
            )
            panel.icon_path = IconPath(
                light=extension_path / view.icon_light,
                dark=extension_path / view.icon_dark,
            )
            await instance.resolve_view(panel)
        except Exception:
            # Close the half-built panel
            if panel is not None:
                panel.dispose()
            self._registry.unregister(instance.id)
            raise

        # The user may have closed the panel while the controller rendered
        if instance not in self._registry:
            log.debug("Panel %s closed during setup, not locking its group", instance.id)
            return None

        await self._placement.lock_group()
        return instance

    def _append(self, line: str) -> None:
        if not self._sink.closed:
            self._sink.append_line(line)
