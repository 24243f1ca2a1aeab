"""Session instances: one per assistant UI surface."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from sessionhost.logging import TRACE, get_logger

if TYPE_CHECKING:
    from sessionhost.host.protocol import ExtensionContext, Surface, SupportsDispose
    from sessionhost.session.controller import SessionController
    from sessionhost.session.registry import SessionRegistry

log = get_logger("session")

# Webview action posted after a new task is started
CHAT_BUTTON_ACTION = "chatButtonClicked"


class SessionKind(Enum):
    """Where a session instance is shown."""

    SIDEBAR = "sidebar"  # The persistent sidebar view, one per process
    PANEL = "panel"  # A detached editor panel, any number


class SessionInstance:
    """One logical assistant UI surface.

    Pairs the host surface it is bound to with the conversation engine's
    controller. The visible flag only changes in response to host
    visibility notifications. When the host disposes the surface, the
    instance removes itself from its registry before the notification
    returns.

    A SessionInstance is also a ViewProvider: the host calls resolve_view()
    when it shows the sidebar, and the command router calls it after
    creating a panel.
    """

    def __init__(
        self,
        kind: SessionKind,
        instance_id: str,
        controller: SessionController,
        context: ExtensionContext,
        registry: SessionRegistry | None = None,
    ) -> None:
        self.kind = kind
        self.id = instance_id
        self.controller = controller
        self.context = context  # Borrowed; owned by the host
        self.surface: Surface | None = None
        self._registry = registry
        self._visible = False
        self._surface_subscriptions: list[SupportsDispose] = []

    @property
    def visible(self) -> bool:
        return self._visible

    @property
    def is_sidebar(self) -> bool:
        return self.kind is SessionKind.SIDEBAR

    async def resolve_view(self, surface: Surface) -> None:
        """Bind to a host surface and let the controller render into it."""
        self._release_surface()
        self.surface = surface
        self._visible = surface.visible
        self._surface_subscriptions = [
            surface.on_did_change_visibility(self._on_visibility_changed),
            surface.on_did_dispose(self._on_surface_disposed),
        ]
        if self._registry is not None:
            # The sidebar comes back here when the host re-creates its view
            self._registry.register(self)
        log.debug("Session %s bound to surface %s", self.id, surface.id)
        await self.controller.resolve_as_panel(surface)

    def _on_visibility_changed(self, visible: bool) -> None:
        self._visible = visible
        log.log(TRACE, "Session %s visible=%s", self.id, visible)

    def _on_surface_disposed(self) -> None:
        log.debug("Surface of session %s disposed", self.id)
        self._visible = False
        self._release_surface()
        self.surface = None
        if self._registry is not None:
            self._registry.unregister(self.id)

    def _release_surface(self) -> None:
        for subscription in self._surface_subscriptions:
            subscription.dispose()
        self._surface_subscriptions = []

    # === Controller delegation ===

    async def clear_task(self) -> None:
        await self.controller.clear_task()

    async def post_state(self) -> None:
        await self.controller.post_state()

    async def post_action(self, action: str) -> None:
        await self.controller.post_action(action)

    async def handle_external_callback(self, code: str) -> None:
        await self.controller.handle_external_callback(code)

    async def start_new_task(self) -> None:
        """Clear the task, resync state and focus the chat input."""
        await self.clear_task()
        await self.post_state()
        await self.post_action(CHAT_BUTTON_ACTION)

    def __repr__(self) -> str:
        return f"SessionInstance({self.kind.value}, id={self.id!r}, visible={self._visible})"
