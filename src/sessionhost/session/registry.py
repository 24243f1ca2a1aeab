"""Registry of live session instances."""

from __future__ import annotations

import uuid
from collections.abc import Callable
from typing import TYPE_CHECKING

from sessionhost.errors import (
    DuplicateRegistrationError,
    DuplicateSidebarError,
    VisibilityConflictError,
)
from sessionhost.logging import get_logger
from sessionhost.session.instance import SessionInstance, SessionKind

if TYPE_CHECKING:
    from sessionhost.host.protocol import ExtensionContext
    from sessionhost.session.controller import SessionController

log = get_logger("registry")

SIDEBAR_ID = "sidebar"


class SessionRegistry:
    """Tracks the sidebar instance and every open panel instance.

    Only one sidebar instance ever exists for a registry: the same object
    may leave (its view was disposed) and come back (the host showed the
    view again), but a different sidebar object is refused.
    """

    def __init__(
        self,
        context: ExtensionContext,
        create_controller: Callable[[], SessionController],
    ) -> None:
        """Initialize an empty registry.

        Args:
            context: Extension context handed to every instance.
            create_controller: Builds the engine controller for a new instance.
        """
        self._context = context
        self._create_controller = create_controller
        self._instances: dict[str, SessionInstance] = {}
        self._sidebar: SessionInstance | None = None

    def register(self, instance: SessionInstance) -> None:
        """Add an instance. Re-registering the same object is a no-op.

        Raises:
            DuplicateSidebarError: If a different sidebar instance exists.
            DuplicateRegistrationError: If another instance uses the same id.
        """
        existing = self._instances.get(instance.id)
        if existing is instance:
            return
        if existing is not None:
            raise DuplicateRegistrationError("session instance", instance.id)
        if instance.kind is SessionKind.SIDEBAR:
            if self._sidebar is not None and self._sidebar is not instance:
                raise DuplicateSidebarError(
                    f"Sidebar instance {self._sidebar.id!r} already exists"
                )
            self._sidebar = instance
        self._instances[instance.id] = instance
        log.debug("Registered %s instance %s", instance.kind.value, instance.id)

    def unregister(self, instance_id: str) -> bool:
        """Remove an instance.

        Returns:
            True if removed, False if it was not registered.
        """
        instance = self._instances.pop(instance_id, None)
        if instance is None:
            return False
        log.debug("Unregistered %s instance %s", instance.kind.value, instance_id)
        return True

    def get(self, instance_id: str) -> SessionInstance | None:
        return self._instances.get(instance_id)

    @property
    def sidebar(self) -> SessionInstance | None:
        """The sidebar instance while it is registered."""
        if self._sidebar is not None and self._sidebar.id in self._instances:
            return self._sidebar
        return None

    def get_or_create(self, kind: SessionKind) -> SessionInstance:
        """Return the sidebar (creating it once) or a new panel instance.

        The new instance is registered before it is returned.
        """
        if kind is SessionKind.SIDEBAR:
            if self._sidebar is not None:
                # Returning a disposed sidebar puts it back in the registry
                self.register(self._sidebar)
                return self._sidebar
            instance_id = SIDEBAR_ID
        else:
            instance_id = f"panel-{uuid.uuid4().hex[:8]}"

        instance = SessionInstance(
            kind,
            instance_id,
            self._create_controller(),
            self._context,
            registry=self,
        )
        self.register(instance)
        return instance

    def resolve_visible(self) -> SessionInstance | None:
        """Return the instance the host reports as visible, if any.

        Raises:
            VisibilityConflictError: If more than one instance is visible.
                The host focuses one surface at a time, so this means the
                visibility notifications upstream are wrong.
        """
        visible = [instance for instance in self._instances.values() if instance.visible]
        if not visible:
            return None
        if len(visible) > 1:
            ids = sorted(instance.id for instance in visible)
            log.warning("Refusing to pick between visible instances: %s", ", ".join(ids))
            raise VisibilityConflictError(ids)
        return visible[0]

    def list_instances(self, kind: SessionKind | None = None) -> list[SessionInstance]:
        return [i for i in self._instances.values() if kind is None or i.kind is kind]

    def __len__(self) -> int:
        return len(self._instances)

    def __contains__(self, item: object) -> bool:
        if isinstance(item, SessionInstance):
            return self._instances.get(item.id) is item
        return item in self._instances
