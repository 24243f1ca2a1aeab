"""Activation and deactivation.

The LifecycleCoordinator is what a host adapter calls when the editor loads
and unloads the extension. Activation wires everything together:

    host activation
      -> open the output sink (process scope)
      -> create the sidebar SessionInstance and register it
      -> register it as the sidebar view provider
      -> register commands, the URI handler and the content provider
      -> return the ExtensionAPI

Every registration is appended to context.subscriptions so the host
releases it on teardown, whichever way the process exits.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from sessionhost.callbacks import CallbackDispatcher
from sessionhost.commands import CommandRouter
from sessionhost.config import Config, get_config
from sessionhost.content import DiffContentProvider
from sessionhost.errors import LifecycleError
from sessionhost.logging import get_logger
from sessionhost.placement import PanelPlacement
from sessionhost.session.instance import SessionInstance, SessionKind
from sessionhost.session.registry import SessionRegistry

if TYPE_CHECKING:
    from sessionhost.host.protocol import ExtensionContext, Host
    from sessionhost.output import OutputSink, ProcessScope
    from sessionhost.session.controller import ControllerFactory

log = get_logger("lifecycle")

OUTPUT_CHANNEL_NAME = "SessionHost"


@dataclass
class ExtensionAPI:
    """Capability object handed to other extensions on activation.

    Bound to the output sink and the sidebar instance; the conversation
    engine's own API is reached through sidebar.controller.
    """

    output: OutputSink
    sidebar: SessionInstance

    def log(self, message: str) -> None:
        if not self.output.closed:
            self.output.append_line(message)

    async def start_new_task(self) -> None:
        await self.sidebar.start_new_task()


@dataclass
class Activation:
    """Everything created by one activation."""

    context: ExtensionContext
    sink: OutputSink
    registry: SessionRegistry
    sidebar: SessionInstance
    router: CommandRouter
    dispatcher: CallbackDispatcher
    content_provider: DiffContentProvider
    api: ExtensionAPI


class LifecycleCoordinator:
    """Sequences activation-time registration and teardown."""

    def __init__(
        self,
        host: Host,
        scope: ProcessScope,
        controller_factory: ControllerFactory,
        config: Config | None = None,
    ) -> None:
        """Initialize the coordinator.

        Args:
            host: The editor host.
            scope: Process-wide state; owns the output sink.
            controller_factory: Builds the engine controller for each instance.
            config: Configuration (defaults to the cached global config).
        """
        self._host = host
        self._scope = scope
        self._controller_factory = controller_factory
        self.config = config or get_config()
        self.activation: Activation | None = None

    @property
    def active(self) -> bool:
        return self.activation is not None

    def activate(self, context: ExtensionContext) -> ExtensionAPI:
        """Wire SessionHost into the host.

        Raises:
            LifecycleError: If already active.
        """
        if self.activation is not None:
            raise LifecycleError("Already activated")

        sink = self._scope.open_sink(self._host, OUTPUT_CHANNEL_NAME)
        context.subscriptions.append(sink)
        sink.append_line("SessionHost extension activated")

        registry = SessionRegistry(
            context, lambda: self._controller_factory(context, sink)
        )
        sidebar = registry.get_or_create(SessionKind.SIDEBAR)

        view = self.config.view
        context.subscriptions.append(
            self._host.register_view_provider(
                view.sidebar_id,
                sidebar,
                retain_context_when_hidden=view.retain_context_when_hidden,
            )
        )

        placement = PanelPlacement(self._host, self.config.placement)
        router = CommandRouter(self._host, registry, sidebar, placement, sink, self.config)
        router.register(context)

        dispatcher = CallbackDispatcher(registry, sink)
        dispatcher.register(self._host, context)

        content_provider = DiffContentProvider(self.config.content.scheme)
        content_provider.register(self._host, context)

        api = ExtensionAPI(output=sink, sidebar=sidebar)
        self.activation = Activation(
            context=context,
            sink=sink,
            registry=registry,
            sidebar=sidebar,
            router=router,
            dispatcher=dispatcher,
            content_provider=content_provider,
            api=api,
        )
        log.info("Activated with %d subscriptions", len(context.subscriptions))
        return api

    def deactivate(self) -> None:
        """Write the final log line and release the output sink.

        Host registrations are released by the host through
        context.subscriptions; calling this when not active is a no-op.
        """
        if self.activation is None:
            return
        if self._scope.has_sink:
            self._scope.sink.append_line("SessionHost extension deactivated")
        self._scope.close_sink()
        self.activation = None
        log.info("Deactivated")
