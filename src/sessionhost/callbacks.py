"""External callback URI dispatch.

Deep links addressed to the extension (for example the redirect at the end
of an OAuth-style sign-in) arrive as URIs. The dispatcher parses them, picks
the session instance the user is looking at, and calls the handler
registered for the URI path.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING
from urllib.parse import parse_qsl

from sessionhost.errors import RoutingMiss
from sessionhost.logging import get_logger

if TYPE_CHECKING:
    from sessionhost.host.protocol import ExtensionContext, Host, SupportsDispose, Uri
    from sessionhost.output import OutputSink
    from sessionhost.session.instance import SessionInstance
    from sessionhost.session.registry import SessionRegistry

log = get_logger("callbacks")

OPENROUTER_PATH = "/openrouter"

RouteHandler = Callable[["SessionInstance", "CallbackRequest"], Awaitable[None]]


@dataclass(frozen=True)
class CallbackRequest:
    """Path and query parameters of a callback URI."""

    path: str
    params: dict[str, str] = field(default_factory=dict)


def parse_callback(uri: Uri) -> CallbackRequest:
    """Split a callback URI into path and parameters.

    A "+" in the raw query is kept as a literal plus instead of becoming a
    space, since authorization codes may contain it. For repeated keys the
    first value wins.
    """
    query = uri.query.replace("+", "%2B")
    params: dict[str, str] = {}
    for key, value in parse_qsl(query, keep_blank_values=True):
        params.setdefault(key, value)
    return CallbackRequest(path=uri.path, params=params)


async def _handle_openrouter(instance: SessionInstance, request: CallbackRequest) -> None:
    code = request.params.get("code")
    if code:
        await instance.handle_external_callback(code)
    else:
        log.debug("Ignoring %s callback without a code", request.path)


class CallbackDispatcher:
    """Routes callback URIs to the visible session instance.

    Callbacks are dropped when no instance is visible or the path is not in
    the route table. Handler failures are logged, never raised to the host.
    """

    def __init__(self, registry: SessionRegistry, sink: OutputSink) -> None:
        self._registry = registry
        self._sink = sink
        self._routes: dict[str, RouteHandler] = {OPENROUTER_PATH: _handle_openrouter}

    @property
    def routes(self) -> list[str]:
        return list(self._routes)

    def add_route(self, path: str, handler: RouteHandler) -> None:
        self._routes[path] = handler

    def register(self, host: Host, context: ExtensionContext) -> SupportsDispose:
        registration = host.register_uri_handler(self)
        context.subscriptions.append(registration)
        return registration

    async def handle_uri(self, uri: Uri) -> None:
        """UriHandler entry point."""
        await self.handle(uri)

    async def handle(self, uri: Uri) -> bool:
        """Dispatch one callback URI.

        Returns:
            True if a route handler ran to completion.
        """
        request = parse_callback(uri)
        try:
            instance = self._registry.resolve_visible()
        except Exception as e:
            log.exception("Cannot resolve visible session for %s", request.path)
            self._append(f"Callback {request.path} dropped: {e}")
            return False

        if instance is None:
            log.debug("No visible session, dropping callback %s", request.path)
            return False

        handler = self._routes.get(request.path)
        if handler is None:
            log.info("%s", RoutingMiss("callback", request.path))
            return False

        try:
            await handler(instance, request)
        except Exception as e:
            log.exception("Callback %s failed", request.path)
            self._append(f"Callback {request.path} failed: {e}")
            return False
        return True

    def _append(self, line: str) -> None:
        if not self._sink.closed:
            self._sink.append_line(line)
