"""Conversation engine interface.

The assistant's conversation/task engine is an external collaborator. Each
SessionInstance wraps one engine-side controller that implements
SessionController; SessionHost never looks past these five methods.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from sessionhost.host.protocol import ExtensionContext, Surface
    from sessionhost.output import OutputSink


class SessionController(Protocol):
    """Engine-side half of a session instance.

    Example:
        >>> class EchoController:
        ...     async def post_action(self, action: str) -> None:
        ...         print(f"webview action: {action}")
        ...     ...
    """

    async def clear_task(self) -> None:
        """Abandon the current task, if any."""
        ...

    async def post_state(self) -> None:
        """Push a full state snapshot to the UI surface."""
        ...

    async def post_action(self, action: str) -> None:
        """Post an action message (e.g. "chatButtonClicked") to the UI surface."""
        ...

    async def handle_external_callback(self, code: str) -> None:
        """Exchange an authorization code received through a deep link."""
        ...

    async def resolve_as_panel(self, surface: Surface) -> None:
        """Render into a host surface that was just created or shown."""
        ...


ControllerFactory = Callable[["ExtensionContext", "OutputSink"], SessionController]


@dataclass
class RecordedCall:
    """One call made on a RecordingController."""

    method: str
    args: tuple[Any, ...] = ()


@dataclass
class RecordingController:
    """SessionController that records every call.

    Used by the replay CLI and tests. Set fail_on to a method name to make
    that method raise RuntimeError.
    """

    extension_path: Path | None = None
    calls: list[RecordedCall] = field(default_factory=list)
    fail_on: set[str] = field(default_factory=set)

    @classmethod
    def factory(cls, created: list[RecordingController] | None = None) -> ControllerFactory:
        """Build a ControllerFactory, optionally collecting what it creates."""

        def create(context: ExtensionContext, sink: OutputSink) -> RecordingController:
            controller = cls(extension_path=context.extension_path)
            if created is not None:
                created.append(controller)
            return controller

        return create

    def methods(self) -> list[str]:
        return [call.method for call in self.calls]

    def _record(self, method: str, *args: Any) -> None:
        self.calls.append(RecordedCall(method, args))
        if method in self.fail_on:
            raise RuntimeError(f"{method} failed")

    async def clear_task(self) -> None:
        self._record("clear_task")

    async def post_state(self) -> None:
        self._record("post_state")

    async def post_action(self, action: str) -> None:
        self._record("post_action", action)

    async def handle_external_callback(self, code: str) -> None:
        self._record("handle_external_callback", code)

    async def resolve_as_panel(self, surface: Surface) -> None:
        self._record("resolve_as_panel", surface.id)
