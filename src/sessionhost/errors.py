"""Exception types for SessionHost.

All errors raised by the orchestration core derive from SessionHostError so
that host adapters can catch them in one place. None of them is fatal to the
process: command and callback handlers catch failures at their boundary and
report them through the output sink.
"""

from __future__ import annotations


class SessionHostError(Exception):
    """Base class for all SessionHost errors."""


class DecodeError(SessionHostError):
    """A virtual document payload is not valid base64-encoded UTF-8."""

    def __init__(self, payload: str, reason: str) -> None:
        self.payload = payload
        self.reason = reason
        preview = payload if len(payload) <= 40 else payload[:37] + "..."
        super().__init__(f"Cannot decode payload {preview!r}: {reason}")


class RoutingMiss(SessionHostError):
    """A command or callback path has no registered handler.

    Never propagated to the host; used to tag log records.
    """

    def __init__(self, kind: str, name: str) -> None:
        self.kind = kind
        self.name = name
        super().__init__(f"No {kind} handler for {name!r}")


class DuplicateRegistrationError(SessionHostError):
    """Something was registered twice under the same key."""

    def __init__(self, what: str, key: str) -> None:
        self.what = what
        self.key = key
        super().__init__(f"{what} already registered: {key!r}")


class DuplicateSidebarError(SessionHostError):
    """A second sidebar instance was offered to the registry."""


class VisibilityConflictError(SessionHostError):
    """More than one session instance reports itself visible."""

    def __init__(self, instance_ids: list[str]) -> None:
        self.instance_ids = instance_ids
        super().__init__(
            f"Multiple visible session instances: {', '.join(instance_ids)}"
        )


class LifecycleError(SessionHostError):
    """Activation or deactivation was called out of order."""


class SinkClosedError(SessionHostError):
    """The output sink was used after it was released."""
