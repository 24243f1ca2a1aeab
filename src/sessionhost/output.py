"""Process-wide output sink.

The host shows one output channel for SessionHost. It is created at
activation, appended to for the life of the process and released at
deactivation. Instead of a module global, the channel lives in a
ProcessScope object that the caller creates once and passes to the
LifecycleCoordinator; components that log to it receive the OutputSink
through their constructors.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sessionhost.errors import LifecycleError, SinkClosedError
from sessionhost.logging import get_logger

if TYPE_CHECKING:
    from sessionhost.host.protocol import Host, OutputChannel

log = get_logger("output")


class OutputSink:
    """Append-only log channel shown to the user by the host.

    Every line is mirrored to the "sessionhost.output" logger so it also
    reaches the log file configured by setup_logging().
    """

    def __init__(self, channel: OutputChannel, name: str) -> None:
        self.name = name
        self._channel = channel
        self._closed = False
        self.line_count = 0

    @property
    def closed(self) -> bool:
        return self._closed

    def append_line(self, line: str) -> None:
        if self._closed:
            raise SinkClosedError(f"Output sink {self.name!r} is closed")
        self._channel.append_line(line)
        self.line_count += 1
        log.info("%s", line)

    def dispose(self) -> None:
        """Release the host channel. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self._channel.dispose()


class ProcessScope:
    """Holds the state that exists once per process: the output sink.

    Lifecycle:
        scope = ProcessScope()
        sink = scope.open_sink(host, "SessionHost")   # activation
        ...
        scope.close_sink()                            # deactivation
    """

    def __init__(self) -> None:
        self._sink: OutputSink | None = None

    @property
    def has_sink(self) -> bool:
        return self._sink is not None and not self._sink.closed

    @property
    def sink(self) -> OutputSink:
        if self._sink is None or self._sink.closed:
            raise SinkClosedError("No open output sink in this process")
        return self._sink

    def open_sink(self, host: Host, name: str) -> OutputSink:
        """Create the process's output sink.

        Raises:
            LifecycleError: If a sink is already open.
        """
        if self.has_sink:
            raise LifecycleError(f"Output sink already open: {self.sink.name!r}")
        self._sink = OutputSink(host.create_output_channel(name), name)
        log.debug("Opened output sink %r", name)
        return self._sink

    def close_sink(self) -> None:
        if self._sink is None:
            return
        self._sink.dispose()
        log.debug("Closed output sink %r", self._sink.name)
        self._sink = None
