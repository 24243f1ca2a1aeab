"""Replay host events from JSONL against an in-memory host.

Each line of a script is one host event:

    {"event": "show_sidebar"}
    {"event": "columns", "columns": [1, 2]}
    {"event": "command", "name": "openInNewTab"}
    {"event": "uri", "uri": "sessionhost://sessionhost/openrouter?code=abc"}
    {"event": "content", "uri": "sessionhost-diff:a.txt?aGVsbG8="}
    {"event": "focus_panel", "index": 0}
    {"event": "close_panel", "index": 0}
    {"event": "hide_sidebar"}

Blank lines and lines that are not JSON objects are skipped.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Any

from rich.console import Console
from rich.table import Table

from sessionhost.config.schema import Config
from sessionhost.errors import DecodeError
from sessionhost.host.memory import InMemoryHost
from sessionhost.lifecycle import LifecycleCoordinator
from sessionhost.logging import get_logger
from sessionhost.output import ProcessScope
from sessionhost.session.controller import RecordingController

log = get_logger("replay")

EVENT_KINDS = {
    "show_sidebar",
    "hide_sidebar",
    "command",
    "uri",
    "content",
    "columns",
    "focus_panel",
    "close_panel",
}


@dataclass
class HostEvent:
    """One scripted host event."""

    line: int
    kind: str
    data: dict[str, Any] = field(default_factory=dict)


class EventPlayer:
    """Reads host events from a JSONL script.

    Usage:
        with EventPlayer(Path("events.jsonl")) as player:
            for event in player:
                print(event.kind)
    """

    def __init__(self, source: Path | IO[str]) -> None:
        self._source: IO[str]
        self._owns_file = False
        if isinstance(source, Path):
            self._source = open(source, encoding="utf-8")
            self._owns_file = True
        else:
            self._source = source

    def __iter__(self) -> Iterator[HostEvent]:
        for number, line in enumerate(self._source, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                data = json.loads(line)
            except json.JSONDecodeError:
                log.warning("Skipping invalid JSON on line %d", number)
                continue
            if not isinstance(data, dict) or data.get("event") not in EVENT_KINDS:
                log.warning("Skipping unknown event on line %d", number)
                continue
            yield HostEvent(line=number, kind=data.pop("event"), data=data)

    def events(self) -> list[HostEvent]:
        return list(self)

    def close(self) -> None:
        if self._owns_file:
            self._source.close()

    def __enter__(self) -> EventPlayer:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()


@dataclass
class ReplayResult:
    """What a replay produced."""

    output_lines: list[str]
    controllers: list[RecordingController]
    documents: list[str]
    errors: list[str]


async def replay_events(
    events: list[HostEvent],
    config: Config,
    extension_path: Path | None = None,
) -> ReplayResult:
    """Activate on a fresh InMemoryHost, apply events, then tear down."""
    host = InMemoryHost(extension_path or Path.cwd())
    scope = ProcessScope()
    controllers: list[RecordingController] = []
    coordinator = LifecycleCoordinator(
        host, scope, RecordingController.factory(controllers), config
    )
    context = host.create_context()
    coordinator.activate(context)
    channel = host.output_channels[-1]

    documents: list[str] = []
    errors: list[str] = []
    prefix = config.commands.prefix

    for event in events:
        log.debug("Line %d: %s %s", event.line, event.kind, event.data)
        if event.kind == "show_sidebar":
            await host.show_view(config.view.sidebar_id)
        elif event.kind == "hide_sidebar":
            host.hide_view(config.view.sidebar_id)
        elif event.kind == "command":
            name = str(event.data.get("name", ""))
            qualified = name if name.startswith(f"{prefix}.") else f"{prefix}.{name}"
            if qualified in host.commands:
                await host.invoke_command(qualified)
            else:
                errors.append(f"line {event.line}: unknown command {name!r}")
        elif event.kind == "uri":
            await host.open_uri(str(event.data.get("uri", "")))
        elif event.kind == "content":
            try:
                documents.append(host.open_document(str(event.data.get("uri", ""))))
            except (DecodeError, KeyError) as e:
                errors.append(f"line {event.line}: {e}")
        elif event.kind == "columns":
            host.editor_columns = list(event.data.get("columns", []))
        elif event.kind in ("focus_panel", "close_panel"):
            index = int(event.data.get("index", 0))
            if index >= len(host.panels):
                errors.append(f"line {event.line}: no panel at index {index}")
                continue
            panel = host.panels[index]
            if event.kind == "focus_panel":
                await host.reveal_panel(panel)
            else:
                panel.dispose()

    coordinator.deactivate()
    host.shutdown(context)
    return ReplayResult(
        output_lines=list(channel.lines),
        controllers=controllers,
        documents=documents,
        errors=errors,
    )


def render_result(result: ReplayResult, console: Console) -> None:
    """Print the output channel, any documents, and the controller calls."""
    console.print("[bold]Output channel[/bold]")
    for line in result.output_lines:
        console.print(f"  {line}", markup=False)

    for index, document in enumerate(result.documents):
        console.print(f"[bold]Document {index}[/bold]")
        console.print(document, markup=False)

    table = Table(title="Controller calls")
    table.add_column("Instance", style="cyan")
    table.add_column("#", justify="right")
    table.add_column("Method")
    table.add_column("Args", style="dim")
    for index, controller in enumerate(result.controllers):
        label = "sidebar" if index == 0 else f"panel {index}"
        for number, call in enumerate(controller.calls, start=1):
            args = ", ".join(repr(arg) for arg in call.args)
            table.add_row(label, str(number), call.method, args)
    console.print(table)

    for error in result.errors:
        console.print(f"[red]{error}[/red]")
