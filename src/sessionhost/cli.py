"""Command-line interface for sessionhost."""

from __future__ import annotations

import argparse
import asyncio
from collections.abc import Sequence
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from sessionhost import __version__
from sessionhost.config import load_config
from sessionhost.content import VirtualDocumentRequest, build_diff_uri
from sessionhost.errors import DecodeError
from sessionhost.host.protocol import Uri
from sessionhost.logging import setup_logging

console = Console()
err_console = Console(stderr=True)


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="sessionhost",
        description="Session orchestration tools: diff documents and host event replay",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (can be repeated)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Extra config file, applied over system/user/project config",
    )

    subparsers = parser.add_subparsers(dest="mode", help="Operation")

    decode_parser = subparsers.add_parser(
        "decode",
        help="Print the content of a diff view URI",
    )
    decode_parser.add_argument("uri", help="Virtual document URI")

    encode_parser = subparsers.add_parser(
        "encode",
        help="Print a diff view URI holding a file's content",
    )
    encode_parser.add_argument("path", type=Path, help="File to embed")
    encode_parser.add_argument("--scheme", help="URI scheme (default: from config)")

    replay_parser = subparsers.add_parser(
        "replay",
        help="Replay JSONL host events against an in-memory host",
    )
    replay_parser.add_argument("script", type=Path, help="JSONL event script")

    return parser


def run_cli(args: Sequence[str]) -> int:
    """Run the CLI with the given arguments."""
    parser = create_parser()
    parsed = parser.parse_args(args)

    if parsed.mode is None:
        parser.print_help()
        return 1

    config = load_config(config_file=parsed.config)
    setup_logging(config.logging, verbose=parsed.verbose or None)

    if parsed.mode == "decode":
        return _decode(parsed.uri)
    elif parsed.mode == "encode":
        return _encode(parsed.path, parsed.scheme or config.content.scheme)
    elif parsed.mode == "replay":
        from sessionhost.replay import EventPlayer, render_result, replay_events

        if not parsed.script.exists():
            err_console.print(f"[red]Error: script not found: {parsed.script}[/red]")
            return 1
        with EventPlayer(parsed.script) as player:
            events = player.events()
        result = asyncio.run(replay_events(events, config))
        render_result(result, console)
        return 1 if result.errors else 0
    else:
        parser.print_help()
        return 1


def _decode(raw_uri: str) -> int:
    try:
        text = VirtualDocumentRequest.from_uri(Uri.parse(raw_uri)).decode()
    except DecodeError as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        return 1
    console.print(text, markup=False, highlight=False, soft_wrap=True, end="")
    return 0


def _encode(path: Path, scheme: str) -> int:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        err_console.print(f"[red]Error reading {path}: {escape(str(e))}[/red]")
        return 1
    console.print(
        str(build_diff_uri(scheme, path.name, text)), markup=False, highlight=False, soft_wrap=True
    )
    return 0
