"""Tests for the command-line interface and host event replay."""

from __future__ import annotations

import io
import json
from pathlib import Path

import pytest

from sessionhost import __version__
from sessionhost.cli import create_parser, run_cli
from sessionhost.config import Config
from sessionhost.config.schema import PlacementConfig
from sessionhost.content import build_diff_uri, encode_payload
from sessionhost.logging import reset_logging
from sessionhost.replay import EventPlayer, replay_events


@pytest.fixture(autouse=True)
def _clean_logging(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.delenv("SESSIONHOST_LOG", raising=False)
    reset_logging()
    yield
    reset_logging()


def write_script(path: Path, *events: dict) -> Path:
    path.write_text("\n".join(json.dumps(event) for event in events) + "\n")
    return path


class TestParser:
    """Argument parsing."""

    def test_no_mode_prints_help(self, capsys) -> None:
        assert run_cli([]) == 1
        assert "usage: sessionhost" in capsys.readouterr().out

    def test_version(self, capsys) -> None:
        with pytest.raises(SystemExit):
            create_parser().parse_args(["--version"])
        assert __version__ in capsys.readouterr().out

    def test_verbosity_counts(self) -> None:
        parsed = create_parser().parse_args(["-vvv", "decode", "x:y"])
        assert parsed.verbose == 3
        assert parsed.mode == "decode"


class TestDecodeEncode:
    """decode and encode modes."""

    def test_decode(self, capsys) -> None:
        uri = f"sessionhost-diff:file.py?{encode_payload('print(1)')}"
        assert run_cli(["decode", uri]) == 0
        assert capsys.readouterr().out == "print(1)"

    def test_decode_malformed(self, capsys) -> None:
        assert run_cli(["decode", "sessionhost-diff:file.py?%%%"]) == 1
        assert "Error" in capsys.readouterr().err

    def test_encode(self, tmp_path: Path, capsys) -> None:
        source = tmp_path / "notes.md"
        source.write_text("héllo\n", encoding="utf-8")

        assert run_cli(["encode", str(source)]) == 0

        out = capsys.readouterr().out.strip()
        assert out == str(build_diff_uri("sessionhost-diff", "notes.md", "héllo\n"))

    def test_encode_custom_scheme(self, tmp_path: Path, capsys) -> None:
        source = tmp_path / "a.txt"
        source.write_text("a")
        run_cli(["encode", str(source), "--scheme", "other"])
        assert capsys.readouterr().out.startswith("other:")

    def test_encode_scheme_from_config_file(self, tmp_path: Path, capsys) -> None:
        source = tmp_path / "a.txt"
        source.write_text("a")
        config_file = tmp_path / "config.yaml"
        config_file.write_text("content:\n  scheme: configured\n")

        run_cli(["--config", str(config_file), "encode", str(source)])

        assert capsys.readouterr().out.startswith("configured:")

    def test_encode_missing_file(self, tmp_path: Path, capsys) -> None:
        assert run_cli(["encode", str(tmp_path / "missing.txt")]) == 1
        assert "Error reading" in capsys.readouterr().err


class TestEventPlayer:
    """Reading JSONL scripts."""

    def test_skips_blank_invalid_and_unknown(self) -> None:
        source = io.StringIO(
            '{"event": "show_sidebar"}\n'
            "\n"
            "not json\n"
            '{"event": "explode"}\n'
            '["a list"]\n'
            '{"event": "command", "name": "plusButtonClicked"}\n'
        )
        events = EventPlayer(source).events()

        assert [e.kind for e in events] == ["show_sidebar", "command"]
        assert events[1].line == 6
        assert events[1].data == {"name": "plusButtonClicked"}

    def test_context_manager_closes_file(self, tmp_path: Path) -> None:
        script = write_script(tmp_path / "s.jsonl", {"event": "show_sidebar"})
        with EventPlayer(script) as player:
            assert len(player.events()) == 1
        assert player._source.closed


class TestReplay:
    """Replaying scripts against an in-memory host."""

    @pytest.fixture
    def config(self) -> Config:
        return Config(placement=PlacementConfig(lock_delay=0.0))

    @pytest.mark.asyncio
    async def test_sidebar_and_panel(self, tmp_path: Path, config: Config) -> None:
        script = write_script(
            tmp_path / "s.jsonl",
            {"event": "show_sidebar"},
            {"event": "command", "name": "plusButtonClicked"},
            {"event": "columns", "columns": [1, 2]},
            {"event": "command", "name": "sessionhost.openInNewTab"},
            {"event": "focus_panel", "index": 0},
            {"event": "uri", "uri": "sessionhost://sessionhost/openrouter?code=xyz"},
            {"event": "close_panel", "index": 0},
        )
        with EventPlayer(script) as player:
            result = await replay_events(player.events(), config, tmp_path)

        assert result.errors == []
        assert result.output_lines == [
            "SessionHost extension activated",
            "Plus button clicked",
            "Opening in new tab",
            "SessionHost extension deactivated",
        ]
        sidebar, panel = result.controllers
        assert sidebar.methods()[:4] == [
            "resolve_as_panel",
            "clear_task",
            "post_state",
            "post_action",
        ]
        assert panel.calls[-1].method == "handle_external_callback"
        assert panel.calls[-1].args == ("xyz",)

    @pytest.mark.asyncio
    async def test_documents_and_errors(self, tmp_path: Path, config: Config) -> None:
        good = f"sessionhost-diff:a.txt?{encode_payload('hello')}"
        script = write_script(
            tmp_path / "s.jsonl",
            {"event": "content", "uri": good},
            {"event": "content", "uri": "sessionhost-diff:b.txt?!!"},
            {"event": "content", "uri": "unknown:c.txt?aGk="},
            {"event": "command", "name": "noSuchCommand"},
            {"event": "focus_panel", "index": 3},
        )
        with EventPlayer(script) as player:
            result = await replay_events(player.events(), config, tmp_path)

        assert result.documents == ["hello"]
        assert len(result.errors) == 4
        assert "unknown command 'noSuchCommand'" in result.errors[2]
        assert "no panel at index 3" in result.errors[3]

    def test_replay_cli(self, tmp_path: Path, capsys) -> None:
        script = write_script(
            tmp_path / "s.jsonl",
            {"event": "show_sidebar"},
            {"event": "command", "name": "historyButtonClicked"},
        )

        assert run_cli(["replay", str(script)]) == 0

        out = capsys.readouterr().out
        assert "SessionHost extension activated" in out
        assert "Controller calls" in out

    def test_replay_cli_missing_script(self, tmp_path: Path, capsys) -> None:
        assert run_cli(["replay", str(tmp_path / "none.jsonl")]) == 1
        assert "script not found" in capsys.readouterr().err
