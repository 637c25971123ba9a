# test_cli.py - CLI commands driven through CLI.handle with a captured console
import io
import json
import os

import pytest
from rich.console import Console

from ghost_complete.cli.cli import CLI, main
from ghost_complete.core.autocompleter import GhostComplete
from ghost_complete.utils.logger_utils import Log
from ghost_complete.utils.model_store import FileBlobStore, storage_keys


@pytest.fixture
def cli(tmp_path, timers):
    console = Console(file=io.StringIO(), width=120)
    engine = GhostComplete(FileBlobStore(str(tmp_path)), timer_factory=timers)
    return CLI(data_dir=str(tmp_path), console=console, engine=engine)


def output(cli):
    return cli.console.file.getvalue()


def test_first_line_has_no_suggestions(cli):
    cli.handle("hello there")
    assert "(no suggestions)" in output(cli)
    assert cli.engine.list_words("") == ["there", "hello"]


def test_learned_words_come_back_as_completions(cli):
    cli.handle("javascript typescript")
    cli.handle("typ")
    out = output(cli)
    assert "Suggestions" in out
    assert "typescript" in out


def test_blank_lines_are_ignored(cli):
    cli.handle("   ")
    assert output(cli) == ""


def test_group_switch_isolates_learning(cli):
    cli.handle("/group search")
    cli.handle("kubernetes")
    assert cli.engine.list_words("search") == ["kubernetes"]
    assert cli.engine.list_words("") == []


def test_stats_words_and_patterns(cli):
    cli.handle("good morning world")
    cli.handle("/stats")
    cli.handle("/words")
    cli.handle("/patterns")
    out = output(cli)
    assert "word_count" in out
    assert "morning" in out
    assert '"good"' in out


def test_config_command_saves_file(cli, tmp_path):
    cli.handle("/config MAX_SUGGESTIONS=2")
    with open(os.path.join(str(tmp_path), "config.json"), encoding="utf8") as f:
        saved = json.load(f)
    assert saved["groups"][""]["max_suggestions"] == 2
    assert cli.engine.get_group_config("").max_suggestions == 2


def test_config_without_value_shows_usage(cli):
    cli.handle("/config MAX_WORDS")
    assert "KEY=VALUE" in output(cli)


def test_clear_and_flush(cli, tmp_path):
    cli.handle("remember")
    cli.handle("/flush")
    assert "Flushed 1 blob(s)." in output(cli)
    path = FileBlobStore(str(tmp_path)).path_for(storage_keys("")[0])
    assert os.path.exists(path)

    cli.handle("/clear words")
    assert cli.engine.list_words("") == []
    assert not os.path.exists(path)

    cli.handle("/clear nonsense")
    assert "Nothing called 'nonsense'" in output(cli)


def test_unknown_command(cli):
    cli.handle("/dance")
    assert "Unknown command:" in output(cli)


def test_quit_stops_loop_and_flushes(cli, tmp_path):
    cli.handle("persist")
    cli.handle("/quit")
    assert cli.running is False
    assert os.path.exists(FileBlobStore(str(tmp_path)).path_for(storage_keys("")[0]))


def test_main_exits_cleanly_on_eof(tmp_path, monkeypatch):
    def eof(*args, **kwargs):
        raise EOFError

    monkeypatch.setattr("builtins.input", eof)
    try:
        assert main(["--data-dir", str(tmp_path)]) == 0
    finally:
        Log.configure(console=False)
