import json

import pytest

from linemark.cli import main


@pytest.fixture
def run(record_path, capsys):
    def _run(*args):
        main(["--record", str(record_path), *args])
        return capsys.readouterr().out

    return _run


def test_toggle_adds_then_removes(run, record_path, numbered_file):
    out = run("toggle", f"{numbered_file}:3")
    assert "Added bookmark" in out
    assert "line 3" in out
    saved = json.loads(record_path.read_text(encoding="utf-8"))
    assert saved["bookmarks"][0]["line"] == 3

    out = run("toggle", f"{numbered_file}:3")
    assert "Removed bookmark" in out
    assert json.loads(record_path.read_text(encoding="utf-8")) == {"bookmarks": []}


def test_toggle_ignored_kind(run, numbered_file):
    out = run("--ignore", "notes", "toggle", "--kind", "notes", f"{numbered_file}:3")
    assert "Nothing to bookmark" in out


def test_list_and_json(run, numbered_file):
    run("toggle", f"{numbered_file}:2")
    run("toggle", f"{numbered_file}:8")

    out = run("list")
    assert str(numbered_file.resolve()) in out
    assert "  2: line 2" in out
    assert "  8: line 8" in out

    entries = json.loads(run("list", "--json"))
    assert [e["kind"] for e in entries] == ["file", "bookmark", "bookmark"]


def test_list_empty(run):
    assert "No bookmarks found." in run("list")


def test_delete(run, numbered_file):
    run("toggle", f"{numbered_file}:2")
    assert "Deleted bookmark" in run("delete", f"{numbered_file}:2")
    assert "No bookmarks found." in run("list")


def test_delete_missing_exits(run, numbered_file):
    with pytest.raises(SystemExit) as exc:
        run("delete", f"{numbered_file}:2")
    assert exc.value.code == 1


def test_clear(run, numbered_file):
    run("toggle", f"{numbered_file}:2")
    run("toggle", f"{numbered_file}:4")
    assert "Cleared 2 bookmark(s)." in run("clear")


def test_refresh_picks_up_file_changes(run, numbered_file):
    run("toggle", f"{numbered_file}:5")
    numbered_file.write_text("\n".join(f"edited {i}" for i in range(1, 21)) + "\n", encoding="utf-8")

    out = run("refresh")

    assert "Refreshed 1 bookmark(s) in 1 file(s)." in out
    assert "5: edited 5" in run("list")


def test_malformed_record_is_not_overwritten(run, record_path, capsys):
    record_path.parent.mkdir(parents=True)
    record_path.write_text("{broken", encoding="utf-8")

    with pytest.raises(SystemExit):
        run("clear")

    assert "Error:" in capsys.readouterr().err
    assert record_path.read_text(encoding="utf-8") == "{broken"


def test_bad_location(run):
    with pytest.raises(SystemExit):
        run("toggle", "no-line-number")
