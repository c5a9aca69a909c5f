import json

import pytest

from linemark.errors import MalformedRecord, SaveError
from linemark.models import Bookmark
from linemark.storage import BookmarkFile
from linemark.store import BookmarkStore


@pytest.fixture
def record(record_path):
    return BookmarkFile(record_path)


def test_missing_record_loads_empty(record):
    assert record.load() == []


def test_save_writes_only_durable_fields(record, record_path, workspace, numbered_file):
    store = BookmarkStore(workspace)
    buf = workspace.open(numbered_file)
    bm = Bookmark(file=buf.path, line=4, text="line 4")
    bm.bind(workspace.tracker(buf.id).create(buf.id, 4))
    store.insert(bm)

    record.save(store)

    data = json.loads(record_path.read_text(encoding="utf-8"))
    assert data == {"bookmarks": [{"file": buf.path, "line": 4, "text": "line 4"}]}


def test_save_refreshes_bound_bookmarks_first(record, workspace, numbered_file):
    store = BookmarkStore(workspace)
    buf = workspace.open(numbered_file)
    bm = Bookmark(file=buf.path, line=4, text="line 4")
    bm.bind(workspace.tracker(buf.id).create(buf.id, 4))
    store.insert(bm)
    buf.insert_lines(1, ["a", "b"])

    record.save(store)

    assert [(b.line, b.text) for b in record.load()] == [(6, "line 4")]


def test_load_yields_unbound_bookmarks(record, record_path):
    record_path.parent.mkdir(parents=True)
    record_path.write_text(
        json.dumps({"bookmarks": [{"file": "/a.txt", "line": 5, "text": "hello"}]}),
        encoding="utf-8",
    )

    [bm] = record.load()

    assert (bm.file, bm.line, bm.text) == ("/a.txt", 5, "hello")
    assert bm.handle is None and bm.buffer_ref is None


def test_load_ignores_unknown_fields_and_defaults_text(record, record_path):
    record_path.parent.mkdir(parents=True)
    record_path.write_text(
        json.dumps({"bookmarks": [{"file": "/a.txt", "line": 2, "mark": "A"}]}),
        encoding="utf-8",
    )

    [bm] = record.load()

    assert bm.text == ""


@pytest.mark.parametrize(
    "content",
    [
        "{not json",
        "[]",
        '{"bookmarks": {}}',
        '{"bookmarks": ["x"]}',
        '{"bookmarks": [{"line": 1}]}',
        '{"bookmarks": [{"file": "/a", "line": 0}]}',
        '{"bookmarks": [{"file": "/a", "line": "3"}]}',
        '{"bookmarks": [{"file": "/a", "line": 3, "text": 7}]}',
    ],
)
def test_malformed_record_fails_loudly(record, record_path, content):
    record_path.parent.mkdir(parents=True)
    record_path.write_text(content, encoding="utf-8")

    with pytest.raises(MalformedRecord):
        record.load()


def test_save_load_save_is_byte_identical(record, record_path, workspace):
    store = BookmarkStore(workspace)
    store.insert(Bookmark(file="/b.txt", line=3, text="ünïcode"))
    store.insert(Bookmark(file="/a.txt", line=1, text=""))
    record.save(store)
    first = record_path.read_bytes()

    reloaded = BookmarkStore(workspace)
    for bm in record.load():
        reloaded.insert(bm)
    record.save(reloaded)

    assert record_path.read_bytes() == first


def test_invalidated_bookmarks_are_not_saved(record, workspace):
    store = BookmarkStore(workspace)
    keep = Bookmark(file="/a.txt", line=1)
    gone = Bookmark(file="/b.txt", line=1)
    store.insert(keep)
    store.insert(gone)
    store.invalidate(gone)

    record.save(store)

    assert [bm.file for bm in record.load()] == ["/a.txt"]


def test_save_failure_raises_save_error(tmp_path, workspace):
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    record = BookmarkFile(blocker / "bookmarks.json")
    store = BookmarkStore(workspace)
    store.insert(Bookmark(file="/a.txt", line=1))

    with pytest.raises(SaveError):
        record.save(store)
    assert len(store) == 1


def test_collapsed_bookmarks_are_saved_once(record, workspace, numbered_file):
    store = BookmarkStore(workspace)
    buf = workspace.open(numbered_file)
    for line in (3, 4):
        bm = Bookmark(file=buf.path, line=line)
        bm.bind(workspace.tracker(buf.id).create(buf.id, line))
        store.insert(bm)
    buf.delete_lines(3, 2)

    record.save(store)

    assert [(b.line, b.text) for b in record.load()] == [(3, "line 5")]


def test_failed_replace_leaves_no_temp_file(record, record_path, workspace):
    record_path.mkdir(parents=True)
    store = BookmarkStore(workspace)
    store.insert(Bookmark(file="/a.txt", line=1))

    with pytest.raises(SaveError):
        record.save(store)
    assert not record_path.with_suffix(".tmp").exists()


def test_set_aside_moves_record(record, record_path):
    record_path.parent.mkdir(parents=True)
    record_path.write_text("{broken", encoding="utf-8")

    target = record.set_aside()

    assert target == record_path.with_name("bookmarks.json.bad")
    assert target.read_text(encoding="utf-8") == "{broken"
    assert not record_path.exists()
