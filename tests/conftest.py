import pytest

from linemark.config import Config
from linemark.host import Workspace
from linemark.session import Session


@pytest.fixture
def record_path(tmp_path):
    return tmp_path / "state" / "bookmarks.json"


@pytest.fixture
def config(record_path):
    return Config.create(record_path=record_path)


@pytest.fixture
def workspace():
    return Workspace()


@pytest.fixture
def session(workspace, config):
    s = Session(workspace, config)
    s.start()
    yield s
    s.shutdown()


@pytest.fixture
def make_file(tmp_path):
    def _make(name, lines):
        path = tmp_path / name
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return _make


@pytest.fixture
def numbered_file(make_file):
    return make_file("numbered.txt", [f"line {i}" for i in range(1, 21)])
