"""JSON storage for linemark bookmarks.

Record layout:
  {
    "bookmarks": [
      {"file": "/abs/path.py", "line": 12, "text": "def main():"},
      ...
    ]
  }

Only the file, line and cached text are stored. Buffer bindings are transient
and are rebuilt when a file is opened again.
"""

import json
import logging
from pathlib import Path

from .errors import MalformedRecord, SaveError
from .models import Bookmark
from .store import BookmarkStore

logger = logging.getLogger(__name__)


class BookmarkFile:
    """The durable record behind a bookmark store."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> list[Bookmark]:
        """Load unbound bookmarks. A missing record is an empty list."""
        if not self.path.exists():
            return []

        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise MalformedRecord(self.path, f"unreadable ({e})") from e

        if not raw.strip():
            return []

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise MalformedRecord(self.path, f"invalid JSON ({e})") from e

        if not isinstance(data, dict) or not isinstance(data.get("bookmarks"), list):
            raise MalformedRecord(self.path, "expected an object with a 'bookmarks' list")

        bookmarks = [_from_record(self.path, i, entry) for i, entry in enumerate(data["bookmarks"])]
        logger.info("Loaded %d bookmark(s) from %s", len(bookmarks), self.path)
        return bookmarks

    def save(self, store: BookmarkStore) -> None:
        """Refresh bound bookmarks from their handles, then write the record."""
        for bm in store.bookmarks():
            store.refresh(bm)
        store.dedupe()

        records = [bm.to_record() for bm in store.bookmarks()]
        payload = json.dumps({"bookmarks": records}, indent=2, ensure_ascii=False) + "\n"

        # Write to a sibling file, then swap it in
        tmp = self.path.with_suffix(".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(payload, encoding="utf-8")
            tmp.replace(self.path)
        except OSError as e:
            if tmp.exists():
                tmp.unlink()
            raise SaveError(self.path, e) from e

        logger.info("Saved %d bookmark(s) to %s", len(records), self.path)

    def set_aside(self) -> Path:
        """Move the current record to `<name>.bad` so a save cannot clobber it."""
        target = self.path.with_name(self.path.name + ".bad")
        try:
            self.path.replace(target)
        except OSError as e:
            raise SaveError(target, e) from e
        logger.warning("Moved unreadable bookmark record to %s", target)
        return target


def _from_record(path: Path, index: int, entry) -> Bookmark:
    """Record dict -> Bookmark. Unknown keys are ignored, missing text is ""."""
    if not isinstance(entry, dict):
        raise MalformedRecord(path, f"entry {index} is not an object")

    file = entry.get("file")
    if not isinstance(file, str) or not file:
        raise MalformedRecord(path, f"entry {index} has no file")

    line = entry.get("line")
    if isinstance(line, bool) or not isinstance(line, int) or line < 1:
        raise MalformedRecord(path, f"entry {index} has invalid line {line!r}")

    text = entry.get("text", "")
    if not isinstance(text, str):
        raise MalformedRecord(path, f"entry {index} has non-string text")

    return Bookmark.from_record({"file": file, "line": line, "text": text})
