"""In-memory bookmark collection."""

import logging
from typing import Iterator, Optional

from .errors import StaleHandle
from .host import EditorHost
from .models import Bookmark

logger = logging.getLogger(__name__)


class BookmarkStore:
    """Ordered bookmarks, some of them bound to live tracker handles.

    While a bookmark is bound, its line is read from the tracker; the cached
    `line` field is only written back to.
    """

    def __init__(self, host: EditorHost):
        self.host = host
        self._bookmarks: list[Bookmark] = []

    def __iter__(self) -> Iterator[Bookmark]:
        return iter(self.bookmarks())

    def __len__(self) -> int:
        return len(self.bookmarks())

    def bookmarks(self) -> list[Bookmark]:
        """Valid bookmarks in insertion order."""
        return [bm for bm in self._bookmarks if bm.is_valid]

    def insert(self, bookmark: Bookmark) -> None:
        self._bookmarks.append(bookmark)

    def get(self, bookmark_id: str) -> Optional[Bookmark]:
        for bm in self.bookmarks():
            if bm.id == bookmark_id:
                return bm
        return None

    def find(self, buffer_id: int, line: int) -> Optional[Bookmark]:
        """The bound bookmark currently resolving to `line` in `buffer_id`."""
        found = self.find_all(buffer_id, line)
        return found[0] if found else None

    def find_all(self, buffer_id: int, line: int) -> list[Bookmark]:
        """Every bound bookmark resolving to `line`; more than one only after
        an edit collapsed several marks onto the same line."""
        found = []
        for bm in self.find_bound_in_buffer(buffer_id):
            try:
                if self._query(bm) == line:
                    found.append(bm)
            except StaleHandle:
                logger.debug("Stale handle for %s, position unknown", bm.short_id)
        return found

    def dedupe(self) -> int:
        """Remove bound bookmarks that share a (buffer, line) with an earlier one."""
        seen = set()
        duplicates = []
        for bm in self.bookmarks():
            if not bm.is_bound:
                continue
            try:
                key = (bm.buffer_ref, self._query(bm))
            except StaleHandle:
                continue
            if key in seen:
                duplicates.append(bm)
            else:
                seen.add(key)
        for bm in duplicates:
            self.remove(bm)
        if duplicates:
            logger.debug("Dropped %d bookmark(s) collapsed onto an occupied line", len(duplicates))
        return len(duplicates)

    def find_unbound_for_file(self, path: str) -> list[Bookmark]:
        return [bm for bm in self.bookmarks() if not bm.is_bound and bm.file == path]

    def find_bound_in_buffer(self, buffer_id: int) -> list[Bookmark]:
        return [
            bm for bm in self.bookmarks() if bm.is_bound and bm.buffer_ref == buffer_id
        ]

    def current_line(self, bookmark: Bookmark) -> int:
        """Tracker line for bound bookmarks, cached line otherwise."""
        if not bookmark.is_bound:
            return bookmark.line
        try:
            return self._query(bookmark)
        except StaleHandle:
            logger.debug("Stale handle for %s, using cached line", bookmark.short_id)
            return bookmark.line

    def refresh(self, bookmark: Bookmark) -> bool:
        """Write the tracked line and its text back into the cached fields.

        Returns False when the handle turned out to be stale; the cached
        values are left untouched in that case.
        """
        if not bookmark.is_bound:
            return False
        try:
            line = self._query(bookmark)
        except StaleHandle:
            logger.debug("Stale handle for %s, keeping cached position", bookmark.short_id)
            return False
        bookmark.line = line
        bookmark.text = self.host.line_text(bookmark.buffer_ref, line)
        return True

    def release(self, bookmark: Bookmark) -> None:
        """Destroy the bookmark's handle, if any, and unbind it."""
        if bookmark.handle is not None:
            self.host.tracker(bookmark.handle.buffer_id).destroy(bookmark.handle)
        bookmark.unbind()

    def remove(self, bookmark: Bookmark) -> None:
        self.release(bookmark)
        self._bookmarks = [bm for bm in self._bookmarks if bm is not bookmark]

    def clear(self) -> None:
        for bm in self._bookmarks:
            self.release(bm)
        self._bookmarks = []

    def invalidate(self, bookmark: Bookmark) -> None:
        """Soft delete: blank the identity; `garbage_collect` purges it."""
        self.release(bookmark)
        bookmark.file = ""

    def garbage_collect(self) -> int:
        before = len(self._bookmarks)
        self._bookmarks = [bm for bm in self._bookmarks if bm.is_valid]
        purged = before - len(self._bookmarks)
        if purged:
            logger.debug("Purged %d invalidated bookmark(s)", purged)
        return purged

    def _query(self, bookmark: Bookmark) -> int:
        return self.host.tracker(bookmark.handle.buffer_id).query(bookmark.handle)
