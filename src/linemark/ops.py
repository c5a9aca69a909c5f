"""Toggle, delete and clear: the bookmark mutations users trigger."""

import logging
from typing import Optional

from .config import Config
from .errors import NoBackingFile
from .models import Bookmark
from .store import BookmarkStore

logger = logging.getLogger(__name__)


class BookmarkOps:
    def __init__(self, store: BookmarkStore, config: Config):
        self.store = store
        self.config = config

    @property
    def host(self):
        return self.store.host

    def toggle(self, buffer_id: int, line: int) -> Optional[Bookmark]:
        """Remove the bookmark at (buffer, line) or create one there.

        Returns the new bookmark, or None when one was removed or nothing
        could be bookmarked.
        """
        if self.config.is_ignored(self.host.buffer_kind(buffer_id)):
            logger.debug("Buffer %d has an ignored kind, toggle skipped", buffer_id)
            return None

        line = min(max(line, 1), self.host.line_count(buffer_id))
        existing = self.store.find_all(buffer_id, line)
        if existing:
            for bm in existing:
                self.delete_one(bm)
            logger.debug("Removed %d bookmark(s) at %s:%d", len(existing), existing[0].file, line)
            return None

        try:
            path = self._require_path(buffer_id)
        except NoBackingFile as e:
            logger.debug("%s, toggle skipped", e)
            return None

        handle = self.host.tracker(buffer_id).create(buffer_id, line)
        bookmark = Bookmark(file=path, line=line, text=self.host.line_text(buffer_id, line))
        bookmark.bind(handle)
        self.store.insert(bookmark)
        logger.debug("Added bookmark %s:%d", path, line)
        return bookmark

    def delete_one(self, bookmark: Bookmark) -> None:
        self.store.remove(bookmark)

    def clear_all(self) -> int:
        count = len(self.store)
        self.store.clear()
        logger.debug("Cleared %d bookmark(s)", count)
        return count

    def _require_path(self, buffer_id: int) -> str:
        path = self.host.buffer_path(buffer_id)
        if not path:
            raise NoBackingFile(buffer_id)
        return path
