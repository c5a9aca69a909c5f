"""Attach persisted bookmarks to buffers as they open, detach as they close."""

import logging

from .config import Config
from .store import BookmarkStore

logger = logging.getLogger(__name__)


class Reconciler:
    def __init__(self, store: BookmarkStore, config: Config):
        self.store = store
        self.config = config

    def on_buffer_opened(self, buffer_id: int) -> list:
        """Bind every unbound bookmark recorded for the buffer's file.

        The stored line is clamped to the buffer and the cached text is
        re-read from it. Returns the bookmarks that were bound.
        """
        host = self.store.host
        if self.config.is_ignored(host.buffer_kind(buffer_id)):
            logger.debug("Buffer %d has an ignored kind, not reconciling", buffer_id)
            return []
        path = host.buffer_path(buffer_id)
        if not path:
            return []

        tracker = host.tracker(buffer_id)
        bound = []
        for bm in self.store.find_unbound_for_file(path):
            line = min(max(bm.line, 1), host.line_count(buffer_id))
            if self.store.find(buffer_id, line) is not None:
                logger.debug("Line %d of %s already bookmarked, dropping %s", line, path, bm.short_id)
                self.store.remove(bm)
                continue
            bm.bind(tracker.create(buffer_id, line))
            bm.line = line
            bm.text = host.line_text(buffer_id, line)
            bound.append(bm)

        if bound:
            logger.info("Restored %d bookmark(s) in %s", len(bound), path)
        return bound

    def on_buffer_closed(self, buffer_id: int) -> list:
        """Write back and release the handles of a closing buffer."""
        released = []
        for bm in self.store.find_bound_in_buffer(buffer_id):
            self.store.refresh(bm)
            self.store.release(bm)
            released.append(bm)
        if released:
            logger.debug("Released %d bookmark(s) of buffer %d", len(released), buffer_id)
        return released
