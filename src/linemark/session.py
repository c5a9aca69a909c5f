"""Process-wide bookmark state wired to editor host events."""

import logging
from typing import Optional

from .config import Config
from .errors import MalformedRecord, SaveError
from .host import BUFFER_CLOSED, BUFFER_OPENED, PROCESS_ENDING, EditorHost
from .ops import BookmarkOps
from .reconcile import Reconciler
from .storage import BookmarkFile
from .store import BookmarkStore

logger = logging.getLogger(__name__)


class Session:
    """Owns the bookmark store for the lifetime of one editor process.

    `start` loads the durable record and subscribes to the host's events;
    the store is flushed when the host signals that the process is ending,
    or whenever `save_now` is called.
    """

    def __init__(self, host: EditorHost, config: Optional[Config] = None):
        self.host = host
        self.config = config or Config.create()
        self.store = BookmarkStore(host)
        self.ops = BookmarkOps(self.store, self.config)
        self.reconciler = Reconciler(self.store, self.config)
        self.record = BookmarkFile(self.config.record_path)
        self.load_error: Optional[MalformedRecord] = None
        self._started = False

    def start(self) -> None:
        try:
            bookmarks = self.record.load()
        except MalformedRecord as e:
            logger.error("%s; starting with no bookmarks", e)
            self.load_error = e
            bookmarks = []

        for bm in bookmarks:
            self.store.insert(bm)

        self.host.subscribe(BUFFER_OPENED, self._on_buffer_opened)
        self.host.subscribe(BUFFER_CLOSED, self._on_buffer_closed)
        self.host.subscribe(PROCESS_ENDING, self._on_process_ending)
        self._started = True

        for buffer_id in self.host.open_buffers():
            self.reconciler.on_buffer_opened(buffer_id)

    def shutdown(self) -> None:
        if not self._started:
            return
        self.host.unsubscribe(BUFFER_OPENED, self._on_buffer_opened)
        self.host.unsubscribe(BUFFER_CLOSED, self._on_buffer_closed)
        self.host.unsubscribe(PROCESS_ENDING, self._on_process_ending)
        self._started = False

    # --- commands ---

    def toggle_at_cursor(self) -> bool:
        try:
            buffer_id = self.host.current_buffer()
        except ValueError as e:
            logger.debug("%s, toggle skipped", e)
            return False
        self.ops.toggle(buffer_id, self.host.cursor_line())
        return True

    def clear_all(self) -> bool:
        self.ops.clear_all()
        return True

    def save_now(self) -> bool:
        self.store.garbage_collect()
        try:
            if self.load_error is not None and self.record.path.exists():
                # Keep the record we could not read instead of overwriting it
                self.record.set_aside()
            self.load_error = None
            self.record.save(self.store)
        except SaveError:
            logger.exception("Saving bookmarks failed")
            return False
        return True

    # --- host events ---

    def _on_buffer_opened(self, buffer_id: int) -> None:
        self.reconciler.on_buffer_opened(buffer_id)

    def _on_buffer_closed(self, buffer_id: int) -> None:
        self.reconciler.on_buffer_closed(buffer_id)

    def _on_process_ending(self, buffer_id: int) -> None:
        self.save_now()
