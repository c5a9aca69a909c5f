"""Editor host boundary and an in-memory implementation of it.

The bookmark core only talks to the editor through `EditorHost`. `Workspace`
is the host used by the CLI and the tests: it owns its buffers directly and
reports every edit to a `LineTracker`.
"""

import itertools
import logging
from pathlib import Path
from typing import Callable, Optional, Protocol, Sequence

from .context import line_label, normalize_path, read_file_lines
from .tracker import LineTracker, PositionTracker

logger = logging.getLogger(__name__)

BUFFER_OPENED = "buffer_opened"
BUFFER_CLOSED = "buffer_closed"
PROCESS_ENDING = "process_ending"
EVENTS = (BUFFER_OPENED, BUFFER_CLOSED, PROCESS_ENDING)

Listener = Callable[[int], None]


class EditorHost(Protocol):
    """Capabilities the bookmark core needs from an editor."""

    def current_buffer(self) -> int: ...

    def cursor_line(self) -> int: ...

    def buffer_path(self, buffer_id: int) -> str: ...

    def buffer_kind(self, buffer_id: int) -> str: ...

    def line_text(self, buffer_id: int, line: int) -> str: ...

    def line_count(self, buffer_id: int) -> int: ...

    def tracker(self, buffer_id: int) -> PositionTracker: ...

    def open_buffers(self) -> list[int]: ...

    def subscribe(self, event: str, callback: Listener) -> None: ...

    def unsubscribe(self, event: str, callback: Listener) -> None: ...


class Buffer:
    """An open text buffer. Always holds at least one (possibly empty) line."""

    def __init__(
        self,
        buffer_id: int,
        tracker: LineTracker,
        lines: Sequence[str] = (),
        path: str = "",
        kind: str = "",
    ):
        self.id = buffer_id
        self.path = path
        self.kind = kind
        self.lines = list(lines) or [""]
        self.closed = False
        self._tracker = tracker
        tracker.attach(buffer_id, len(self.lines))

    @property
    def line_count(self) -> int:
        return len(self.lines)

    def get_line(self, line_number: int) -> str:
        if line_number < 1 or line_number > len(self.lines):
            raise ValueError(
                f"Line {line_number} out of range (buffer has {len(self.lines)} lines)"
            )
        return self.lines[line_number - 1]

    def insert_lines(self, at: int, new_lines: Sequence[str]) -> None:
        """Insert lines so that the first one becomes line `at`."""
        self._check_open()
        if at < 1 or at > len(self.lines) + 1:
            raise ValueError(f"Cannot insert at line {at}")
        idx = at - 1
        self.lines[idx:idx] = list(new_lines)
        self._tracker.lines_inserted(self.id, at, len(new_lines))

    def delete_lines(self, start: int, count: int = 1) -> None:
        self._check_open()
        if start < 1 or start > len(self.lines):
            raise ValueError(f"Cannot delete from line {start}")
        count = min(count, len(self.lines) - start + 1)
        del self.lines[start - 1 : start - 1 + count]
        if not self.lines:
            self.lines = [""]
        self._tracker.lines_deleted(self.id, start, count)

    def set_lines(self, new_lines: Sequence[str]) -> None:
        """Replace the whole content; marks follow a line diff."""
        self._check_open()
        old = self.lines
        self.lines = list(new_lines) or [""]
        self._tracker.lines_replaced(self.id, old, self.lines)

    def reload(self) -> None:
        """Re-read the backing file, keeping marks attached via a diff."""
        if not self.path:
            return
        self.set_lines(read_file_lines(Path(self.path)))

    def write(self) -> None:
        if not self.path:
            raise ValueError(f"Buffer {self.id} has no backing file")
        Path(self.path).write_text("\n".join(self.lines) + "\n", encoding="utf-8")

    def _check_open(self) -> None:
        if self.closed:
            raise ValueError(f"Buffer {self.id} is closed")


class Workspace:
    """In-memory editor host: a set of buffers plus lifecycle events."""

    def __init__(self):
        self._tracker = LineTracker()
        self._buffers: dict[int, Buffer] = {}
        self._listeners: dict[str, list[Listener]] = {e: [] for e in EVENTS}
        self._ids = itertools.count(1)
        self._current: Optional[int] = None
        self._cursor = 1

    # --- buffer management ---

    def open(self, path, kind: str = "") -> Buffer:
        """Open a file in a buffer, or focus it if it is already open."""
        resolved = normalize_path(path)
        for buf in self._buffers.values():
            if buf.path == resolved:
                self.focus(buf.id)
                return buf
        lines = read_file_lines(Path(resolved))
        buf = Buffer(next(self._ids), self._tracker, lines, path=resolved, kind=kind)
        return self._add(buf)

    def scratch(self, lines: Sequence[str] = (), kind: str = "") -> Buffer:
        """Open a buffer with no backing file."""
        buf = Buffer(next(self._ids), self._tracker, lines, kind=kind)
        return self._add(buf)

    def close(self, buffer_id: int) -> None:
        buf = self._buffers.get(buffer_id)
        if buf is None:
            return
        self.emit(BUFFER_CLOSED, buffer_id)
        del self._buffers[buffer_id]
        buf.closed = True
        self._tracker.detach(buffer_id)
        if self._current == buffer_id:
            self._current = next(iter(self._buffers), None)
            self._cursor = 1
        logger.debug("Closed buffer %d (%s)", buffer_id, buf.path or "no file")

    def end(self) -> None:
        """Signal that the process is ending."""
        self.emit(PROCESS_ENDING, self._current or 0)

    def focus(self, buffer_id: int, line: int = 1) -> None:
        buf = self.get(buffer_id)
        self._current = buffer_id
        self._cursor = min(max(line, 1), buf.line_count)

    def get(self, buffer_id: int) -> Buffer:
        try:
            return self._buffers[buffer_id]
        except KeyError:
            raise ValueError(f"No open buffer {buffer_id}") from None

    def find_by_path(self, path) -> Optional[Buffer]:
        resolved = normalize_path(path)
        for buf in self._buffers.values():
            if buf.path == resolved:
                return buf
        return None

    def _add(self, buf: Buffer) -> Buffer:
        self._buffers[buf.id] = buf
        self._current = buf.id
        self._cursor = 1
        logger.debug("Opened buffer %d (%s)", buf.id, buf.path or "no file")
        self.emit(BUFFER_OPENED, buf.id)
        return buf

    # --- events ---

    def subscribe(self, event: str, callback: Listener) -> None:
        if event not in self._listeners:
            raise ValueError(f"Unknown event: {event}")
        self._listeners[event].append(callback)

    def unsubscribe(self, event: str, callback: Listener) -> None:
        listeners = self._listeners.get(event, [])
        if callback in listeners:
            listeners.remove(callback)

    def emit(self, event: str, buffer_id: int) -> None:
        for callback in list(self._listeners[event]):
            callback(buffer_id)

    # --- EditorHost ---

    def current_buffer(self) -> int:
        if self._current is None:
            raise ValueError("No buffer is open")
        return self._current

    def cursor_line(self) -> int:
        return self._cursor

    def buffer_path(self, buffer_id: int) -> str:
        return self.get(buffer_id).path

    def buffer_kind(self, buffer_id: int) -> str:
        return self.get(buffer_id).kind

    def line_text(self, buffer_id: int, line: int) -> str:
        return line_label(self.get(buffer_id).lines, line)

    def line_count(self, buffer_id: int) -> int:
        return self.get(buffer_id).line_count

    def tracker(self, buffer_id: int) -> LineTracker:
        return self._tracker

    def open_buffers(self) -> list[int]:
        return list(self._buffers)
