"""Line position tracking that survives edits.

A mark is a 1-based line number registered against a buffer. Whenever the
buffer inserts, deletes or replaces lines it reports the edit here and every
mark is shifted so it keeps pointing at the same logical line.
"""

import difflib
import itertools
import logging
from dataclasses import dataclass
from typing import Protocol, Sequence

from .errors import StaleHandle

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Handle:
    id: int
    buffer_id: int


class PositionTracker(Protocol):
    def create(self, buffer_id: int, line: int) -> Handle: ...

    def query(self, handle: Handle) -> int: ...

    def destroy(self, handle: Handle) -> None: ...


class LineTracker:
    """Mark table for all buffers of one host."""

    def __init__(self):
        self._marks: dict[int, dict[int, int]] = {}
        self._sizes: dict[int, int] = {}
        self._ids = itertools.count(1)

    # --- buffer lifecycle ---

    def attach(self, buffer_id: int, line_count: int) -> None:
        self._marks.setdefault(buffer_id, {})
        self._sizes[buffer_id] = line_count

    def detach(self, buffer_id: int) -> None:
        """Forget a closed buffer. Its handles become stale."""
        marks = self._marks.pop(buffer_id, {})
        self._sizes.pop(buffer_id, None)
        if marks:
            logger.debug("Dropped %d mark(s) of closed buffer %d", len(marks), buffer_id)

    # --- handle API ---

    def create(self, buffer_id: int, line: int) -> Handle:
        if buffer_id not in self._marks:
            raise StaleHandle(0, buffer_id)
        handle = Handle(id=next(self._ids), buffer_id=buffer_id)
        self._marks[buffer_id][handle.id] = self._clamp(buffer_id, line)
        return handle

    def query(self, handle: Handle) -> int:
        try:
            return self._marks[handle.buffer_id][handle.id]
        except KeyError:
            raise StaleHandle(handle.id, handle.buffer_id) from None

    def destroy(self, handle: Handle) -> None:
        self._marks.get(handle.buffer_id, {}).pop(handle.id, None)

    def is_live(self, handle: Handle) -> bool:
        return handle.id in self._marks.get(handle.buffer_id, {})

    # --- edit notifications ---

    def lines_inserted(self, buffer_id: int, at: int, count: int) -> None:
        """`count` lines were inserted so that the first new one is line `at`."""
        if count <= 0:
            return
        marks = self._marks[buffer_id]
        self._sizes[buffer_id] += count
        for hid, line in marks.items():
            if line >= at:
                marks[hid] = line + count

    def lines_deleted(self, buffer_id: int, start: int, count: int) -> None:
        """Lines `start`..`start + count - 1` were removed.

        Marks inside the removed range land on the line that takes the
        range's place, clamped to the end of the buffer.
        """
        if count <= 0:
            return
        marks = self._marks[buffer_id]
        end = start + count - 1
        self._sizes[buffer_id] = max(1, self._sizes[buffer_id] - count)
        for hid, line in marks.items():
            if line > end:
                line -= count
            elif line >= start:
                line = start
            marks[hid] = self._clamp(buffer_id, line)

    def lines_replaced(
        self, buffer_id: int, old: Sequence[str], new: Sequence[str]
    ) -> None:
        """The whole buffer content changed from `old` to `new`."""
        mapping = diff_line_map(old, new)
        marks = self._marks[buffer_id]
        self._sizes[buffer_id] = max(1, len(new))
        for hid, line in marks.items():
            idx = min(max(line, 1), len(mapping)) - 1
            marks[hid] = self._clamp(buffer_id, mapping[idx] if mapping else 1)

    def _clamp(self, buffer_id: int, line: int) -> int:
        return min(max(line, 1), max(self._sizes[buffer_id], 1))


def diff_line_map(old: Sequence[str], new: Sequence[str]) -> list[int]:
    """Map every 1-based line of `old` to a 1-based line of `new`.

    Equal blocks keep their identity. A replaced block maps by offset into
    its replacement; lines past the replacement's end, and deleted lines,
    land on the first line after the block.
    """
    result = [1] * len(old)
    matcher = difflib.SequenceMatcher(a=list(old), b=list(new), autojunk=False)
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        for k, i in enumerate(range(i1, i2)):
            if tag == "equal" or (tag == "replace" and k < j2 - j1):
                result[i] = j1 + k + 1
            else:
                result[i] = j2 + 1
    return result
