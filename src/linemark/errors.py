"""Error types for linemark."""

from pathlib import Path
from typing import Optional


class LinemarkError(Exception):
    """Base class for all linemark errors."""


class StaleHandle(LinemarkError):
    """A tracker handle was used after it was destroyed or its buffer closed."""

    def __init__(self, handle_id: int, buffer_id: int):
        super().__init__(f"Handle {handle_id} in buffer {buffer_id} is no longer live")
        self.handle_id = handle_id
        self.buffer_id = buffer_id


class NoBackingFile(LinemarkError):
    """The buffer has no file path, so there is nothing to bookmark."""

    def __init__(self, buffer_id: int):
        super().__init__(f"Buffer {buffer_id} has no backing file")
        self.buffer_id = buffer_id


class MalformedRecord(LinemarkError, ValueError):
    """The durable bookmark record could not be decoded."""

    def __init__(self, path: Path, reason: str):
        super().__init__(f"Malformed bookmark record {path}: {reason}")
        self.path = path
        self.reason = reason


class SaveError(LinemarkError, OSError):
    """Writing the durable bookmark record failed."""

    def __init__(self, path: Path, cause: Optional[OSError] = None):
        detail = f": {cause}" if cause else ""
        super().__init__(f"Could not save bookmarks to {path}{detail}")
        self.path = path
        self.cause = cause
