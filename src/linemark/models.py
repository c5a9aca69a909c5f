"""Data models for linemark bookmarks."""

from dataclasses import dataclass, field
from typing import Optional
import hashlib
import itertools
import time

from .tracker import Handle


@dataclass(eq=False)
class Bookmark:
    file: str
    line: int
    text: str = ""
    handle: Optional[Handle] = None
    buffer_ref: Optional[int] = None
    id: str = field(default_factory=lambda: generate_id())

    @property
    def is_bound(self) -> bool:
        return self.handle is not None

    @property
    def is_valid(self) -> bool:
        """An empty file path marks a soft-deleted bookmark."""
        return bool(self.file)

    def bind(self, handle: Handle) -> None:
        self.handle = handle
        self.buffer_ref = handle.buffer_id

    def unbind(self) -> None:
        self.handle = None
        self.buffer_ref = None

    def to_record(self) -> dict:
        """Bookmark -> durable record. Transient fields are dropped."""
        return {
            "file": self.file,
            "line": self.line,
            "text": self.text,
        }

    @classmethod
    def from_record(cls, data: dict) -> "Bookmark":
        return cls(
            file=data["file"],
            line=data["line"],
            text=data.get("text", ""),
        )

    @property
    def short_id(self) -> str:
        """Last 8 chars of ID for display."""
        return self.id[-8:]


_ids = itertools.count(1)


def generate_id() -> str:
    """Generate a bookmark ID: bm_{timestamp}_{hash}."""
    ts = int(time.time())
    rand = hashlib.sha256(f"{ts}{time.monotonic_ns()}".encode()).hexdigest()[:4]
    return f"bm_{ts}_{rand}{next(_ids)}"
