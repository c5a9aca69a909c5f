"""Read-only picker view of the bookmark store."""

from dataclasses import dataclass, asdict
from typing import Iterable

from .store import BookmarkStore


@dataclass(frozen=True)
class PickerEntry:
    kind: str  # "file" header or "bookmark"
    label: str
    file: str
    line: int = 0
    token: str = ""
    ordinal: str = ""

    def to_dict(self) -> dict:
        return asdict(self)


def project(store: BookmarkStore) -> list[PickerEntry]:
    """Group bookmarks under their file, ordered by current line."""
    groups: dict[str, list] = {}
    for bm in store.bookmarks():
        groups.setdefault(bm.file, []).append((store.current_line(bm), bm))

    entries = []
    for file, items in groups.items():
        entries.append(PickerEntry(kind="file", label=file, file=file))
        for line, bm in sorted(items, key=lambda item: item[0]):
            entries.append(
                PickerEntry(
                    kind="bookmark",
                    label=f"{line}: {bm.text}",
                    file=file,
                    line=line,
                    token=bm.id,
                    ordinal=f"{file}\0{line:06d}",
                )
            )
    return entries


class Picker:
    """Picker actions bound to a running session."""

    def __init__(self, session):
        self.session = session

    def entries(self) -> list[PickerEntry]:
        self.session.store.dedupe()
        return project(self.session.store)

    def delete_selected(self, tokens: Iterable[str]) -> int:
        """Delete the bookmarks behind the selected tokens. Unknown tokens are skipped."""
        deleted = 0
        for token in tokens:
            bm = self.session.store.get(token)
            if bm is None:
                continue
            self.session.ops.delete_one(bm)
            deleted += 1
        return deleted

    def clear_all(self) -> int:
        return self.session.ops.clear_all()
