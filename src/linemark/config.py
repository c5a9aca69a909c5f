"""Settings for linemark."""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional

DEFAULT_IGNORED_BUFFER_KINDS = frozenset({"help", "NvimTree"})
RECORD_ENV = "LINEMARK_FILE"


def default_record_path() -> Path:
    env = os.environ.get(RECORD_ENV)
    if env:
        return Path(env)
    return Path.home() / ".local" / "share" / "linemark" / "bookmarks.json"


@dataclass
class Config:
    ignored_buffer_kinds: frozenset = DEFAULT_IGNORED_BUFFER_KINDS
    record_path: Path = field(default_factory=default_record_path)

    @classmethod
    def create(
        cls,
        ignored_buffer_kinds: Iterable[str] = (),
        record_path: Optional[Path] = None,
    ) -> "Config":
        """Merge extra ignored kinds into the built-in defaults."""
        return cls(
            ignored_buffer_kinds=DEFAULT_IGNORED_BUFFER_KINDS | frozenset(ignored_buffer_kinds),
            record_path=Path(record_path) if record_path else default_record_path(),
        )

    @classmethod
    def from_file(cls, config_path: Path) -> "Config":
        """Load settings from JSON. A missing file yields the defaults."""
        config_path = Path(config_path)
        if not config_path.exists():
            return cls.create()

        with open(config_path, encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Settings file {config_path} must contain a JSON object")

        kinds = data.get("ignored_buffer_kinds", [])
        if isinstance(kinds, str) or not all(isinstance(k, str) for k in kinds):
            raise ValueError("ignored_buffer_kinds must be a list of strings")

        record = data.get("record_path")
        return cls.create(
            ignored_buffer_kinds=kinds,
            record_path=Path(record).expanduser() if record else None,
        )

    def merged(self, extra_kinds: Iterable[str]) -> "Config":
        return Config(
            ignored_buffer_kinds=self.ignored_buffer_kinds | frozenset(extra_kinds),
            record_path=self.record_path,
        )

    def is_ignored(self, kind: str) -> bool:
        return kind in self.ignored_buffer_kinds
