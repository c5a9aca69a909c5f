"""Read line content from files and buffers."""

from pathlib import Path
from typing import Sequence


def read_file_lines(filepath: Path) -> list[str]:
    """Read all lines from a file. Returns empty list if file doesn't exist."""
    if not filepath.exists():
        return []
    return filepath.read_text(encoding="utf-8").splitlines()


def line_label(lines: Sequence[str], line_number: int) -> str:
    """Trimmed content of a 1-based line, or "" when out of range."""
    if line_number < 1 or line_number > len(lines):
        return ""
    return lines[line_number - 1].strip()


def normalize_path(path) -> str:
    """Absolute, resolved form of a path used as the bookmark identity."""
    if not path:
        return ""
    return str(Path(path).expanduser().resolve())
