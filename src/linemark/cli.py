"""CLI interface for linemark."""

import argparse
import json
import logging
import sys
from pathlib import Path

from . import __version__
from .config import Config
from .errors import LinemarkError
from .host import Workspace
from .picker import Picker
from .session import Session


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="linemark",
        description="Line bookmarks that follow their text through edits and restarts.",
    )
    parser.add_argument("--version", action="version", version=f"linemark {__version__}")
    parser.add_argument("--record", help="Bookmark record file (overrides settings)")
    parser.add_argument("--config", help="JSON settings file")
    parser.add_argument(
        "--ignore",
        action="append",
        default=[],
        metavar="KIND",
        help="Extra buffer kind to ignore (repeatable)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    sub = parser.add_subparsers(dest="command")

    # --- toggle ---
    p_toggle = sub.add_parser("toggle", help="Toggle a bookmark")
    p_toggle.add_argument("location", help="file:line (e.g. src/main.py:42)")
    p_toggle.add_argument("-k", "--kind", default="", help="Buffer kind of the file")

    # --- list ---
    p_list = sub.add_parser("list", aliases=["ls"], help="List bookmarks")
    p_list.add_argument(
        "--json", action="store_true", dest="as_json", help="Output as JSON"
    )

    # --- delete ---
    p_del = sub.add_parser("delete", aliases=["rm"], help="Delete a bookmark")
    p_del.add_argument("location", help="file:line of the bookmark")

    # --- clear ---
    sub.add_parser("clear", help="Delete all bookmarks")

    # --- refresh ---
    sub.add_parser("refresh", help="Re-read bookmarked files and update cached text")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(message)s",
    )

    if not args.command:
        parser.print_help()
        return

    # Dispatch
    commands = {
        "toggle": cmd_toggle,
        "list": cmd_list,
        "ls": cmd_list,
        "delete": cmd_delete,
        "rm": cmd_delete,
        "clear": cmd_clear,
        "refresh": cmd_refresh,
    }

    fn = commands.get(args.command)
    if fn:
        try:
            fn(args)
        except (LinemarkError, FileNotFoundError, ValueError) as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)


# ---------- Commands ----------


def cmd_toggle(args):
    workspace, session = _start(args)
    filepath, line = _parse_location(args.location)
    if not filepath.exists():
        raise FileNotFoundError(f"File not found: {filepath}")

    buf = workspace.open(filepath, kind=args.kind)
    workspace.focus(buf.id, line)
    before = len(session.store)
    session.toggle_at_cursor()
    _finish(session)

    if len(session.store) > before:
        bm = session.store.find(buf.id, workspace.cursor_line())
        print(f"Added bookmark {bm.file}:{bm.line}")
        print(f"  Text: {bm.text}")
    elif len(session.store) < before:
        print(f"Removed bookmark {buf.path}:{workspace.cursor_line()}")
    else:
        print("Nothing to bookmark here.")


def cmd_list(args):
    workspace, session = _start(args)
    entries = Picker(session).entries()
    session.shutdown()

    if args.as_json:
        print(json.dumps([e.to_dict() for e in entries], indent=2))
        return

    if not entries:
        print("No bookmarks found.")
        return

    for entry in entries:
        if entry.kind == "file":
            print(entry.label)
        else:
            print(f"  {entry.label}")


def cmd_delete(args):
    workspace, session = _start(args)
    filepath, line = _parse_location(args.location)
    path = str(filepath.resolve())

    picker = Picker(session)
    tokens = [
        e.token
        for e in picker.entries()
        if e.kind == "bookmark" and e.file == path and e.line == line
    ]
    if not tokens:
        session.shutdown()
        print(f"Error: No bookmark at {path}:{line}.", file=sys.stderr)
        sys.exit(1)

    picker.delete_selected(tokens)
    _finish(session)
    print(f"Deleted bookmark {path}:{line}")


def cmd_clear(args):
    workspace, session = _start(args)
    count = len(session.store)
    session.clear_all()
    _finish(session)
    print(f"Cleared {count} bookmark(s).")


def cmd_refresh(args):
    workspace, session = _start(args)
    files = []
    for bm in session.store:
        if bm.file not in files:
            files.append(bm.file)

    missing = []
    for file in files:
        if Path(file).exists():
            workspace.open(file)
        else:
            missing.append(file)
    _finish(session)

    print(f"Refreshed {len(session.store)} bookmark(s) in {len(files) - len(missing)} file(s).")
    for file in missing:
        print(f"  missing: {file}")


# ---------- Helpers ----------


def _start(args) -> tuple:
    """Build config, host and session, and load bookmarks. Returns (workspace, session)."""
    config = Config.from_file(Path(args.config)) if args.config else Config.create()
    if args.record:
        config.record_path = Path(args.record)
    config = config.merged(args.ignore)

    workspace = Workspace()
    session = Session(workspace, config)
    session.start()
    if session.load_error is not None:
        # Refuse to overwrite a record we could not read
        session.shutdown()
        raise session.load_error
    return workspace, session


def _finish(session: Session) -> None:
    ok = session.save_now()
    session.shutdown()
    if not ok:
        print(f"Error: Could not save bookmarks to {session.record.path}", file=sys.stderr)
        sys.exit(1)


def _parse_location(location: str) -> tuple:
    """Parse file:line into (absolute Path, int)."""
    if ":" not in location:
        raise ValueError("Location must be file:line (e.g. src/main.py:42)")

    parts = location.rsplit(":", 1)
    filepath = Path(parts[0])
    try:
        line = int(parts[1])
    except ValueError:
        raise ValueError(f"Invalid line number: {parts[1]}") from None
    if line < 1:
        raise ValueError(f"Line number must be >= 1 (got {line})")

    if not filepath.is_absolute():
        filepath = Path.cwd() / filepath
    return filepath, line


if __name__ == "__main__":
    main()
