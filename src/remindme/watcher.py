"""Detect changed markdown documents by polling modification stamps."""

import logging
from datetime import datetime
from pathlib import Path

from remindme.parsing.markers import parse_file
from remindme.scheduling.reminders import ADDED_DIRECTLY, Reminder

log = logging.getLogger(__name__)

_Stamp = tuple[int, int]  # (mtime_ns, size)


def documents(root: Path) -> list[Path]:
    """The root file itself, or every .md file below a root directory."""
    if root.is_dir():
        return sorted(p for p in root.rglob("*.md") if p.is_file())
    if root.is_file():
        return [root]
    return []


def initial_scan(root: Path, reference: datetime) -> dict[str, list[Reminder]]:
    """Parse every document under root. Unreadable documents are logged and skipped."""
    parsed: dict[str, list[Reminder]] = {}
    for path in documents(root):
        try:
            parsed[str(path)] = parse_file(path, reference)
        except OSError as e:
            log.warning("Could not parse %s: %s", path, e)
    return parsed


def vanished_origins(reminders: list[Reminder], root: Path, parsed: dict[str, list[Reminder]]) -> list[str]:
    """Origins under root that reminders still point to but the scan no longer found."""
    vanished: list[str] = []
    for r in reminders:
        if r.origin in parsed or r.origin in vanished or r.origin == ADDED_DIRECTLY:
            continue
        origin = Path(r.origin)
        if origin == root or root in origin.parents:
            vanished.append(r.origin)
    return vanished


class DocumentWatcher:
    def __init__(self, root: Path) -> None:
        self.root = root
        self._seen: dict[Path, _Stamp] = {}

    def _stamps(self) -> dict[Path, _Stamp]:
        stamps: dict[Path, _Stamp] = {}
        for path in documents(self.root):
            try:
                stat = path.stat()
            except OSError:
                continue  # vanished between listing and stat
            stamps[path] = (stat.st_mtime_ns, stat.st_size)
        return stamps

    def prime(self) -> None:
        """Record the current state so the next poll reports only later changes."""
        self._seen = self._stamps()

    def poll(self) -> tuple[list[Path], list[Path]]:
        """Return (changed or new documents, removed documents) since the last poll."""
        current = self._stamps()
        changed = [p for p, stamp in current.items() if self._seen.get(p) != stamp]
        removed = [p for p in self._seen if p not in current]
        self._seen = current
        return changed, removed
