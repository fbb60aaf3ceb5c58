"""Plain-text rendering of reminders for the CLI."""

from pathlib import Path

from remindme.scheduling.reminders import ACKNOWLEDGED, ADDED_DIRECTLY, PENDING, TRIGGERED, Reminder

STATUS_ICONS = {
    PENDING: " ",
    TRIGGERED: "!",
    ACKNOWLEDGED: "x",
}


def _shorten_path(path: str) -> str:
    """Reduce a path to its last two components."""
    parts = Path(path).parts
    return str(Path(*parts[-2:])) if len(parts) > 2 else path


def format_origin(reminder: Reminder) -> str:
    if reminder.origin == ADDED_DIRECTLY:
        return "added directly"
    short = _shorten_path(reminder.origin)
    return f"{short}:{reminder.origin_line}" if reminder.origin_line else short


def format_reminder(reminder: Reminder) -> str:
    """One line: ``[!] a1b2c3d4  Fri 2026-01-16 10:00  Team sync #work  (notes/todo.md:3)``."""
    tags = "".join(f" #{t}" for t in reminder.tags)
    return (
        f"[{STATUS_ICONS[reminder.status]}] {reminder.id}  "
        f"{reminder.when:%a %Y-%m-%d %H:%M}  "
        f"{reminder.description}{tags}  ({format_origin(reminder)})"
    )


def format_edit_prefill(reminder: Reminder) -> str:
    """Text that split_entry turns back into the same time, description and tags."""
    tags = "".join(f" #{t}" for t in reminder.tags)
    return f"{reminder.when:%Y-%m-%d %H:%M} {reminder.description}{tags}"
