"""Reminder data model, status state machine, and markdown persistence.

A reminder moves through three states:

    pending --(time arrives)--> triggered --(ack)--> acknowledged
       \\______________________(ack)___________________/^

Unacknowledging returns to triggered or pending depending on whether the time
has passed; snoozing pushes ``when`` forward and returns to pending. Reminders
are immutable: every transition returns a new instance (or the same one when
the transition does not apply), and the owning engine replaces it by id.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from typing import Any, Literal, get_args
from uuid import uuid4

from remindme.storage import DATA_DIR, read_md_dir, set_aside, sync_md_dir

REMINDERS_DIR = DATA_DIR / "reminders"

Status = Literal["pending", "triggered", "acknowledged"]
PENDING: Status = "pending"
TRIGGERED: Status = "triggered"
ACKNOWLEDGED: Status = "acknowledged"
_STATUSES: tuple[str, ...] = get_args(Status)

# Origin of reminders typed in by the user rather than found in a document
ADDED_DIRECTLY = "(added directly)"


@dataclass(frozen=True, slots=True)
class Reminder:
    id: str
    when: datetime
    description: str
    tags: list[str] = field(default_factory=list)
    origin: str = ADDED_DIRECTLY
    origin_line: int = 0  # 1-based, 0 = not from a document
    status: Status = PENDING

    def __post_init__(self) -> None:
        if not self.description.strip():
            raise ValueError("Reminder description must not be empty")
        if self.status not in _STATUSES:
            raise ValueError(f"Invalid status: {self.status!r}")

    @staticmethod
    def new(
        when: datetime,
        description: str,
        *,
        tags: list[str] | None = None,
        origin: str = ADDED_DIRECTLY,
        origin_line: int = 0,
    ) -> "Reminder":
        return Reminder(
            id=uuid4().hex[:8],
            when=when,
            description=description,
            tags=list(tags or []),
            origin=origin,
            origin_line=origin_line,
        )


def is_due(reminder: Reminder, now: datetime) -> bool:
    return reminder.when <= now


def trigger_if_due(reminder: Reminder, now: datetime) -> Reminder:
    if reminder.status == PENDING and is_due(reminder, now):
        return replace(reminder, status=TRIGGERED)
    return reminder


def acknowledge(reminder: Reminder) -> Reminder:
    if reminder.status == ACKNOWLEDGED:
        return reminder
    return replace(reminder, status=ACKNOWLEDGED)


def unacknowledge(reminder: Reminder, now: datetime) -> Reminder:
    if reminder.status != ACKNOWLEDGED:
        return reminder
    return replace(reminder, status=TRIGGERED if is_due(reminder, now) else PENDING)


def snooze(reminder: Reminder, delta: timedelta, now: datetime) -> Reminder:
    """Push a pending or triggered reminder to now + delta. Acknowledged ones stay put."""
    if reminder.status == ACKNOWLEDGED:
        return reminder
    return replace(reminder, when=now + delta, status=PENDING)


def edit(
    reminder: Reminder,
    when: datetime,
    description: str,
    tags: list[str],
    now: datetime,
) -> Reminder:
    """Replace the user-editable fields; origin and origin_line never change."""
    status = reminder.status
    if status != ACKNOWLEDGED:
        status = TRIGGERED if when <= now else PENDING
    return replace(reminder, when=when, description=description, tags=list(tags), status=status)


def sort_by_when(reminders: list[Reminder]) -> list[Reminder]:
    return sorted(reminders, key=lambda r: r.when)


# --- Persistence ---


def _to_md(reminder: Reminder) -> tuple[dict[str, Any], str]:
    meta: dict[str, Any] = {
        "id": reminder.id,
        "when": reminder.when.isoformat(),
        "status": reminder.status,
        "origin": reminder.origin,
    }
    if reminder.origin_line:
        meta["origin_line"] = reminder.origin_line
    if reminder.tags:
        meta["tags"] = list(reminder.tags)
    return meta, reminder.description


def _from_md(meta: dict[str, Any], body: str) -> Reminder:
    when = meta["when"]
    if not isinstance(when, datetime):
        when = datetime.fromisoformat(str(when))
    return Reminder(
        id=str(meta["id"]),
        when=when,
        description=body,
        tags=[str(t) for t in meta.get("tags") or []],
        origin=str(meta.get("origin", ADDED_DIRECTLY)),
        origin_line=int(meta.get("origin_line", 0)),
        status=meta.get("status", PENDING),
    )


def list_reminders() -> list[Reminder]:
    result: list[Reminder] = []
    for filepath, meta, body in read_md_dir(REMINDERS_DIR):
        try:
            result.append(_from_md(meta, body))
        except (KeyError, ValueError, TypeError):
            # Not a reminder; keep it out of the next sync
            set_aside(filepath)
    return sort_by_when(result)


def save_reminders(reminders: list[Reminder]) -> None:
    """Replace the stored collection with exactly these reminders."""
    sync_md_dir(REMINDERS_DIR, [_to_md(r) for r in reminders])


def use_test_store() -> None:
    """Point persistence at DATA_DIR/test/reminders (``--test-dir``)."""
    global REMINDERS_DIR
    REMINDERS_DIR = DATA_DIR / "test" / "reminders"
