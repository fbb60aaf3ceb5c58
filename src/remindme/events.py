"""Events consumed by the reminder engine, one at a time, in arrival order."""

from dataclasses import dataclass
from datetime import datetime, timedelta

from remindme.scheduling.reminders import Reminder


@dataclass(frozen=True, slots=True)
class Tick:
    now: datetime


@dataclass(frozen=True, slots=True)
class DocumentChanged:
    origin: str
    reminders: list[Reminder]


@dataclass(frozen=True, slots=True)
class DocumentRemoved:
    origin: str


@dataclass(frozen=True, slots=True)
class Acknowledge:
    reminder_id: str


@dataclass(frozen=True, slots=True)
class Unacknowledge:
    reminder_id: str
    now: datetime


@dataclass(frozen=True, slots=True)
class Snooze:
    reminder_id: str
    delta: timedelta
    now: datetime


@dataclass(frozen=True, slots=True)
class Delete:
    reminder_id: str


@dataclass(frozen=True, slots=True)
class Add:
    text: str
    now: datetime


@dataclass(frozen=True, slots=True)
class Edit:
    reminder_id: str
    text: str
    now: datetime


Event = (
    Tick
    | DocumentChanged
    | DocumentRemoved
    | Acknowledge
    | Unacknowledge
    | Snooze
    | Delete
    | Add
    | Edit
)
