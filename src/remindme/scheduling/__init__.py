"""Scheduling: the reminder model, its state machine, and reconciliation."""

from remindme.scheduling.reconcile import reconcile, reconcile_all
from remindme.scheduling.reminders import (
    ACKNOWLEDGED,
    ADDED_DIRECTLY,
    PENDING,
    TRIGGERED,
    Reminder,
    Status,
    list_reminders,
    save_reminders,
    sort_by_when,
)

__all__ = [
    "ACKNOWLEDGED",
    "ADDED_DIRECTLY",
    "PENDING",
    "TRIGGERED",
    "Reminder",
    "Status",
    "list_reminders",
    "reconcile",
    "reconcile_all",
    "save_reminders",
    "sort_by_when",
]
