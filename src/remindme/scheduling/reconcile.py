"""Merge a fresh parse of one document into the known reminder collection.

Documents carry no stable ids, so a reminder is matched by ``(origin,
description)``. Editing only the time of a marker keeps the existing
reminder, old ``when`` and status included; rewording it reads as a delete
plus an add. Acknowledged reminders are never dropped by a re-parse.

With two markers sharing a description in one document, a single existing
entry satisfies both and no second reminder is added.
"""

from collections.abc import Mapping
from dataclasses import replace

from remindme.scheduling.reminders import ACKNOWLEDGED, PENDING, Reminder


def reconcile(existing: list[Reminder], origin: str, fresh: list[Reminder]) -> list[Reminder]:
    """Return the new collection. Order: other origins, kept entries, new entries."""
    fresh_descriptions = {r.description for r in fresh}

    others: list[Reminder] = []
    kept: list[Reminder] = []
    for reminder in existing:
        if reminder.origin != origin:
            others.append(reminder)
        elif reminder.status == ACKNOWLEDGED or reminder.description in fresh_descriptions:
            kept.append(reminder)

    kept_descriptions = {r.description for r in kept}
    added = [
        r if r.status == PENDING else replace(r, status=PENDING)
        for r in fresh
        if r.description not in kept_descriptions
    ]
    return others + kept + added


def reconcile_all(existing: list[Reminder], parsed: Mapping[str, list[Reminder]]) -> list[Reminder]:
    """Reconcile several documents at once, one origin at a time."""
    result = existing
    for origin, fresh in parsed.items():
        result = reconcile(result, origin, fresh)
    return result
